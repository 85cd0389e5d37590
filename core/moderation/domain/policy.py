"""
Authorization policy for project and event submissions.

This is the single place where we decide who may see and change a submission.
:func:`decide` is a pure function of the actor, the operation, and the state
of the record before (and, for writes, after) the operation. It has no side
effects and never raises, so callers can treat it as a lookup table:

.. code-block:: python

   >>> from moderation.domain.policy import decide, Operation
   >>> decide(None, Operation.READ, approved_project)
   Decision(allowed=True, reason=None)
   >>> decide(None, Operation.READ, pending_project)
   Decision(allowed=False, reason='not_visible')

Rules are evaluated in order and the first match wins:

1. **Read**: approved submissions are public. Otherwise the owner may read
   their own submission, and administrators may read anything.
2. **Create**: any authenticated actor, as long as the new submission is owned
   by that actor.
3. **Update**: administrators may update any submission in any status. Owners
   may update their own submission only while it is a draft. Note that this
   is checked against the status *before* the update; submitting a draft for
   review is therefore an update of a draft.
4. Everything else (including delete) is denied.

Submissions whose owner no longer exists (``submitted_by is None``) never
match an ownership rule, so only administrators can see or change them.
"""

from enum import Enum
from typing import Callable, Dict, Optional

from dataclasses import dataclass

from .agent import Actor
from .submission import Submission

__all__ = ('Operation', 'Decision', 'ALLOW', 'deny', 'decide', 'is_visible',
           'NOT_VISIBLE', 'UNAUTHENTICATED', 'OWNERSHIP_MISMATCH', 'FORBIDDEN')

NOT_VISIBLE = 'not_visible'
UNAUTHENTICATED = 'unauthenticated'
OWNERSHIP_MISMATCH = 'ownership_mismatch'
FORBIDDEN = 'forbidden'


class Operation(Enum):
    """Operations governed by the policy."""

    CREATE = 'create'
    READ = 'read'
    UPDATE = 'update'
    DELETE = 'delete'


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy check."""

    allowed: bool
    reason: Optional[str] = None
    """Why the operation was denied; ``None`` when allowed."""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def deny(reason: str) -> Decision:
    """Generate a denial for ``reason``."""
    return Decision(False, reason)


Rule = Callable[[Optional[Actor], Optional[Submission], Optional[Submission]],
                Decision]


def _owner_of(record: Optional[Submission]) -> Optional[str]:
    return getattr(record, 'submitted_by', None)


def _status_of(record: Optional[Submission]) -> Optional[str]:
    return getattr(record, 'status', None)


def _is_owner(actor: Optional[Actor], record: Optional[Submission]) -> bool:
    return actor is not None and actor.owns(_owner_of(record))


def _is_admin(actor: Optional[Actor]) -> bool:
    return actor is not None and bool(actor.is_admin)


def _read(actor: Optional[Actor], before: Optional[Submission],
          after: Optional[Submission]) -> Decision:
    if before is None:
        return deny(NOT_VISIBLE)
    if _status_of(before) == Submission.APPROVED:
        return ALLOW
    if _is_owner(actor, before):
        return ALLOW
    if _is_admin(actor):
        return ALLOW
    return deny(NOT_VISIBLE)


def _create(actor: Optional[Actor], before: Optional[Submission],
            after: Optional[Submission]) -> Decision:
    if actor is None:
        return deny(UNAUTHENTICATED)
    if after is not None and _is_owner(actor, after):
        return ALLOW
    return deny(OWNERSHIP_MISMATCH)


def _update(actor: Optional[Actor], before: Optional[Submission],
            after: Optional[Submission]) -> Decision:
    if _is_admin(actor):
        return ALLOW
    # Owners may only touch drafts, and may not hand the record to someone
    # else in the process.
    if _is_owner(actor, before) \
            and _status_of(before) == Submission.DRAFT \
            and (after is None or _is_owner(actor, after)):
        return ALLOW
    return deny(FORBIDDEN)


def _default(actor: Optional[Actor], before: Optional[Submission],
             after: Optional[Submission]) -> Decision:
    return deny(FORBIDDEN)


_RULES: Dict[Operation, Rule] = {
    Operation.READ: _read,
    Operation.CREATE: _create,
    Operation.UPDATE: _update,
}


def decide(actor: Optional[Actor], operation: Operation,
           before: Optional[Submission] = None,
           candidate_after: Optional[Submission] = None) -> Decision:
    """
    Decide whether ``actor`` may perform ``operation``.

    Parameters
    ----------
    actor : :class:`.Actor` or None
        The caller; ``None`` for anonymous callers.
    operation : :class:`.Operation`
    before : :class:`.Submission` or None
        The stored state of the submission. ``None`` for creation.
    candidate_after : :class:`.Submission` or None
        The state that would be stored if the operation is allowed.

    Returns
    -------
    :class:`.Decision`

    """
    rule = _RULES.get(operation, _default)
    return rule(actor, before, candidate_after)


def is_visible(actor: Optional[Actor], submission: Submission) -> bool:
    """Check whether ``actor`` may see ``submission``."""
    return decide(actor, Operation.READ, submission).allowed
