"""
Status lifecycle for submissions.

The whole lifecycle is the table :const:`TRANSITIONS`, keyed on the current
status and the role of the actor:

============  =======  =====================================
From          Role     To
============  =======  =====================================
draft         owner    draft, pending
draft         admin    any
pending       admin    any
approved      admin    any
rejected      admin    any
============  =======  =====================================

Owners lose control of a submission once it leaves ``draft``; from then on
only administrators may move it, including overriding earlier decisions.
"""

import logging
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from ..exceptions import Forbidden, InvalidTransition, ValidationError
from .agent import Actor
from .submission import Submission
from .util import get_tzaware_utc_now

logger = logging.getLogger(__name__)

OWNER = 'owner'
ADMIN = 'admin'

_ANY = frozenset(Submission.STATUSES)

TRANSITIONS: Mapping[Tuple[str, str], FrozenSet[str]] = {
    (Submission.DRAFT, OWNER): frozenset({Submission.DRAFT,
                                          Submission.PENDING}),
    (Submission.DRAFT, ADMIN): _ANY,
    (Submission.PENDING, ADMIN): _ANY,
    (Submission.APPROVED, ADMIN): _ANY,
    (Submission.REJECTED, ADMIN): _ANY,
}


def roles_of(actor: Optional[Actor], submission: Submission) -> List[str]:
    """Get the roles that ``actor`` holds with respect to ``submission``."""
    roles: List[str] = []
    if actor is None:
        return roles
    if actor.is_admin:
        roles.append(ADMIN)
    if actor.owns(submission.submitted_by):
        roles.append(OWNER)
    return roles


def allowed_statuses(submission: Submission,
                     actor: Optional[Actor]) -> FrozenSet[str]:
    """Get the statuses that ``actor`` may move ``submission`` into."""
    allowed: FrozenSet[str] = frozenset()
    for role in roles_of(actor, submission):
        allowed |= TRANSITIONS.get((submission.status, role), frozenset())
    return allowed


def apply_transition(submission: Submission, requested_status: str,
                     actor: Optional[Actor],
                     now: Optional[datetime] = None) -> Submission:
    """
    Move ``submission`` into ``requested_status`` on behalf of ``actor``.

    A change into ``approved`` or ``rejected`` made as an administrator
    stamps ``reviewed_at`` and ``reviewed_by``. No other transition touches
    the review fields.

    Parameters
    ----------
    submission : :class:`.Submission`
        Current state; not modified.
    requested_status : str
    actor : :class:`.Actor` or None
    now : datetime
        Review timestamp; defaults to the current time.

    Returns
    -------
    :class:`.Submission`
        A copy of the submission in its new status.

    Raises
    ------
    :class:`.ValidationError`
        If ``requested_status`` is not a known status.
    :class:`.Forbidden`
        If the actor holds no role that may act on the current status.
    :class:`.InvalidTransition`
        If the actor may act on the current status, but not move it to
        ``requested_status``.

    """
    if requested_status not in Submission.STATUSES:
        raise ValidationError(
            errors={'status': f'unknown status {requested_status!r}'}
        )
    current = submission.status
    roles = [role for role in roles_of(actor, submission)
             if (current, role) in TRANSITIONS]
    if not roles:
        raise Forbidden(f'Not permitted to change a {current} submission')
    if requested_status not in allowed_statuses(submission, actor):
        raise InvalidTransition(current, requested_status)

    changes: Dict[str, Any] = {'status': requested_status}
    if ADMIN in roles and requested_status in Submission.REVIEWED \
            and requested_status != current:
        assert actor is not None
        changes.update(reviewed_at=now or get_tzaware_utc_now(),
                       reviewed_by=actor.identifier)
    if requested_status != current:
        logger.info('Submission %s: %s -> %s by %s', submission.id, current,
                    requested_status, actor.identifier if actor else None)
    return submission.evolve(**changes)
