"""Core operations on project and event submissions."""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

from .domain.agent import Actor
from .domain.policy import Operation, decide, is_visible
from .domain.submission import Submission, Kind
from .domain.transition import apply_transition
from .domain.util import get_tzaware_utc_now
from .exceptions import ValidationError, PermissionDenied, NoSuchSubmission, \
    SaveError, ConflictError
from .services import store
from .services.identity import current_actor

logger = logging.getLogger(__name__)

__all__ = ('create_submission', 'get_submission', 'list_submissions',
           'update_submission', 'CURRENT_ACTOR')


class _CurrentActor:
    """Placeholder for the actor of the current request."""

    def __repr__(self) -> str:
        return 'CURRENT_ACTOR'


CURRENT_ACTOR: Any = _CurrentActor()
"""
Default for ``actor`` parameters: ask the identity provider.

Pass ``None`` explicitly to act anonymously.
"""

ActorArg = Union[Actor, None, _CurrentActor]


def _resolve(actor: ActorArg) -> Optional[Actor]:
    if isinstance(actor, _CurrentActor):
        return current_actor()
    return actor


def _load(kind: Kind, identifier: str) -> Submission:
    submission = store.get(kind.namespace, identifier)
    if submission is None:
        raise NoSuchSubmission(f'No {kind.value} with id {identifier}')
    return submission


def create_submission(kind: Union[Kind, str], fields: Mapping[str, Any],
                      actor: ActorArg = CURRENT_ACTOR) -> Submission:
    """
    Create a new project or event submission.

    Parameters
    ----------
    kind : :class:`.Kind` or str
    fields : dict
        Submission payload. May include ``status='draft'``; the default is
        ``pending``.
    actor : :class:`.Actor` or None
        Defaults to the caller of the current request.

    Returns
    -------
    :class:`.Submission`
        The stored submission, with its new ``id``.

    Raises
    ------
    :class:`.ValidationError`
        If ``fields`` are incomplete or malformed.
    :class:`.PermissionDenied`
        If the caller is anonymous, or tries to create a submission on behalf
        of someone else.
    :class:`.SaveError`
        If the submission could not be stored.

    """
    kind = Kind(kind)
    actor = _resolve(actor)
    owner = actor.identifier if actor is not None else None
    candidate = kind.record_class.new_draft_or_pending(fields, owner)

    decision = decide(actor, Operation.CREATE, None, candidate)
    if not decision:
        logger.info('Denied create %s to %s: %s', kind.value, owner,
                    decision.reason)
        raise PermissionDenied(decision.reason)

    now = get_tzaware_utc_now()
    candidate = candidate.evolve(id=str(uuid.uuid4()), submitted_at=now,
                                 created_at=now, updated_at=now)
    try:
        with store.transaction():
            submission = store.insert(kind.namespace, candidate)
    except store.StoreException as e:
        raise SaveError(f'Could not store new {kind.value}') from e
    logger.debug('Created %s %s for %s', kind.value, submission.id, owner)
    return submission


def get_submission(kind: Union[Kind, str], identifier: str,
                   actor: ActorArg = CURRENT_ACTOR) -> Submission:
    """
    Load a submission that the actor is allowed to see.

    Submissions that exist but are not visible to the actor are reported
    exactly as if they did not exist.

    Raises
    ------
    :class:`.NoSuchSubmission`

    """
    kind = Kind(kind)
    actor = _resolve(actor)
    submission = _load(kind, identifier)
    if not decide(actor, Operation.READ, submission):
        raise NoSuchSubmission(f'No {kind.value} with id {identifier}')
    return submission


def list_submissions(kind: Union[Kind, str], actor: ActorArg = CURRENT_ACTOR,
                     status: Optional[str] = None,
                     category: Optional[str] = None) -> List[Submission]:
    """
    Get the submissions visible to the actor, most recent first.

    Parameters
    ----------
    kind : :class:`.Kind` or str
    actor : :class:`.Actor` or None
    status : str
        Only submissions in this status.
    category : str
        Only submissions in this category.

    Raises
    ------
    :class:`.ValidationError`
        If ``status`` is not a known status.

    """
    kind = Kind(kind)
    actor = _resolve(actor)
    if status is not None and status not in Submission.STATUSES:
        raise ValidationError(errors={'status': f'unknown status {status!r}'})

    # Anonymous callers can only ever see approved submissions, so let the
    # database do the filtering.
    if actor is None:
        if status not in (None, Submission.APPROVED):
            return []
        status = Submission.APPROVED

    def _visible(submission: Submission) -> bool:
        return is_visible(actor, submission)

    return list(store.scan(kind.namespace, _visible, status=status,
                           category=category))


def update_submission(kind: Union[Kind, str], identifier: str,
                      patch: Mapping[str, Any],
                      actor: ActorArg = CURRENT_ACTOR,
                      expected_version: Optional[int] = None) -> Submission:
    """
    Change a submission, possibly moving it to another status.

    The patch is merged onto the stored submission. If it changes the status,
    the transition is checked first (see :mod:`.domain.transition`), and then
    the update policy is checked against the status *before* the update. On
    success ``updated_at`` is stamped and the submission is written back,
    provided that nobody else has written it in the meantime.

    Parameters
    ----------
    kind : :class:`.Kind` or str
    identifier : str
    patch : dict
        Fields to change. System-managed fields may be included as long as
        their values are unchanged.
    actor : :class:`.Actor` or None
    expected_version : int
        The version that the caller last saw, e.g. from an ``If-Match``
        header. Defaults to the version loaded here.

    Returns
    -------
    :class:`.Submission`
        The stored submission.

    Raises
    ------
    :class:`.NoSuchSubmission`
        If there is no such submission, or the actor cannot see it.
    :class:`.ValidationError`
        If the patch is malformed, changes a system-managed field, or asks
        for a status change outside of the lifecycle.
    :class:`.PermissionDenied`
        If the actor may see the submission but not change it.
    :class:`.ConflictError`
        If the submission was changed concurrently; reload and retry.
    :class:`.SaveError`
        If the submission could not be stored.

    """
    kind = Kind(kind)
    actor = _resolve(actor)
    before = _load(kind, identifier)
    if not decide(actor, Operation.READ, before):
        raise NoSuchSubmission(f'No {kind.value} with id {identifier}')
    if expected_version is not None and expected_version != before.version:
        raise ConflictError(f'{kind.value} {identifier} is at version'
                            f' {before.version}, not {expected_version}')

    merged, changed = _merge(before, patch)
    now = get_tzaware_utc_now()

    candidate = merged
    if 'status' in changed:
        candidate = apply_transition(merged.evolve(status=before.status),
                                     merged.status, actor, now)
    review_changes = [key for key in Submission.REVIEW_FIELDS
                      if key in changed]
    if review_changes:
        _check_review_changes(before, candidate, actor, review_changes)
    candidate.validate()

    decision = decide(actor, Operation.UPDATE, before, candidate)
    if not decision:
        logger.info('Denied update of %s %s to %s: %s', kind.value,
                    identifier, actor.identifier if actor else None,
                    decision.reason)
        raise PermissionDenied(decision.reason)

    candidate = candidate.evolve(updated_at=max(now, before.created_at or now))
    try:
        with store.transaction():
            submission = store.put_if_version(kind.namespace, identifier,
                                              candidate, before.version)
    except store.VersionConflict as e:
        raise ConflictError(f'{kind.value} {identifier} changed while'
                            ' updating; reload and retry') from e
    except store.NoSuchSubmission as e:
        raise NoSuchSubmission(f'No {kind.value} with id {identifier}') from e
    except store.StoreException as e:
        raise SaveError(f'Could not store {kind.value} {identifier}') from e
    logger.debug('Updated %s %s: %s', kind.value, identifier,
                 ', '.join(sorted(changed)) or 'no changes')
    return submission


def _merge(before: Submission, patch: Mapping[str, Any]) \
        -> Tuple[Submission, Set[str]]:
    """Apply ``patch`` to ``before``; get the result and the changed keys."""
    errors: Dict[str, str] = {}
    for key in sorted(set(patch) - before.field_names(), key=str):
        errors[key] = 'unknown field'
    if errors:
        raise ValidationError(errors=errors)

    merged = before.evolve(**patch)
    changed = {key for key in patch
               if getattr(merged, key) != getattr(before, key)}
    for key in Submission.SYSTEM_FIELDS:
        if key in changed:
            errors[key] = 'cannot be changed'
    if errors:
        raise ValidationError(errors=errors)
    return merged, changed


def _check_review_changes(before: Submission, after: Submission,
                          actor: Optional[Actor], keys: List[str]) -> None:
    """Reviewer feedback goes with a decision, and only admins decide."""
    if actor is None or not actor.is_admin:
        raise PermissionDenied('forbidden',
                               f'Only reviewers may set {", ".join(keys)}')
    if after.status not in Submission.REVIEWED or after.status == before.status:
        raise ValidationError(errors={
            key: 'may only be set when approving or rejecting'
            for key in keys
        })
