"""
Persistence for project and event submissions.

Each kind of submission lives in its own namespace (table):
``project_submissions`` and ``event_submissions``. The API is deliberately
small, so that the core does not depend on the storage engine:

- :func:`get` loads one record by id.
- :func:`insert` stores a new record.
- :func:`put_if_version` replaces a record, but only if nobody else has
  written it since it was loaded. Every row carries an integer ``version``
  that is incremented on each write; the update is a single
  ``UPDATE ... WHERE id = ? AND version = ?``, so two writers racing from the
  same version cannot both succeed. The loser gets :class:`.VersionConflict`.
- :func:`scan` iterates over records, optionally narrowed by the indexed
  fields ``status``, ``category``, and ``submitted_by``.

Callers determine the transaction scope with :func:`.util.transaction`.

ORM representations of the tables are located in :mod:`.store.models`.
"""

import logging
from functools import wraps
from typing import Any, Callable, Iterator, Optional, Type

from flask import Flask
from retry import retry
from sqlalchemy.exc import OperationalError

from ...domain.submission import Submission
from . import models
from .exceptions import StoreException, NoSuchSubmission, VersionConflict, \
    TransactionFailed, Unavailable
from .models import Base
from .util import transaction, current_session, db

logger = logging.getLogger(__name__)

INDEXED = ('status', 'category', 'submitted_by')
"""Fields on which :func:`scan` may filter in the database."""

Predicate = Callable[[Submission], bool]


def handle_operational_errors(func):
    """Catch SQLAlchemy OperationalErrors and raise :class:`.Unavailable`."""
    @wraps(func)
    def inner(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except OperationalError as e:
            raise Unavailable('Submission database unavailable') from e
    return inner


def _model_for(namespace: str) -> Type[models.SubmissionMixin]:
    try:
        return models.MODELS[namespace]
    except KeyError as e:
        raise ValueError(f'No such namespace: {namespace}') from e


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def get(namespace: str, identifier: str) -> Optional[Submission]:
    """
    Load a submission.

    Parameters
    ----------
    namespace : str
        Either ``project_submissions`` or ``event_submissions``.
    identifier : str

    Returns
    -------
    :class:`.domain.submission.Submission` or None
        ``None`` if there is no such submission.

    """
    model = _model_for(namespace)
    row = current_session().get(model, identifier, populate_existing=True)
    if row is None:
        logger.debug('No %s with id %s', namespace, identifier)
        return None
    return row.to_submission()


@handle_operational_errors
def insert(namespace: str, submission: Submission) -> Submission:
    """
    Store a new submission.

    The caller is responsible for the transaction scope, and for assigning
    the identifier.

    Returns
    -------
    :class:`.domain.submission.Submission`
        The stored state, at version 1.

    """
    model = _model_for(namespace)
    row = model()
    row.update_from_submission(submission)
    row.version = 1
    session = current_session()
    session.add(row)
    session.flush()
    logger.debug('Inserted %s %s', namespace, submission.id)
    return submission.evolve(version=1)


@handle_operational_errors
def put_if_version(namespace: str, identifier: str, submission: Submission,
                   expected_version: int) -> Submission:
    """
    Replace a submission if it is still at ``expected_version``.

    Parameters
    ----------
    namespace : str
    identifier : str
    submission : :class:`.domain.submission.Submission`
        The new state. Its ``id`` and ``version`` are ignored.
    expected_version : int
        The version that the caller loaded.

    Returns
    -------
    :class:`.domain.submission.Submission`
        The stored state, at ``expected_version + 1``.

    Raises
    ------
    :class:`.VersionConflict`
        The stored submission has been written since ``expected_version``.
    :class:`.NoSuchSubmission`
        There is no submission with ``identifier``.

    """
    model = _model_for(namespace)
    values = model.values_from(submission)
    values.pop('id')
    values['version'] = expected_version + 1

    session = current_session()
    updated = session.query(model) \
        .filter(model.id == identifier) \
        .filter(model.version == expected_version) \
        .update(values, synchronize_session=False)
    if updated == 0:
        if session.get(model, identifier) is None:
            raise NoSuchSubmission(f'No {namespace} with id {identifier}')
        logger.debug('Version conflict on %s %s at %i', namespace,
                     identifier, expected_version)
        raise VersionConflict(f'{namespace} {identifier} is no longer at'
                              f' version {expected_version}')
    return submission.evolve(id=identifier, version=expected_version + 1)


def scan(namespace: str, predicate: Optional[Predicate] = None,
         **filters: Any) -> Iterator[Submission]:
    """
    Iterate over submissions, most recently created first.

    Parameters
    ----------
    namespace : str
    predicate : callable
        If provided, only submissions for which this returns ``True`` are
        yielded.
    filters : kwargs
        Equality filters on :const:`INDEXED` fields. ``None`` values are
        ignored.

    Returns
    -------
    iterator
        Lazy; each call runs a fresh query.

    """
    model = _model_for(namespace)
    for key in filters:
        if key not in INDEXED:
            raise ValueError(f'Cannot filter on {key}')
    query = current_session().query(model)
    for key, value in filters.items():
        if value is not None:
            query = query.filter(getattr(model, key) == value)
    query = query.order_by(model.created_at.desc())
    return _iterate(query, predicate)


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def _execute(query: Any) -> Iterator[Any]:
    """Run ``query``; the first batch of rows is fetched here."""
    return iter(query.yield_per(100))


def _iterate(query: Any, predicate: Optional[Predicate]) \
        -> Iterator[Submission]:
    rows = _execute(query)
    try:
        for row in rows:
            submission = row.to_submission()
            if predicate is None or predicate(submission):
                yield submission
    except OperationalError as e:
        raise Unavailable('Submission database unavailable') from e


def init_app(app: Flask) -> None:
    """Register the SQLAlchemy extension to an application."""
    db.init_app(app)


def create_all() -> None:
    """Create all tables in the database."""
    Base.metadata.create_all(db.engine)


def drop_all() -> None:
    """Drop all tables in the database."""
    Base.metadata.drop_all(db.engine)
