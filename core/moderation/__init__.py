"""
Access control and review lifecycle for community project and event proposals.

Community members propose projects and events; moderators review them. This
package decides who may see and change those proposals, and moves them through
their review lifecycle::

    draft --> pending --> approved
                     \\-> rejected

Overview
========

Submissions are defined in :mod:`.domain.submission`. There are two kinds,
:class:`.ProjectSubmission` and :class:`.EventSubmission`, which share
everything that matters for authorization: an owner (``submitted_by``), a
``status``, and review metadata.

Who may do what is decided in one place, :func:`.domain.policy.decide`, a pure
function of the actor, the operation, and the record. Status changes are
checked against the transition table in :mod:`.domain.transition`. Neither
touches storage, so both can be tested as plain lookup tables.

:mod:`.core` puts the pieces together. Applications should only need these
functions:

.. code-block:: python

   from moderation import Actor, Kind, create_submission, update_submission

   jane = Actor('1234')
   project = create_submission(Kind.PROJECT, {'title': 'Park cleanup', ...},
                               actor=jane)
   mod = Actor('42', is_admin=True)
   project = update_submission(Kind.PROJECT, project.id,
                               {'status': 'approved'}, actor=mod)


If ``actor`` is not passed, it is taken from the current request via
:mod:`.services.identity`. Pass ``actor=None`` to act anonymously.

Errors
======

Watch out for :class:`.exceptions.ValidationError` (bad data or an impossible
status change), :class:`.exceptions.PermissionDenied` (the policy said no),
:class:`.exceptions.NoSuchSubmission` (missing, or not visible to the
caller), and :class:`.exceptions.ConflictError` (someone else changed the
submission first; reload and try again).

Storage
=======

:mod:`.services.store` keeps submissions in two tables via Flask-SQLAlchemy.
Writes use an optimistic version check, so concurrent updates never silently
overwrite each other.

"""
import logging
import sys

from flask import Flask

from .core import *
from .domain.agent import Actor
from .domain.submission import Submission, ProjectSubmission, \
    EventSubmission, Kind
from .exceptions import ValidationError, InvalidTransition, \
    PermissionDenied, Forbidden, NoSuchSubmission, SaveError, ConflictError
from .services import identity, store


def init_app(app: Flask) -> None:
    """Set default configuration and attach services to ``app``."""
    app.config.setdefault('LOGLEVEL', 20)
    store.init_app(app)
    identity.init_app(app)
    _configure_logging(int(app.config['LOGLEVEL']))


def _configure_logging(level: int) -> None:
    """Attach a stdout handler, formatted like ``arxiv.base.logging``."""
    logger = logging.getLogger(__name__)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            'application %(asctime)s - %(name)s - %(levelname)s:'
            ' "%(message)s"'
        ))
        logger.addHandler(handler)
