"""Tests for :mod:`moderation.core`."""

import logging
from unittest import TestCase, mock

from flask import Flask

from .. import core, init_app, store, Actor, Kind
from ..exceptions import ValidationError, InvalidTransition, SaveError, \
    NoSuchSubmission
from ..util import get_application_config
from .util import in_memory_db, project_fields, event_fields

JANE = Actor('1234')
ADMIN = Actor('42', is_admin=True)


class TestCreateSubmission(TestCase):
    """Tests for :func:`.core.create_submission`."""

    def test_unknown_kind(self):
        """Only projects and events can be created."""
        with in_memory_db():
            with self.assertRaises(ValueError):
                core.create_submission('petition', project_fields(),
                                       actor=JANE)

    def test_invalid(self):
        """Invalid submissions are not stored."""
        with in_memory_db():
            with self.assertRaises(ValidationError):
                core.create_submission(Kind.EVENT, event_fields(time=''),
                                       actor=JANE)
            self.assertEqual(list(store.scan(Kind.EVENT.namespace)), [])

    def test_not_even_admins_skip_review(self):
        """New submissions start out as drafts or pending review."""
        with in_memory_db():
            with self.assertRaises(InvalidTransition):
                core.create_submission(Kind.EVENT,
                                       event_fields(status='approved'),
                                       actor=ADMIN)

    def test_store_fails(self):
        """Storage failures are reported as :class:`.SaveError`."""
        with in_memory_db():
            with mock.patch(f'{store.__name__}.insert',
                            side_effect=store.TransactionFailed('nope')):
                with self.assertRaises(SaveError):
                    core.create_submission(Kind.PROJECT, project_fields(),
                                           actor=JANE)

    def test_ids_are_unique(self):
        """Each submission gets its own identifier."""
        with in_memory_db():
            first = core.create_submission(Kind.PROJECT, project_fields(),
                                           actor=JANE)
            second = core.create_submission(Kind.PROJECT, project_fields(),
                                            actor=JANE)
        self.assertNotEqual(first.id, second.id)


class TestUpdateSubmission(TestCase):
    """Tests for :func:`.core.update_submission`."""

    def test_missing(self):
        """Updating a submission that does not exist fails."""
        with in_memory_db():
            with self.assertRaises(NoSuchSubmission):
                core.update_submission(Kind.PROJECT, 'nope', {},
                                       actor=ADMIN)

    def test_transition_before_policy(self):
        """A bad status change is reported as such, even to an owner."""
        with in_memory_db():
            draft = core.create_submission(Kind.PROJECT,
                                           project_fields(status='draft'),
                                           actor=JANE)
            with self.assertRaises(InvalidTransition):
                core.update_submission(Kind.PROJECT, draft.id,
                                       {'status': 'approved'}, actor=JANE)

    def test_comments_without_decision(self):
        """Reviewer feedback is refused on a submission under review."""
        with in_memory_db():
            pending = core.create_submission(Kind.PROJECT, project_fields(),
                                             actor=JANE)
            with self.assertRaises(ValidationError) as ctx:
                core.update_submission(Kind.PROJECT, pending.id,
                                       {'rejection_reason': 'Too vague'},
                                       actor=ADMIN)
        self.assertIn('rejection_reason', ctx.exception.errors)


class TestInitApp(TestCase):
    """Tests for :func:`moderation.init_app`."""

    def test_defaults(self):
        """Services are attached with default configuration."""
        app = Flask('foo')
        app.config['MODERATION_DATABASE_URI'] = 'sqlite://'
        init_app(app)
        self.assertEqual(app.config['LOGLEVEL'], 20)
        self.assertEqual(app.config['SQLALCHEMY_DATABASE_URI'], 'sqlite://')
        self.assertIn('JWT_SECRET', app.config)
        self.assertEqual(logging.getLogger('moderation').level, 20)

    def test_application_config(self):
        """Application config is preferred over the environment."""
        app = Flask('foo')
        app.config['JWT_SECRET'] = 'foosecret'
        with app.app_context():
            self.assertEqual(get_application_config()['JWT_SECRET'],
                             'foosecret')
        with mock.patch.dict('os.environ', {'JWT_SECRET': 'envsecret'}):
            self.assertEqual(get_application_config()['JWT_SECRET'],
                             'envsecret')
