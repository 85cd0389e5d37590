"""Example 4: Joe tries to change Jane's project."""

from unittest import TestCase
import tempfile

from flask import Flask

from ... import create_submission, get_submission, update_submission, \
    init_app, store, Actor, Kind, Submission
from ...exceptions import NoSuchSubmission, PermissionDenied
from ..util import project_fields


class TestSomeoneElsesProject(TestCase):
    """
    Joe is signed in, but is neither the owner nor a moderator.

    While Jane's project is pending, Joe cannot even tell that it exists. Once
    it is approved Joe can read it, but still not change it.
    """

    @classmethod
    def setUpClass(cls):
        """Instantiate an app for use with a SQLite database."""
        _, db = tempfile.mkstemp(suffix='.sqlite')
        cls.app = Flask('foo')
        cls.app.config['MODERATION_DATABASE_URI'] = f'sqlite:///{db}'

        with cls.app.app_context():
            init_app(cls.app)

    def setUp(self):
        """Create the project."""
        self.jane = Actor('1234')
        self.joe = Actor('5678')
        self.admin = Actor('42', is_admin=True)
        with self.app.app_context():
            store.create_all()
            self.project = create_submission(Kind.PROJECT, project_fields(),
                                             actor=self.jane)

    def tearDown(self):
        """Clear the database after each test."""
        with self.app.app_context():
            store.drop_all()

    def test_pending(self):
        """Joe cannot update a pending project that Joe cannot see."""
        with self.app.app_context():
            with self.assertRaises(NoSuchSubmission):
                update_submission(Kind.PROJECT, self.project.id,
                                  {'title': 'Mine now'}, actor=self.joe)
            with self.assertRaises(NoSuchSubmission):
                update_submission(Kind.PROJECT, self.project.id,
                                  {'status': 'approved'}, actor=self.joe)
            loaded = get_submission(Kind.PROJECT, self.project.id,
                                    actor=self.jane)
        self.assertEqual(loaded, self.project, 'Nothing changed')

    def test_approved(self):
        """Joe can see an approved project, but not change it."""
        with self.app.app_context():
            approved = update_submission(Kind.PROJECT, self.project.id,
                                         {'status': 'approved'},
                                         actor=self.admin)
            with self.assertRaises(PermissionDenied) as ctx:
                update_submission(Kind.PROJECT, self.project.id,
                                  {'title': 'Mine now'}, actor=self.joe)
            self.assertEqual(ctx.exception.reason, 'forbidden')

            with self.assertRaises(PermissionDenied):
                update_submission(Kind.PROJECT, self.project.id,
                                  {'status': 'rejected'}, actor=self.joe)

            loaded = get_submission(Kind.PROJECT, self.project.id,
                                    actor=self.joe)
        self.assertEqual(loaded, approved, 'Nothing changed')
        self.assertEqual(loaded.status, Submission.APPROVED)

    def test_anonymous(self):
        """Anonymous callers cannot change anything either."""
        with self.app.app_context():
            update_submission(Kind.PROJECT, self.project.id,
                              {'status': 'approved'}, actor=self.admin)
            with self.assertRaises(PermissionDenied):
                update_submission(Kind.PROJECT, self.project.id,
                                  {'title': 'Graffiti'}, actor=None)

    def test_cannot_create_for_jane(self):
        """Joe cannot create a project in Jane's name."""
        with self.app.app_context():
            with self.assertRaises(PermissionDenied) as ctx:
                create_submission(Kind.PROJECT,
                                  project_fields(submitted_by='1234'),
                                  actor=self.joe)
        self.assertEqual(ctx.exception.reason, 'ownership_mismatch')

    def test_orphaned(self):
        """A project whose owner is gone is left to the moderators."""
        with self.app.app_context():
            store.current_session() \
                .query(store.models.ProjectSubmission) \
                .update({'submitted_by': None})
            store.current_session().commit()

            with self.assertRaises(NoSuchSubmission):
                get_submission(Kind.PROJECT, self.project.id, actor=self.jane)
            rejected = update_submission(Kind.PROJECT, self.project.id,
                                         {'status': 'rejected'},
                                         actor=self.admin)
        self.assertIsNone(rejected.submitted_by)
        self.assertEqual(rejected.status, Submission.REJECTED)
