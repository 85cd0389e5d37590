"""Helpers for testing the moderation core."""

from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Optional

from flask import Flask

from ..services import store


@contextmanager
def in_memory_db(app: Optional[Flask] = None):
    """Provide an in-memory sqlite database for testing purposes."""
    if app is None:
        app = Flask('foo')
    app.config['MODERATION_DATABASE_URI'] = 'sqlite://'
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    with app.app_context():
        store.init_app(app)
        store.create_all()
        try:
            yield store.current_session()
        finally:
            store.drop_all()


def project_fields(**overrides: Any) -> Dict[str, Any]:
    """Generate a complete set of fields for a new project."""
    fields = {
        'title': 'Riverside cleanup',
        'description': 'Pick up litter along the river path.',
        'category': 'environment',
        'location': 'Springfield',
        'start_date': date(2026, 5, 1),
        'end_date': date(2026, 5, 31),
        'contact_email': 'cleanup@example.org',
        'submitter_name': 'Jane User',
        'submitter_email': 'jane@example.org',
        'timeline': 'Every Saturday in May',
        'requirements': ['gloves', 'boots'],
        'objectives': ['clean river', 'meet neighbors'],
    }
    fields.update(overrides)
    return fields


def event_fields(**overrides: Any) -> Dict[str, Any]:
    """Generate a complete set of fields for a new event."""
    fields = {
        'title': 'Repair cafe',
        'description': 'Bring broken things; leave with working things.',
        'category': 'workshop',
        'date': date(2026, 6, 13),
        'time': '10:00-14:00',
        'location': 'Community hall',
        'registration_deadline': date(2026, 6, 10),
        'contact_email': 'repair@example.org',
        'submitter_name': 'Jane User',
        'submitter_email': 'jane@example.org',
        'agenda': ['welcome', 'repairs', 'lunch'],
    }
    fields.update(overrides)
    return fields
