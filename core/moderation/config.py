"""Moderation core configuration parameters."""

from os import environ
import warnings

LOGLEVEL = int(environ.get('LOGLEVEL', '20'))
"""
Logging verbosity.

See `https://docs.python.org/3/library/logging.html#levels`_.
"""

JWT_SECRET = environ.get('JWT_SECRET')
"""Secret key for signing + verifying authentication JWTs."""

if not JWT_SECRET:
    warnings.warn('JWT_SECRET is not set; authn/z may not work correctly!')

CORE_VERSION = "0.1.0"

# --- DATABASE CONFIGURATION ---

MODERATION_DATABASE_URI = environ.get('MODERATION_DATABASE_URI', 'sqlite:///')
"""Full database URI for the submission tables."""

SQLALCHEMY_DATABASE_URI = MODERATION_DATABASE_URI
"""Full database URI, as expected by Flask-SQLAlchemy."""

SQLALCHEMY_TRACK_MODIFICATIONS = False
"""Track modifications feature should always be disabled."""
