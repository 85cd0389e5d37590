"""Session and transaction helpers for :mod:`.services.store`."""

import logging
from contextlib import contextmanager
from typing import Generator

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm.session import Session

from .exceptions import StoreException, TransactionFailed

logger = logging.getLogger(__name__)


class ModerationSQLAlchemy(SQLAlchemy):
    """Flask-SQLAlchemy extension bound to the submission database."""

    def init_app(self, app: Flask) -> None:
        """Point SQLAlchemy at ``MODERATION_DATABASE_URI`` unless configured."""
        app.config.setdefault(
            'SQLALCHEMY_DATABASE_URI',
            app.config.get('MODERATION_DATABASE_URI', 'sqlite://')
        )
        app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
        super(ModerationSQLAlchemy, self).init_app(app)


db: SQLAlchemy = ModerationSQLAlchemy()


def current_session() -> Session:
    """Get the session for the current application context."""
    return db.session()


@contextmanager
def transaction() -> Generator:
    """
    Commit everything written in the block, or nothing.

    Store exceptions raised in the block are re-raised after rollback; any
    other failure is wrapped in :class:`.TransactionFailed`.
    """
    session = current_session()
    try:
        yield session
        session.commit()
    except StoreException as e:
        logger.debug('Store operation failed, rolling back: %s', e)
        session.rollback()
        raise
    except Exception as e:
        logger.debug('Transaction failed, rolling back: %s', e)
        session.rollback()
        raise TransactionFailed('Could not write submissions') from e
