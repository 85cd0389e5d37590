"""Exceptions raised by :mod:`moderation.services.store`."""


class StoreException(RuntimeError):
    """Base for record store exceptions."""


class NoSuchSubmission(StoreException):
    """A request was made for a submission that does not exist."""


class VersionConflict(StoreException):
    """The stored record no longer has the expected version."""


class TransactionFailed(StoreException):
    """Raised when there was a problem committing changes to the database."""


class Unavailable(StoreException):
    """The database is not available."""
