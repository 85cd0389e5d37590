"""SQLAlchemy ORM classes for the submission tables."""

from datetime import datetime
from typing import Any, Dict, Type

from pytz import UTC
from sqlalchemy import Column, Date, DateTime, Float, Integer, JSON, String, \
    Text, text
from sqlalchemy.orm import declarative_base

from ... import domain

Base = declarative_base()


class SubmissionMixin:
    """
    Columns shared by project and event submissions.

    Column names match the field names of :class:`.domain.Submission`, so that
    rows and domain objects can be copied field-for-field.
    """

    DOMAIN = domain.Submission

    id = Column(String(36), primary_key=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(Text, nullable=False, index=True)
    location = Column(Text, nullable=False)
    address = Column(Text, server_default=text("''"))
    latitude = Column(Float)
    longitude = Column(Float)
    target_audience = Column(Text, server_default=text("''"))
    duration_estimate = Column(Text, server_default=text("''"))
    requirements = Column(JSON)
    contact_email = Column(Text, nullable=False)
    contact_phone = Column(Text, server_default=text("''"))
    notes = Column(Text, server_default=text("''"))
    image = Column(Text, server_default=text("''"))

    submitted_by = Column(String(36), index=True)
    """
    Owner of the submission.

    This is a reference into the identity provider's user store, which is not
    part of this database; it is nulled upstream when the owner is removed.
    """

    submitter_name = Column(Text, nullable=False)
    submitter_email = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, index=True,
                    server_default=text("'pending'"))
    submitted_at = Column(DateTime(timezone=True),
                          default=lambda: datetime.now(UTC))
    reviewed_at = Column(DateTime(timezone=True))
    reviewed_by = Column(String(36))
    admin_comments = Column(Text, server_default=text("''"))
    rejection_reason = Column(Text, server_default=text("''"))
    created_at = Column(DateTime(timezone=True),
                        default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime(timezone=True),
                        default=lambda: datetime.now(UTC))

    version = Column(Integer, nullable=False, server_default=text("'1'"))
    """Incremented on every write; see :func:`.store.put_if_version`."""

    def to_submission(self) -> domain.Submission:
        """Get the domain representation of this row."""
        return self.DOMAIN(**{
            name: getattr(self, name) for name in self.DOMAIN.field_names()
        })

    def update_from_submission(self, submission: domain.Submission) -> None:
        """Copy the state of ``submission`` onto this row."""
        for name, value in self.values_from(submission).items():
            setattr(self, name, value)

    @classmethod
    def values_from(cls, submission: domain.Submission) -> Dict[str, Any]:
        """Get column values for ``submission``."""
        return {name: getattr(submission, name)
                for name in cls.DOMAIN.field_names()}


class ProjectSubmission(SubmissionMixin, Base):    # type: ignore
    """A proposed community project."""

    __tablename__ = 'project_submissions'

    DOMAIN = domain.ProjectSubmission

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    expected_volunteers = Column(Integer, server_default=text("'10'"))
    objectives = Column(JSON)
    budget = Column(Text, server_default=text("''"))
    timeline = Column(Text, nullable=False)


class EventSubmission(SubmissionMixin, Base):    # type: ignore
    """A proposed community event."""

    __tablename__ = 'event_submissions'

    DOMAIN = domain.EventSubmission

    date = Column(Date, nullable=False)
    time = Column(Text, nullable=False)
    expected_attendees = Column(Integer, server_default=text("'50'"))
    registration_deadline = Column(Date, nullable=False)
    agenda = Column(JSON)
    cost = Column(Text, server_default=text("'Free'"))


MODELS: Dict[str, Type[SubmissionMixin]] = {
    ProjectSubmission.__tablename__: ProjectSubmission,
    EventSubmission.__tablename__: EventSubmission,
}
"""Models by namespace."""
