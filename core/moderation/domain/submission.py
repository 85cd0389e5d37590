"""Data structures for project and event submissions."""

import datetime as dt
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Mapping, Optional, \
    Tuple, Type

from dataclasses import dataclass, field, fields as dataclass_fields, \
    asdict, replace

from ..exceptions import ValidationError, InvalidTransition
from .util import coerce_date, coerce_datetime


@dataclass
class Submission:
    """
    Represents a community proposal moving through review.

    Projects and events share this shape; for authorization purposes they are
    indistinguishable. Everything besides the ownership, status, and review
    fields is payload that the policy never looks at.

    Records are treated as values: the state machine and the service build
    changed copies with :meth:`.evolve` rather than mutating in place.
    """

    DRAFT = 'draft'
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    STATUSES = (DRAFT, PENDING, APPROVED, REJECTED)
    REVIEWED = (APPROVED, REJECTED)
    """Statuses that represent a moderation decision."""

    SYSTEM_FIELDS = ('id', 'submitted_by', 'submitted_at', 'created_at',
                     'updated_at', 'reviewed_at', 'reviewed_by', 'version')
    """Fields that only this package may write."""

    REVIEW_FIELDS = ('admin_comments', 'rejection_reason')
    """Reviewer feedback, written by administrators alongside a decision."""

    REQUIRED: ClassVar[Tuple[str, ...]] = (
        'title', 'description', 'category', 'location', 'contact_email',
        'submitter_name', 'submitter_email'
    )
    DATE_FIELDS: ClassVar[Tuple[str, ...]] = ()
    LIST_FIELDS: ClassVar[Tuple[str, ...]] = ('requirements',)
    INT_FIELDS: ClassVar[Tuple[str, ...]] = ()

    id: Optional[str] = field(default=None)
    submitted_by: Optional[str] = field(default=None)
    """
    Identifier of the owning actor.

    ``None`` if the owner was removed upstream; such records are only
    visible to and mutable by administrators.
    """

    status: str = field(default=PENDING)

    title: str = field(default_factory=str)
    description: str = field(default_factory=str)
    category: str = field(default_factory=str)
    location: str = field(default_factory=str)
    address: str = field(default_factory=str)
    latitude: Optional[float] = field(default=None)
    longitude: Optional[float] = field(default=None)
    target_audience: str = field(default_factory=str)
    duration_estimate: str = field(default_factory=str)
    requirements: List[str] = field(default_factory=list)
    contact_email: str = field(default_factory=str)
    contact_phone: str = field(default_factory=str)
    notes: str = field(default_factory=str)
    image: str = field(default_factory=str)
    submitter_name: str = field(default_factory=str)
    submitter_email: str = field(default_factory=str)

    submitted_at: Optional[dt.datetime] = field(default=None)
    reviewed_at: Optional[dt.datetime] = field(default=None)
    reviewed_by: Optional[str] = field(default=None)
    admin_comments: str = field(default_factory=str)
    rejection_reason: str = field(default_factory=str)
    created_at: Optional[dt.datetime] = field(default=None)
    updated_at: Optional[dt.datetime] = field(default=None)

    version: int = field(default=0)
    """Optimistic concurrency counter, maintained by the record store."""

    def __post_init__(self) -> None:
        """Coerce loosely-typed input (e.g. from JSON) to field types."""
        errors: Dict[str, str] = {}
        for key in ('submitted_at', 'reviewed_at', 'created_at',
                    'updated_at'):
            try:
                setattr(self, key, coerce_datetime(getattr(self, key)))
            except (ValueError, TypeError, OverflowError):
                errors[key] = 'not a valid timestamp'
        for key in self.DATE_FIELDS:
            try:
                setattr(self, key, coerce_date(getattr(self, key)))
            except (ValueError, TypeError, OverflowError):
                errors[key] = 'not a valid date'
        for key in self.LIST_FIELDS:
            value = getattr(self, key)
            if value is None:
                setattr(self, key, [])
            elif isinstance(value, (list, tuple)):
                setattr(self, key, [str(item) for item in value])
            else:
                errors[key] = 'must be a list'
        for key in self.INT_FIELDS:
            try:
                setattr(self, key, int(getattr(self, key)))
            except (ValueError, TypeError):
                errors[key] = 'must be an integer'
        for key in ('latitude', 'longitude'):
            value = getattr(self, key)
            if value is None or value == '':
                setattr(self, key, None)
                continue
            try:
                setattr(self, key, float(value))
            except (ValueError, TypeError):
                errors[key] = 'must be a number'
        if errors:
            raise ValidationError(errors=errors)

    @property
    def is_draft(self) -> bool:
        """The owner is still working on the submission."""
        return self.status == self.DRAFT

    @classmethod
    def field_names(cls) -> FrozenSet[str]:
        """Names of all fields on this kind of submission."""
        return frozenset(f.name for f in dataclass_fields(cls))

    def evolve(self, **changes: Any) -> 'Submission':
        """Get a copy of this submission with ``changes`` applied."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Get a dict representation of the submission."""
        return asdict(self)

    def validate(self) -> None:
        """
        Check structural constraints on the submission.

        Raises
        ------
        :class:`.ValidationError`
            If required fields are blank, the status is unknown, or dates are
            out of order. ``errors`` maps field names to problems.

        """
        errors: Dict[str, str] = {}
        if self.status not in self.STATUSES:
            errors['status'] = f'unknown status {self.status!r}'
        for key in self.REQUIRED:
            value = getattr(self, key)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[key] = 'is required'
        self._check_dates(errors)
        if errors:
            raise ValidationError(errors=errors)

    def _check_dates(self, errors: Dict[str, str]) -> None:
        """Add date-ordering problems to ``errors``."""

    @classmethod
    def new_draft_or_pending(cls, fields: Mapping[str, Any],
                             owner: Optional[str]) -> 'Submission':
        """
        Build a new submission from user-supplied ``fields``.

        The status is ``pending`` unless ``fields`` asks for ``draft``. The
        owner is ``owner`` unless ``fields`` names a different
        ``submitted_by``, which the create policy will then refuse.

        Raises
        ------
        :class:`.ValidationError`
            If fields are unknown, system-managed, blank, or malformed.
        :class:`.InvalidTransition`
            If a status other than draft or pending is requested.

        """
        data = dict(fields)
        errors: Dict[str, str] = {}
        for key in sorted(set(data) - cls.field_names(), key=str):
            errors[key] = 'unknown field'
        for key in cls.SYSTEM_FIELDS + cls.REVIEW_FIELDS:
            if key != 'submitted_by' and key in data:
                errors[key] = 'cannot be set by the submitter'
        if errors:
            raise ValidationError(errors=errors)

        status = data.pop('status', cls.PENDING)
        if status not in cls.STATUSES:
            raise ValidationError(errors={'status': f'unknown status {status!r}'})
        if status not in (cls.DRAFT, cls.PENDING):
            raise InvalidTransition('new', status)
        data.setdefault('submitted_by', owner)
        submission = cls(status=status, **data)
        submission.validate()
        return submission


@dataclass
class ProjectSubmission(Submission):
    """A proposed community project."""

    REQUIRED = Submission.REQUIRED + ('start_date', 'end_date', 'timeline')
    DATE_FIELDS = ('start_date', 'end_date')
    LIST_FIELDS = Submission.LIST_FIELDS + ('objectives',)
    INT_FIELDS = ('expected_volunteers',)

    start_date: Optional[dt.date] = field(default=None)
    end_date: Optional[dt.date] = field(default=None)
    expected_volunteers: int = field(default=10)
    objectives: List[str] = field(default_factory=list)
    budget: str = field(default_factory=str)
    timeline: str = field(default_factory=str)

    def _check_dates(self, errors: Dict[str, str]) -> None:
        if self.start_date and self.end_date \
                and self.end_date < self.start_date:
            errors['end_date'] = 'must not be before start_date'


@dataclass
class EventSubmission(Submission):
    """A proposed community event."""

    REQUIRED = Submission.REQUIRED + ('date', 'time', 'registration_deadline')
    DATE_FIELDS = ('date', 'registration_deadline')
    LIST_FIELDS = Submission.LIST_FIELDS + ('agenda',)
    INT_FIELDS = ('expected_attendees',)

    date: Optional[dt.date] = field(default=None)
    time: str = field(default_factory=str)
    expected_attendees: int = field(default=50)
    registration_deadline: Optional[dt.date] = field(default=None)
    agenda: List[str] = field(default_factory=list)
    cost: str = field(default='Free')

    def _check_dates(self, errors: Dict[str, str]) -> None:
        if self.date and self.registration_deadline \
                and self.registration_deadline > self.date:
            errors['registration_deadline'] = 'must not be after date'


class Kind(Enum):
    """The two kinds of submission, each stored in its own namespace."""

    PROJECT = 'project'
    EVENT = 'event'

    @property
    def namespace(self) -> str:
        """Name of the storage namespace (table) for this kind."""
        return f'{self.value}_submissions'

    @property
    def record_class(self) -> Type[Submission]:
        """The :class:`.Submission` subclass for this kind."""
        return _record_classes[self]

    @classmethod
    def from_namespace(cls, namespace: str) -> 'Kind':
        """Get the kind stored in ``namespace``."""
        for kind in cls:
            if kind.namespace == namespace:
                return kind
        raise ValueError(f'No such namespace: {namespace}')


_record_classes = {
    Kind.PROJECT: ProjectSubmission,
    Kind.EVENT: EventSubmission,
}
