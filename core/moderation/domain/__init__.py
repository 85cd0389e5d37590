"""Core data structures for the moderation system."""

from .agent import Actor, actor_factory
from .policy import Operation, Decision, decide, is_visible
from .submission import Submission, ProjectSubmission, EventSubmission, Kind
from .transition import apply_transition, allowed_statuses
