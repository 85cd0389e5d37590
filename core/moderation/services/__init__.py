"""External service integrations."""

from . import identity, store
