"""Data structures for actors."""

from typing import Any, Optional

from dataclasses import dataclass, field

__all__ = ('Actor', 'actor_factory')


@dataclass(frozen=True)
class Actor:
    """
    A resolved caller identity.

    Actors are supplied by the identity provider (see
    :mod:`moderation.services.identity`); the ``is_admin`` capability is never
    inferred from submission data.
    """

    identifier: str
    """Stable identifier of the caller, e.g. the auth user id."""

    is_admin: bool = field(default=False)
    """Whether the caller may moderate any submission."""

    email: str = field(default_factory=str)
    name: str = field(default_factory=str)

    def owns(self, submitted_by: Optional[str]) -> bool:
        """Check whether the actor is the owner named by ``submitted_by``."""
        return submitted_by is not None and self.identifier == submitted_by


def actor_factory(**data: Any) -> Actor:
    """
    Instantiate an :class:`.Actor` from session or token data.

    Accepts either ``identifier`` or ``user_id`` as the identity key, and
    ignores any keys that are not actor fields.
    """
    identifier = data.pop('identifier', None) or data.pop('user_id', None)
    if not identifier:
        raise ValueError('No actor identifier')
    data = {k: v for k, v in data.items() if k in Actor.__dataclass_fields__}
    is_admin = data.get('is_admin', False)
    if not isinstance(is_admin, bool):
        raise ValueError(f'is_admin must be a boolean, not {is_admin!r}')
    return Actor(str(identifier), **data)
