from __future__ import annotations

from enum import Enum
from typing import Any, TypeVar

C = TypeVar("C", bound=type[Any])

LIFETIME_ATTR = "__chainwire_lifetime__"


class Lifetime(Enum):
    """Define cache behavior for constructed objects."""

    SINGLETON = "singleton"
    """Build once and share the instance for the lifetime of the resolver."""

    TRANSIENT = "transient"
    """Build a new instance every time the type is resolved."""


def singleton(cls: C) -> C:
    """Declare a class singleton-scoped regardless of the resolver default."""
    setattr(cls, LIFETIME_ATTR, Lifetime.SINGLETON)
    return cls


def transient(cls: C) -> C:
    """Declare a class transient: every resolution builds a new instance."""
    setattr(cls, LIFETIME_ATTR, Lifetime.TRANSIENT)
    return cls


def lifetime_of(candidate: Any, default: Lifetime) -> Lifetime:
    """Return the declared lifetime of a class, or ``default`` when undeclared.

    Only the class's own declaration counts; subclasses do not inherit the
    lifetime of their parents.

    Args:
        candidate: Class (or other dependency key) to inspect.
        default: Lifetime used when nothing is declared.

    """
    declared = vars(candidate).get(LIFETIME_ATTR) if isinstance(candidate, type) else None
    if isinstance(declared, Lifetime):
        return declared
    return default
