from __future__ import annotations

import types
from typing import Any, TypeGuard


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_instance_of(value: object, candidate: object) -> bool:
    """Return true when ``value`` is assignable to ``candidate``.

    Non-class candidates (typing constructs, protocols without runtime support)
    cannot be checked at runtime and are accepted.

    Args:
        value: Produced object to check.
        candidate: Requested dependency type.

    """
    if not is_runtime_class(candidate):
        return True
    try:
        return isinstance(value, candidate)
    except TypeError:
        return True


__all__ = ["is_instance_of", "is_runtime_class"]
