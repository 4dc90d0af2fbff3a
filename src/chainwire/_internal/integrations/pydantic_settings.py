from __future__ import annotations

import importlib
import warnings
from typing import Any

from chainwire._internal.type_checks import is_runtime_class

_SETTINGS_MODULES = ("pydantic_settings", "pydantic.v1")
_PYDANTIC_V1_WARNING_PATTERN = (
    r"Core Pydantic V1 functionality isn't compatible with Python 3\.14 or greater\."
)


def _load_settings_base(module_name: str) -> type[Any] | None:
    try:
        with warnings.catch_warnings():
            warnings.filterwarnings(
                "ignore",
                message=_PYDANTIC_V1_WARNING_PATTERN,
                category=UserWarning,
            )
            module = importlib.import_module(module_name)
    except ImportError:
        return None
    base_settings = getattr(module, "BaseSettings", None)
    if isinstance(base_settings, type):
        return base_settings
    return None


def _discover_settings_bases() -> tuple[type[Any], ...]:
    bases: list[type[Any]] = []
    for module_name in _SETTINGS_MODULES:
        base = _load_settings_base(module_name)
        if base is not None and base not in bases:
            bases.append(base)
    return tuple(bases)


SETTINGS_BASES: tuple[type[Any], ...] = _discover_settings_bases()


def is_settings_class(candidate: object) -> bool:
    """Return whether ``candidate`` is a Pydantic settings model.

    Settings models load their values from the environment, so they are built
    with their zero-argument constructor instead of through injection points.
    Always ``False`` when neither ``pydantic-settings`` nor ``pydantic.v1`` is
    importable.

    Args:
        candidate: Object to test.

    """
    if not is_runtime_class(candidate):
        return False
    try:
        return any(
            issubclass(candidate, base) and candidate is not base for base in SETTINGS_BASES
        )
    except TypeError:
        return False


__all__ = ["SETTINGS_BASES", "is_settings_class"]
