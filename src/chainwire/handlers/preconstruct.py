from __future__ import annotations

from typing import TYPE_CHECKING

from chainwire._internal.type_checks import is_runtime_class
from chainwire.exceptions import ConfigurationError, ValidationError

if TYPE_CHECKING:
    from chainwire.context import ResolutionContext
    from chainwire.identifier import Identifier

_LIBRARY_PACKAGE = __name__.split(".", maxsplit=1)[0]
_ALWAYS_ALLOWED_MODULES = frozenset({"builtins", "typing", "collections.abc"})


class PackageValidator:
    """Reject classes defined outside the allowed root package.

    Builtins and the library's own types are always allowed, since they are
    resolved by value handlers rather than constructed.
    """

    def __init__(self, root_package: str) -> None:
        if not root_package:
            msg = "The root package may not be empty."
            raise ConfigurationError(msg)
        self._root_package = root_package

    @property
    def root_package(self) -> str:
        return self._root_package

    def pre_construct(self, context: ResolutionContext) -> Identifier | None:
        raw_type = context.identifier.raw_type
        if not is_runtime_class(raw_type):
            return None

        module = raw_type.__module__
        if module in _ALWAYS_ALLOWED_MODULES or _is_within(module, _LIBRARY_PACKAGE):
            return None
        if not _is_within(module, self._root_package):
            msg = (
                f"Class '{raw_type.__qualname__}' with package '{module}' is outside of the "
                f"allowed packages. It must be within '{self._root_package}'"
            )
            raise ValidationError(msg)
        return None


def _is_within(module: str, package: str) -> bool:
    return module == package or module.startswith(f"{package}.")
