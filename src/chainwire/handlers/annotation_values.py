from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from chainwire.exceptions import AlreadyRegisteredError, ConfigurationError
from chainwire.instantiations import ValueInstantiation

if TYPE_CHECKING:
    from chainwire.context import ResolutionContext
    from chainwire.instantiations import Instantiation


class SavedAnnotationsHandler:
    """Resolve identifiers annotated with a custom marker to a saved value.

    Use this for a handful of configuration values: define a marker class,
    save a value for it with ``Resolver.provide(Marker, value)`` and request it
    with ``Annotated[int, Marker]`` (or ``Annotated[int, Marker()]``).
    """

    def __init__(self) -> None:
        self._stored_values: dict[type[Any], Any] = {}
        self._lock = threading.Lock()

    def on_annotation_value(self, marker: Any, value: Any) -> None:
        if not isinstance(marker, type):
            msg = f"Annotation markers must be classes, got {marker!r}."
            raise ConfigurationError(msg)
        if value is None:
            msg = f"Value for @{marker.__qualname__} may not be None."
            raise ConfigurationError(msg)
        with self._lock:
            if marker in self._stored_values:
                raise AlreadyRegisteredError(
                    marker,
                    f"Value already registered for @{marker.__qualname__}",
                )
            self._stored_values[marker] = value

    def resolve_annotation_value(self, context: ResolutionContext) -> Instantiation[Any] | None:
        for annotation in context.identifier.annotations:
            marker = annotation if isinstance(annotation, type) else type(annotation)
            value = self._stored_values.get(marker)
            if value is not None:
                return ValueInstantiation(value)
        return None
