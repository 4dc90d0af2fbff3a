from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from chainwire.exceptions import ConfigurationError
from chainwire.handlers.protocol import (
    AnnotationValueHandler,
    DependencyHandler,
    InstantiationProvider,
    PostConstructHandler,
    PreConstructHandler,
    ProviderRegistrationHandler,
)

if TYPE_CHECKING:
    from typing_extensions import Self

# Capability tag -> protocol. Order matches the pipeline stages.
HANDLER_CAPABILITIES: tuple[tuple[str, type[Any]], ...] = (
    ("pre_construct", PreConstructHandler),
    ("annotation_value", AnnotationValueHandler),
    ("dependency", DependencyHandler),
    ("instantiation", InstantiationProvider),
    ("post_construct", PostConstructHandler),
)


@dataclass(frozen=True, slots=True)
class HandlerChains:
    """Ordered, immutable handler chains, one per pipeline stage.

    Earlier handlers are consulted first. All chains except ``post_construct``
    stop at the first handler returning a result; post-construct handlers all
    run, in order.
    """

    pre_construct: tuple[PreConstructHandler, ...] = ()
    annotation_value: tuple[AnnotationValueHandler, ...] = ()
    dependency: tuple[DependencyHandler, ...] = ()
    instantiation: tuple[InstantiationProvider, ...] = ()
    post_construct: tuple[PostConstructHandler, ...] = ()

    @classmethod
    def from_handlers(cls, handlers: Iterable[object]) -> Self:
        """Sort handlers into chains by capability, keeping their relative order.

        A handler implementing several capabilities is enrolled in each
        matching chain.

        Args:
            handlers: Handlers in the order they should be consulted.

        Raises:
            ConfigurationError: If a handler implements none of the capabilities.

        """
        chains: dict[str, list[Any]] = {tag: [] for tag, _ in HANDLER_CAPABILITIES}
        for handler in handlers:
            matched = False
            for tag, capability in HANDLER_CAPABILITIES:
                if isinstance(handler, capability):
                    chains[tag].append(handler)
                    matched = True
            if not matched:
                msg = (
                    f"Handler '{type(handler).__qualname__}' must implement a known handler "
                    "capability (pre_construct, annotation value, dependency, instantiation "
                    "or post_construct)."
                )
                raise ConfigurationError(msg)
        return cls(**{tag: tuple(chain) for tag, chain in chains.items()})

    def all_handlers(self) -> tuple[object, ...]:
        """Return every distinct handler, in stage order then chain order."""
        seen: set[int] = set()
        result: list[object] = []
        for tag, _ in HANDLER_CAPABILITIES:
            for handler in getattr(self, tag):
                if id(handler) not in seen:
                    seen.add(id(handler))
                    result.append(handler)
        return tuple(result)

    def provider_registration_handlers(self) -> tuple[ProviderRegistrationHandler, ...]:
        """Return the handlers accepting provider registrations."""
        return tuple(
            handler
            for handler in self.all_handlers()
            if isinstance(handler, ProviderRegistrationHandler)
        )

    def counts(self) -> dict[str, int]:
        """Return the number of handlers per chain."""
        return {tag: len(getattr(self, tag)) for tag, _ in HANDLER_CAPABILITIES}
