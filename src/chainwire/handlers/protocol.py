"""Handler capabilities.

A handler is any object implementing one or more of these protocols. The
resolver sorts handlers into chains by testing them against each protocol,
so a single object may take part in several pipeline stages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from chainwire.context import ResolutionContext
    from chainwire.identifier import Identifier
    from chainwire.instantiations import Instantiation


@runtime_checkable
class PreConstructHandler(Protocol):
    """Validate or redirect an identifier before any instantiation attempt."""

    def pre_construct(self, context: ResolutionContext) -> Identifier | None:
        """Inspect the identifier about to be resolved.

        Args:
            context: Context of the identifier being resolved.

        Returns:
            ``None`` to keep the identifier, or a replacement identifier that
            all later handlers resolve instead.

        Raises:
            ValidationError: To veto the resolution.

        """
        ...


@runtime_checkable
class AnnotationValueHandler(Protocol):
    """Resolve identifiers carrying custom marker annotations to saved values."""

    def on_annotation_value(self, marker: Any, value: Any) -> None:
        """Save ``value`` for ``marker``; called by ``Resolver.provide``."""
        ...

    def resolve_annotation_value(self, context: ResolutionContext) -> Instantiation[Any] | None:
        """Return an instantiation for the identifier, or ``None`` if not applicable."""
        ...


@runtime_checkable
class DependencyHandler(Protocol):
    """Resolve an identifier to an available value or a dedicated instantiation."""

    def resolve_dependency(self, context: ResolutionContext) -> Instantiation[Any] | None:
        """Return an instantiation for the identifier, or ``None`` if not applicable."""
        ...


@runtime_checkable
class InstantiationProvider(Protocol):
    """Choose how a type is built."""

    def get_instantiation(self, context: ResolutionContext) -> Instantiation[Any] | None:
        """Return an instantiation able to build the identifier, or ``None``."""
        ...


@runtime_checkable
class PostConstructHandler(Protocol):
    """Run after an object was built and all its dependencies were injected."""

    def post_construct(self, instance: Any, context: ResolutionContext) -> None:
        """Process the freshly built ``instance``."""
        ...


@runtime_checkable
class ProviderRegistrationHandler(Protocol):
    """Receive provider registrations from ``Resolver.register_provider``.

    This is not a chain of its own: handlers with this capability must also
    belong to at least one pipeline chain.
    """

    def on_provider(self, identifier: Identifier, provider: Any) -> None:
        """Register a ready provider object for ``identifier``."""
        ...

    def on_provider_class(self, identifier: Identifier, provider_class: type[Any]) -> None:
        """Register a provider class, resolved lazily, for ``identifier``."""
        ...

    def has_provider(self, identifier: Identifier) -> bool:
        """Return True when a provider or provider class is registered for ``identifier``."""
        ...
