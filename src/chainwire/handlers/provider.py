from __future__ import annotations

import functools
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from chainwire.exceptions import AlreadyRegisteredError, ConfigurationError
from chainwire.identifier import Identifier
from chainwire.instantiations import (
    ProviderClassInstantiation,
    ProviderInstantiation,
    ValueInstantiation,
)
from chainwire.markers import Provider, ProviderMarker

if TYPE_CHECKING:
    from chainwire.context import ResolutionContext
    from chainwire.instantiations import Instantiation


@dataclass(frozen=True, slots=True)
class ProviderRegistration:
    """A provider registered for a target type: a ready object or a class."""

    provider: Any = None
    provider_class: type[Any] | None = None


class ProviderHandler:
    """Handle registered providers and ``Provider[T]`` injection points.

    As an instantiation provider it builds types that have a registered
    provider. As a dependency handler it answers ``Provider[T]`` requests with
    a zero-argument callable: the registered provider's ``get`` when one
    exists, otherwise a callable that resolves ``T`` on each call.
    """

    def __init__(self) -> None:
        self._providers: dict[Identifier, ProviderRegistration] = {}
        self._lock = threading.Lock()

    def on_provider(self, identifier: Identifier, provider: Any) -> None:
        if isinstance(provider, type) or not callable(getattr(provider, "get", None)):
            msg = (
                f"Provider for '{identifier}' must be an object with a callable get() method, "
                f"got {provider!r}."
            )
            raise ConfigurationError(msg)
        self._register(identifier, ProviderRegistration(provider=provider))

    def on_provider_class(self, identifier: Identifier, provider_class: type[Any]) -> None:
        if not isinstance(provider_class, type) or not callable(
            getattr(provider_class, "get", None),
        ):
            msg = (
                f"Provider class for '{identifier}' must be a class defining get(), "
                f"got {provider_class!r}."
            )
            raise ConfigurationError(msg)
        self._register(identifier, ProviderRegistration(provider_class=provider_class))

    def has_provider(self, identifier: Identifier) -> bool:
        return identifier in self._providers

    def get_instantiation(self, context: ResolutionContext) -> Instantiation[Any] | None:
        registration = self._providers.get(context.identifier)
        if registration is None:
            return None
        if registration.provider_class is not None:
            return ProviderClassInstantiation(registration.provider_class, context.identifier)
        return ProviderInstantiation(registration.provider, context.identifier)

    def resolve_dependency(self, context: ResolutionContext) -> Instantiation[Any] | None:
        identifier = context.identifier
        if identifier.raw_type is Provider:
            msg = "Injection of a provider was requested but no generic type was given"
            raise ConfigurationError(msg)
        if identifier.find_annotation(ProviderMarker) is None:
            return None

        target = identifier.without(ProviderMarker)
        registration = self._providers.get(target)
        if registration is None:
            return ValueInstantiation(functools.partial(context.resolver.resolve, target))
        if registration.provider_class is not None:
            provider = context.resolver.resolve(registration.provider_class)
            return ValueInstantiation(provider.get)
        return ValueInstantiation(registration.provider.get)

    def _register(self, identifier: Identifier, registration: ProviderRegistration) -> None:
        with self._lock:
            if identifier in self._providers:
                raise AlreadyRegisteredError(
                    identifier,
                    f"There is already a provider registered for '{identifier}'",
                )
            self._providers[identifier] = registration
