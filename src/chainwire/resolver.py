from __future__ import annotations

import functools
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, TypeVar, overload

from chainwire._internal.type_checks import is_instance_of
from chainwire.context import ResolutionContext
from chainwire.exceptions import (
    AlreadyRegisteredError,
    ConfigurationError,
    CyclicDependencyError,
    PostConstructError,
)
from chainwire.handlers.chains import HandlerChains
from chainwire.identifier import Identifier
from chainwire.lifetime import Lifetime, lifetime_of
from chainwire.singleton_store import MISSING, SingletonStore

if TYPE_CHECKING:
    from chainwire.instantiations import Instantiation

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Resolver:
    """Resolve dependencies through an ordered pipeline of handlers.

    For every requested identifier the resolver consults, in this order,
    pre-construct handlers, annotation-value handlers, dependency handlers and
    instantiation providers. It resolves the dependencies declared by the
    chosen instantiation first, builds the object, runs all post-construct
    handlers and caches singleton-scoped results.

    The resolver registers itself as a singleton, so classes may depend on
    ``Resolver`` directly.

    Examples:
        .. code-block:: python

            resolver = Resolver(create_default_handlers("myapp"))
            service = resolver.resolve(Service)

    """

    def __init__(
        self,
        handlers: Iterable[object],
        *,
        default_lifetime: Lifetime = Lifetime.SINGLETON,
    ) -> None:
        """Sort the handlers into chains and create an empty singleton store.

        Args:
            handlers: Handlers in the order they should be consulted within each stage.
            default_lifetime: Lifetime of classes without ``@singleton``/``@transient``.

        Raises:
            ConfigurationError: If a handler implements no known capability.

        """
        self._chains = HandlerChains.from_handlers(handlers)
        self._default_lifetime = default_lifetime
        self._singletons = SingletonStore()
        self._singletons.add(Identifier.of(Resolver), self)

        counts = self._chains.counts()
        logger.info(
            "Configured resolver: %d pre-construct, %d annotation-value, %d dependency, "
            "%d instantiation and %d post-construct handlers",
            counts["pre_construct"],
            counts["annotation_value"],
            counts["dependency"],
            counts["instantiation"],
            counts["post_construct"],
        )

    @property
    def handler_chains(self) -> HandlerChains:
        """Handler chains used by this resolver, fixed at construction."""
        return self._chains

    @property
    def default_lifetime(self) -> Lifetime:
        return self._default_lifetime

    @overload
    def resolve(self, dependency: type[T]) -> T: ...

    @overload
    def resolve(self, dependency: Any) -> Any: ...

    def resolve(self, dependency: Any) -> Any:
        """Resolve a dependency, building it and its dependencies when needed.

        Args:
            dependency: Class, ``Annotated`` form, or ``Identifier`` to resolve.

        Raises:
            ConfigurationError: If no instantiation provider can build the type.
            CyclicDependencyError: If the type depends on itself.
            ValidationError: If a pre-construct handler rejects the type.
            PostConstructError: If a post-construct handler fails.

        """
        context = ResolutionContext(resolver=self, identifier=Identifier.of(dependency))
        return self._resolve(context)

    def register(self, dependency: Any, instance: Any) -> None:
        """Pre-seed the singleton for ``dependency`` with a ready instance.

        Raises:
            ConfigurationError: If ``instance`` is not an instance of the dependency type.
            AlreadyRegisteredError: If a singleton or provider already exists for the key.

        """
        identifier = Identifier.of(dependency)
        if not is_instance_of(instance, identifier.raw_type):
            msg = (
                f"Cannot register '{type(instance).__qualname__}' instance for '{identifier}': "
                "it is not an instance of the dependency type."
            )
            raise ConfigurationError(msg)
        for handler in self._chains.provider_registration_handlers():
            if handler.has_provider(identifier):
                raise AlreadyRegisteredError(
                    identifier,
                    f"There is already a provider registered for '{identifier}'",
                )
        self._singletons.add(identifier, instance)
        logger.debug("Registered singleton %s", identifier)

    def register_provider(self, dependency: Any, provider: Any) -> None:
        """Register a provider object or a provider class for ``dependency``.

        A provider object must have a callable ``get()``. A provider class is
        resolved through the pipeline on first use, so it may declare
        dependencies of its own.

        Raises:
            ConfigurationError: If the provider is invalid or no handler accepts providers.
            AlreadyRegisteredError: If a provider or singleton already exists for the key.

        """
        identifier = Identifier.of(dependency)
        if identifier in self._singletons:
            raise AlreadyRegisteredError(
                identifier,
                f"There is already a singleton registered for '{identifier}'",
            )
        handlers = self._chains.provider_registration_handlers()
        if not handlers:
            msg = f"Cannot register a provider for '{identifier}': no handler accepts providers."
            raise ConfigurationError(msg)

        for handler in handlers:
            if isinstance(provider, type):
                handler.on_provider_class(identifier, provider)
            else:
                handler.on_provider(identifier, provider)
        logger.debug("Registered provider %r for %s", provider, identifier)

    def provide(self, marker: Any, value: Any) -> None:
        """Save ``value`` for injection points annotated with ``marker``.

        Raises:
            ConfigurationError: If no annotation-value handler is configured.
            AlreadyRegisteredError: If a value was already saved for ``marker``.

        """
        if not self._chains.annotation_value:
            msg = (
                f"Cannot provide a value for {marker!r}: "
                "no annotation-value handler is configured."
            )
            raise ConfigurationError(msg)
        for handler in self._chains.annotation_value:
            handler.on_annotation_value(marker, value)

    def new_instance(self, cls: type[T]) -> T:
        """Build a new instance of ``cls`` that is never cached.

        Pre-construct handlers, instantiation providers and post-construct
        handlers run as usual. Dependencies of the instance are resolved with
        their own lifetime.
        """
        context = self._pre_construct_all(
            ResolutionContext(resolver=self, identifier=Identifier.of(cls)),
        )
        instantiation = self._construction_for(context)
        return self._instantiate(context, instantiation)

    def get_if_available(self, dependency: Any) -> Any | None:
        """Return the singleton for ``dependency`` if it exists, else ``None``."""
        return self._singletons.get(Identifier.of(dependency))

    def create_if_has_dependencies(self, cls: type[T]) -> T | None:
        """Build a new ``cls`` only when all of its dependencies are already available.

        A dependency is available when its singleton exists or when an
        annotation-value or dependency handler supplies it without further
        dependencies. Nothing is built for missing dependencies.

        Returns:
            The new instance, or ``None`` if a dependency is missing.

        """
        context = self._pre_construct_all(
            ResolutionContext(resolver=self, identifier=Identifier.of(cls)),
        )
        instantiation = self._construction_for(context)

        values: list[Any] = []
        for dependency in instantiation.dependencies:
            child = context.child(dependency)
            value = self._singletons.lookup(child.identifier)
            if value is MISSING:
                direct = self._direct_instantiation(child)
                if direct is None or direct.dependencies:
                    logger.debug("Dependency %s of %s is not available", child.identifier, cls)
                    return None
                value = direct.instantiate_with()
            values.append(value)

        instance = instantiation.instantiate_with(*values)
        self._run_post_construct(instance, context)
        return instance

    def retrieve_all_of_type(self, cls: type[T]) -> list[T]:
        """Return every built singleton that is an instance of ``cls``."""
        return [instance for instance in self._singletons.values() if isinstance(instance, cls)]

    def _resolve(self, context: ResolutionContext) -> Any:
        identifier = context.identifier
        instance = self._singletons.lookup(identifier)
        if instance is not MISSING:
            return instance
        if context.is_cyclic():
            raise CyclicDependencyError(identifier, context.ancestors)

        redirected = self._pre_construct(context)
        if redirected is not None:
            return self._resolve(redirected)

        instantiation = self._direct_instantiation(context)
        if instantiation is None:
            instantiation = self._construction_for(context)
        if instantiation.constructs and self._is_singleton(identifier):
            return self._singletons.get_or_create(
                identifier,
                functools.partial(self._instantiate, context, instantiation),
            )
        return self._instantiate(context, instantiation)

    def _pre_construct(self, context: ResolutionContext) -> ResolutionContext | None:
        for handler in self._chains.pre_construct:
            replacement = handler.pre_construct(context)
            if replacement is None:
                continue
            replacement = Identifier.of(replacement)
            if replacement != context.identifier:
                logger.debug("Redirected %s to %s", context.identifier, replacement)
                return context.redirect(replacement)
        return None

    def _pre_construct_all(self, context: ResolutionContext) -> ResolutionContext:
        redirected = self._pre_construct(context)
        while redirected is not None:
            if redirected.is_cyclic():
                raise CyclicDependencyError(redirected.identifier, redirected.ancestors)
            context = redirected
            redirected = self._pre_construct(context)
        return context

    def _direct_instantiation(self, context: ResolutionContext) -> Instantiation[Any] | None:
        for value_handler in self._chains.annotation_value:
            instantiation = value_handler.resolve_annotation_value(context)
            if instantiation is not None:
                return instantiation
        for dependency_handler in self._chains.dependency:
            instantiation = dependency_handler.resolve_dependency(context)
            if instantiation is not None:
                return instantiation
        return None

    def _construction_for(self, context: ResolutionContext) -> Instantiation[Any]:
        for provider in self._chains.instantiation:
            instantiation = provider.get_instantiation(context)
            if instantiation is not None:
                return instantiation
        msg = (
            f"No instantiation method available for '{context.identifier}'. "
            "Register a provider or a singleton for it, or make sure it is a concrete class."
        )
        raise ConfigurationError(msg)

    def _instantiate(self, context: ResolutionContext, instantiation: Instantiation[Any]) -> Any:
        values = [
            self._resolve(context.child(dependency)) for dependency in instantiation.dependencies
        ]
        instance = instantiation.instantiate_with(*values)
        if instantiation.constructs:
            logger.debug("Instantiated %s with %r", context.identifier, instantiation)
            self._run_post_construct(instance, context)
        return instance

    def _run_post_construct(self, instance: Any, context: ResolutionContext) -> None:
        for handler in self._chains.post_construct:
            try:
                handler.post_construct(instance, context)
            except PostConstructError:
                raise
            except Exception as error:
                msg = (
                    f"Post-construct handler '{type(handler).__qualname__}' failed "
                    f"for '{context.identifier}': {error}"
                )
                raise PostConstructError(msg) from error

    def _is_singleton(self, identifier: Identifier) -> bool:
        return lifetime_of(identifier.raw_type, self._default_lifetime) is Lifetime.SINGLETON
