from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from chainwire._internal.type_checks import is_runtime_class
from chainwire.exceptions import ConfigurationError
from chainwire.identifier import Identifier
from chainwire.instantiations import ValueInstantiation
from chainwire.markers import Factory, FactoryMarker, Singletons, SingletonsMarker

if TYPE_CHECKING:
    from chainwire.context import ResolutionContext
    from chainwire.instantiations import Instantiation
    from chainwire.resolver import Resolver

T = TypeVar("T")


class InstanceFactory(Generic[T]):
    """Create new instances of subclasses of a base type.

    Injected for ``Factory[T]``. Every call builds a new object through
    ``Resolver.new_instance``; the dependencies of that object follow their
    own lifetime.
    """

    def __init__(self, resolver: Resolver, base: type[T]) -> None:
        self._resolver = resolver
        self._base = base

    @property
    def base(self) -> type[T]:
        return self._base

    def new_instance(self, cls: type[Any]) -> T:
        """Build a new instance of ``cls``.

        Raises:
            ConfigurationError: If ``cls`` is not a subclass of the base type.

        """
        _check_subclass(cls, self._base, "factory")
        return self._resolver.new_instance(cls)


class SingletonCollection(Generic[T]):
    """Read access to the singletons of subclasses of a base type.

    Injected for ``Singletons[T]``.
    """

    def __init__(self, resolver: Resolver, base: type[T]) -> None:
        self._resolver = resolver
        self._base = base

    @property
    def base(self) -> type[T]:
        return self._base

    def singleton(self, cls: type[Any]) -> T:
        """Return the singleton of ``cls``, building it when needed."""
        _check_subclass(cls, self._base, "singleton store")
        return self._resolver.resolve(cls)

    def get_if_available(self, cls: type[Any]) -> T | None:
        """Return the singleton of ``cls`` if it was already built, else ``None``."""
        _check_subclass(cls, self._base, "singleton store")
        return self._resolver.get_if_available(cls)

    def retrieve_all_of_type(self, cls: type[Any] | None = None) -> list[T]:
        """Return all built singletons that are instances of ``cls`` (default: the base)."""
        target = self._base if cls is None else cls
        _check_subclass(target, self._base, "singleton store")
        return self._resolver.retrieve_all_of_type(target)


class FactoryDependencyHandler:
    """Inject an ``InstanceFactory`` for ``Factory[T]`` injection points."""

    def resolve_dependency(self, context: ResolutionContext) -> Instantiation[Any] | None:
        base = _marked_base(context.identifier, Factory, FactoryMarker, "factory")
        if base is None:
            return None
        return ValueInstantiation(InstanceFactory(context.resolver, base))


class SingletonStoreDependencyHandler:
    """Inject a ``SingletonCollection`` for ``Singletons[T]`` injection points."""

    def resolve_dependency(self, context: ResolutionContext) -> Instantiation[Any] | None:
        base = _marked_base(context.identifier, Singletons, SingletonsMarker, "singleton store")
        if base is None:
            return None
        return ValueInstantiation(SingletonCollection(context.resolver, base))


def _marked_base(
    identifier: Identifier,
    bare_marker: Any,
    marker_type: type[Any],
    description: str,
) -> type[Any] | None:
    if identifier.raw_type is bare_marker:
        msg = f"Injection of a {description} was requested but no generic type was given"
        raise ConfigurationError(msg)
    marker = identifier.find_annotation(marker_type)
    if marker is None:
        return None
    base = Identifier.of(marker.dependency_key).raw_type
    if not is_runtime_class(base):
        msg = f"The generic type of a {description} must be a class, got {base!r}."
        raise ConfigurationError(msg)
    return base


def _check_subclass(cls: Any, base: type[Any], description: str) -> None:
    if not is_runtime_class(cls) or not issubclass(cls, base):
        msg = (
            f"Class {cls!r} requested from a {description} is not a subclass "
            f"of '{base.__qualname__}'."
        )
        raise ConfigurationError(msg)
