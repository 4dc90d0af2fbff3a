"""Instantiation recipes.

An instantiation declares the identifiers it depends on and builds a value
once the resolver supplies the resolved dependency values, in the declared
order. Instantiations hold no resolved state and can be reused.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from inspect import Parameter
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from chainwire._internal.type_checks import is_instance_of
from chainwire.exceptions import ConfigurationError
from chainwire.identifier import Identifier

if TYPE_CHECKING:
    from chainwire._internal.introspection import InjectionPoint, InjectionPoints

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Instantiation(Protocol[T_co]):
    """Protocol for instantiation recipes."""

    @property
    def dependencies(self) -> Sequence[Identifier]:
        """Identifiers whose values ``instantiate_with`` expects, in order."""
        ...

    @property
    def constructs(self) -> bool:
        """Whether the result is a newly built object.

        Post-construct handlers and singleton caching only apply to results
        of constructing instantiations.
        """
        ...

    def instantiate_with(self, *values: Any) -> T_co:
        """Build the value from resolved dependency values."""
        ...


class ValueInstantiation:
    """Instantiation returning an already available value."""

    __slots__ = ("_value",)

    def __init__(self, value: Any) -> None:
        self._value = value

    @property
    def dependencies(self) -> Sequence[Identifier]:
        return ()

    @property
    def constructs(self) -> bool:
        return False

    def instantiate_with(self, *values: Any) -> Any:
        _check_value_count(self, values)
        return self._value

    def __repr__(self) -> str:
        return f"ValueInstantiation({self._value!r})"


class ConstructorInstantiation:
    """Instantiation calling ``__init__``, then setting injected fields."""

    __slots__ = ("_dependencies", "_points")

    def __init__(self, points: InjectionPoints) -> None:
        self._points = points
        self._dependencies = tuple(
            point.identifier for point in (*points.constructor_parameters, *points.fields)
        )

    @property
    def dependencies(self) -> Sequence[Identifier]:
        return self._dependencies

    @property
    def constructs(self) -> bool:
        return True

    def instantiate_with(self, *values: Any) -> Any:
        _check_value_count(self, values)
        parameter_count = len(self._points.constructor_parameters)
        instance = _call_with(
            self._points.target,
            self._points.constructor_parameters,
            values[:parameter_count],
        )
        _set_fields(instance, self._points.fields, values[parameter_count:])
        return instance

    def __repr__(self) -> str:
        return f"ConstructorInstantiation({self._points.target.__qualname__})"


class FactoryMethodInstantiation:
    """Instantiation calling a class-level factory method, then setting injected fields."""

    __slots__ = ("_dependencies", "_points")

    def __init__(self, points: InjectionPoints) -> None:
        if points.factory_method is None:
            msg = f"Class '{points.target.__qualname__}' has no factory method."
            raise ConfigurationError(msg)
        self._points = points
        self._dependencies = tuple(
            point.identifier for point in (*points.factory_parameters, *points.fields)
        )

    @property
    def dependencies(self) -> Sequence[Identifier]:
        return self._dependencies

    @property
    def constructs(self) -> bool:
        return True

    def instantiate_with(self, *values: Any) -> Any:
        _check_value_count(self, values)
        factory_method = self._points.factory_method
        if factory_method is None:  # pragma: no cover - checked in __init__
            msg = f"Class '{self._points.target.__qualname__}' has no factory method."
            raise ConfigurationError(msg)
        parameter_count = len(self._points.factory_parameters)
        instance = _call_with(
            factory_method,
            self._points.factory_parameters,
            values[:parameter_count],
        )
        if not isinstance(instance, self._points.target):
            msg = (
                f"Factory method of '{self._points.target.__qualname__}' returned "
                f"'{type(instance).__qualname__}', which is not an instance of the class."
            )
            raise ConfigurationError(msg)
        _set_fields(instance, self._points.fields, values[parameter_count:])
        return instance

    def __repr__(self) -> str:
        return f"FactoryMethodInstantiation({self._points.target.__qualname__})"


class ProviderInstantiation:
    """Instantiation delegating to a registered provider object's ``get()``."""

    __slots__ = ("_provider", "_requested")

    def __init__(self, provider: Any, requested: Identifier) -> None:
        self._provider = provider
        self._requested = requested

    @property
    def dependencies(self) -> Sequence[Identifier]:
        return ()

    @property
    def constructs(self) -> bool:
        return True

    def instantiate_with(self, *values: Any) -> Any:
        _check_value_count(self, values)
        return _checked_provider_result(self._provider, self._requested)

    def __repr__(self) -> str:
        return f"ProviderInstantiation({self._provider!r} -> {self._requested})"


class ProviderClassInstantiation:
    """Instantiation resolving a provider class first, then calling its ``get()``."""

    __slots__ = ("_dependencies", "_provider_class", "_requested")

    def __init__(self, provider_class: type[Any], requested: Identifier) -> None:
        self._provider_class = provider_class
        self._requested = requested
        self._dependencies = (Identifier.of(provider_class),)

    @property
    def dependencies(self) -> Sequence[Identifier]:
        return self._dependencies

    @property
    def constructs(self) -> bool:
        return True

    def instantiate_with(self, *values: Any) -> Any:
        _check_value_count(self, values)
        provider = values[0]
        if not isinstance(provider, self._provider_class):
            msg = (
                f"Expected an instance of provider class '{self._provider_class.__qualname__}' "
                f"but got '{type(provider).__qualname__}'."
            )
            raise ConfigurationError(msg)
        return _checked_provider_result(provider, self._requested)

    def __repr__(self) -> str:
        name = self._provider_class.__qualname__
        return f"ProviderClassInstantiation({name} -> {self._requested})"


class SettingsInstantiation:
    """Instantiation for settings models that load themselves without arguments."""

    __slots__ = ("_settings_class",)

    def __init__(self, settings_class: type[Any]) -> None:
        self._settings_class = settings_class

    @property
    def dependencies(self) -> Sequence[Identifier]:
        return ()

    @property
    def constructs(self) -> bool:
        return True

    def instantiate_with(self, *values: Any) -> Any:
        _check_value_count(self, values)
        return self._settings_class()


def _check_value_count(instantiation: Instantiation[Any], values: Sequence[Any]) -> None:
    expected = len(instantiation.dependencies)
    if len(values) != expected:
        msg = f"{instantiation!r} expects {expected} dependency values, got {len(values)}."
        raise ConfigurationError(msg)


def _call_with(
    target: Callable[..., Any],
    points: Sequence[InjectionPoint],
    values: Sequence[Any],
) -> Any:
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for point, value in zip(points, values, strict=True):
        if point.kind is Parameter.POSITIONAL_ONLY:
            args.append(value)
        else:
            kwargs[point.name] = value
    return target(*args, **kwargs)


def _set_fields(instance: Any, points: Sequence[InjectionPoint], values: Sequence[Any]) -> None:
    for point, value in zip(points, values, strict=True):
        setattr(instance, point.name, value)


def _checked_provider_result(provider: Any, requested: Identifier) -> Any:
    value = provider.get()
    if not is_instance_of(value, requested.raw_type):
        msg = (
            f"Provider '{type(provider).__qualname__}' returned '{type(value).__qualname__}', "
            f"which is not assignable to the requested type '{requested}'."
        )
        raise ConfigurationError(msg)
    return value
