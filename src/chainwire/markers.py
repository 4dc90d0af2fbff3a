from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, Union, get_args, get_origin

if TYPE_CHECKING:
    from chainwire.handlers.dependency import InstanceFactory, SingletonCollection

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

INJECT_MARKER_ATTR = "__chainwire_inject__"
POST_CONSTRUCT_MARKER_ATTR = "__chainwire_post_construct__"
_ANNOTATED_MARKER_MIN_ARGS = 2


class Component(NamedTuple):
    """Differentiate several objects of the same base type.

    Attach ``Component`` metadata to ``typing.Annotated`` so each annotated
    identifier is resolved and cached separately.

    Examples:
        .. code-block:: python

            ReplicaDb: TypeAlias = Annotated[Database, Component("replica")]
            PrimaryDb: TypeAlias = Annotated[Database, Component("primary")]

    """

    value: Any


class InjectedMarker:
    """Marker indicating that a field or defaulted parameter must be injected."""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, InjectedMarker)

    def __hash__(self) -> int:
        return hash(InjectedMarker)

    def __repr__(self) -> str:
        return "InjectedMarker()"


class ProviderMarker(NamedTuple):
    """Marker for deferred resolver-bound provider callables."""

    dependency_key: Any


class FactoryMarker(NamedTuple):
    """Marker for factories creating new instances of subclasses of a base type."""

    dependency_key: Any


class SingletonsMarker(NamedTuple):
    """Marker for read access to cached singletons of a base type."""

    dependency_key: Any


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
    """Mark an instance field (or a defaulted parameter) for injection.

    At runtime ``Injected[T]`` becomes ``Annotated[T, InjectedMarker()]``.
    """

    Provider = Callable[[], T]
    """Inject a zero-argument callable that resolves ``T`` on each call.

    At runtime ``Provider[T]`` becomes ``Annotated[T, ProviderMarker(T)]``.
    """

    Factory = InstanceFactory[T]
    """Inject a factory building new instances of subclasses of ``T``."""

    Singletons = SingletonCollection[T]
    """Inject read access to the singletons of subclasses of ``T``."""

else:

    class Injected:
        """Mark an instance field (or a defaulted parameter) for injection.

        At runtime ``Injected[T]`` resolves to ``Annotated[T, InjectedMarker()]``.

        Examples:
            .. code-block:: python

                class Service:
                    repository: Injected[Repository]

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectedMarker]:
            return _append_marker(item, InjectedMarker())

    class Provider:
        """Inject a zero-argument callable resolving the wrapped type lazily.

        Requesting a bare ``Provider`` without a type argument is a
        configuration error.
        """

        def __class_getitem__(cls, item: T) -> Annotated[T, ProviderMarker]:
            return _append_marker(item, ProviderMarker(dependency_key=item))

    class Factory:
        """Inject a factory for new instances of subclasses of the wrapped type."""

        def __class_getitem__(cls, item: T) -> Annotated[T, FactoryMarker]:
            return _append_marker(item, FactoryMarker(dependency_key=item))

    class Singletons:
        """Inject read access to cached singletons of the wrapped type."""

        def __class_getitem__(cls, item: T) -> Annotated[T, SingletonsMarker]:
            return _append_marker(item, SingletonsMarker(dependency_key=item))


def inject(func: F) -> F:
    """Mark ``__init__`` or a class/static factory method as the injection point.

    Marking ``__init__`` is optional; marking a factory method makes the
    factory strategy build the class through it.

    Args:
        func: Function, ``classmethod`` or ``staticmethod`` to mark.

    """
    target = getattr(func, "__func__", func)
    setattr(target, INJECT_MARKER_ATTR, True)
    return func


def post_construct(func: F) -> F:
    """Mark a method to run once after all dependencies are injected.

    Args:
        func: Instance method without parameters other than ``self``.

    """
    target = getattr(func, "__func__", func)
    setattr(target, POST_CONSTRUCT_MARKER_ATTR, True)
    return func


def is_inject_marked(member: Any) -> bool:
    """Return True when a function (or wrapped class/static method) carries ``@inject``."""
    target = getattr(member, "__func__", member)
    return bool(getattr(target, INJECT_MARKER_ATTR, False))


def is_post_construct_marked(member: Any) -> bool:
    """Return True when a function (or wrapped class/static method) carries ``@post_construct``."""
    target = getattr(member, "__func__", member)
    return bool(getattr(target, POST_CONSTRUCT_MARKER_ATTR, False))


def is_injected_annotation(annotation: Any) -> bool:
    """Return True when annotation is ``Annotated[..., InjectedMarker()]``."""
    if get_origin(annotation) is not Annotated:
        return False
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return False
    return any(isinstance(item, InjectedMarker) for item in annotation_args[1:])


def build_annotated_key(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]


def _append_marker(item: Any, marker: object) -> Any:
    if get_origin(item) is Annotated:
        args = get_args(item)
        return build_annotated_key((args[0], *args[1:], marker))
    return build_annotated_key((item, marker))
