from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, get_args, get_origin

from chainwire.markers import InjectedMarker, build_annotated_key


@dataclass(frozen=True, slots=True, eq=False)
class Identifier:
    """Identify a requested dependency: a type plus its injection-point annotations.

    Lookup identity is the erased type together with the set of annotations,
    so ``Annotated[Db, Component("a")]`` and ``Db`` are different keys while the
    order of metadata items does not matter.
    """

    dependency_type: Any
    """The requested type, possibly a parameterized generic."""
    annotations: tuple[Any, ...] = ()
    """Metadata attached through ``typing.Annotated`` (without ``Injected``)."""

    _key: tuple[Any, frozenset[Any]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_key", (self.raw_type, frozenset(self.annotations)))

    @classmethod
    def of(cls, dependency: Any) -> Identifier:
        """Build an identifier from a type, an ``Annotated`` form, or an identifier.

        Args:
            dependency: Dependency key as written at the injection point.

        """
        if isinstance(dependency, Identifier):
            return dependency
        if get_origin(dependency) is Annotated:
            args = get_args(dependency)
            metadata = tuple(item for item in args[1:] if not isinstance(item, InjectedMarker))
            return cls(dependency_type=args[0], annotations=metadata)
        return cls(dependency_type=dependency)

    @property
    def raw_type(self) -> Any:
        """Erased type: the origin of a parameterized generic, else the type itself."""
        return get_origin(self.dependency_type) or self.dependency_type

    def find_annotation(self, annotation_type: type[Any]) -> Any | None:
        """Return the first annotation that is an instance of ``annotation_type``."""
        return next(
            (item for item in self.annotations if isinstance(item, annotation_type)),
            None,
        )

    def without(self, annotation_type: type[Any]) -> Identifier:
        """Return a copy without annotations that are instances of ``annotation_type``."""
        return Identifier(
            dependency_type=self.dependency_type,
            annotations=tuple(
                item for item in self.annotations if not isinstance(item, annotation_type)
            ),
        )

    def to_annotation(self) -> Any:
        """Return the ``Annotated`` form (or the plain type) for this identifier."""
        if not self.annotations:
            return self.dependency_type
        return build_annotated_key((self.dependency_type, *self.annotations))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identifier):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __str__(self) -> str:
        name = getattr(self.dependency_type, "__qualname__", None) or repr(self.dependency_type)
        if not self.annotations:
            return name
        annotations = ", ".join(_describe_annotation(item) for item in self.annotations)
        return f"{name} [{annotations}]"


def _describe_annotation(annotation: Any) -> str:
    if isinstance(annotation, type):
        return f"@{annotation.__qualname__}"
    return repr(annotation)
