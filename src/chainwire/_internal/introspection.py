from __future__ import annotations

import inspect
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from inspect import Parameter
from typing import Any, ClassVar, get_args, get_origin, get_type_hints

from chainwire.exceptions import ConfigurationError
from chainwire.identifier import Identifier
from chainwire.markers import is_inject_marked, is_injected_annotation

_MISSING_ANNOTATION: Any = object()
_IMPLICIT_FIRST_PARAMETER_NAMES = {"self", "cls"}


@dataclass(frozen=True, slots=True)
class InjectionPoint:
    """A parameter or field that receives a resolved dependency."""

    name: str
    identifier: Identifier
    kind: Any = Parameter.POSITIONAL_OR_KEYWORD
    """Parameter kind; instance fields use ``POSITIONAL_OR_KEYWORD``."""


@dataclass(frozen=True, slots=True)
class InjectionPoints:
    """Describe how a class receives its dependencies."""

    target: type[Any]
    constructor_parameters: tuple[InjectionPoint, ...]
    """Parameters of ``__init__``; empty when a factory method is declared."""
    fields: tuple[InjectionPoint, ...]
    """Instance fields annotated with ``Injected[...]``, set after construction."""
    factory_method: Callable[..., Any] | None = None
    """Class-level factory marked with ``@inject``, bound to the class."""
    factory_parameters: tuple[InjectionPoint, ...] = ()


@dataclass(slots=True)
class InjectionPointInspector:
    """Describe the injection points of classes.

    This is the single place that inspects signatures and annotations; the
    instantiation strategies only consume the resulting ``InjectionPoints``.
    Results are cached per class.
    """

    _cache: dict[type[Any], InjectionPoints] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def describe(self, cls: type[Any]) -> InjectionPoints:
        """Return the injection points of ``cls``.

        Args:
            cls: Concrete class to inspect.

        Raises:
            ConfigurationError: If the class declares ambiguous markers, injects into
                a class-level field, or has required parameters without annotations.

        """
        cached = self._cache.get(cls)
        if cached is not None:
            return cached

        factory_name = self._find_factory_method_name(cls)
        if factory_name is None:
            constructor_parameters = self._extract_parameters(
                provider=cls.__init__,
                provider_name=f"{cls.__qualname__}.__init__",
                skip_first_parameter=True,
                fallback_hints=self._class_type_hints(cls),
            )
            factory_method = None
            factory_parameters: tuple[InjectionPoint, ...] = ()
        else:
            constructor_parameters = ()
            factory_method = getattr(cls, factory_name)
            factory_parameters = self._extract_parameters(
                provider=factory_method,
                provider_name=f"{cls.__qualname__}.{factory_name}",
                skip_first_parameter=False,
                fallback_hints={},
            )

        parameter_names = {point.name for point in constructor_parameters}
        points = InjectionPoints(
            target=cls,
            constructor_parameters=constructor_parameters,
            fields=self._extract_fields(cls, skip_names=parameter_names),
            factory_method=factory_method,
            factory_parameters=factory_parameters,
        )
        with self._lock:
            return self._cache.setdefault(cls, points)

    def _find_factory_method_name(self, cls: type[Any]) -> str | None:
        factory_names: list[str] = []
        for name, member in vars(cls).items():
            if isinstance(member, classmethod | staticmethod):
                if is_inject_marked(member):
                    factory_names.append(name)
            elif inspect.isfunction(member) and name != "__init__" and is_inject_marked(member):
                msg = (
                    f"@inject on '{cls.__qualname__}.{name}' is not supported. Only __init__ "
                    "and class-level factory methods (classmethod/staticmethod) may be marked."
                )
                raise ConfigurationError(msg)

        init_marked = is_inject_marked(cls.__init__)
        if len(factory_names) > 1 or (factory_names and init_marked):
            marked = ", ".join(
                f"'{name}'" for name in (["__init__"] if init_marked else []) + factory_names
            )
            msg = (
                f"Class '{cls.__qualname__}' declares multiple injection markers ({marked}). "
                "Mark exactly one constructor or factory method with @inject."
            )
            raise ConfigurationError(msg)
        return factory_names[0] if factory_names else None

    def _extract_parameters(
        self,
        *,
        provider: Callable[..., Any],
        provider_name: str,
        skip_first_parameter: bool,
        fallback_hints: dict[str, Any],
    ) -> tuple[InjectionPoint, ...]:
        try:
            parameters = tuple(inspect.signature(provider).parameters.values())
        except (TypeError, ValueError):
            return ()
        if (
            skip_first_parameter
            and parameters
            and parameters[0].name in _IMPLICIT_FIRST_PARAMETER_NAMES
        ):
            parameters = parameters[1:]

        annotations, annotation_error = self._resolved_type_hints(provider)
        for name, hint in fallback_hints.items():
            annotations.setdefault(name, hint)

        points: list[InjectionPoint] = []
        for parameter in parameters:
            if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
                continue
            annotation = self._resolve_parameter_annotation(
                parameter=parameter,
                annotations=annotations,
                annotation_error=annotation_error,
                provider_name=provider_name,
            )
            if annotation is _MISSING_ANNOTATION:
                continue
            points.append(
                InjectionPoint(
                    name=parameter.name,
                    identifier=Identifier.of(annotation),
                    kind=parameter.kind,
                ),
            )
        return tuple(points)

    def _resolve_parameter_annotation(
        self,
        *,
        parameter: Parameter,
        annotations: dict[str, Any],
        annotation_error: Exception | None,
        provider_name: str,
    ) -> Any:
        annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
        if annotation is _MISSING_ANNOTATION:
            raw_annotation = parameter.annotation
            if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
                annotation = raw_annotation

        if parameter.default is not Parameter.empty:
            # Defaulted parameters keep their default unless explicitly marked.
            if annotation is not _MISSING_ANNOTATION and is_injected_annotation(annotation):
                return annotation
            return _MISSING_ANNOTATION

        if annotation is not _MISSING_ANNOTATION:
            return annotation

        error_message = (
            f"Unable to infer dependency for required parameter '{parameter.name}' "
            f"in '{provider_name}'. Add a type annotation."
        )
        if annotation_error is None:
            raise ConfigurationError(error_message)
        msg = f"{error_message} Original annotation error: {annotation_error}"
        raise ConfigurationError(msg) from annotation_error

    def _extract_fields(
        self,
        cls: type[Any],
        *,
        skip_names: set[str],
    ) -> tuple[InjectionPoint, ...]:
        points: list[InjectionPoint] = []
        for name, hint in self._class_type_hints(cls).items():
            if get_origin(hint) is ClassVar:
                inner = get_args(hint)
                if inner and is_injected_annotation(inner[0]):
                    msg = (
                        f"Field '{cls.__qualname__}.{name}' is declared as ClassVar. "
                        "Static members may not be injected."
                    )
                    raise ConfigurationError(msg)
                continue
            if name in skip_names or not is_injected_annotation(hint):
                continue
            points.append(InjectionPoint(name=name, identifier=Identifier.of(hint)))
        return tuple(points)

    def _class_type_hints(self, cls: type[Any]) -> dict[str, Any]:
        try:
            return get_type_hints(cls, include_extras=True)
        except (AttributeError, NameError, TypeError):
            pass

        # Unresolvable forward references: keep the annotations that are real objects.
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            for name, annotation in inspect.get_annotations(klass).items():
                if not isinstance(annotation, str):
                    hints[name] = annotation
        return hints

    def _resolved_type_hints(
        self,
        provider: Callable[..., Any],
    ) -> tuple[dict[str, Any], Exception | None]:
        try:
            return get_type_hints(provider, include_extras=True), None
        except (AttributeError, NameError, TypeError) as error:
            return {}, error
