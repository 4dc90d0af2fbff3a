from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chainwire._internal.integrations.pydantic_settings import is_settings_class
from chainwire._internal.introspection import InjectionPointInspector
from chainwire._internal.policies import ConstructionPolicy
from chainwire.instantiations import (
    ConstructorInstantiation,
    FactoryMethodInstantiation,
    SettingsInstantiation,
)

if TYPE_CHECKING:
    from chainwire.context import ResolutionContext
    from chainwire.instantiations import Instantiation


class ConstructorInjectionProvider:
    """Build concrete classes through ``__init__`` and ``Injected`` fields.

    Classes declaring an ``@inject`` factory method are left to
    ``FactoryMethodInjectionProvider``.
    """

    def __init__(
        self,
        inspector: InjectionPointInspector | None = None,
        policy: ConstructionPolicy | None = None,
    ) -> None:
        self._inspector = inspector or InjectionPointInspector()
        self._policy = policy or ConstructionPolicy()

    def get_instantiation(self, context: ResolutionContext) -> Instantiation[Any] | None:
        candidate = context.identifier.raw_type
        if not self._policy.is_constructible(candidate):
            return None
        points = self._inspector.describe(candidate)
        if points.factory_method is not None:
            return None
        return ConstructorInstantiation(points)


class FactoryMethodInjectionProvider:
    """Build classes through their ``@inject``-marked class or static method."""

    def __init__(
        self,
        inspector: InjectionPointInspector | None = None,
        policy: ConstructionPolicy | None = None,
    ) -> None:
        self._inspector = inspector or InjectionPointInspector()
        self._policy = policy or ConstructionPolicy()

    def get_instantiation(self, context: ResolutionContext) -> Instantiation[Any] | None:
        candidate = context.identifier.raw_type
        if not self._policy.is_constructible(candidate):
            return None
        points = self._inspector.describe(candidate)
        if points.factory_method is None:
            return None
        return FactoryMethodInstantiation(points)


class SettingsInstantiationProvider:
    """Build Pydantic settings models with their zero-argument constructor."""

    def get_instantiation(self, context: ResolutionContext) -> Instantiation[Any] | None:
        candidate = context.identifier.raw_type
        if not is_settings_class(candidate):
            return None
        return SettingsInstantiation(candidate)
