from __future__ import annotations

from chainwire._internal.introspection import InjectionPointInspector
from chainwire._internal.policies import ConstructionPolicy
from chainwire.handlers.annotation_values import SavedAnnotationsHandler
from chainwire.handlers.dependency import (
    FactoryDependencyHandler,
    SingletonStoreDependencyHandler,
)
from chainwire.handlers.instantiation import (
    ConstructorInjectionProvider,
    FactoryMethodInjectionProvider,
    SettingsInstantiationProvider,
)
from chainwire.handlers.postconstruct import PostConstructMethodInvoker
from chainwire.handlers.preconstruct import PackageValidator
from chainwire.handlers.provider import ProviderHandler


def create_default_handlers(root_package: str) -> list[object]:
    """Return the default handlers, in pipeline order.

    Only classes within ``root_package`` (or one of its subpackages) may be
    resolved. Pass the result to ``Resolver``, optionally after inserting
    custom handlers: the order within each stage matters.

    Args:
        root_package: Dotted name of the package containing the application classes.

    """
    return [
        PackageValidator(root_package),
        SavedAnnotationsHandler(),
        FactoryDependencyHandler(),
        SingletonStoreDependencyHandler(),
        *create_instantiation_providers(),
        PostConstructMethodInvoker(),
    ]


def create_instantiation_providers() -> list[object]:
    """Return the default instantiation providers, most specific first.

    Registered providers win over settings models, which win over factory
    methods; constructor injection comes last. ``ProviderHandler`` also
    resolves ``Provider[T]`` injection points.
    """
    inspector = InjectionPointInspector()
    policy = ConstructionPolicy()
    return [
        ProviderHandler(),
        SettingsInstantiationProvider(),
        FactoryMethodInjectionProvider(inspector=inspector, policy=policy),
        ConstructorInjectionProvider(inspector=inspector, policy=policy),
    ]


__all__ = ["create_default_handlers", "create_instantiation_providers"]
