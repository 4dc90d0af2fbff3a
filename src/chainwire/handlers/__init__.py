from chainwire.handlers.annotation_values import SavedAnnotationsHandler
from chainwire.handlers.chains import HANDLER_CAPABILITIES, HandlerChains
from chainwire.handlers.dependency import (
    FactoryDependencyHandler,
    InstanceFactory,
    SingletonCollection,
    SingletonStoreDependencyHandler,
)
from chainwire.handlers.instantiation import (
    ConstructorInjectionProvider,
    FactoryMethodInjectionProvider,
    SettingsInstantiationProvider,
)
from chainwire.handlers.postconstruct import PostConstructMethodInvoker
from chainwire.handlers.preconstruct import PackageValidator
from chainwire.handlers.protocol import (
    AnnotationValueHandler,
    DependencyHandler,
    InstantiationProvider,
    PostConstructHandler,
    PreConstructHandler,
    ProviderRegistrationHandler,
)
from chainwire.handlers.provider import ProviderHandler, ProviderRegistration

__all__ = [
    "HANDLER_CAPABILITIES",
    "AnnotationValueHandler",
    "ConstructorInjectionProvider",
    "DependencyHandler",
    "FactoryDependencyHandler",
    "FactoryMethodInjectionProvider",
    "HandlerChains",
    "InstanceFactory",
    "InstantiationProvider",
    "PackageValidator",
    "PostConstructHandler",
    "PostConstructMethodInvoker",
    "PreConstructHandler",
    "ProviderHandler",
    "ProviderRegistration",
    "ProviderRegistrationHandler",
    "SavedAnnotationsHandler",
    "SettingsInstantiationProvider",
    "SingletonCollection",
    "SingletonStoreDependencyHandler",
]
