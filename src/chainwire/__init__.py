from chainwire.context import ResolutionContext
from chainwire.defaults import create_default_handlers, create_instantiation_providers
from chainwire.exceptions import (
    AlreadyRegisteredError,
    ChainwireError,
    ConfigurationError,
    CyclicDependencyError,
    PostConstructError,
    ValidationError,
)
from chainwire.identifier import Identifier
from chainwire.lifetime import Lifetime, singleton, transient
from chainwire.markers import (
    Component,
    Factory,
    Injected,
    Provider,
    Singletons,
    inject,
    post_construct,
)
from chainwire.resolver import Resolver

__all__ = [
    "AlreadyRegisteredError",
    "ChainwireError",
    "Component",
    "ConfigurationError",
    "CyclicDependencyError",
    "Factory",
    "Identifier",
    "Injected",
    "Lifetime",
    "PostConstructError",
    "Provider",
    "ResolutionContext",
    "Resolver",
    "Singletons",
    "ValidationError",
    "create_default_handlers",
    "create_instantiation_providers",
    "inject",
    "post_construct",
    "singleton",
    "transient",
]
