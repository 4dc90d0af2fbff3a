"""Shared pytest fixtures for chainwire tests."""

import pytest

from chainwire import Resolver, create_default_handlers
from chainwire.defaults import create_instantiation_providers
from chainwire.handlers import (
    FactoryDependencyHandler,
    PostConstructMethodInvoker,
    SavedAnnotationsHandler,
    SingletonStoreDependencyHandler,
)

SAMPLES_PACKAGE = "samples"


@pytest.fixture()
def resolver() -> Resolver:
    """Resolver with all default handlers except the package validator."""
    return Resolver(
        [
            SavedAnnotationsHandler(),
            FactoryDependencyHandler(),
            SingletonStoreDependencyHandler(),
            *create_instantiation_providers(),
            PostConstructMethodInvoker(),
        ],
    )


@pytest.fixture()
def sample_resolver() -> Resolver:
    """Resolver with the default handlers restricted to the samples package."""
    return Resolver(create_default_handlers(SAMPLES_PACKAGE))
