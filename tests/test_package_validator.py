"""Tests for PackageValidator."""

from typing import Annotated

import pytest

from chainwire import ConfigurationError, Provider, Resolver, ValidationError
from chainwire.context import ResolutionContext
from chainwire.handlers import PackageValidator
from chainwire.identifier import Identifier
from samples.services import Port, Repository, Server, Service
from samples.subpackage.widgets import Gadget, Widget


class OutsideService:
    pass


def _context(resolver: Resolver, dependency: object) -> ResolutionContext:
    return ResolutionContext(resolver=resolver, identifier=Identifier.of(dependency))


class TestPackageValidator:
    def test_allows_classes_within_root_package(self, sample_resolver: Resolver) -> None:
        validator = PackageValidator("samples")

        assert validator.pre_construct(_context(sample_resolver, Service)) is None
        assert validator.pre_construct(_context(sample_resolver, Widget)) is None

    def test_rejects_classes_outside_root_package(self, sample_resolver: Resolver) -> None:
        validator = PackageValidator("samples.subpackage")

        with pytest.raises(ValidationError, match="outside of the allowed packages"):
            validator.pre_construct(_context(sample_resolver, Service))

    def test_does_not_match_package_name_prefixes(self, sample_resolver: Resolver) -> None:
        validator = PackageValidator("sample")

        with pytest.raises(ValidationError, match="It must be within 'sample'"):
            validator.pre_construct(_context(sample_resolver, Service))

    def test_allows_builtins_and_library_types(self, sample_resolver: Resolver) -> None:
        validator = PackageValidator("samples.subpackage")

        assert validator.pre_construct(_context(sample_resolver, int)) is None
        assert validator.pre_construct(_context(sample_resolver, Resolver)) is None
        assert validator.pre_construct(_context(sample_resolver, Provider)) is None

    def test_empty_root_package_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="may not be empty"):
            PackageValidator("")


class TestPackageValidatorInResolver:
    def test_resolves_classes_of_subpackages(self, sample_resolver: Resolver) -> None:
        widget = sample_resolver.resolve(Widget)

        assert widget.repository is sample_resolver.resolve(Repository)
        assert isinstance(sample_resolver.resolve(Gadget), Gadget)

    def test_rejects_outside_class(self, sample_resolver: Resolver) -> None:
        with pytest.raises(ValidationError, match="OutsideService"):
            sample_resolver.resolve(OutsideService)

        assert sample_resolver.get_if_available(OutsideService) is None

    def test_saved_values_pass_validation(self, sample_resolver: Resolver) -> None:
        sample_resolver.provide(Port, 9000)

        assert sample_resolver.resolve(Server).port == 9000
        assert sample_resolver.resolve(Annotated[int, Port]) == 9000

    def test_registered_singletons_skip_validation(self, sample_resolver: Resolver) -> None:
        outside = OutsideService()
        sample_resolver.register(OutsideService, outside)

        assert sample_resolver.resolve(OutsideService) is outside
