"""Tests for the resolution pipeline of Resolver."""

import abc
from typing import Annotated, Any, ClassVar

import pytest

from chainwire import (
    AlreadyRegisteredError,
    ConfigurationError,
    CyclicDependencyError,
    Identifier,
    Injected,
    Lifetime,
    PostConstructError,
    Resolver,
    create_instantiation_providers,
    post_construct,
    singleton,
    transient,
)
from samples.hierarchy import CyclicA, CyclicB
from samples.services import (
    AuditLog,
    Connection,
    Database,
    Port,
    PrimaryDb,
    ReplicaDb,
    Reporting,
    Repository,
    RequestHandler,
    Server,
    Service,
)

CREATION_ORDER: list[str] = []
UNSET: Any = object()


class Leaf:
    def __init__(self) -> None:
        CREATION_ORDER.append("leaf")


class Branch:
    def __init__(self, leaf: Leaf) -> None:
        CREATION_ORDER.append("branch")
        self.leaf = leaf


class Storage(abc.ABC):
    @abc.abstractmethod
    def save(self) -> None: ...


class SelfReferencing:
    def __init__(self, other: "SelfReferencing") -> None:
        self.other = other


class Broken:
    def __init__(self) -> None:
        msg = "cannot build"
        raise ValueError(msg)


class UsesBroken:
    def __init__(self, broken: Broken) -> None:
        self.broken = broken


class Unannotated:
    def __init__(self, value) -> None:  # type: ignore[no-untyped-def]
        self.value = value


class StaticInjection:
    shared: ClassVar[Injected[Repository]]


class WithInjectedDefault:
    def __init__(self, repository: Injected[Repository] = UNSET, label: str = "x") -> None:
        self.repository = repository
        self.label = label


class NeedsResolver:
    def __init__(self, resolver: Resolver) -> None:
        self.resolver = resolver


@transient
class TransientBase:
    pass


class InheritsTransient(TransientBase):
    pass


@singleton
class ForcedSingleton:
    pass


class Plain:
    pass


class FailingHook:
    attempts = 0

    @post_construct
    def fail(self) -> None:
        FailingHook.attempts += 1
        msg = "hook failed"
        raise RuntimeError(msg)


class RepositoryProvider:
    def __init__(self, repository: Repository) -> None:
        self.repository = repository
        self.calls = 0

    def get(self) -> Repository:
        self.calls += 1
        return self.repository


class DatabaseProvider:
    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    def get(self) -> Database:
        return Database("from-provider")


class WrongTypeProvider:
    def get(self) -> Any:
        return "not a database"


class TestResolve:
    def test_resolves_constructor_and_field_dependencies(self, resolver: Resolver) -> None:
        service = resolver.resolve(Service)

        assert isinstance(service.repository, Repository)
        assert isinstance(service.audit, AuditLog)
        assert service.audit_seen_in_post_construct is True

    def test_singleton_resolved_twice_is_identical(self, resolver: Resolver) -> None:
        assert resolver.resolve(Service) is resolver.resolve(Service)
        assert resolver.resolve(Service).repository is resolver.resolve(Repository)

    def test_transient_class_builds_new_instances(self, resolver: Resolver) -> None:
        first = resolver.resolve(RequestHandler)
        second = resolver.resolve(RequestHandler)

        assert first is not second
        assert first.service is second.service

    def test_default_lifetime_transient(self) -> None:
        resolver = Resolver(create_instantiation_providers(), default_lifetime=Lifetime.TRANSIENT)

        assert resolver.resolve(Plain) is not resolver.resolve(Plain)
        assert resolver.resolve(ForcedSingleton) is resolver.resolve(ForcedSingleton)

    def test_lifetime_is_not_inherited(self, resolver: Resolver) -> None:
        assert resolver.resolve(TransientBase) is not resolver.resolve(TransientBase)
        assert resolver.resolve(InheritsTransient) is resolver.resolve(InheritsTransient)

    def test_dependencies_are_built_first(self, resolver: Resolver) -> None:
        CREATION_ORDER.clear()

        branch = resolver.resolve(Branch)

        assert CREATION_ORDER == ["leaf", "branch"]
        assert branch.leaf is resolver.resolve(Leaf)

    def test_annotated_components_are_cached_separately(self, resolver: Resolver) -> None:
        reporting = resolver.resolve(Reporting)

        assert reporting.primary is not reporting.replica
        assert resolver.resolve(PrimaryDb) is reporting.primary
        assert resolver.resolve(ReplicaDb) is reporting.replica
        assert resolver.get_if_available(Database) is None

    def test_factory_method_is_used_when_marked(self, resolver: Resolver) -> None:
        connection = resolver.resolve(Connection)

        assert connection.url == "memory://"
        assert connection.repository is resolver.resolve(Repository)

    def test_injected_default_parameter_is_resolved(self, resolver: Resolver) -> None:
        instance = resolver.resolve(WithInjectedDefault)

        assert instance.repository is resolver.resolve(Repository)
        assert instance.label == "x"

    def test_resolver_resolves_itself(self, resolver: Resolver) -> None:
        assert resolver.resolve(Resolver) is resolver
        assert resolver.resolve(NeedsResolver).resolver is resolver

    def test_accepts_identifier_instances(self, resolver: Resolver) -> None:
        assert resolver.resolve(Identifier.of(Repository)) is resolver.resolve(Repository)


class TestResolveErrors:
    def test_abstract_class_without_provider_raises(self, resolver: Resolver) -> None:
        with pytest.raises(ConfigurationError, match="No instantiation method available"):
            resolver.resolve(Storage)

    def test_builtin_type_cannot_be_built(self, resolver: Resolver) -> None:
        with pytest.raises(ConfigurationError, match="No instantiation method available"):
            resolver.resolve(int)

    def test_cycle_raises_with_full_traversal(self, resolver: Resolver) -> None:
        with pytest.raises(CyclicDependencyError) as exc_info:
            resolver.resolve(CyclicA)

        assert exc_info.value.identifier == Identifier.of(CyclicA)
        assert exc_info.value.chain == (Identifier.of(CyclicA), Identifier.of(CyclicB))
        assert "CyclicA -> CyclicB -> CyclicA" in str(exc_info.value)
        assert resolver.get_if_available(CyclicA) is None
        assert resolver.get_if_available(CyclicB) is None

    def test_self_reference_raises(self, resolver: Resolver) -> None:
        with pytest.raises(CyclicDependencyError, match="Found cyclic dependency"):
            resolver.resolve(SelfReferencing)

    def test_failing_dependency_aborts_parent(self, resolver: Resolver) -> None:
        with pytest.raises(ValueError, match="cannot build"):
            resolver.resolve(UsesBroken)

        assert resolver.get_if_available(UsesBroken) is None

    def test_required_parameter_without_annotation_raises(self, resolver: Resolver) -> None:
        with pytest.raises(ConfigurationError, match="Unable to infer dependency"):
            resolver.resolve(Unannotated)

    def test_static_member_injection_raises(self, resolver: Resolver) -> None:
        with pytest.raises(ConfigurationError, match="Static members may not be injected"):
            resolver.resolve(StaticInjection)

    def test_failing_post_construct_is_not_cached(self, resolver: Resolver) -> None:
        FailingHook.attempts = 0

        with pytest.raises(PostConstructError, match="Could not invoke method"):
            resolver.resolve(FailingHook)
        with pytest.raises(PostConstructError):
            resolver.resolve(FailingHook)

        assert FailingHook.attempts == 2
        assert resolver.get_if_available(FailingHook) is None


class TestRegister:
    def test_registered_instance_is_resolved(self, resolver: Resolver) -> None:
        repository = Repository()
        resolver.register(Repository, repository)

        assert resolver.resolve(Repository) is repository
        assert resolver.resolve(Service).repository is repository

    def test_wrong_instance_type_raises(self, resolver: Resolver) -> None:
        with pytest.raises(ConfigurationError, match="not an instance of the dependency type"):
            resolver.register(Repository, AuditLog())

    def test_duplicate_registration_raises(self, resolver: Resolver) -> None:
        resolver.register(Repository, Repository())

        with pytest.raises(AlreadyRegisteredError):
            resolver.register(Repository, Repository())

    def test_registration_after_resolution_raises(self, resolver: Resolver) -> None:
        resolver.resolve(Repository)

        with pytest.raises(AlreadyRegisteredError):
            resolver.register(Repository, Repository())

    def test_registration_after_provider_raises(self, resolver: Resolver) -> None:
        repository = Repository()
        resolver.register_provider(Repository, RepositoryProvider(repository))

        with pytest.raises(AlreadyRegisteredError, match="already a provider registered"):
            resolver.register(Repository, Repository())

        assert resolver.resolve(Repository) is repository


class TestRegisterProvider:
    def test_provider_instance_produces_value(self, resolver: Resolver) -> None:
        repository = Repository()
        provider = RepositoryProvider(repository)
        resolver.register_provider(Repository, provider)

        assert resolver.resolve(Repository) is repository
        assert resolver.resolve(Repository) is repository
        assert provider.calls == 1

    def test_provider_class_is_resolved_with_dependencies(self, resolver: Resolver) -> None:
        resolver.register_provider(Database, DatabaseProvider)

        database = resolver.resolve(Database)

        assert database.name == "from-provider"
        provider = resolver.get_if_available(DatabaseProvider)
        assert isinstance(provider, DatabaseProvider)
        assert provider.repository is resolver.resolve(Repository)

    def test_provider_result_of_wrong_type_raises(self, resolver: Resolver) -> None:
        resolver.register_provider(Database, WrongTypeProvider())

        with pytest.raises(ConfigurationError, match="not assignable to the requested type"):
            resolver.resolve(Database)

    @pytest.mark.parametrize(
        ("first", "second"),
        [
            (DatabaseProvider, WrongTypeProvider()),
            (WrongTypeProvider(), DatabaseProvider),
            (DatabaseProvider, DatabaseProvider),
        ],
    )
    def test_second_provider_registration_raises(
        self,
        resolver: Resolver,
        first: Any,
        second: Any,
    ) -> None:
        resolver.register_provider(Database, first)

        with pytest.raises(AlreadyRegisteredError, match="already a provider registered"):
            resolver.register_provider(Database, second)

    def test_provider_without_get_raises(self, resolver: Resolver) -> None:
        with pytest.raises(ConfigurationError, match="callable get"):
            resolver.register_provider(Database, object())

    def test_provider_for_existing_singleton_raises(self, resolver: Resolver) -> None:
        resolver.resolve(Repository)

        with pytest.raises(AlreadyRegisteredError, match="already a singleton registered"):
            resolver.register_provider(Repository, RepositoryProvider(Repository()))

    def test_without_provider_handler_raises(self) -> None:
        resolver = Resolver(create_instantiation_providers()[1:])

        with pytest.raises(ConfigurationError, match="no handler accepts providers"):
            resolver.register_provider(Database, DatabaseProvider)


class TestProvide:
    def test_saved_value_is_injected_by_marker(self, resolver: Resolver) -> None:
        resolver.provide(Port, 8080)

        assert resolver.resolve(Server).port == 8080
        assert resolver.resolve(Annotated[int, Port()]) == 8080

    def test_missing_saved_value_raises(self, resolver: Resolver) -> None:
        with pytest.raises(ConfigurationError, match="No instantiation method available"):
            resolver.resolve(Server)

    def test_duplicate_value_raises(self, resolver: Resolver) -> None:
        resolver.provide(Port, 8080)

        with pytest.raises(AlreadyRegisteredError, match="Value already registered for @Port"):
            resolver.provide(Port, 9090)

    def test_without_annotation_value_handler_raises(self) -> None:
        resolver = Resolver(create_instantiation_providers())

        with pytest.raises(ConfigurationError, match="no annotation-value handler"):
            resolver.provide(Port, 8080)


class TestNewInstance:
    def test_new_instance_is_never_cached(self, resolver: Resolver) -> None:
        singleton_service = resolver.resolve(Service)

        first = resolver.new_instance(Service)
        second = resolver.new_instance(Service)

        assert first is not second
        assert first is not singleton_service
        assert first.repository is singleton_service.repository
        assert first.audit_seen_in_post_construct is True

    def test_new_instance_does_not_fill_the_store(self, resolver: Resolver) -> None:
        resolver.new_instance(Service)

        assert resolver.get_if_available(Service) is None
        assert resolver.get_if_available(Repository) is not None


class TestGetIfAvailable:
    def test_returns_none_until_built(self, resolver: Resolver) -> None:
        assert resolver.get_if_available(Repository) is None

        repository = resolver.resolve(Repository)

        assert resolver.get_if_available(Repository) is repository


class TestCreateIfHasDependencies:
    def test_returns_none_when_dependency_is_missing(self, resolver: Resolver) -> None:
        resolver.resolve(Repository)

        assert resolver.create_if_has_dependencies(Service) is None
        assert resolver.get_if_available(AuditLog) is None

    def test_builds_when_all_dependencies_exist(self, resolver: Resolver) -> None:
        repository = resolver.resolve(Repository)
        audit = resolver.resolve(AuditLog)

        service = resolver.create_if_has_dependencies(Service)

        assert service is not None
        assert service.repository is repository
        assert service.audit is audit
        assert service.audit_seen_in_post_construct is True
        assert resolver.get_if_available(Service) is None

    def test_saved_values_count_as_available(self, resolver: Resolver) -> None:
        resolver.provide(Port, 8080)

        server = resolver.create_if_has_dependencies(Server)

        assert server is not None
        assert server.port == 8080


class TestHandlerChainsProperty:
    def test_exposes_configured_chains(self, resolver: Resolver) -> None:
        chains = resolver.handler_chains

        assert chains.counts() == {
            "pre_construct": 0,
            "annotation_value": 1,
            "dependency": 3,
            "instantiation": 4,
            "post_construct": 1,
        }
