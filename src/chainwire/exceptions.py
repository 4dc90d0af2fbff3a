from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class ChainwireError(Exception):
    """Represent a base class for all chainwire-specific failures.

    Catch this type when you want to handle any resolution or configuration
    error without matching each concrete exception class individually.
    """


class ConfigurationError(ChainwireError):
    """Signal an invalid handler, provider, or instantiation setup.

    Raised when a handler matches no known capability, when no instantiation
    provider can build a requested type, when a class declares ambiguous or
    invalid injection points, and when a provider produces a value of the
    wrong type.

    Typical fixes include registering a provider for abstract types, marking
    exactly one constructor or factory method with ``@inject``, and adding
    type annotations to constructor parameters.
    """


class CyclicDependencyError(ChainwireError):
    """Signal a self-referential resolution chain.

    Raised by ``Resolver.resolve`` when an identifier is requested again while
    it is still being resolved, for example when ``A`` needs ``B`` and ``B``
    needs ``A``.

    Typical fixes include breaking the cycle with ``Provider[T]`` so one side
    resolves its dependency lazily.
    """

    def __init__(self, identifier: Any, chain: Sequence[Any]) -> None:
        self.identifier = identifier
        self.chain = tuple(chain)
        traversal = " -> ".join(str(item) for item in (*self.chain, identifier))
        super().__init__(
            f"Found cyclic dependency - already traversed '{identifier}' "
            f"(full traversal list: {traversal})",
        )


class AlreadyRegisteredError(ChainwireError):
    """Signal a duplicate singleton, provider, or annotation value registration.

    Registrations are write-once per key. Raised by ``Resolver.register``,
    ``Resolver.register_provider`` and ``Resolver.provide``.
    """

    def __init__(self, key: Any, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"There is already a registration for '{key}'")


class ValidationError(ChainwireError):
    """Signal that a pre-construct handler vetoed a requested type.

    The bundled ``PackageValidator`` raises it for classes outside the
    allowed root package.
    """


class PostConstructError(ChainwireError):
    """Signal a failure while running post-construct hooks.

    Wraps exceptions raised inside a hook as well as structural violations:
    static or parameterized hooks, several hooks on one class, or a hook whose
    annotated return type is not ``None``. The affected instance is never
    cached as a singleton.
    """
