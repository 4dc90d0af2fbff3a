from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from chainwire.identifier import Identifier

if TYPE_CHECKING:
    from chainwire.resolver import Resolver


@dataclass(frozen=True, slots=True)
class ResolutionContext:
    """Carry the state of one resolution step.

    A root context is created for every ``Resolver.resolve`` call. Resolving a
    dependency creates a child context whose ancestor chain ends with the
    parent's identifier, so the chain always lists the identifiers currently
    being resolved on this call stack.
    """

    resolver: Resolver
    """Resolver running the pipeline, used for recursive lookups."""
    identifier: Identifier
    """Identifier being resolved."""
    ancestors: tuple[Identifier, ...] = ()
    """Identifiers currently being resolved above this one, outermost first."""

    def child(self, dependency: Any) -> ResolutionContext:
        """Return the context for resolving a dependency of the current identifier.

        Args:
            dependency: Dependency key or identifier declared by an instantiation.

        """
        return ResolutionContext(
            resolver=self.resolver,
            identifier=Identifier.of(dependency),
            ancestors=(*self.ancestors, self.identifier),
        )

    def redirect(self, identifier: Identifier) -> ResolutionContext:
        """Return a context resolving ``identifier`` in place of the current one.

        The replaced identifier joins the ancestor chain, so a loop of
        redirects is reported as a cycle.
        """
        return ResolutionContext(
            resolver=self.resolver,
            identifier=identifier,
            ancestors=(*self.ancestors, self.identifier),
        )

    def is_cyclic(self) -> bool:
        """Return True when the identifier already appears in the ancestor chain."""
        return self.identifier in self.ancestors
