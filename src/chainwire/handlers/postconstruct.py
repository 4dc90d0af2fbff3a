from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from chainwire.exceptions import PostConstructError
from chainwire.markers import is_post_construct_marked

if TYPE_CHECKING:
    from chainwire.context import ResolutionContext

logger = logging.getLogger(__name__)

_NONE_RETURN_ANNOTATIONS = (None, type(None), "None")


class PostConstructMethodInvoker:
    """Run methods marked with ``@post_construct`` on freshly built instances.

    Hooks of base classes run before hooks of subclasses. A base class hook
    that a subclass overrides under the same name is skipped.
    """

    def post_construct(self, instance: Any, context: ResolutionContext) -> None:
        self.process(instance)

    def process(self, instance: Any) -> None:
        """Validate and invoke the post-construct hooks of ``instance``.

        Raises:
            PostConstructError: If a class declares an invalid hook or a hook raises.

        """
        instance_type = type(instance)
        for klass in reversed(instance_type.__mro__):
            if klass is object:
                continue
            hook = self._find_hook(klass)
            if hook is None:
                continue
            name, function = hook
            if inspect.getattr_static(instance_type, name, None) is not function:
                continue
            try:
                function(instance)
            except Exception as error:
                msg = (
                    f"Could not invoke method '{function.__qualname__}' "
                    f"on '{instance_type.__qualname__}'"
                )
                raise PostConstructError(msg) from error
            logger.debug("Ran post-construct hook %s", function.__qualname__)

    def _find_hook(self, klass: type[Any]) -> tuple[str, Callable[..., Any]] | None:
        marked = [
            (name, member)
            for name, member in vars(klass).items()
            if is_post_construct_marked(member)
        ]
        if not marked:
            return None
        if len(marked) > 1:
            names = ", ".join(name for name, _ in marked)
            msg = f"Multiple methods with @post_construct in '{klass.__qualname__}': {names}"
            raise PostConstructError(msg)

        name, member = marked[0]
        if isinstance(member, staticmethod | classmethod) or _has_parameters(member):
            msg = (
                f"@post_construct method may not be static or have any parameters "
                f"('{klass.__qualname__}.{name}')"
            )
            raise PostConstructError(msg)
        if not _returns_none(member):
            msg = (
                f"@post_construct method must have return type None "
                f"('{klass.__qualname__}.{name}')"
            )
            raise PostConstructError(msg)
        return name, member


def _has_parameters(function: Callable[..., Any]) -> bool:
    try:
        parameters = inspect.signature(function).parameters
    except (TypeError, ValueError):
        return False
    return len(parameters) != 1


def _returns_none(function: Callable[..., Any]) -> bool:
    try:
        annotation = inspect.signature(function).return_annotation
    except (TypeError, ValueError):
        return True
    if annotation is inspect.Signature.empty:
        return True
    return annotation in _NONE_RETURN_ANNOTATIONS
