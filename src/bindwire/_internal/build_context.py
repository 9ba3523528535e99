from __future__ import annotations

from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from bindwire.exceptions import BindwireCircularDependencyError


@dataclass(frozen=True, slots=True)
class BuildContext:
    """Immutable snapshot of an in-progress resolution.

    ``build_stack`` holds the classes under construction, innermost last; its
    top scopes contextual overrides. ``path`` holds the identifiers being
    resolved and is used for cycle detection. Entering a frame returns a new
    context, so a failed resolution never leaves stale frames behind.
    """

    build_stack: tuple[Any, ...] = ()
    path: tuple[Hashable, ...] = ()

    @property
    def consumer(self) -> Any | None:
        """Return the class currently being built, if any."""
        return self.build_stack[-1] if self.build_stack else None

    def enter_resolution(self, abstract: Hashable) -> BuildContext:
        if abstract in self.path:
            raise BindwireCircularDependencyError(abstract, list(self.path))
        return BuildContext(build_stack=self.build_stack, path=(*self.path, abstract))

    def enter_build(self, concrete: Any) -> BuildContext:
        if concrete in self.build_stack:
            raise BindwireCircularDependencyError(concrete, list(self.build_stack))
        return BuildContext(build_stack=(*self.build_stack, concrete), path=self.path)


EMPTY_CONTEXT = BuildContext()

# Context variable for the build context seen by nested ``make`` calls issued from
# factories and callbacks (works with both threads and async tasks).
_active_context: ContextVar[BuildContext] = ContextVar(
    "bindwire_build_context",
    default=EMPTY_CONTEXT,
)


def current_context() -> BuildContext:
    return _active_context.get()


@contextmanager
def activate(context: BuildContext) -> Iterator[BuildContext]:
    """Expose ``context`` to user code running inside a resolution."""
    token = _active_context.set(context)
    try:
        yield context
    finally:
        _active_context.reset(token)


__all__ = ["EMPTY_CONTEXT", "BuildContext", "activate", "current_context"]
