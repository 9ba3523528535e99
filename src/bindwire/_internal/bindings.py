from __future__ import annotations

from collections.abc import Hashable, Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Binding:
    """A construction recipe registered for one identifier.

    ``concrete`` is a class to auto-wire, another identifier to resolve, or a
    factory callable. ``shared`` bindings are cached after the first
    successful resolution.
    """

    concrete: Any
    shared: bool = False


class BindingRegistry:
    """Map abstract identifiers to their construction recipes."""

    def __init__(self) -> None:
        self._bindings: dict[Hashable, Binding] = {}

    def get(self, abstract: Hashable) -> Binding | None:
        return self._bindings.get(abstract)

    def set(self, abstract: Hashable, binding: Binding) -> Binding | None:
        """Store ``binding`` and return the binding it replaced, if any."""
        previous = self._bindings.get(abstract)
        self._bindings[abstract] = binding
        return previous

    def setdefault(self, abstract: Hashable, binding: Binding) -> Binding:
        """Store ``binding`` unless one exists and return the stored binding."""
        return self._bindings.setdefault(abstract, binding)

    def remove(self, abstract: Hashable) -> Binding | None:
        return self._bindings.pop(abstract, None)

    def is_shared(self, abstract: Hashable) -> bool:
        binding = self._bindings.get(abstract)
        return binding is not None and binding.shared

    def snapshot(self) -> dict[Hashable, Binding]:
        return dict(self._bindings)

    def clear(self) -> None:
        self._bindings.clear()

    def __contains__(self, abstract: object) -> bool:
        return abstract in self._bindings

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._bindings))

    def __len__(self) -> int:
        return len(self._bindings)


__all__ = ["Binding", "BindingRegistry"]
