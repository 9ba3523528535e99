from __future__ import annotations

from collections.abc import Hashable, Iterable
from typing import Any

_MISSING = object()


class ContextualBindingIndex:
    """Map ``(consumer, needed identifier)`` pairs to override implementations.

    An entry only applies while ``consumer`` is the class currently being
    built, which lets two consumers of one interface receive different
    implementations.
    """

    def __init__(self) -> None:
        self._overrides: dict[Hashable, dict[Hashable, Any]] = {}

    def add(self, concrete: Hashable, abstract: Hashable, implementation: Any) -> None:
        self._overrides.setdefault(concrete, {})[abstract] = implementation

    def find(self, concrete: Hashable, candidates: Iterable[Hashable]) -> Any:
        """Return the first override for ``concrete`` matching any candidate key.

        Returns ``None`` when nothing matches.
        """
        overrides = self._overrides.get(concrete)
        if not overrides:
            return None
        for candidate in candidates:
            implementation = overrides.get(candidate, _MISSING)
            if implementation is not _MISSING:
                return implementation
        return None

    def has_overrides_for(self, concrete: Hashable) -> bool:
        return bool(self._overrides.get(concrete))

    def clear(self) -> None:
        self._overrides.clear()


__all__ = ["ContextualBindingIndex"]
