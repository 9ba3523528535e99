from __future__ import annotations

from collections.abc import Hashable


class TagRegistry:
    """Group identifiers under labels for bulk resolution."""

    def __init__(self) -> None:
        self._tags: dict[Hashable, list[Hashable]] = {}

    def add(self, abstracts: list[Hashable], tags: list[Hashable]) -> None:
        for tag in tags:
            self._tags.setdefault(tag, []).extend(abstracts)

    def members(self, tag: Hashable) -> tuple[Hashable, ...]:
        return tuple(self._tags.get(tag, ()))

    def clear(self) -> None:
        self._tags.clear()

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags


__all__ = ["TagRegistry"]
