from __future__ import annotations

from collections.abc import Hashable

from bindwire.exceptions import BindwireCircularAliasError, BindwireSelfAliasError


class AliasTable:
    """Map alternate names to the identifiers they stand for.

    Aliases resolve transitively: ``a -> b -> c`` canonicalizes ``a`` to ``c``.
    A reverse index keeps the names pointing directly at each identifier so
    contextual lookups can try every spelling of a dependency.
    """

    def __init__(self) -> None:
        self._aliases: dict[Hashable, Hashable] = {}
        self._abstract_aliases: dict[Hashable, list[Hashable]] = {}

    def add(self, abstract: Hashable, alias: Hashable) -> None:
        if alias == abstract:
            raise BindwireSelfAliasError(abstract)

        self.remove(alias)
        self._aliases[alias] = abstract
        self._abstract_aliases.setdefault(abstract, []).append(alias)

    def remove(self, alias: Hashable) -> None:
        target = self._aliases.pop(alias, None)
        if target is None:
            return
        names = self._abstract_aliases.get(target)
        if names is not None and alias in names:
            names.remove(alias)
            if not names:
                del self._abstract_aliases[target]

    def is_alias(self, name: Hashable) -> bool:
        return name in self._aliases

    def resolve(self, abstract: Hashable) -> Hashable:
        """Follow the alias chain starting at ``abstract`` to a non-aliased name."""
        seen: list[Hashable] = []
        current = abstract
        while current in self._aliases:
            if current in seen:
                raise BindwireCircularAliasError([*seen, current])
            seen.append(current)
            current = self._aliases[current]
        return current

    def aliases_of(self, abstract: Hashable) -> list[Hashable]:
        """Return every name that resolves to ``abstract``, nearest first."""
        result: list[Hashable] = []
        pending = list(self._abstract_aliases.get(abstract, ()))
        while pending:
            name = pending.pop(0)
            if name in result:
                continue
            result.append(name)
            pending.extend(self._abstract_aliases.get(name, ()))
        return result

    def clear(self) -> None:
        self._aliases.clear()
        self._abstract_aliases.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._aliases


__all__ = ["AliasTable"]
