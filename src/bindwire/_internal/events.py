from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any


def _is_subclass(candidate: Any, base: Any) -> bool:
    if not isinstance(candidate, type) or not isinstance(base, type):
        return False
    try:
        return issubclass(candidate, base)
    except TypeError:
        return False


def _is_instance(obj: Any, key: Any) -> bool:
    if not isinstance(key, type):
        return False
    try:
        return isinstance(obj, key)
    except TypeError:
        return False


class LifecycleEventBus:
    """Hold resolution callbacks and fire them in registration order.

    Three phases exist: before-resolving, resolving and after-resolving. Each
    phase has a global list, fired for every resolution, and per-key lists.
    Global callbacks always fire before per-key callbacks. Rebound callbacks
    and extenders are kept per identifier.
    """

    def __init__(self) -> None:
        self._global_before: list[Callable[..., Any]] = []
        self._global_resolving: list[Callable[..., Any]] = []
        self._global_after: list[Callable[..., Any]] = []
        self._before: dict[Hashable, list[Callable[..., Any]]] = {}
        self._resolving: dict[Hashable, list[Callable[..., Any]]] = {}
        self._after: dict[Hashable, list[Callable[..., Any]]] = {}
        self._rebound: dict[Hashable, list[Callable[..., Any]]] = {}
        self._extenders: dict[Hashable, list[Callable[..., Any]]] = {}

    # registration

    def add_before_resolving(self, key: Hashable | None, callback: Callable[..., Any]) -> None:
        self._add(self._global_before, self._before, key, callback)

    def add_resolving(self, key: Hashable | None, callback: Callable[..., Any]) -> None:
        self._add(self._global_resolving, self._resolving, key, callback)

    def add_after_resolving(self, key: Hashable | None, callback: Callable[..., Any]) -> None:
        self._add(self._global_after, self._after, key, callback)

    def add_rebound(self, abstract: Hashable, callback: Callable[..., Any]) -> None:
        self._rebound.setdefault(abstract, []).append(callback)

    def add_extender(self, abstract: Hashable, extender: Callable[..., Any]) -> None:
        self._extenders.setdefault(abstract, []).append(extender)

    def forget_extenders(self, abstract: Hashable) -> None:
        self._extenders.pop(abstract, None)

    def rebound_callbacks(self, abstract: Hashable) -> tuple[Callable[..., Any], ...]:
        return tuple(self._rebound.get(abstract, ()))

    def extenders(self, abstract: Hashable) -> tuple[Callable[..., Any], ...]:
        return tuple(self._extenders.get(abstract, ()))

    # firing

    def fire_before_resolving(
        self,
        abstract: Hashable,
        params: dict[str, Any],
        container: Any,
    ) -> None:
        for callback in tuple(self._global_before):
            callback(abstract, params, container)

        for key, callbacks in tuple(self._before.items()):
            if key == abstract or _is_subclass(abstract, key):
                for callback in tuple(callbacks):
                    callback(abstract, params, container)

    def fire_resolving(self, abstract: Hashable, obj: Any, container: Any) -> None:
        self._fire_object_callbacks(
            self._global_resolving, self._resolving, abstract, obj, container
        )

    def fire_after_resolving(self, abstract: Hashable, obj: Any, container: Any) -> None:
        self._fire_object_callbacks(self._global_after, self._after, abstract, obj, container)

    def clear(self) -> None:
        for registry in (self._global_before, self._global_resolving, self._global_after):
            registry.clear()
        for per_key in (self._before, self._resolving, self._after, self._rebound, self._extenders):
            per_key.clear()

    @staticmethod
    def _add(
        global_callbacks: list[Callable[..., Any]],
        per_key: dict[Hashable, list[Callable[..., Any]]],
        key: Hashable | None,
        callback: Callable[..., Any],
    ) -> None:
        if key is None:
            global_callbacks.append(callback)
        else:
            per_key.setdefault(key, []).append(callback)

    @staticmethod
    def _fire_object_callbacks(
        global_callbacks: list[Callable[..., Any]],
        per_key: dict[Hashable, list[Callable[..., Any]]],
        abstract: Hashable,
        obj: Any,
        container: Any,
    ) -> None:
        for callback in tuple(global_callbacks):
            callback(obj, container)

        # Matching by instance lets callbacks hook an interface.
        matched: list[Callable[..., Any]] = []
        for key, callbacks in tuple(per_key.items()):
            if key == abstract or _is_instance(obj, key):
                matched.extend(callbacks)
        for callback in matched:
            callback(obj, container)


__all__ = ["LifecycleEventBus"]
