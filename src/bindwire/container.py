from __future__ import annotations

import logging
import pkgutil
import threading
from collections.abc import Callable, Hashable
from contextlib import AbstractContextManager, nullcontext
from typing import Any

from bindwire._internal.aliases import AliasTable
from bindwire._internal.bindings import Binding, BindingRegistry
from bindwire._internal.build_context import BuildContext, activate, current_context
from bindwire._internal.contextual import ContextualBindingIndex
from bindwire._internal.dependencies import (
    DependenciesExtractor,
    ParameterInfo,
    is_instantiable,
    is_runtime_class,
)
from bindwire._internal.events import LifecycleEventBus
from bindwire._internal.instances import InstanceCache
from bindwire._internal.tags import TagRegistry
from bindwire.container_interface import IContainer
from bindwire.contextual_binding import ContextualBindingBuilder
from bindwire.exceptions import (
    BindwireBindingResolutionError,
    BindwireCircularDependencyError,
    BindwireEntryNotFoundError,
    BindwireInvalidRegistrationError,
)
from bindwire.integrations.pydantic_settings import is_pydantic_settings_subclass
from bindwire.lock_mode import LockMode
from bindwire.types import (
    BeforeResolvingCallback,
    Concrete,
    Extender,
    Identifier,
    ReboundCallback,
    ResolvingCallback,
)

logger = logging.getLogger(__name__)
_MISSING = object()
_FACTORY_ARGS_WITH_PARAMS = 2


def _is_factory(concrete: Any) -> bool:
    return callable(concrete) and not isinstance(concrete, (type, str))


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class Container(IContainer):
    """Register bindings and resolve them into live objects.

    Identifiers are usually classes or strings. Unbound classes are auto-wired:
    the container introspects their constructor and resolves each typed
    parameter recursively. Bindings customize resolution and are consulted in
    this order:

    1. objects pinned with ``instance``,
    2. contextual overrides registered with ``when(...).needs(...).give(...)``
       while the consuming class is being built,
    3. registered bindings (``bind``, ``singleton`` and their variants),
    4. auto-wiring of the identifier itself.

    Resolution fires before-resolving, resolving and after-resolving callbacks,
    caches shared instances, and notifies rebinding listeners when an already
    resolved identifier is bound again.

    With ``lock_mode=LockMode.THREAD`` one container can serve several threads:
    registrations are serialized and each shared identifier is constructed
    exactly once. The build stack used for contextual overrides and cycle
    detection is a per-call value, never shared state.
    """

    def __init__(
        self,
        *,
        lock_mode: LockMode = LockMode.THREAD,
        autowire: bool = True,
    ) -> None:
        """Initialize an empty container.

        Args:
            lock_mode: Locking strategy for registrations and shared instances.
            autowire: Build unbound classes by introspecting their constructor.
                When disabled, every identifier must be bound explicitly.

        """
        self._lock_mode = lock_mode
        self._autowire = autowire

        self._bindings = BindingRegistry()
        self._aliases = AliasTable()
        self._contextual = ContextualBindingIndex()
        self._instances = InstanceCache(lock_mode)
        self._events = LifecycleEventBus()
        self._tags = TagRegistry()
        self._resolved: set[Hashable] = set()
        self._dependencies_extractor = DependenciesExtractor()

        self._registration_lock: AbstractContextManager[Any] = (
            threading.RLock() if lock_mode is LockMode.THREAD else nullcontext()
        )

        self._register_base_bindings()

    def _register_base_bindings(self) -> None:
        for abstract in dict.fromkeys((type(self), Container, IContainer)):
            self.instance(abstract, self)

    # Binding registry

    def bind(
        self,
        abstract: Identifier,
        concrete: Concrete | None = None,
        *,
        shared: bool = False,
    ) -> None:
        """Register a binding for ``abstract``.

        Args:
            abstract: Identifier to bind. Binding an alias binds the identifier
                the alias stands for.
            concrete: A class to auto-wire, another identifier to resolve, or a
                factory called as ``factory(container, params)``. Defaults to
                ``abstract`` itself.
            shared: Cache the first resolved instance and return it afterwards.

        If ``abstract`` was already resolved, rebinding listeners are notified
        with a freshly resolved instance.

        """
        self._bind(abstract, concrete, shared=shared)

    def bind_if(
        self,
        abstract: Identifier,
        concrete: Concrete | None = None,
        *,
        shared: bool = False,
    ) -> None:
        """Register a binding only when ``abstract`` is not bound yet."""
        self._bind(abstract, concrete, shared=shared, if_unbound=True)

    def singleton(self, abstract: Identifier, concrete: Concrete | None = None) -> None:
        """Register a shared binding."""
        self.bind(abstract, concrete, shared=True)

    def singleton_if(self, abstract: Identifier, concrete: Concrete | None = None) -> None:
        """Register a shared binding only when ``abstract`` is not bound yet."""
        self._bind(abstract, concrete, shared=True, if_unbound=True)

    def _bind(
        self,
        abstract: Identifier,
        concrete: Concrete | None,
        *,
        shared: bool,
        if_unbound: bool = False,
    ) -> None:
        with self._registration_lock:
            if if_unbound and self.bound(abstract):
                return
            abstract = self._aliases.resolve(abstract)
            if concrete is None:
                concrete = abstract
            self._instances.remove(abstract)
            self._bindings.set(abstract, Binding(concrete=concrete, shared=shared))
            was_resolved = abstract in self._resolved

        logger.debug("Bound %r to %r (shared=%s)", abstract, concrete, shared)
        # User factories run outside the registration lock.
        if was_resolved:
            self._rebound(abstract)

    def instance(self, abstract: Identifier, instance: Any) -> Any:
        """Pin ``instance`` as the shared instance of ``abstract`` and return it.

        Every later ``make(abstract)`` returns ``instance`` without consulting
        any factory. Rebinding listeners fire when ``abstract`` was bound
        before.
        """
        with self._registration_lock:
            abstract = self._aliases.resolve(abstract)
            is_bound = self.bound(abstract)
            self._instances.set(abstract, instance, pinned=True)
            self._resolved.add(abstract)

        logger.debug("Registered instance for %r", abstract)
        if is_bound:
            self._rebound(abstract)
        return instance

    def set(self, abstract: Hashable, value: Any) -> None:
        """Bind ``value``: factories are bound as-is, anything else is returned verbatim."""
        if _is_factory(value):
            self.bind(abstract, value)
            return

        def value_factory() -> Any:
            return value

        self.bind(abstract, value_factory)

    def alias(self, abstract: Identifier, alias: Identifier) -> None:
        """Make ``alias`` resolve to whatever ``abstract`` resolves to."""
        with self._registration_lock:
            self._aliases.add(abstract, alias)
        logger.debug("Aliased %r to %r", alias, abstract)

    def forget(self, abstract: Hashable) -> None:
        """Remove the binding, instance and resolved state of ``abstract``."""
        with self._registration_lock:
            self._bindings.remove(abstract)
            self._instances.remove(abstract)
            self._aliases.remove(abstract)
            self._resolved.discard(abstract)

    def forget_instance(self, abstract: Hashable) -> None:
        with self._registration_lock:
            self._instances.remove(self._aliases.resolve(abstract))

    def forget_instances(self) -> None:
        with self._registration_lock:
            self._instances.clear()

    def bound(self, abstract: Hashable) -> bool:
        return (
            abstract in self._bindings
            or abstract in self._instances
            or abstract in self._aliases
        )

    def resolved(self, abstract: Hashable) -> bool:
        abstract = self._aliases.resolve(abstract)
        return abstract in self._resolved or abstract in self._instances

    def is_shared(self, abstract: Hashable) -> bool:
        return abstract in self._instances or self._bindings.is_shared(abstract)

    def is_alias(self, name: Hashable) -> bool:
        return self._aliases.is_alias(name)

    def get_alias(self, abstract: Hashable) -> Hashable:
        return self._aliases.resolve(abstract)

    def get_bindings(self) -> dict[Hashable, Binding]:
        return self._bindings.snapshot()

    def flush(self) -> None:
        """Forget every binding, instance, alias, override, tag and callback.

        The container then only knows about itself.
        """
        with self._registration_lock:
            self._bindings.clear()
            self._aliases.clear()
            self._contextual.clear()
            self._instances.clear()
            self._events.clear()
            self._tags.clear()
            self._resolved.clear()
            self._dependencies_extractor.clear()
            self._register_base_bindings()
        logger.debug("Flushed container %r", self)

    # Contextual bindings

    def when(self, concrete: Hashable | list[Hashable]) -> ContextualBindingBuilder:
        """Start a contextual binding for one consumer or a list of consumers."""
        concretes = [self._aliases.resolve(item) for item in _as_list(concrete)]
        return ContextualBindingBuilder(self, concretes)

    def add_contextual_binding(
        self,
        concrete: Hashable,
        abstract: Hashable,
        implementation: Any,
    ) -> None:
        with self._registration_lock:
            self._contextual.add(concrete, self._aliases.resolve(abstract), implementation)

    # Tags

    def tag(self, abstracts: Hashable | list[Hashable], tags: Hashable | list[Hashable]) -> None:
        """Append ``abstracts`` to every label in ``tags``."""
        with self._registration_lock:
            self._tags.add(_as_list(abstracts), _as_list(tags))

    def tagged(self, tag: Hashable) -> list[Any]:
        """Resolve every identifier tagged with ``tag`` in registration order."""
        return [self.make(abstract) for abstract in self._tags.members(tag)]

    # Lifecycle callbacks

    def before_resolving(
        self,
        abstract: Any,
        callback: BeforeResolvingCallback | None = None,
    ) -> None:
        """Register ``callback(abstract, params, container)`` fired before resolution.

        With a single callable argument the callback is global. Otherwise it
        fires for ``abstract`` and its subclasses.
        """
        key, callback = self._callback_target(abstract, callback)
        with self._registration_lock:
            self._events.add_before_resolving(key, callback)

    def resolving(self, abstract: Any, callback: ResolvingCallback | None = None) -> None:
        """Register ``callback(instance, container)`` fired once an object is resolved.

        With a single callable argument the callback is global. Otherwise it
        fires when the identifier is ``abstract`` or the object is an instance
        of it.
        """
        key, callback = self._callback_target(abstract, callback)
        with self._registration_lock:
            self._events.add_resolving(key, callback)

    def after_resolving(self, abstract: Any, callback: ResolvingCallback | None = None) -> None:
        """Register ``callback(instance, container)`` fired after the resolving callbacks."""
        key, callback = self._callback_target(abstract, callback)
        with self._registration_lock:
            self._events.add_after_resolving(key, callback)

    def rebinding(self, abstract: Identifier, callback: ReboundCallback) -> Any:
        """Register ``callback(container, instance)`` fired whenever ``abstract`` is rebound.

        Returns the current instance when ``abstract`` is already bound.
        """
        with self._registration_lock:
            abstract = self._aliases.resolve(abstract)
            self._events.add_rebound(abstract, callback)
            is_bound = self.bound(abstract)

        if is_bound:
            return self.make(abstract)
        return None

    def refresh(self, abstract: Hashable, target: Any, method: str) -> Any:
        """Call ``target.method(instance)`` whenever ``abstract`` is rebound."""

        def refresh_target(_container: Container, instance: Any) -> None:
            getattr(target, method)(instance)

        return self.rebinding(abstract, refresh_target)

    def extend(self, abstract: Identifier, extender: Extender) -> None:
        """Decorate the instances of ``abstract`` with ``extender(instance, container)``.

        A cached instance is replaced immediately. Otherwise the extender runs
        on every future resolution.
        """
        with self._registration_lock:
            abstract = self._aliases.resolve(abstract)
            found, instance = self._instances.lookup(abstract)
            if not found:
                self._events.add_extender(abstract, extender)
                needs_rebound = abstract in self._resolved

        if found:
            extended = extender(instance, self)
            with self._registration_lock:
                pinned = self._instances.is_pinned(abstract)
                self._instances.set(abstract, extended, pinned=pinned)
            needs_rebound = True

        if needs_rebound:
            self._rebound(abstract)

    def forget_extenders(self, abstract: Hashable) -> None:
        with self._registration_lock:
            self._events.forget_extenders(self._aliases.resolve(abstract))

    def _callback_target(
        self,
        abstract: Any,
        callback: Callable[..., Any] | None,
    ) -> tuple[Hashable | None, Callable[..., Any]]:
        if callback is None:
            if not callable(abstract):
                msg = f"Resolution callback must be callable, got {abstract!r}."
                raise BindwireInvalidRegistrationError(msg)
            return None, abstract
        if not callable(callback):
            msg = f"Resolution callback must be callable, got {callback!r}."
            raise BindwireInvalidRegistrationError(msg)
        return self._aliases.resolve(abstract), callback

    def _rebound(self, abstract: Hashable) -> None:
        instance = self.make(abstract)
        logger.debug("Rebound %r", abstract)
        for callback in self._events.rebound_callbacks(abstract):
            callback(self, instance)

    # Container interface

    def get(self, abstract: Any) -> Any:
        try:
            return self.make(abstract)
        except BindwireBindingResolutionError as e:
            if self.has(abstract):
                raise
            raise BindwireEntryNotFoundError(abstract) from e

    def has(self, abstract: Any) -> bool:
        return self.bound(abstract)

    # Resolution

    def make(self, abstract: Identifier, params: dict[str, Any] | None = None) -> Any:
        """Resolve ``abstract`` into an object.

        Args:
            abstract: Identifier to resolve.
            params: Constructor arguments by parameter name. They take
                precedence over anything the container would inject, and are
                passed to factories as their second argument.

        Raises:
            BindwireBindingResolutionError: The identifier cannot be built.
            BindwireCircularDependencyError: The identifier depends on itself.

        """
        return self._resolve(abstract, dict(params or {}), current_context())

    def build(self, concrete: Any, params: dict[str, Any] | None = None) -> Any:
        """Instantiate ``concrete`` directly, bypassing bindings, events and caching."""
        return self._build(concrete, dict(params or {}), current_context())

    def _resolve(
        self,
        abstract: Hashable,
        params: dict[str, Any],
        context: BuildContext,
        *,
        raise_events: bool = True,
    ) -> Any:
        abstract = self._aliases.resolve(abstract)

        found, instance = self._instances.lookup(abstract)
        if found:
            return instance

        context = context.enter_resolution(abstract)

        if raise_events:
            with activate(context):
                self._events.fire_before_resolving(abstract, params, self)

        binding = self._get_binding(abstract)
        if binding is not None and binding.shared:
            with self._instances.lock_for(abstract):
                found, instance = self._instances.lookup(abstract)
                if found:
                    return instance
                instance = self._produce(abstract, binding, params, context)
                self._instances.set(abstract, instance)
        else:
            instance = self._produce(abstract, binding, params, context)

        self._resolved.add(abstract)

        if raise_events:
            with activate(context):
                self._events.fire_resolving(abstract, instance, self)
                self._events.fire_after_resolving(abstract, instance, self)

        return instance

    def _get_binding(self, abstract: Hashable) -> Binding | None:
        binding = self._bindings.get(abstract)
        if binding is not None or not self._autowire:
            return binding

        if is_pydantic_settings_subclass(abstract):

            def settings_factory() -> Any:
                return abstract()

            binding = Binding(concrete=settings_factory, shared=True)
            return self._bindings.setdefault(abstract, binding)

        return None

    def _produce(
        self,
        abstract: Hashable,
        binding: Binding | None,
        params: dict[str, Any],
        context: BuildContext,
    ) -> Any:
        if binding is None:
            if not self._autowire:
                msg = f"Target [{abstract!r}] is not bound and autowiring is disabled."
                raise BindwireBindingResolutionError(msg, abstract)
            concrete: Any = abstract
        else:
            concrete = binding.concrete

        if concrete == abstract or _is_factory(concrete):
            instance = self._build(concrete, params, context)
        elif is_runtime_class(concrete) and not self.bound(concrete):
            instance = self._build(concrete, params, context)
        else:
            instance = self._resolve(concrete, params, context, raise_events=False)

        for extender in self._events.extenders(abstract):
            with activate(context):
                instance = extender(instance, self)
        return instance

    def _build(self, concrete: Any, params: dict[str, Any], context: BuildContext) -> Any:
        if _is_factory(concrete):
            return self._call_factory(concrete, params, context)

        target = self._load_class(concrete)
        if not is_instantiable(target):
            msg = f"Target [{target.__module__}.{target.__qualname__}] is not instantiable."
            raise BindwireBindingResolutionError(msg, concrete)

        context = context.enter_build(target)
        parameters = self._dependencies_extractor.get_parameters(target)
        if not parameters:
            return target()

        args, kwargs = self._resolve_dependencies(target, parameters, params, context)
        return target(*args, **kwargs)

    def _load_class(self, concrete: Any) -> type[Any]:
        if is_runtime_class(concrete):
            return concrete

        if isinstance(concrete, str):
            if "." in concrete:
                try:
                    target = pkgutil.resolve_name(concrete)
                except (ImportError, AttributeError, ValueError) as e:
                    msg = f"Target class [{concrete}] does not exist."
                    raise BindwireBindingResolutionError(msg, concrete) from e
                if is_runtime_class(target):
                    return target
            msg = f"Target class [{concrete}] does not exist."
            raise BindwireBindingResolutionError(msg, concrete)

        msg = f"Target [{concrete!r}] is not instantiable."
        raise BindwireBindingResolutionError(msg, concrete)

    def _call_factory(
        self,
        factory: Callable[..., Any],
        params: dict[str, Any],
        context: BuildContext,
    ) -> Any:
        arity = self._dependencies_extractor.factory_arity(factory)
        with activate(context):
            if arity >= _FACTORY_ARGS_WITH_PARAMS:
                return factory(self, params)
            if arity == 1:
                return factory(self)
            return factory()

    def _resolve_dependencies(
        self,
        target: type[Any],
        parameters: tuple[ParameterInfo, ...],
        params: dict[str, Any],
        context: BuildContext,
    ) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for parameter in parameters:
            if parameter.name in params:
                value = params[parameter.name]
            elif parameter.dependency is not None:
                value = self._resolve_class(target, parameter, context)
            else:
                value = self._resolve_primitive(target, parameter)

            if parameter.positional_only:
                args.append(value)
            else:
                kwargs[parameter.name] = value

        return args, kwargs

    def _resolve_class(
        self,
        target: type[Any],
        parameter: ParameterInfo,
        context: BuildContext,
    ) -> Any:
        dependency = parameter.dependency
        try:
            abstract = self._aliases.resolve(dependency)
            if self._instances.is_pinned(abstract):
                return self._instances.get(abstract)

            implementation = self._find_contextual(context.consumer, dependency, abstract)
            if implementation is not _MISSING:
                return self._resolve_contextual(implementation, context)

            return self._resolve(abstract, {}, context)
        except BindwireCircularDependencyError:
            raise
        except BindwireBindingResolutionError:
            if parameter.has_default:
                return parameter.default
            raise

    def _resolve_primitive(self, target: type[Any], parameter: ParameterInfo) -> Any:
        if parameter.has_default:
            return parameter.default

        if parameter.annotation_error is not None:
            msg = (
                f"Unable to evaluate constructor annotations of [{target.__qualname__}]: "
                f"{parameter.annotation_error}"
            )
            raise BindwireBindingResolutionError(msg, target)

        msg = (
            f"Unresolvable dependency resolving [{parameter.describe()}] "
            f"in class {target.__module__}.{target.__qualname__}"
        )
        raise BindwireBindingResolutionError(msg, target)

    def _find_contextual(self, consumer: Any, dependency: Any, abstract: Hashable) -> Any:
        if consumer is None or not self._contextual.has_overrides_for(consumer):
            return _MISSING
        candidates = [abstract, dependency, *self._aliases.aliases_of(abstract)]
        implementation = self._contextual.find(consumer, candidates)
        return _MISSING if implementation is None else implementation

    def _resolve_contextual(self, implementation: Any, context: BuildContext) -> Any:
        if isinstance(implementation, (list, tuple)):
            return [self._resolve(item, {}, context) for item in implementation]
        if _is_factory(implementation):
            return self._call_factory(implementation, {}, context)
        return self._resolve(implementation, {}, context)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(bindings={len(self._bindings)}, "
            f"instances={len(self._instances)})"
        )


__all__ = ["Container"]
