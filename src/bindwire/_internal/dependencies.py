from __future__ import annotations

import inspect
import sys
import threading
import types
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from bindwire.markers import Inject

PRIMITIVE_TYPES: frozenset[type[Any]] = frozenset(
    {
        int,
        str,
        float,
        complex,
        bool,
        bytes,
        bytearray,
        list,
        dict,
        set,
        frozenset,
        tuple,
        object,
        type,
        type(None),
    },
)

_MAX_FACTORY_ARGS = 2


@dataclass(frozen=True, slots=True)
class ParameterInfo:
    """Information about a constructor parameter."""

    name: str
    kind: inspect._ParameterKind
    dependency: Hashable | None
    has_default: bool
    default: Any = None
    annotation_error: str | None = None
    """Why the annotation could not be evaluated; ``None`` when it was."""

    @property
    def positional_only(self) -> bool:
        return self.kind is inspect.Parameter.POSITIONAL_ONLY

    def describe(self) -> str:
        return self.name


def is_runtime_class(candidate: object) -> bool:
    """Return true when candidate is a real class rather than a generic alias."""
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_instantiable(concrete: type[Any]) -> bool:
    """Return false for abstract classes and protocols."""
    if inspect.isabstract(concrete):
        return False
    return not getattr(concrete, "_is_protocol", False)


def dependency_key(annotation: Any) -> Hashable | None:
    """Return the identifier a parameter annotation asks for.

    ``Annotated[..., Inject(key)]`` yields ``key``. ``Optional[X]`` and
    ``X | None`` unwrap to ``X``. Primitives, enums, unions of several types and
    non-class annotations yield ``None``.
    """
    if annotation is inspect.Parameter.empty or annotation is Any:
        return None

    for _ in range(2):
        if get_origin(annotation) is Annotated:
            args = get_args(annotation)
            for metadata in args[1:]:
                if isinstance(metadata, Inject):
                    return metadata.abstract
            annotation = args[0]

        origin = get_origin(annotation)
        if origin is Union or origin is types.UnionType:
            members = [arg for arg in get_args(annotation) if arg is not type(None)]
            if len(members) != 1:
                return None
            annotation = members[0]

    if annotation is Any or not is_runtime_class(annotation) or annotation in PRIMITIVE_TYPES:
        return None
    if issubclass(annotation, Enum):
        return None
    return annotation


def _get_constructor(concrete: type[Any]) -> Callable[..., Any] | None:
    """Return the callable whose signature describes how ``concrete`` is built.

    ``__init__`` wins. Classes that only customize ``__new__``, such as
    ``NamedTuple`` classes, are described by ``__new__``.
    """
    init_func = getattr(concrete, "__init__", None)
    if init_func is not None and init_func is not object.__init__:
        return init_func
    new_func = getattr(concrete, "__new__", None)
    if new_func is None or new_func is object.__new__:
        return None
    return new_func


def _bound_argument_count(sig: inspect.Signature) -> int:
    # Unbound ``__init__`` / ``__new__``: drop ``self`` or ``cls``.
    parameters = list(sig.parameters.values())
    if parameters and parameters[0].kind in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        return 1
    return 0


def _evaluate_type_hints(
    concrete: type[Any],
    constructor: Callable[..., Any],
    parameters: list[inspect.Parameter],
) -> tuple[dict[str, Any], dict[str, str]]:
    """Evaluate constructor annotations.

    Returns the evaluated hints and, per parameter, the reason its annotation
    could not be evaluated. Annotations are evaluated one parameter at a time
    once the constructor as a whole fails, so one bad forward reference only
    affects its own parameter.
    """
    try:
        return get_type_hints(constructor, include_extras=True), {}
    except (NameError, TypeError):
        module = sys.modules.get(concrete.__module__)
        globalns = vars(module) if module is not None else getattr(constructor, "__globals__", {})

    hints: dict[str, Any] = {}
    errors: dict[str, str] = {}
    for param in parameters:
        if param.annotation is inspect.Parameter.empty:
            continue
        holder = types.SimpleNamespace(__annotations__={param.name: param.annotation})
        try:
            hints.update(get_type_hints(holder, globalns=globalns, include_extras=True))
        except (NameError, TypeError) as e:
            errors[param.name] = str(e)
    return hints, errors


class DependenciesExtractor:
    """Extract constructor dependencies from classes and call shapes from factories."""

    def __init__(self) -> None:
        self._parameters_cache: dict[type[Any], tuple[ParameterInfo, ...]] = {}
        self._arity_cache: dict[Any, int] = {}
        self._lock = threading.Lock()

    def get_parameters(self, concrete: type[Any]) -> tuple[ParameterInfo, ...]:
        """Return the injectable constructor parameters of ``concrete`` in declaration order.

        Returns an empty tuple for classes without their own constructor.
        ``*args`` and ``**kwargs`` are never injected.
        """
        cached = self._parameters_cache.get(concrete)
        if cached is not None:
            return cached

        result = self._extract_parameters(concrete)
        with self._lock:
            self._parameters_cache[concrete] = result
        return result

    def factory_arity(self, factory: Callable[..., Any]) -> int:
        """Return how many of ``(container, params)`` a factory accepts."""
        try:
            cached = self._arity_cache.get(factory)
        except TypeError:
            return self._compute_arity(factory)
        if cached is not None:
            return cached

        arity = self._compute_arity(factory)
        with self._lock:
            self._arity_cache[factory] = arity
        return arity

    def clear(self) -> None:
        with self._lock:
            self._parameters_cache.clear()
            self._arity_cache.clear()

    def _extract_parameters(self, concrete: type[Any]) -> tuple[ParameterInfo, ...]:
        constructor = _get_constructor(concrete)
        if constructor is None:
            return ()

        try:
            sig = inspect.signature(constructor)
        except (TypeError, ValueError):
            return ()

        parameters = [
            param
            for param in list(sig.parameters.values())[_bound_argument_count(sig) :]
            if param.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]
        type_hints, errors = _evaluate_type_hints(concrete, constructor, parameters)

        result: list[ParameterInfo] = []
        for param in parameters:
            has_default = param.default is not inspect.Parameter.empty
            error = errors.get(param.name)
            result.append(
                ParameterInfo(
                    name=param.name,
                    kind=param.kind,
                    dependency=(
                        None
                        if error is not None
                        else dependency_key(type_hints.get(param.name, param.annotation))
                    ),
                    has_default=has_default,
                    default=param.default if has_default else None,
                    annotation_error=error,
                ),
            )
        return tuple(result)

    @staticmethod
    def _compute_arity(factory: Callable[..., Any]) -> int:
        try:
            sig = inspect.signature(factory)
        except (TypeError, ValueError):
            return _MAX_FACTORY_ARGS

        count = 0
        for param in sig.parameters.values():
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                return _MAX_FACTORY_ARGS
            if param.kind in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                count += 1
        return min(count, _MAX_FACTORY_ARGS)


__all__ = [
    "PRIMITIVE_TYPES",
    "DependenciesExtractor",
    "ParameterInfo",
    "dependency_key",
    "is_instantiable",
    "is_runtime_class",
]
