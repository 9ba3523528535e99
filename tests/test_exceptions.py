from abc import ABC, abstractmethod

import pytest

from bindwire._internal.build_context import EMPTY_CONTEXT, current_context
from bindwire.container import Container
from bindwire.exceptions import (
    BindwireBindingResolutionError,
    BindwireCircularAliasError,
    BindwireCircularDependencyError,
    BindwireEntryNotFoundError,
    BindwireError,
    BindwireInvalidProviderError,
    BindwireInvalidRegistrationError,
    BindwireSelfAliasError,
)


class Plain:
    pass


class Gateway(ABC):
    @abstractmethod
    def charge(self) -> None: ...


class CycleA:
    def __init__(self, b: "CycleB") -> None:
        self.b = b


class CycleB:
    def __init__(self, a: CycleA) -> None:
        self.a = a


class SelfReferencing:
    def __init__(self, other: "SelfReferencing") -> None:
        self.other = other


class OptionalCycleA:
    def __init__(self, b: "OptionalCycleB | None" = None) -> None:
        self.b = b


class OptionalCycleB:
    def __init__(self, a: OptionalCycleA) -> None:
        self.a = a


class BrokenAnnotation:
    def __init__(self, dependency: "UndefinedDependency") -> None:  # noqa: F821
        self.dependency = dependency


class OptionalMissing:
    def __init__(self, cache: "UndefinedCache | None" = None) -> None:  # noqa: F821
        self.cache = cache


@pytest.mark.parametrize(
    "error_class",
    [
        BindwireBindingResolutionError,
        BindwireCircularAliasError,
        BindwireCircularDependencyError,
        BindwireEntryNotFoundError,
        BindwireInvalidProviderError,
        BindwireInvalidRegistrationError,
        BindwireSelfAliasError,
    ],
)
def test_errors_share_base_class(error_class: type[Exception]) -> None:
    assert issubclass(error_class, BindwireError)


def test_circular_dependency_is_a_resolution_error() -> None:
    assert issubclass(BindwireCircularDependencyError, BindwireBindingResolutionError)


def test_error_messages() -> None:
    assert str(BindwireEntryNotFoundError("mailer")) == "No entry was found for 'mailer' identifier"
    assert str(BindwireSelfAliasError("cache")) == "[cache] is aliased to itself."
    assert str(BindwireCircularAliasError(["a", "b", "a"])) == "Alias chain loops: a -> b -> a"
    assert str(BindwireInvalidProviderError("nope")) == "'nope' is not a ServiceProvider."

    cycle = BindwireCircularDependencyError("a", ["a", "b"])
    assert str(cycle) == "Circular dependency detected: a -> b -> a"
    assert cycle.chain == ["a", "b", "a"]
    assert cycle.abstract == "a"


def test_types_are_rendered_with_module_path() -> None:
    error = BindwireEntryNotFoundError(Plain)

    assert str(error) == f"No entry was found for '{Plain.__module__}.Plain' identifier"


class TestGet:
    def test_get_returns_resolved_object(self, container: Container) -> None:
        container.instance("answer", 42)

        assert container.get("answer") == 42

    def test_get_autowires_unbound_class(self, container: Container) -> None:
        assert isinstance(container.get(Plain), Plain)

    def test_get_unknown_identifier_raises_entry_not_found(self, container: Container) -> None:
        with pytest.raises(BindwireEntryNotFoundError) as exc_info:
            container.get("mailer")

        assert exc_info.value.abstract == "mailer"
        assert isinstance(exc_info.value.__cause__, BindwireBindingResolutionError)

    def test_get_unbound_abstract_raises_entry_not_found(self, container: Container) -> None:
        with pytest.raises(BindwireEntryNotFoundError):
            container.get(Gateway)

    def test_get_propagates_failure_of_bound_identifier(self, container: Container) -> None:
        container.bind("gateway", Gateway)

        with pytest.raises(BindwireBindingResolutionError) as exc_info:
            container.get("gateway")

        assert not isinstance(exc_info.value, BindwireEntryNotFoundError)
        assert "is not instantiable" in str(exc_info.value)


class TestCycles:
    def test_constructor_cycle_is_detected(self, container: Container) -> None:
        with pytest.raises(BindwireCircularDependencyError) as exc_info:
            container.make(CycleA)

        assert exc_info.value.chain == [CycleA, CycleB, CycleA]

    def test_self_reference_is_detected(self, container: Container) -> None:
        with pytest.raises(BindwireCircularDependencyError) as exc_info:
            container.make(SelfReferencing)

        assert exc_info.value.chain == [SelfReferencing, SelfReferencing]

    def test_default_value_does_not_hide_cycle(self, container: Container) -> None:
        with pytest.raises(BindwireCircularDependencyError):
            container.make(OptionalCycleA)

    def test_cycle_through_factories_is_detected(self, container: Container) -> None:
        container.bind("a", lambda c: c.make("b"))
        container.bind("b", lambda c: c.make("a"))

        with pytest.raises(BindwireCircularDependencyError) as exc_info:
            container.make("a")

        assert exc_info.value.chain == ["a", "b", "a"]

    def test_cycle_through_shared_bindings_is_detected(self, container: Container) -> None:
        container.singleton(CycleA)
        container.singleton(CycleB)

        with pytest.raises(BindwireCircularDependencyError):
            container.make(CycleB)

    def test_failure_leaves_no_stale_build_state(self, container: Container) -> None:
        with pytest.raises(BindwireCircularDependencyError):
            container.make(CycleA)

        assert current_context() == EMPTY_CONTEXT
        assert isinstance(container.make(Plain), Plain)
        assert not container.resolved(CycleA)

    def test_sibling_dependencies_are_not_cycles(self, container: Container) -> None:
        class Pair:
            def __init__(self, first: Plain, second: Plain) -> None:
                self.first = first
                self.second = second

        pair = container.make(Pair)

        assert pair.first is not pair.second


def test_unevaluable_annotation_is_a_resolution_error(container: Container) -> None:
    with pytest.raises(
        BindwireBindingResolutionError,
        match="Unable to evaluate constructor annotations",
    ):
        container.make(BrokenAnnotation)


def test_unevaluable_annotation_with_default_uses_default(container: Container) -> None:
    assert container.make(OptionalMissing).cache is None
