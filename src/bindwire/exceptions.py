from __future__ import annotations

from typing import Any


class BindwireError(Exception):
    """Represent a base class for all bindwire-specific failures.

    Catch this type when you want to handle any bindwire error path without
    matching each concrete exception class individually.
    """


class BindwireBindingResolutionError(BindwireError):
    """Signal that an identifier could not be turned into an instance.

    Raised by ``Container.make`` and ``Container.build`` when the target class
    does not exist, the target is abstract and has no binding, a constructor
    parameter cannot be satisfied, or a nested dependency fails without a
    default value to fall back on.

    Typical fixes include binding the abstract type to a concrete class,
    giving the parameter a default value, or passing it explicitly through
    ``make(..., params={"name": value})``.
    """

    def __init__(self, message: str, abstract: Any = None) -> None:
        super().__init__(message)
        self.abstract = abstract


class BindwireInvalidRegistrationError(BindwireError):
    """Signal invalid registration configuration.

    Raised by callback registration APIs such as ``Container.resolving`` when
    the callback is not callable, and by ``ContextualBindingBuilder.give`` when
    ``needs`` was never called.
    """


class BindwireCircularDependencyError(BindwireBindingResolutionError):
    """Signal a dependency cycle detected while resolving.

    The ``chain`` attribute lists the identifiers on the resolution path, in
    resolution order, ending with the identifier that closed the cycle. The
    default-value fallback never swallows this error.
    """

    def __init__(self, abstract: Any, chain: list[Any]) -> None:
        self.chain = [*chain, abstract]
        rendered = " -> ".join(_describe(item) for item in self.chain)
        super().__init__(f"Circular dependency detected: {rendered}", abstract)


class BindwireEntryNotFoundError(BindwireError):
    """Signal that ``Container.get`` was asked for an unknown identifier.

    Only raised when the identifier is neither bound nor resolvable by
    auto-wiring. Resolution failures of bound identifiers propagate as
    ``BindwireBindingResolutionError`` instead.
    """

    def __init__(self, abstract: Any) -> None:
        super().__init__(f"No entry was found for '{_describe(abstract)}' identifier")
        self.abstract = abstract


class BindwireSelfAliasError(BindwireError):
    """Signal an attempt to alias an identifier to itself."""

    def __init__(self, abstract: Any) -> None:
        super().__init__(f"[{_describe(abstract)}] is aliased to itself.")
        self.abstract = abstract


class BindwireCircularAliasError(BindwireError):
    """Signal an alias chain that loops back onto itself."""

    def __init__(self, chain: list[Any]) -> None:
        self.chain = chain
        rendered = " -> ".join(_describe(item) for item in chain)
        super().__init__(f"Alias chain loops: {rendered}")


class BindwireInvalidProviderError(BindwireError):
    """Signal that ``Application.register`` was given something that is not a provider.

    Providers must be ``ServiceProvider`` instances or subclasses.
    """

    def __init__(self, provider: Any) -> None:
        super().__init__(f"{provider!r} is not a ServiceProvider.")
        self.provider = provider


def _describe(value: Any) -> str:
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    return str(value)
