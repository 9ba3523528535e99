from collections.abc import Callable, Hashable
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from bindwire.container import Container

Identifier: TypeAlias = Hashable
"""A key under which a dependency is requested: usually a class or a string."""

Factory: TypeAlias = Callable[..., Any]
"""A callable producing an instance; called as ``factory(container, params)``."""

Concrete: TypeAlias = "type[Any] | str | Factory"
"""What a binding builds from: a class, another identifier, or a factory."""

BeforeResolvingCallback: TypeAlias = "Callable[[Any, dict[str, Any], Container], None]"
"""Called with ``(abstract, params, container)`` before an identifier is resolved."""

ResolvingCallback: TypeAlias = "Callable[[Any, Container], None]"
"""Called with ``(instance, container)`` once an identifier has been resolved."""

ReboundCallback: TypeAlias = "Callable[[Container, Any], None]"
"""Called with ``(container, instance)`` when a resolved identifier is rebound."""

Extender: TypeAlias = "Callable[[Any, Container], Any]"
"""Called with ``(instance, container)``; its return value replaces the instance."""
