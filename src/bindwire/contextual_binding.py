from __future__ import annotations

from collections.abc import Hashable
from typing import TYPE_CHECKING, Any

from bindwire.exceptions import BindwireInvalidRegistrationError

if TYPE_CHECKING:
    from typing_extensions import Self

    from bindwire.container import Container


class ContextualBindingBuilder:
    """Fluent builder behind ``Container.when``.

    Examples:
        .. code-block:: python

            container.when(PhotoController).needs(Filesystem).give(LocalFilesystem)
            container.when([VideoController, UploadController]).needs(Filesystem).give(
                lambda container: S3Filesystem(bucket="media"),
            )
            container.when(ReportAggregator).needs("reports").give_tagged("reports")

    """

    def __init__(self, container: Container, concretes: list[Hashable]) -> None:
        self._container = container
        self._concretes = concretes
        self._needs: Hashable | None = None

    def needs(self, abstract: Hashable) -> Self:
        """Define the identifier whose resolution depends on the consumer."""
        self._needs = abstract
        return self

    def give(self, implementation: Any) -> None:
        """Define what the consumers receive for the needed identifier.

        ``implementation`` may be a class or identifier (resolved through the
        container), a factory called as ``factory(container)``, or a list of
        identifiers resolved in order.
        """
        if self._needs is None:
            msg = "Call needs() before give() when defining a contextual binding."
            raise BindwireInvalidRegistrationError(msg)
        for concrete in self._concretes:
            self._container.add_contextual_binding(concrete, self._needs, implementation)

    def give_tagged(self, tag: Hashable) -> None:
        """Give every service tagged with ``tag``, resolved at injection time."""

        def tagged_services(container: Container) -> list[Any]:
            return container.tagged(tag)

        self.give(tagged_services)


__all__ = ["ContextualBindingBuilder"]
