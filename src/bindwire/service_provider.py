from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bindwire.application import Application


class ServiceProvider(ABC):
    """Group related bindings and the code that bootstraps them.

    ``register`` should only bind things into the container; it runs before
    every provider has registered, so it must not resolve services owned by
    other providers. ``boot`` runs once all providers are registered and may
    resolve anything.

    Examples:
        .. code-block:: python

            class MailServiceProvider(ServiceProvider):
                def register(self) -> None:
                    self.singleton("mailer", lambda app: SmtpMailer(app.make(ApplicationSettings)))

                def boot(self) -> None:
                    self.app.make("mailer").connect()

    """

    def __init__(self, app: Application) -> None:
        self.app = app

    @abstractmethod
    def register(self) -> None:
        """Register bindings into the application container."""

    def boot(self) -> None:  # noqa: B027
        """Bootstrap services after every provider has been registered."""

    def provides(self) -> list[Hashable]:
        """Return the identifiers this provider binds."""
        return []

    @property
    def name(self) -> str:
        return type(self).__name__

    def bind(self, abstract: Hashable, concrete: Any = None, *, shared: bool = False) -> None:
        self.app.bind(abstract, concrete, shared=shared)

    def singleton(self, abstract: Hashable, concrete: Any = None) -> None:
        self.app.singleton(abstract, concrete)

    def instance(self, abstract: Hashable, instance: Any) -> Any:
        return self.app.instance(abstract, instance)


__all__ = ["ServiceProvider"]
