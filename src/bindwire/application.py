from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from bindwire.container import Container
from bindwire.exceptions import BindwireInvalidProviderError
from bindwire.lock_mode import LockMode
from bindwire.service_provider import ServiceProvider
from bindwire.settings import ApplicationSettings

if TYPE_CHECKING:
    from typing_extensions import Self

logger = logging.getLogger(__name__)

_PATH_SEGMENTS: dict[str, str] = {
    "path.app": "app",
    "path.config": "config",
    "path.public": "public",
    "path.storage": "storage",
    "path.database": "database",
    "path.resources": "resources",
    "path.bootstrap": "bootstrap",
}


class Application(Container):
    """Container that also owns application settings and service providers.

    The application registers itself under ``"app"``, ``Container``,
    ``IContainer`` and its own class, exposes its settings under
    ``ApplicationSettings`` and the ``"config"`` alias, and binds the
    ``path.*`` identifiers once a base path is known.
    """

    VERSION = "1.0.0"

    def __init__(
        self,
        base_path: str | os.PathLike[str] | None = None,
        settings: ApplicationSettings | None = None,
        *,
        lock_mode: LockMode = LockMode.THREAD,
        autowire: bool = True,
    ) -> None:
        self._base_path: Path | None = Path(base_path) if base_path is not None else None
        self._settings = settings if settings is not None else ApplicationSettings()
        self._providers: dict[type[ServiceProvider], ServiceProvider] = {}
        self._booted_providers: set[type[ServiceProvider]] = set()
        self._booted = False
        super().__init__(lock_mode=lock_mode, autowire=autowire)

    def _register_base_bindings(self) -> None:
        super()._register_base_bindings()
        self.instance("app", self)
        self.instance(ApplicationSettings, self._settings)
        self.alias(ApplicationSettings, "config")
        if self._base_path is not None:
            self._bind_paths_in_container()

    @property
    def settings(self) -> ApplicationSettings:
        return self._settings

    def version(self) -> str:
        return self.VERSION

    # Paths

    def set_base_path(self, base_path: str | os.PathLike[str]) -> Self:
        self._base_path = Path(base_path)
        self._bind_paths_in_container()
        return self

    def base_path(self, path: str = "") -> Path:
        if self._base_path is None:
            msg = "The application base path has not been set."
            raise RuntimeError(msg)
        return self._base_path / path if path else self._base_path

    def app_path(self, path: str = "") -> Path:
        """Return ``path`` under the application source directory."""
        return self._segment_path("app", path)

    def config_path(self, path: str = "") -> Path:
        return self._segment_path("config", path)

    def public_path(self, path: str = "") -> Path:
        return self._segment_path("public", path)

    def storage_path(self, path: str = "") -> Path:
        return self._segment_path("storage", path)

    def database_path(self, path: str = "") -> Path:
        return self._segment_path("database", path)

    def resource_path(self, path: str = "") -> Path:
        return self._segment_path("resources", path)

    def bootstrap_path(self, path: str = "") -> Path:
        return self._segment_path("bootstrap", path)

    def _segment_path(self, segment: str, path: str) -> Path:
        directory = self.base_path(segment)
        return directory / path if path else directory

    def _bind_paths_in_container(self) -> None:
        base = self.base_path()
        self.instance("path.base", base)
        for abstract, segment in _PATH_SEGMENTS.items():
            self.instance(abstract, base / segment)

    # Service providers

    @property
    def providers(self) -> tuple[ServiceProvider, ...]:
        return tuple(self._providers.values())

    @property
    def is_booted(self) -> bool:
        return self._booted

    def get_provider(self, provider_class: type[ServiceProvider]) -> ServiceProvider | None:
        return self._providers.get(provider_class)

    def register(self, provider: ServiceProvider | type[ServiceProvider]) -> ServiceProvider:
        """Register a service provider with the application.

        Accepts a provider instance or a provider class, which is instantiated
        with the application. Each provider class registers once; registering
        it again returns the existing provider. Providers registered after
        ``boot`` are booted immediately.
        """
        if isinstance(provider, type) and issubclass(provider, ServiceProvider):
            provider = provider(self)
        elif not isinstance(provider, ServiceProvider):
            raise BindwireInvalidProviderError(provider)

        existing = self._providers.get(type(provider))
        if existing is not None:
            return existing

        provider.register()
        self._providers[type(provider)] = provider
        logger.debug("Registered service provider %s", provider.name)

        if self._booted:
            self._boot_provider(provider)
        return provider

    def boot(self) -> None:
        """Boot every registered provider once, in registration order."""
        if self._booted:
            return

        for provider in list(self._providers.values()):
            self._boot_provider(provider)

        self._booted = True
        logger.info(
            "Application %s booted with %d service providers",
            self._settings.name,
            len(self._providers),
        )

    def _boot_provider(self, provider: ServiceProvider) -> None:
        if type(provider) in self._booted_providers:
            return
        provider.boot()
        self._booted_providers.add(type(provider))
        logger.debug("Booted service provider %s", provider.name)

    def flush(self) -> None:
        super().flush()
        self._providers.clear()
        self._booted_providers.clear()
        self._booted = False


__all__ = ["Application"]
