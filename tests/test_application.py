import logging
from pathlib import Path
from typing import Any

import pytest

from bindwire.application import Application
from bindwire.container import Container
from bindwire.container_interface import IContainer
from bindwire.exceptions import BindwireInvalidProviderError
from bindwire.service_provider import ServiceProvider
from bindwire.settings import ApplicationSettings


class Cache:
    def __init__(self, settings: ApplicationSettings) -> None:
        self.prefix = settings.name


class CacheServiceProvider(ServiceProvider):
    def register(self) -> None:
        self.singleton(Cache)
        self.app.alias(Cache, "cache")

    def provides(self) -> list[Any]:
        return [Cache, "cache"]


class MailServiceProvider(ServiceProvider):
    def __init__(self, app: Application) -> None:
        super().__init__(app)
        self.events: list[str] = []
        self.cache_at_boot: Any = None

    def register(self) -> None:
        self.events.append("register")
        self.singleton("mailer", lambda app: {"driver": "smtp", "from": app.settings.name})

    def boot(self) -> None:
        self.events.append("boot")
        self.cache_at_boot = self.app.make("cache")


@pytest.fixture()
def app(tmp_path: Path) -> Application:
    return Application(base_path=tmp_path, settings=ApplicationSettings(name="shop"))


class TestBaseBindings:
    def test_application_resolves_itself(self, app: Application) -> None:
        assert app.make("app") is app
        assert app.make(Application) is app
        assert app.make(Container) is app
        assert app.make(IContainer) is app

    def test_settings_are_registered(self, app: Application) -> None:
        assert app.make(ApplicationSettings) is app.settings
        assert app.make("config") is app.settings
        assert app.make(Cache).prefix == "shop"

    def test_settings_read_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_NAME", "billing")
        monkeypatch.setenv("APP_DEBUG", "true")

        settings = Application().settings

        assert settings.name == "billing"
        assert settings.debug is True
        assert settings.env == "production"

    def test_paths_are_bound(self, app: Application, tmp_path: Path) -> None:
        assert app.make("path.base") == tmp_path
        assert app.make("path.config") == tmp_path / "config"
        assert app.make("path.storage") == tmp_path / "storage"
        assert app.base_path("public") == tmp_path / "public"

    def test_base_path_required(self) -> None:
        app = Application()

        with pytest.raises(RuntimeError, match="base path"):
            app.base_path()
        assert not app.bound("path.base")

    def test_set_base_path_binds_paths(self, tmp_path: Path) -> None:
        app = Application()

        assert app.set_base_path(tmp_path) is app
        assert app.make("path.bootstrap") == tmp_path / "bootstrap"

    def test_directory_helpers(self, app: Application, tmp_path: Path) -> None:
        assert app.app_path() == tmp_path / "app"
        assert app.config_path() == tmp_path / "config"
        assert app.public_path("index.html") == tmp_path / "public" / "index.html"
        assert app.storage_path("logs") == tmp_path / "storage" / "logs"
        assert app.database_path("app.sqlite") == tmp_path / "database" / "app.sqlite"
        assert app.resource_path("views") == tmp_path / "resources" / "views"
        assert app.bootstrap_path() == app.make("path.bootstrap")

    def test_directory_helpers_require_base_path(self) -> None:
        with pytest.raises(RuntimeError, match="base path"):
            Application().storage_path("logs")

    def test_version(self, app: Application) -> None:
        assert app.version() == Application.VERSION


class TestProviders:
    def test_register_provider_class(self, app: Application) -> None:
        provider = app.register(MailServiceProvider)

        assert isinstance(provider, MailServiceProvider)
        assert provider.app is app
        assert provider.events == ["register"]
        assert app.make("mailer") == {"driver": "smtp", "from": "shop"}

    def test_register_provider_instance(self, app: Application) -> None:
        provider = CacheServiceProvider(app)

        assert app.register(provider) is provider
        assert app.get_provider(CacheServiceProvider) is provider
        assert provider.provides() == [Cache, "cache"]
        assert provider.name == "CacheServiceProvider"

    def test_provider_registers_once(self, app: Application) -> None:
        first = app.register(MailServiceProvider)

        assert app.register(MailServiceProvider) is first
        assert app.register(MailServiceProvider(app)) is first
        assert first.events == ["register"]
        assert app.providers == (first,)

    def test_boot_runs_after_every_provider_registered(self, app: Application) -> None:
        mail = app.register(MailServiceProvider)
        app.register(CacheServiceProvider)

        app.boot()

        assert mail.events == ["register", "boot"]
        assert isinstance(mail.cache_at_boot, Cache)
        assert mail.cache_at_boot is app.make(Cache)
        assert app.is_booted

    def test_boot_is_idempotent(self, app: Application) -> None:
        app.register(CacheServiceProvider)
        mail = app.register(MailServiceProvider)

        app.boot()
        app.boot()

        assert mail.events == ["register", "boot"]

    def test_provider_registered_after_boot_boots_immediately(self, app: Application) -> None:
        app.register(CacheServiceProvider)
        app.boot()

        mail = app.register(MailServiceProvider)

        assert mail.events == ["register", "boot"]

    @pytest.mark.parametrize("provider", [object(), int, "MailServiceProvider"])
    def test_invalid_provider_is_rejected(self, app: Application, provider: Any) -> None:
        with pytest.raises(BindwireInvalidProviderError):
            app.register(provider)

    def test_boot_is_logged(self, app: Application, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="bindwire.application")
        app.register(CacheServiceProvider)

        app.boot()

        assert "Application shop booted with 1 service providers" in caplog.text


def test_flush_restores_base_bindings(app: Application, tmp_path: Path) -> None:
    app.register(CacheServiceProvider)
    app.boot()

    app.flush()

    assert app.providers == ()
    assert not app.is_booted
    assert not app.bound(Cache)
    assert app.make("app") is app
    assert app.make("config") is app.settings
    assert app.make("path.base") == tmp_path
