from pydantic_settings import BaseSettings, SettingsConfigDict


class ApplicationSettings(BaseSettings):
    """Application-level configuration read from ``APP_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="APP_")

    name: str = "bindwire"
    """Human-readable application name (``APP_NAME``)."""

    env: str = "production"
    """Deployment environment (``APP_ENV``)."""

    debug: bool = False
    """Enable development diagnostics (``APP_DEBUG``)."""
