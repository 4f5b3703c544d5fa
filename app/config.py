"""Runtime configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Attributes
    ----------
    app_name : str
        Human-readable application name.
    database_url : str
        SQLAlchemy database URL.
    log_level : str
        Root logging level name.
    debug : bool
        Whether unexpected error messages are exposed in responses.
    bootstrap_enabled : bool
        Whether one-time unauthenticated bootstrap is allowed.
    default_page_limit : int
        Page size applied when a listing omits ``limit``.
    """

    model_config = SettingsConfigDict(env_prefix="DEVICEGRAPH_", extra="ignore")

    app_name: str = "Device Graph"
    database_url: str = "sqlite+aiosqlite:///./devicegraph.db"
    log_level: str = "INFO"
    debug: bool = False
    bootstrap_enabled: bool = True
    default_page_limit: int = 10


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings.

    Returns
    -------
    Settings
        Cached settings instance.
    """
    return Settings()
