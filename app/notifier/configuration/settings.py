"""Notifier configuration settings - main aggregator."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from notifier.configuration.notify import NotifySettings


class Settings(BaseSettings):
    """Notifier configuration settings - main aggregator.

    Environment Variables:
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        ENVIRONMENT: Deployment environment name (production enables JSON logs)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from notifier.configuration import get_settings

        settings = get_settings()
        if settings.is_production:
            ...
        concurrency = settings.notify.bulk.concurrency_limit
        ```
    """

    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    GIT_SHA: str = "Unknown"

    notify: NotifySettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if ENVIRONMENT is "production", False otherwise.
        """
        return self.ENVIRONMENT.lower() == "production"

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        if "notify" not in kwargs:
            kwargs["notify"] = NotifySettings()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings singleton.

    The @lru_cache decorator ensures only ONE instance is created per process.

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()
