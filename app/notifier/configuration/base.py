"""Shared base class for settings sections."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class SectionSettings(BaseSettings):
    """Base class for a settings section.

    All sections inherit from this class to ensure consistent
    configuration behavior (env file loading, unknown keys ignored).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )
