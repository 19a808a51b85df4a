"""
Configuration settings for the Heroku client.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from heroku_client import __version__

DEFAULT_HOST = "api.heroku.com"
USER_AGENT = f"heroku-client/{__version__}"


class ClientSettings(BaseSettings):
    """
    Configuration for the Heroku API client.

    Settings are loaded from environment variables with HEROKU_ prefix.
    Example: HEROKU_URL=https://:token@api.heroku.com
    """

    model_config = SettingsConfigDict(
        env_prefix="HEROKU_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = Field(
        default="",
        description="Session URL of the form https://:<token>@<host>; empty selects the default host",
    )

    api_version: str = Field(
        default="3",
        description="Version token sent in the Accept header",
    )

    timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds for the default transport",
    )

    user_agent: str = Field(
        default=USER_AGENT,
        description="User-Agent header sent with every request",
    )


@lru_cache
def get_settings() -> ClientSettings:
    """
    Get client settings loaded from the environment.

    Uses lru_cache so settings are only loaded once; call
    ``get_settings.cache_clear()`` to reload.
    """
    return ClientSettings()
