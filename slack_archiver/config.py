from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Slack Archiver"
    debug: bool = False

    # Slack web API (xoxc token + xoxd "d" cookie from the web client)
    slack_api_base: str = "https://slack.com/api"
    slack_api_token: str = ""
    slack_api_cookie: str = ""
    request_timeout: float = 30.0  # Seconds, used by the default transport

    # Archive output
    archive_dir: str = "archive"

    # Default feature flags when a request does not supply its own
    fetch_users: bool = False
    fetch_channel: bool = False
    fetch_team: bool = False
    fetch_files: bool = False

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
