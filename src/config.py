"""Pydantic Settings — loads configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    default_target_url: str = (
        "https://info.monsterhunter.com/wilds/event-quest/en-uk/schedule?utc=-8"
    )
    scrape_mode: Literal["direct", "rendered"] = "direct"

    fetch_timeout_seconds: float = 30.0
    navigation_timeout_seconds: float = 60.0
    stabilization_delay_seconds: float = 2.0
    content_ready_timeout_seconds: float = 5.0
    browser_launch_timeout_seconds: float = 60.0

    browser_headless: bool = True
    browser_permissive: bool = True
    browser_mobile: bool = True

    proxy_server: str = ""
    proxy_username: str = ""
    proxy_password: str = ""

    cors_origins: str = "*"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
