"""Application configuration settings."""

import logging
import os
from datetime import timezone, tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Required configuration is missing or unusable."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "whoop-cli"
    log_level: str = "WARNING"

    # WHOOP credentials
    whoop_email: Optional[str] = None
    whoop_password: Optional[str] = None

    # WHOOP API
    whoop_api_base_url: str = "https://api.prod.whoop.com"
    whoop_client_id: str = ""
    whoop_http_timeout_seconds: float = 30.0

    # Device / locale headers
    whoop_locale: str = "en_US"
    whoop_currency: str = "USD"
    whoop_time_zone: Optional[str] = None  # e.g. "Europe/Berlin"; defaults to machine zone

    def require_credentials(self) -> tuple[str, str]:
        """Return (email, password) or raise if either is unset."""
        for env_name, value in (
            ("WHOOP_EMAIL", self.whoop_email),
            ("WHOOP_PASSWORD", self.whoop_password),
        ):
            if not value:
                raise ConfigurationError(
                    f"Missing {env_name}. Set it as an environment variable and try again."
                )
        return self.whoop_email, self.whoop_password


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def local_timezone_name(settings: Optional[Settings] = None) -> str:
    """Resolve the IANA name of the machine's time zone.

    Order: explicit WHOOP_TIME_ZONE setting, the TZ environment variable,
    the /etc/localtime link target. Falls back to "UTC".
    """
    settings = settings or get_settings()
    if settings.whoop_time_zone:
        return settings.whoop_time_zone

    tz_env = os.environ.get("TZ", "").lstrip(":")
    if tz_env:
        return tz_env

    try:
        target = Path("/etc/localtime").resolve(strict=True)
    except OSError:
        logger.debug("Could not resolve /etc/localtime, assuming UTC")
        return "UTC"

    parts = target.parts
    if "zoneinfo" in parts:
        # Last "zoneinfo" component; macOS nests zoneinfo under /var/db/timezone
        idx = len(parts) - 1 - parts[::-1].index("zoneinfo")
        name = "/".join(parts[idx + 1:])
        if name:
            return name
    return "UTC"


def local_tzinfo(settings: Optional[Settings] = None) -> Optional[tzinfo]:
    """Zone for rendering local timestamps.

    None means the machine zone. An explicit WHOOP_TIME_ZONE is loaded from
    the IANA database so output matches the zone sent to WHOOP.
    """
    settings = settings or get_settings()
    if not settings.whoop_time_zone:
        return None
    if settings.whoop_time_zone.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(settings.whoop_time_zone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(
            f"Unknown WHOOP_TIME_ZONE {settings.whoop_time_zone!r}"
        ) from e
