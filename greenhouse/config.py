import os
from enum import StrEnum
from typing import Final
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .windows import DEFAULT_WINDOW, TimeWindow


class LogLevel(StrEnum):
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


class Settings(BaseModel):
    feed_url: str = Field(validation_alias="FEED_URL")
    feed_path: str = Field(default="sensorData", validation_alias="FEED_PATH")
    # Database secret or ID token appended as ?auth=
    feed_auth: str | None = Field(default=None, validation_alias="FEED_AUTH")
    user_agent: str = Field(default="greenhouse-dashboard/1.0", validation_alias="USER_AGENT")

    poll_interval_secs: int = Field(default=30, ge=1, validation_alias="POLL_INTERVAL_SECS")
    request_timeout_secs: int = Field(default=10, ge=1, validation_alias="REQUEST_TIMEOUT_SECS")

    default_window: TimeWindow = Field(default=DEFAULT_WINDOW, validation_alias="DEFAULT_WINDOW")
    # IANA zone for parsing keys and labelling axes; host local time when unset
    display_tz: str | None = Field(default=None, validation_alias="DISPLAY_TZ")

    log_level: LogLevel = Field(default=LogLevel.INFO, validation_alias="LOG_LEVEL")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("display_tz")
    @classmethod
    def _known_zone(cls, value: str | None) -> str | None:
        if not value:
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def tz(self) -> ZoneInfo | None:
        return ZoneInfo(self.display_tz) if self.display_tz else None


ENV_KEYS: Final[tuple[str, ...]] = (
    "FEED_URL",
    "FEED_PATH",
    "FEED_AUTH",
    "USER_AGENT",
    "POLL_INTERVAL_SECS",
    "REQUEST_TIMEOUT_SECS",
    "DEFAULT_WINDOW",
    "DISPLAY_TZ",
    "LOG_LEVEL",
)


def load_settings() -> Settings:
    # Load .env if present (does nothing if file missing)
    load_dotenv()
    data: dict[str, str] = {}
    for key in ENV_KEYS:
        if key in os.environ:
            data[key] = os.environ[key]

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        if "FEED_URL" not in data:
            raise RuntimeError("Missing required configuration: FEED_URL") from e
        raise
