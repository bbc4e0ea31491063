import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


def _host_timezone() -> str:
    """Best guess at the host's configured IANA zone, falling back to UTC."""
    tz_env = os.environ.get("TZ", "").lstrip(":")
    if tz_env in pytz.all_timezones_set:
        return tz_env

    # /etc/localtime is usually a link into the zoneinfo tree
    target = os.path.realpath("/etc/localtime")
    marker = "zoneinfo/"
    if marker in target:
        name = target.split(marker, 1)[1]
        if name in pytz.all_timezones_set:
            return name

    return "UTC"


class Settings(BaseSettings):
    """Engine settings."""

    # Clustering / matching thresholds
    TIME_THRESHOLD_HOURS: float = 5
    DISTANCE_THRESHOLD_KM: float = 6.0
    TIGHT_TIME_WINDOW_MINUTES: float = 30
    RELAXED_DISTANCE_THRESHOLD_KM: float = 50.0

    # Zone used when a record carries no location
    LOCAL_TIMEZONE: str = Field(
        default_factory=_host_timezone,
        description="IANA zone used when no location is available",
    )

    @field_validator("LOCAL_TIMEZONE")
    @classmethod
    def known_zone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    class Config:
        env_prefix = "OUTING_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()


@dataclass(frozen=True)
class Thresholds:
    """Time and distance bounds shared by the clusterer and the matcher."""

    time: timedelta = timedelta(hours=5)
    distance_km: float = 6.0
    tight_window: timedelta = timedelta(minutes=30)
    relaxed_distance_km: float = 50.0

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> "Thresholds":
        source = source or settings
        return cls(
            time=timedelta(hours=source.TIME_THRESHOLD_HOURS),
            distance_km=source.DISTANCE_THRESHOLD_KM,
            tight_window=timedelta(minutes=source.TIGHT_TIME_WINDOW_MINUTES),
            relaxed_distance_km=source.RELAXED_DISTANCE_THRESHOLD_KM,
        )
