import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Union

import pytz
from timezonefinder import TimezoneFinder

from .config import settings
from .errors import UnknownTimezoneError
from .models import GeoInstant, format_offset

logger = logging.getLogger(__name__)

Instant = Union[GeoInstant, datetime]


@lru_cache(maxsize=1)
def _finder() -> TimezoneFinder:
    # Loading the boundary data is slow, share one finder per process
    return TimezoneFinder()


@lru_cache(maxsize=None)
def get_zone(name: str) -> pytz.BaseTzInfo:
    """Returns the pytz zone for an IANA name."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise UnknownTimezoneError(name) from e


def nautical_zone(lon: float) -> str:
    """The Etc/GMT±N zone covering a longitude (signs are inverted in Etc names)."""
    hours = int(round(lon / 15.0))
    if hours == 0:
        return "Etc/GMT"
    return f"Etc/GMT{'-' if hours > 0 else '+'}{abs(hours)}"


def as_utc(instant: Instant) -> datetime:
    if isinstance(instant, GeoInstant):
        return instant.utc
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


class TimezoneResolver:
    """
    Timezone database service: coordinates to zone names, and UTC offsets
    for zones at absolute instants or at wall-clock readings.

    The zone used when a record has no location is `local_zone`; it is
    injected (defaulting to the configured LOCAL_TIMEZONE) so results do
    not depend on where the process happens to run.
    """

    def __init__(self, local_zone: Optional[str] = None):
        self.local_zone = local_zone or settings.LOCAL_TIMEZONE
        get_zone(self.local_zone)

    def zone_for_location(self, lat: float, lon: float) -> str:
        """
        Looks up the IANA zone for a coordinate.

        Args:
            lat: Latitude in decimal degrees.
            lon: Longitude in decimal degrees.

        Returns:
            A zone name such as "Pacific/Honolulu". Points the boundary data
            does not cover get the nautical Etc/GMT±N zone for their longitude.
        """
        name = _finder().timezone_at(lng=lon, lat=lat)
        if name is None:
            name = nautical_zone(lon)
            logger.debug(f"No zone polygon at ({lat}, {lon}), using {name}")
        return name

    def utcoffset_at(self, zone: str, instant: Instant) -> timedelta:
        """UTC offset in force in `zone` at an absolute instant."""
        local = as_utc(instant).astimezone(get_zone(zone))
        return local.utcoffset() or timedelta(0)

    def offset_at_instant(self, zone: str, instant: Instant) -> str:
        """Same as utcoffset_at, rendered as "+HH:MM"."""
        return format_offset(self.utcoffset_at(zone, instant))

    def utcoffset_for_wall_clock(self, zone: str, wall_clock: datetime) -> timedelta:
        """
        UTC offset that applies to a wall-clock reading in `zone`.

        Nonexistent readings (spring-forward gap) get the offset in force
        after the transition. Ambiguous readings (fall-back overlap) get the
        first occurrence, i.e. the daylight offset. Both are valid local
        offsets; neither case raises.
        """
        tz = get_zone(zone)
        naive = wall_clock.replace(tzinfo=None)
        localized = tz.localize(naive, is_dst=True)
        offset = localized.utcoffset() or timedelta(0)
        if logger.isEnabledFor(logging.DEBUG):
            standard = tz.localize(naive, is_dst=False).utcoffset() or timedelta(0)
            if standard != offset:
                logger.debug(
                    f"{naive.isoformat()} is ambiguous or skipped in {zone}; "
                    f"using {format_offset(offset)} over {format_offset(standard)}"
                )
        return offset

    def offset_for_local_wall_clock(
        self,
        zone: str,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
    ) -> str:
        """Offset string for a wall-clock reading. `month` is 1-based."""
        wall = datetime(year, month, day, hour, minute, second)
        return format_offset(self.utcoffset_for_wall_clock(zone, wall))

    def abbreviation(self, zone: str, instant: Instant) -> str:
        """Zone abbreviation in force at an instant, e.g. "HST" or "PDT"."""
        return as_utc(instant).astimezone(get_zone(zone)).tzname() or ""
