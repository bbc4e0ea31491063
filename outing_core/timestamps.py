import logging
import re
from datetime import datetime
from typing import Optional, Union

from .errors import TimestampFormatError
from .models import UNLOCATED, GeoInstant, Located, Location, format_offset
from .timezone import Instant, TimezoneResolver, as_utc

logger = logging.getLogger(__name__)

# "YYYY-MM-DD HH:MM:SS", EXIF "YYYY:MM:DD HH:MM:SS", or with a "T"; seconds optional
LOCAL_RE = re.compile(r"^(\d{4})[-:](\d{2})[-:](\d{2})[T ](\d{2}):(\d{2})(?::(\d{2}))?$")


def parse_local(raw: str) -> datetime:
    """
    Parses a naive wall-clock string into a naive datetime.

    Args:
        raw: Machine-local ("2024-01-15 17:00:00") or EXIF-punctuated
             ("2024:01:15 17:00:00") timestamp, without an offset.

    Raises:
        TimestampFormatError: If the string is not one of the accepted shapes.
    """
    m = LOCAL_RE.match(raw.strip()) if isinstance(raw, str) else None
    if not m:
        raise TimestampFormatError(f"Not a local timestamp: {raw!r}")
    try:
        return datetime(
            int(m.group(1)), int(m.group(2)), int(m.group(3)),
            int(m.group(4)), int(m.group(5)), int(m.group(6) or 0),
        )
    except ValueError as e:
        raise TimestampFormatError(f"Invalid timestamp {raw!r}: {e}") from e


class OffsetTimestampCodec:
    """Turns naive or device-biased timestamps into offset-correct GeoInstants."""

    def __init__(self, resolver: Optional[TimezoneResolver] = None):
        self.resolver = resolver or TimezoneResolver()

    def zone_for(self, location: Location = UNLOCATED) -> str:
        """Zone at a location, or the resolver's local zone when there is none."""
        if isinstance(location, Located):
            return self.resolver.zone_for_location(location.lat, location.lon)
        return self.resolver.local_zone

    def normalize_local(
        self, raw: Union[str, datetime], location: Location = UNLOCATED
    ) -> GeoInstant:
        """
        Attaches the correct offset to a wall-clock reading taken at `location`.

        "2024:12:18 17:16:00" taken on Maui becomes 2024-12-18T17:16:00-10:00.
        The offset is resolved for that date, so DST is handled per record.
        """
        wall = raw.replace(tzinfo=None) if isinstance(raw, datetime) else parse_local(raw)
        zone = self.zone_for(location)
        offset = self.resolver.utcoffset_for_wall_clock(zone, wall)
        return GeoInstant.from_local(wall, offset)

    def render_instant(self, instant: Instant, location: Location = UNLOCATED) -> GeoInstant:
        """Re-expresses an absolute instant as the wall clock at `location`."""
        zone = self.zone_for(location)
        utc = as_utc(instant)
        return GeoInstant(utc=utc, offset=self.resolver.utcoffset_at(zone, utc))

    def reconcile_device_bias(
        self,
        raw: Union[str, datetime],
        source_zone: str,
        dest_location: Location = UNLOCATED,
    ) -> GeoInstant:
        """
        Corrects a timestamp a device stamped in its own configured zone.

        The raw string is read as a wall clock in `source_zone`, turned into
        the instant it denotes, and that instant is rendered as the wall
        clock at `dest_location` (the true place of the event). A phone set
        to America/Los_Angeles that logs "2025-01-15 01:00:00" for a
        sighting in Taipei yields 2025-01-15T17:00:00+08:00.
        """
        wall = raw.replace(tzinfo=None) if isinstance(raw, datetime) else parse_local(raw)
        source_offset = self.resolver.utcoffset_for_wall_clock(source_zone, wall)
        instant = GeoInstant.from_local(wall, source_offset)
        reconciled = self.render_instant(instant, dest_location)
        logger.debug(
            f"Reconciled {wall.isoformat()}{format_offset(source_offset)} "
            f"({source_zone}) to {reconciled.isoformat()}"
        )
        return reconciled

    def parse_stored(self, text: str, location: Location = UNLOCATED) -> GeoInstant:
        """
        Reads a stored timestamp. Offset-annotated strings keep their offset;
        naive ones are localised at `location` like normalize_local.
        """
        try:
            return GeoInstant.parse(text)
        except TimestampFormatError:
            return self.normalize_local(text, location)

    def abbreviation(self, instant: GeoInstant, location: Location = UNLOCATED) -> str:
        """
        Short zone label for display, e.g. "HST" or "PDT".

        Falls back to a numeric label ("UTC+5:30") when the zone's
        abbreviation is itself numeric or its offset does not match the
        instant's recorded offset.
        """
        zone = self.zone_for(location)
        if self.resolver.utcoffset_at(zone, instant) == instant.offset:
            name = self.resolver.abbreviation(zone, instant)
            if name and name[0].isalpha():
                return name

        label = format_offset(instant.offset)
        hours, minutes = label[1:3].lstrip("0") or "0", label[4:6]
        return f"UTC{label[0]}{hours}" + (f":{minutes}" if minutes != "00" else "")
