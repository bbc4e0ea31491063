import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Tuple, Union

from .errors import TimestampFormatError

OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

STAMP_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?"
    r"(Z|[+-]\d{2}:?\d{2})$"
)


def format_offset(delta: timedelta) -> str:
    """Renders a UTC offset as "+HH:MM" / "-HH:MM" (seconds are dropped)."""
    seconds = int(delta.total_seconds())
    sign = "+" if seconds >= 0 else "-"
    hh, mm = divmod(abs(seconds) // 60, 60)
    return f"{sign}{hh:02d}:{mm:02d}"


def parse_offset(text: str) -> timedelta:
    """Parses "+HH:MM", "-HHMM" or "Z" into a timedelta."""
    if text == "Z":
        return timedelta(0)
    m = OFFSET_RE.match(text)
    if not m:
        raise TimestampFormatError(f"Invalid UTC offset: {text!r}")
    sign = 1 if m.group(1) == "+" else -1
    return sign * timedelta(hours=int(m.group(2)), minutes=int(m.group(3)))


@dataclass(frozen=True)
class GeoInstant:
    """
    An absolute instant paired with the UTC offset in force where it was observed.

    `utc` is always timezone-aware UTC. Ordering compares the instant only,
    so two readings of the same moment from different zones sort together.
    """

    utc: datetime
    offset: timedelta = timedelta(0)

    def __post_init__(self):
        if self.utc.tzinfo is None:
            raise ValueError("GeoInstant.utc must be timezone-aware")
        if self.utc.utcoffset() != timedelta(0):
            object.__setattr__(self, "utc", self.utc.astimezone(timezone.utc))

    @classmethod
    def from_local(cls, wall_clock: datetime, offset: timedelta) -> "GeoInstant":
        """Builds an instant from a naive wall-clock reading and its offset."""
        naive = wall_clock.replace(tzinfo=None)
        return cls(utc=(naive - offset).replace(tzinfo=timezone.utc), offset=offset)

    @classmethod
    def parse(cls, text: str) -> "GeoInstant":
        """Parses an offset-annotated timestamp such as 2024-12-18T17:16:00-10:00."""
        m = STAMP_RE.match(text.strip()) if isinstance(text, str) else None
        if not m:
            raise TimestampFormatError(f"Not an offset-annotated timestamp: {text!r}")
        try:
            wall = datetime(
                int(m.group(1)), int(m.group(2)), int(m.group(3)),
                int(m.group(4)), int(m.group(5)), int(m.group(6) or 0),
            )
        except ValueError as e:
            raise TimestampFormatError(f"Invalid timestamp {text!r}: {e}") from e
        return cls.from_local(wall, parse_offset(m.group(7)))

    @property
    def local(self) -> datetime:
        """Wall-clock reading at the place of observation (naive)."""
        return (self.utc + self.offset).replace(tzinfo=None)

    @property
    def offset_string(self) -> str:
        return format_offset(self.offset)

    def isoformat(self) -> str:
        return self.local.strftime("%Y-%m-%dT%H:%M:%S") + self.offset_string

    def __str__(self):
        return self.isoformat()

    def __lt__(self, other: "GeoInstant") -> bool:
        return self.utc < other.utc

    def __le__(self, other: "GeoInstant") -> bool:
        return self.utc <= other.utc

    def __gt__(self, other: "GeoInstant") -> bool:
        return self.utc > other.utc

    def __ge__(self, other: "GeoInstant") -> bool:
        return self.utc >= other.utc

    def __sub__(self, other: "GeoInstant") -> timedelta:
        return self.utc - other.utc


@dataclass(frozen=True)
class Located:
    """A GPS fix in decimal degrees."""

    lat: float
    lon: float

    def as_pair(self) -> List[float]:
        return [self.lat, self.lon]


@dataclass(frozen=True)
class Unlocated:
    """No GPS fix."""

    def __bool__(self):
        return False


UNLOCATED = Unlocated()

Location = Union[Located, Unlocated]


def location_of(lat: Optional[float], lon: Optional[float]) -> Location:
    """Located when both coordinates are present, otherwise UNLOCATED."""
    if lat is None or lon is None:
        return UNLOCATED
    return Located(float(lat), float(lon))


@dataclass(frozen=True)
class PhotoRecord:
    """A photo or sighting as captured: optional instant, optional location."""

    id: Any
    instant: Optional[GeoInstant] = None
    location: Location = UNLOCATED

    @property
    def is_timed(self) -> bool:
        return self.instant is not None


@dataclass(frozen=True)
class Outing:
    """A recorded outing read from the persistence layer."""

    id: Any
    start: GeoInstant
    end: GeoInstant
    location: Location = UNLOCATED


@dataclass(frozen=True)
class Cluster:
    """A candidate outing: records grouped by time and place."""

    members: Tuple[PhotoRecord, ...]
    start: GeoInstant
    end: GeoInstant
    center: Location = UNLOCATED

    @property
    def ids(self) -> List[Any]:
        return [m.id for m in self.members]

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_located(self) -> bool:
        return isinstance(self.center, Located)

    def __len__(self):
        return len(self.members)

    def to_outing(self, outing_id: Any) -> Outing:
        """The Outing value a caller would persist for this cluster."""
        return Outing(id=outing_id, start=self.start, end=self.end, location=self.center)
