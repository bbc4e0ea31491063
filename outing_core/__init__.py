# outing_core/__init__.py

from .config import Settings, Thresholds, settings
from .errors import MetadataError, OutingCoreError, TimestampFormatError, UnknownTimezoneError
from .models import (
    UNLOCATED,
    Cluster,
    GeoInstant,
    Located,
    Location,
    Outing,
    PhotoRecord,
    Unlocated,
    format_offset,
    location_of,
    parse_offset,
)
from .timezone import TimezoneResolver
from .timestamps import OffsetTimestampCodec, parse_local
from .geo import generate_outing_track, haversine_distance
from .cluster import PhotoClusterer, cluster_photos_into_outings
from .matching import OutingMatcher, find_matching_outing
from .exif import extract_exif, extract_photo_record
from .schemas import LocationIn, OutingIn, PhotoIn
from .log import setup_logging

__all__ = [
    "Settings",
    "Thresholds",
    "settings",
    "OutingCoreError",
    "TimestampFormatError",
    "UnknownTimezoneError",
    "MetadataError",
    "GeoInstant",
    "Located",
    "Unlocated",
    "UNLOCATED",
    "Location",
    "PhotoRecord",
    "Cluster",
    "Outing",
    "format_offset",
    "parse_offset",
    "location_of",
    "TimezoneResolver",
    "OffsetTimestampCodec",
    "parse_local",
    "haversine_distance",
    "generate_outing_track",
    "PhotoClusterer",
    "cluster_photos_into_outings",
    "OutingMatcher",
    "find_matching_outing",
    "extract_exif",
    "extract_photo_record",
    "LocationIn",
    "PhotoIn",
    "OutingIn",
    "setup_logging",
]
