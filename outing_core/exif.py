import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import piexif
from PIL import ExifTags, Image, UnidentifiedImageError

from .errors import MetadataError, TimestampFormatError
from .models import GeoInstant, PhotoRecord, location_of, parse_offset
from .timestamps import OffsetTimestampCodec, parse_local

logger = logging.getLogger(__name__)

PIEXIF_EXTENSIONS = {".jpg", ".jpeg", ".tif", ".tiff"}
PILLOW_EXTENSIONS = {".png", ".webp"}

# EXIF tag ids, shared by piexif and Pillow
DATETIME_ORIGINAL = 36867
OFFSET_TIME_ORIGINAL = 36881
GPS_LATITUDE_REF, GPS_LATITUDE = 1, 2
GPS_LONGITUDE_REF, GPS_LONGITUDE = 3, 4


def _as_float(value: Any) -> float:
    # piexif gives (numerator, denominator) pairs, Pillow gives IFDRational
    if isinstance(value, tuple):
        return value[0] / value[1]
    return float(value)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    return value.strip("\x00 ") or None


def _convert_gps_to_decimal(gps_coord: Optional[Tuple[Any, ...]], gps_ref: Any) -> Optional[float]:
    """Converts GPS coordinates from EXIF format (degrees, minutes, seconds) to decimal degrees."""
    ref = _as_text(gps_ref)
    if not gps_coord or not ref:
        return None

    try:
        degrees = _as_float(gps_coord[0])
        minutes = _as_float(gps_coord[1])
        seconds = _as_float(gps_coord[2])

        decimal = degrees + minutes / 60 + seconds / 3600

        if ref.upper() in ["S", "W"]:
            decimal = -decimal

        return decimal
    except (IndexError, ZeroDivisionError, TypeError, ValueError) as e:
        logger.warning(f"Could not parse GPS coordinate: {e}")
        return None


def _read_with_piexif(file_path: Path) -> Tuple[Dict[int, Any], Dict[int, Any]]:
    exif_dict = piexif.load(str(file_path))
    return exif_dict.get("Exif", {}) or {}, exif_dict.get("GPS", {}) or {}


def _read_with_pillow(file_path: Path) -> Tuple[Dict[int, Any], Dict[int, Any]]:
    with Image.open(file_path) as img:
        exif = img.getexif()
        return dict(exif.get_ifd(ExifTags.IFD.Exif)), dict(exif.get_ifd(ExifTags.IFD.GPSInfo))


def extract_exif(file_path: Path) -> Dict[str, Any]:
    """
    Extracts the raw capture fields from an image file.

    Args:
        file_path: Path to the file.

    Returns:
        A dictionary with DateTimeOriginal, OffsetTimeOriginal, GPSLat and
        GPSLong (each None when absent or unreadable).

    Raises:
        MetadataError: If the file does not exist.
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise MetadataError(f"File not found: {file_path}")

    suffix = file_path.suffix.lower()
    result: Dict[str, Any] = {
        "FileName": file_path.name,
        "DateTimeOriginal": None,
        "OffsetTimeOriginal": None,
        "GPSLat": None,
        "GPSLong": None,
    }

    try:
        if suffix in PIEXIF_EXTENSIONS:
            exif_ifd, gps_ifd = _read_with_piexif(file_path)
        elif suffix in PILLOW_EXTENSIONS:
            exif_ifd, gps_ifd = _read_with_pillow(file_path)
        else:
            logger.debug(f"Unsupported file type for EXIF extraction: {file_path.name}")
            return result
    except (piexif.InvalidImageDataError, UnidentifiedImageError, ValueError, OSError) as e:
        logger.warning(f"Failed to read EXIF for {file_path.name}: {e}")
        return result

    result["DateTimeOriginal"] = _as_text(exif_ifd.get(DATETIME_ORIGINAL))
    result["OffsetTimeOriginal"] = _as_text(exif_ifd.get(OFFSET_TIME_ORIGINAL))

    if gps_ifd:
        result["GPSLat"] = _convert_gps_to_decimal(
            gps_ifd.get(GPS_LATITUDE), gps_ifd.get(GPS_LATITUDE_REF)
        )
        result["GPSLong"] = _convert_gps_to_decimal(
            gps_ifd.get(GPS_LONGITUDE), gps_ifd.get(GPS_LONGITUDE_REF)
        )

    return result


def extract_photo_record(
    file_path: Path,
    codec: Optional[OffsetTimestampCodec] = None,
    record_id: Any = None,
) -> PhotoRecord:
    """
    Reads a file's capture time and GPS fix into a PhotoRecord.

    An OffsetTimeOriginal tag written by the camera is trusted as is.
    Otherwise the naive DateTimeOriginal is localised at the photo's GPS
    location (or the codec's local zone when there is no fix).
    """
    metadata = extract_exif(file_path)
    location = location_of(metadata["GPSLat"], metadata["GPSLong"])
    record_id = record_id if record_id is not None else metadata["FileName"]

    raw = metadata["DateTimeOriginal"]
    if not raw:
        return PhotoRecord(id=record_id, location=location)

    try:
        if metadata["OffsetTimeOriginal"]:
            instant = GeoInstant.from_local(
                parse_local(raw), parse_offset(metadata["OffsetTimeOriginal"])
            )
        else:
            instant = (codec or OffsetTimestampCodec()).normalize_local(raw, location)
    except TimestampFormatError as e:
        logger.warning(f"Could not parse capture time for {metadata['FileName']}: {e}")
        instant = None

    return PhotoRecord(id=record_id, instant=instant, location=location)
