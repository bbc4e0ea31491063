import math
from typing import Iterable, List, Optional

from .models import UNLOCATED, Located, Location, PhotoRecord

EARTH_RADIUS_KM = 6371.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two points."""
    lat1_rad, lon1_rad = math.radians(lat1), math.radians(lon1)
    lat2_rad, lon2_rad = math.radians(lat2), math.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_between(a: Location, b: Location) -> Optional[float]:
    """Distance between two locations, or None unless both are Located."""
    if isinstance(a, Located) and isinstance(b, Located):
        return haversine_distance(a.lat, a.lon, b.lat, b.lon)
    return None


def center_of(locations: Iterable[Location]) -> Location:
    """Arithmetic mean of the Located entries; UNLOCATED if there are none."""
    points = [loc for loc in locations if isinstance(loc, Located)]
    if not points:
        return UNLOCATED
    return Located(
        sum(p.lat for p in points) / len(points),
        sum(p.lon for p in points) / len(points),
    )


def generate_outing_track(records: Iterable[PhotoRecord]) -> Optional[List[List[float]]]:
    """
    Generates a GPS track (list of [lat, lon] coordinates) for an outing.

    Args:
        records: Records from the same outing, in capture order.

    Returns:
        A list of [latitude, longitude] coordinates, or None if no GPS data.
    """
    track_points = [
        r.location.as_pair() for r in records if isinstance(r.location, Located)
    ]
    return track_points if track_points else None
