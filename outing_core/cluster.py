import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence

from .config import Thresholds
from .geo import center_of, distance_between
from .models import Cluster, GeoInstant, PhotoRecord

logger = logging.getLogger(__name__)


def _utc_now() -> GeoInstant:
    return GeoInstant(utc=datetime.now(timezone.utc))


def sort_records(records: Iterable[PhotoRecord]) -> List[PhotoRecord]:
    """
    Sorts records by instant.

    Untimed records keep their place relative to the timed record that
    precedes them in the input (or stay at the front if none does), so
    they ride along with whatever cluster is open at that point.
    """
    keyed = []
    anchor = (0,)
    for record in records:
        if record.instant is not None:
            anchor = (1, record.instant.utc)
        keyed.append((anchor, record))

    # sorted() is stable, ties keep input order
    keyed = sorted(keyed, key=lambda pair: pair[0])
    return [record for _, record in keyed]


class PhotoClusterer:
    """
    Groups records into candidate outings with a single pass over the
    time-sorted input.

    A new cluster starts when the gap to the last timed member exceeds
    `thresholds.time`, or when both records carry GPS and are more than
    `thresholds.distance_km` apart. Untimed records never start or close
    a cluster.

    Both checks compare against the last *timed* member, not the last
    member: an untimed record in between is skipped over. So for
    a(0h, Seattle), b(untimed, no GPS), c(1h, Portland), c is measured
    against a and opens a new cluster, giving [a, b] and [c].
    """

    def __init__(
        self,
        thresholds: Optional[Thresholds] = None,
        clock: Callable[[], GeoInstant] = _utc_now,
    ):
        self.thresholds = thresholds or Thresholds.from_settings()
        self.clock = clock

    def should_split(self, anchor: Optional[PhotoRecord], record: PhotoRecord) -> bool:
        """Whether `record` starts a new cluster after `anchor` (last timed member)."""
        if anchor is None or record.instant is None or anchor.instant is None:
            return False

        gap = record.instant - anchor.instant
        if gap > self.thresholds.time:
            logger.debug(f"Split before {record.id}: gap {gap} exceeds {self.thresholds.time}")
            return True

        distance = distance_between(anchor.location, record.location)
        if distance is not None and distance > self.thresholds.distance_km:
            logger.debug(
                f"Split before {record.id}: {distance:.2f} km from {anchor.id} "
                f"exceeds {self.thresholds.distance_km} km"
            )
            return True

        return False

    def build_cluster(self, members: Sequence[PhotoRecord]) -> Cluster:
        """Computes the time window and center of a closed group of records."""
        instants = [m.instant for m in members if m.instant is not None]
        if instants:
            start, end = min(instants), max(instants)
        else:
            start = end = self.clock()

        return Cluster(
            members=tuple(members),
            start=start,
            end=end,
            center=center_of(m.location for m in members),
        )

    def cluster(self, records: Iterable[PhotoRecord]) -> List[Cluster]:
        """
        Partitions records into clusters ordered by time.

        Args:
            records: Photo records in any order.

        Returns:
            A list of Cluster values. Every input record appears in exactly
            one cluster.
        """
        ordered = sort_records(records)
        if not ordered:
            return []

        groups: List[List[PhotoRecord]] = []
        current = [ordered[0]]
        anchor = ordered[0] if ordered[0].is_timed else None

        for record in ordered[1:]:
            if self.should_split(anchor, record):
                groups.append(current)
                current = [record]
            else:
                current.append(record)
            if record.is_timed:
                anchor = record

        groups.append(current)

        clusters = [self.build_cluster(group) for group in groups]
        logger.info(f"Clustered {len(ordered)} records into {len(clusters)} candidate outings")
        return clusters


def cluster_photos_into_outings(
    records: Iterable[PhotoRecord],
    thresholds: Optional[Thresholds] = None,
) -> List[Cluster]:
    """Shortcut for PhotoClusterer(thresholds).cluster(records)."""
    return PhotoClusterer(thresholds).cluster(records)
