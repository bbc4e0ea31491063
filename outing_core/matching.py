import logging
from datetime import timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import Thresholds
from .geo import distance_between
from .models import Cluster, Outing

logger = logging.getLogger(__name__)


def window_gap(cluster: Cluster, outing: Outing) -> timedelta:
    """Time between the cluster's and the outing's windows; zero if they overlap."""
    return max(cluster.start - outing.end, outing.start - cluster.end, timedelta(0))


class OutingMatcher:
    """
    Decides whether a candidate cluster belongs to an already recorded outing.

    Match criteria:
    - the cluster falls within the outing window padded by `thresholds.time`
    - if both sides have GPS, the centers are within `thresholds.distance_km`,
      or within `thresholds.relaxed_distance_km` when the two windows are no
      more than `thresholds.tight_window` apart (a checklist app may report
      the lodge while the photos carry the field location)
    """

    def __init__(self, thresholds: Optional[Thresholds] = None):
        self.thresholds = thresholds or Thresholds.from_settings()

    def overlaps_in_time(self, cluster: Cluster, outing: Outing) -> bool:
        pad = self.thresholds.time
        return (
            cluster.start.utc <= outing.end.utc + pad
            and cluster.end.utc >= outing.start.utc - pad
        )

    def distance_limit(self, cluster: Cluster, outing: Outing) -> float:
        """Spatial bound for this pair, relaxed when the windows are tight."""
        if window_gap(cluster, outing) <= self.thresholds.tight_window:
            return self.thresholds.relaxed_distance_km
        return self.thresholds.distance_km

    def is_near(self, cluster: Cluster, outing: Outing) -> bool:
        distance = distance_between(cluster.center, outing.location)
        if distance is None:
            return True
        limit = self.distance_limit(cluster, outing)
        if distance > limit:
            logger.debug(f"Outing {outing.id} is {distance:.2f} km away (limit {limit} km)")
            return False
        return True

    def find_match(self, cluster: Cluster, outings: Iterable[Outing]) -> Optional[Outing]:
        """
        Returns the first outing, in input order, that the cluster matches.

        Args:
            cluster: A candidate outing from the clusterer.
            outings: Existing outings, searched but never modified.

        Returns:
            The matching Outing, or None.
        """
        for outing in outings:
            if not self.overlaps_in_time(cluster, outing):
                continue
            if not self.is_near(cluster, outing):
                continue
            logger.debug(f"Cluster {cluster.start.isoformat()} matches outing {outing.id}")
            return outing
        return None

    def assign(
        self, clusters: Iterable[Cluster], outings: Sequence[Outing]
    ) -> List[Tuple[Cluster, Optional[Outing]]]:
        """Pairs each cluster with its matching outing (or None)."""
        pairs = [(cluster, self.find_match(cluster, outings)) for cluster in clusters]
        matched = sum(1 for _, outing in pairs if outing is not None)
        logger.info(f"Matched {matched} of {len(pairs)} clusters to existing outings")
        return pairs


def find_matching_outing(
    cluster: Cluster,
    outings: Iterable[Outing],
    thresholds: Optional[Thresholds] = None,
) -> Optional[Outing]:
    """Shortcut for OutingMatcher(thresholds).find_match(cluster, outings)."""
    return OutingMatcher(thresholds).find_match(cluster, outings)
