import pytest
from datetime import timedelta

from outing_core.config import Thresholds
from outing_core.matching import OutingMatcher, find_matching_outing, window_gap
from outing_core.models import UNLOCATED, Cluster, GeoInstant, Located, Outing

SEATTLE = Located(47.6, -122.4)
THREE_KM_NORTH = Located(47.627, -122.4)
EIGHT_KM_NORTH = Located(47.672, -122.4)
TWENTY_KM_NORTH = Located(47.78, -122.4)
SIXTY_KM_NORTH = Located(48.14, -122.4)

OUTING = Outing(
    id="outing-1",
    start=GeoInstant.parse("2025-06-10T08:00:00-07:00"),
    end=GeoInstant.parse("2025-06-10T10:00:00-07:00"),
    location=SEATTLE,
)


def make_cluster(start, end, center=UNLOCATED):
    return Cluster(
        members=(),
        start=GeoInstant.parse(start),
        end=GeoInstant.parse(end),
        center=center,
    )


# 2 hours after the outing ends
LATER = ("2025-06-10T12:00:00-07:00", "2025-06-10T12:30:00-07:00")
# 15 minutes after the outing ends
SOON = ("2025-06-10T10:15:00-07:00", "2025-06-10T11:00:00-07:00")


@pytest.fixture
def matcher():
    return OutingMatcher(Thresholds())


class TestNormalThreshold:
    def test_far_and_not_tight_in_time(self, matcher):
        """Test 8 km apart and 2 hours apart does not match."""
        cluster = make_cluster(*LATER, center=EIGHT_KM_NORTH)
        assert matcher.find_match(cluster, [OUTING]) is None

    def test_near_and_not_tight_in_time(self, matcher):
        """Test 3 km apart and 2 hours apart matches."""
        cluster = make_cluster(*LATER, center=THREE_KM_NORTH)
        assert matcher.find_match(cluster, [OUTING]) is OUTING


class TestRelaxedThreshold:
    def test_twenty_km_within_tight_window(self, matcher):
        """Test 20 km apart within 30 minutes matches under the relaxed bound."""
        cluster = make_cluster(*SOON, center=TWENTY_KM_NORTH)
        assert matcher.find_match(cluster, [OUTING]) is OUTING

    def test_twenty_km_outside_tight_window(self, matcher):
        """Test 20 km apart with a 2 hour gap uses the normal bound."""
        cluster = make_cluster(*LATER, center=TWENTY_KM_NORTH)
        assert matcher.find_match(cluster, [OUTING]) is None

    def test_sixty_km_exceeds_relaxed_cap(self, matcher):
        """Test 60 km apart within 30 minutes still does not match."""
        cluster = make_cluster(*SOON, center=SIXTY_KM_NORTH)
        assert matcher.find_match(cluster, [OUTING]) is None

    def test_overlapping_windows_are_tight(self, matcher):
        """Test a cluster inside the outing window gets the relaxed bound."""
        cluster = make_cluster("2025-06-10T08:30:00-07:00", "2025-06-10T09:00:00-07:00", TWENTY_KM_NORTH)

        assert window_gap(cluster, OUTING) == timedelta(0)
        assert matcher.distance_limit(cluster, OUTING) == 50.0
        assert matcher.find_match(cluster, [OUTING]) is OUTING

    def test_gap_exactly_tight_window(self, matcher):
        """Test a gap of exactly 30 minutes still counts as tight."""
        cluster = make_cluster("2025-06-10T10:30:00-07:00", "2025-06-10T11:00:00-07:00", TWENTY_KM_NORTH)
        assert matcher.find_match(cluster, [OUTING]) is OUTING

    def test_gap_before_outing(self, matcher):
        """Test the tight window applies to clusters before the outing too."""
        cluster = make_cluster("2025-06-10T07:00:00-07:00", "2025-06-10T07:45:00-07:00", TWENTY_KM_NORTH)

        assert window_gap(cluster, OUTING) == timedelta(minutes=15)
        assert matcher.find_match(cluster, [OUTING]) is OUTING


class TestTemporalOverlap:
    def test_too_late(self, matcher):
        """Test a cluster starting 6 hours after the outing ends does not match."""
        cluster = make_cluster("2025-06-10T16:00:00-07:00", "2025-06-10T17:00:00-07:00", SEATTLE)
        assert matcher.find_match(cluster, [OUTING]) is None

    def test_too_early(self, matcher):
        """Test a cluster ending 6 hours before the outing starts does not match."""
        cluster = make_cluster("2025-06-10T01:00:00-07:00", "2025-06-10T02:00:00-07:00", SEATTLE)
        assert matcher.find_match(cluster, [OUTING]) is None

    def test_exactly_threshold_after(self, matcher):
        """Test a cluster starting exactly 5 hours after the outing ends matches."""
        cluster = make_cluster("2025-06-10T15:00:00-07:00", "2025-06-10T15:30:00-07:00", SEATTLE)
        assert matcher.find_match(cluster, [OUTING]) is OUTING

    def test_compares_instants_across_offsets(self, matcher):
        """Test a cluster stamped in another offset is compared by instant."""
        # 17:30 UTC == 10:30 PDT, 30 minutes after the outing
        cluster = make_cluster("2025-06-10T17:30:00+00:00", "2025-06-10T18:00:00+00:00", TWENTY_KM_NORTH)
        assert matcher.find_match(cluster, [OUTING]) is OUTING


class TestMissingLocation:
    def test_unlocated_cluster(self, matcher):
        """Test that a cluster without GPS matches on time alone."""
        cluster = make_cluster(*LATER)
        assert matcher.find_match(cluster, [OUTING]) is OUTING

    def test_unlocated_outing(self, matcher):
        """Test that an outing without GPS matches on time alone."""
        outing = Outing("outing-2", OUTING.start, OUTING.end)
        cluster = make_cluster(*LATER, center=SIXTY_KM_NORTH)
        assert matcher.find_match(cluster, [outing]) is outing


class TestFirstMatch:
    def test_returns_first_qualifying_in_input_order(self, matcher):
        """Test that the first qualifying outing wins, not the closest."""
        far_but_first = Outing("first", OUTING.start, OUTING.end, TWENTY_KM_NORTH)
        close_but_second = Outing("second", OUTING.start, OUTING.end, SEATTLE)
        cluster = make_cluster(*SOON, center=SEATTLE)

        assert matcher.find_match(cluster, [far_but_first, close_but_second]) is far_but_first

    def test_skips_non_qualifying(self, matcher):
        """Test that non-qualifying outings are skipped."""
        elsewhere = Outing("elsewhere", OUTING.start, OUTING.end, SIXTY_KM_NORTH)
        cluster = make_cluster(*SOON, center=SEATTLE)

        assert matcher.find_match(cluster, [elsewhere, OUTING]) is OUTING

    def test_no_outings(self, matcher):
        """Test that an empty list gives no match."""
        assert matcher.find_match(make_cluster(*SOON), []) is None

    def test_does_not_modify_outings(self, matcher):
        """Test the outings list is left untouched."""
        outings = [OUTING]
        matcher.find_match(make_cluster(*SOON), outings)
        assert outings == [OUTING]


class TestAssign:
    def test_pairs_each_cluster(self, matcher):
        """Test assign returns one pair per cluster in order."""
        near = make_cluster(*SOON, center=SEATTLE)
        far = make_cluster(*SOON, center=SIXTY_KM_NORTH)

        pairs = matcher.assign([near, far], [OUTING])

        assert pairs == [(near, OUTING), (far, None)]

    def test_module_shortcut(self):
        """Test find_matching_outing with custom thresholds."""
        cluster = make_cluster(*LATER, center=EIGHT_KM_NORTH)

        assert find_matching_outing(cluster, [OUTING], Thresholds(distance_km=10.0)) is OUTING
        assert find_matching_outing(cluster, [OUTING], Thresholds()) is None
