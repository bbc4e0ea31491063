import pytest

from outing_core.timezone import TimezoneResolver
from outing_core.timestamps import OffsetTimestampCodec


@pytest.fixture
def resolver():
    """Resolver pinned to UTC so no test depends on the host zone."""
    return TimezoneResolver(local_zone="UTC")


@pytest.fixture
def codec(resolver):
    return OffsetTimestampCodec(resolver)
