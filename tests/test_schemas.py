import pytest
from pydantic import ValidationError

from outing_core.errors import TimestampFormatError
from outing_core.models import UNLOCATED, Located
from outing_core.schemas import OutingIn, PhotoIn


class TestPhotoIn:
    def test_offset_annotated_photo(self):
        """Test the photo-upload shape with exifTime and gps."""
        photo = PhotoIn.model_validate(
            {"id": "p1", "exifTime": "2024-12-18T17:16:00-10:00", "gps": {"lat": 20.68, "lon": -156.44}}
        )

        record = photo.to_record()

        assert record.id == "p1"
        assert record.instant.isoformat() == "2024-12-18T17:16:00-10:00"
        assert record.location == Located(20.68, -156.44)

    def test_naive_photo_needs_codec(self, codec):
        """Test that naive timestamps are localised with a codec."""
        photo = PhotoIn.model_validate(
            {"instant": "2024:12:18 17:16:00", "location": {"lat": 20.682568, "lng": -156.442741}}
        )

        with pytest.raises(TimestampFormatError):
            photo.to_record()

        record = photo.to_record(codec, default_id=7)
        assert record.id == 7
        assert record.instant.isoformat() == "2024-12-18T17:16:00-10:00"

    def test_photo_without_metadata(self):
        """Test a photo with neither timestamp nor GPS."""
        record = PhotoIn.model_validate({"id": 3}).to_record()

        assert record.instant is None
        assert record.location is UNLOCATED

    def test_flat_coordinates(self):
        """Test top-level lat/lon are folded into a location."""
        photo = PhotoIn.model_validate({"lat": 47.6, "lon": -122.4})
        assert photo.to_location() == Located(47.6, -122.4)

    def test_bad_coordinates_type(self):
        """Test that non-numeric coordinates are rejected."""
        with pytest.raises(ValidationError):
            PhotoIn.model_validate({"gps": {"lat": "north", "lon": 1.0}})


class TestOutingIn:
    def test_stored_outing_row(self):
        """Test the stored outing shape with flat coordinates."""
        outing = OutingIn.model_validate(
            {
                "id": "o1",
                "startTime": "2025-06-10T08:00:00-07:00",
                "endTime": "2025-06-10T10:00:00-07:00",
                "lat": 47.6,
                "lon": -122.4,
            }
        ).to_outing()

        assert outing.id == "o1"
        assert outing.start.isoformat() == "2025-06-10T08:00:00-07:00"
        assert outing.end.isoformat() == "2025-06-10T10:00:00-07:00"
        assert outing.location == Located(47.6, -122.4)

    def test_outing_without_location(self):
        """Test an outing with no coordinates."""
        outing = OutingIn.model_validate(
            {"id": 2, "start": "2025-06-10T08:00:00Z", "end": "2025-06-10T09:00:00Z"}
        ).to_outing()

        assert outing.location is UNLOCATED

    def test_naive_times_rejected(self):
        """Test that stored outing times must carry an offset."""
        with pytest.raises(ValidationError):
            OutingIn.model_validate(
                {"id": "o1", "startTime": "2025-06-10 08:00:00", "endTime": "2025-06-10 10:00:00"}
            )

    def test_missing_end_rejected(self):
        """Test that both ends of the window are required."""
        with pytest.raises(ValidationError):
            OutingIn.model_validate({"id": "o1", "startTime": "2025-06-10T08:00:00-07:00"})
