from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .errors import TimestampFormatError
from .models import UNLOCATED, GeoInstant, Located, Location, Outing, PhotoRecord
from .timestamps import OffsetTimestampCodec


class LocationIn(BaseModel):
    """A {lat, lon} pair as sent by the upload and import layers."""

    lat: float
    lon: float = Field(validation_alias=AliasChoices("lon", "lng"))

    def to_location(self) -> Located:
        return Located(self.lat, self.lon)


def _fold_flat_coordinates(data: Any) -> Any:
    # Stored outings carry lat/lon as top-level columns
    if isinstance(data, dict) and data.get("location") is None and data.get("gps") is None:
        lat, lon = data.get("lat"), data.get("lon", data.get("lng"))
        if lat is not None and lon is not None:
            data = {**data, "location": {"lat": lat, "lon": lon}}
    return data


class PhotoIn(BaseModel):
    """Photo metadata: an optional timestamp and an optional GPS fix."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[Union[int, str]] = None
    instant: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("instant", "exifTime", "exif_time")
    )
    location: Optional[LocationIn] = Field(
        default=None, validation_alias=AliasChoices("location", "gps")
    )

    @model_validator(mode="before")
    @classmethod
    def flat_coordinates(cls, data: Any) -> Any:
        return _fold_flat_coordinates(data)

    def to_location(self) -> Location:
        return self.location.to_location() if self.location else UNLOCATED

    def to_record(
        self,
        codec: Optional[OffsetTimestampCodec] = None,
        default_id: Any = None,
    ) -> PhotoRecord:
        """
        Converts to a PhotoRecord, parsing the timestamp once.

        Naive timestamps are localised at the photo's location with `codec`;
        without a codec only offset-annotated timestamps are accepted.
        """
        location = self.to_location()
        instant = None
        if self.instant:
            if codec is not None:
                instant = codec.parse_stored(self.instant, location)
            else:
                instant = GeoInstant.parse(self.instant)
        record_id = self.id if self.id is not None else default_id
        return PhotoRecord(id=record_id, instant=instant, location=location)


class OutingIn(BaseModel):
    """An existing outing row as read from storage."""

    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str]
    start: str = Field(validation_alias=AliasChoices("start", "startTime", "start_time", "startInstant"))
    end: str = Field(validation_alias=AliasChoices("end", "endTime", "end_time", "endInstant"))
    location: Optional[LocationIn] = Field(
        default=None, validation_alias=AliasChoices("location", "gps")
    )

    @model_validator(mode="before")
    @classmethod
    def flat_coordinates(cls, data: Any) -> Any:
        return _fold_flat_coordinates(data)

    @model_validator(mode="after")
    def offset_annotated(self) -> "OutingIn":
        for value in (self.start, self.end):
            try:
                GeoInstant.parse(value)
            except TimestampFormatError as e:
                raise ValueError(str(e)) from e
        return self

    def to_outing(self) -> Outing:
        return Outing(
            id=self.id,
            start=GeoInstant.parse(self.start),
            end=GeoInstant.parse(self.end),
            location=self.location.to_location() if self.location else UNLOCATED,
        )
