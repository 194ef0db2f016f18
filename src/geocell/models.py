"""models.py

Immutable value types shared by the cell algebra, the cover search and the
in-memory index.

Both models are frozen pydantic models: they validate coordinate ranges on
construction, compare by value and are hashable.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0


class Point(BaseModel):
    """A WGS-84 position in decimal degrees.

    Attributes:
        lat: Latitude, ``-90 <= lat <= 90``.
        lon: Longitude, ``-180 <= lon <= 180``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    lat: float = Field(ge=MIN_LATITUDE, le=MAX_LATITUDE)
    lon: float = Field(ge=MIN_LONGITUDE, le=MAX_LONGITUDE)


class BoundingBox(BaseModel):
    """A latitude/longitude rectangle given by its four edges.

    ``south <= north`` is enforced.  ``west > east`` is accepted and marks a
    box that crosses the antimeridian; use :meth:`split_antimeridian` to get
    the equivalent non-crossing boxes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    north: float = Field(ge=MIN_LATITUDE, le=MAX_LATITUDE)
    east: float = Field(ge=MIN_LONGITUDE, le=MAX_LONGITUDE)
    south: float = Field(ge=MIN_LATITUDE, le=MAX_LATITUDE)
    west: float = Field(ge=MIN_LONGITUDE, le=MAX_LONGITUDE)

    @model_validator(mode="after")
    def _check_latitude_order(self) -> "BoundingBox":
        if self.south > self.north:
            raise ValueError(
                f"south ({self.south}) must not be greater than north ({self.north})"
            )
        return self

    @property
    def north_east(self) -> Point:
        return Point(lat=self.north, lon=self.east)

    @property
    def south_west(self) -> Point:
        return Point(lat=self.south, lon=self.west)

    @property
    def crosses_antimeridian(self) -> bool:
        return self.west > self.east

    def contains(self, point: Point) -> bool:
        """Return True if *point* lies inside the box, edges included."""
        if not self.south <= point.lat <= self.north:
            return False
        if self.crosses_antimeridian:
            return point.lon >= self.west or point.lon <= self.east
        return self.west <= point.lon <= self.east

    def split_antimeridian(self) -> List["BoundingBox"]:
        """Return the non-crossing boxes that together equal this box.

        A box that does not cross the antimeridian is returned unchanged as
        the only element.
        """
        if not self.crosses_antimeridian:
            return [self]
        return [
            BoundingBox(north=self.north, east=self.east, south=self.south, west=MIN_LONGITUDE),
            BoundingBox(north=self.north, east=MAX_LONGITUDE, south=self.south, west=self.west),
        ]
