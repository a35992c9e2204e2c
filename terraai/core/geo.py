# terraai/core/geo.py
"""
Coordinate validation, bounding boxes and date windows shared by the providers
"""
import math
from datetime import date, timedelta
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .exceptions import InvalidCoordinateError

KM_PER_DEGREE = 111.32

# Contiguous US, used to skip CONUS-only collections elsewhere
CONUS_BOUNDS = {"west": -125.0, "east": -65.0, "south": 20.0, "north": 50.0}


class Location(BaseModel):
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)


class DateRange(BaseModel):
    start: date
    end: date

    @model_validator(mode="after")
    def _ordered(self):
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self

    @classmethod
    def last_days(cls, days: int, today: Optional[date] = None) -> "DateRange":
        end = today or date.today()
        return cls(start=end - timedelta(days=days), end=end)

    def to_stac(self) -> str:
        return f"{self.start.isoformat()}/{self.end.isoformat()}"

    def to_power(self) -> dict:
        return {"start": self.start.strftime("%Y%m%d"), "end": self.end.strftime("%Y%m%d")}


def validate_coordinates(longitude, latitude) -> Location:
    """Return a Location or raise InvalidCoordinateError."""
    if longitude is None or latitude is None:
        raise InvalidCoordinateError(longitude, latitude, "longitude and latitude are required")
    try:
        lon = float(longitude)
        lat = float(latitude)
    except (TypeError, ValueError):
        raise InvalidCoordinateError(longitude, latitude, "not numeric")
    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise InvalidCoordinateError(longitude, latitude, "not finite")
    if not -180.0 <= lon <= 180.0:
        raise InvalidCoordinateError(longitude, latitude, "longitude must be within [-180, 180]")
    if not -90.0 <= lat <= 90.0:
        raise InvalidCoordinateError(longitude, latitude, "latitude must be within [-90, 90]")
    return Location(longitude=lon, latitude=lat)


def create_bounding_box(longitude: float, latitude: float, buffer_km: float) -> List[float]:
    """
    Square bbox ``[west, south, east, north]`` around a point.

    Uses a flat ``buffer_km / 111.32`` degree offset on both axes. Good
    enough at farm scale; it widens in real distance toward the poles.
    """
    delta = buffer_km / KM_PER_DEGREE
    return [longitude - delta, latitude - delta, longitude + delta, latitude + delta]


def is_within_conus(longitude: float, latitude: float) -> bool:
    return (
        CONUS_BOUNDS["west"] <= longitude <= CONUS_BOUNDS["east"]
        and CONUS_BOUNDS["south"] <= latitude <= CONUS_BOUNDS["north"]
    )
