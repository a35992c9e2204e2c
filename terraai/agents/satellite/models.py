# terraai/agents/satellite/models.py
"""
Pydantic models for the satellite-data provider (NASA POWER)
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from datetime import date

Trend = Literal["increasing", "decreasing", "stable"]


class SatelliteTrends(BaseModel):
    ndvi: Trend = "stable"
    soil_moisture: Trend = "stable"
    precipitation: Trend = "stable"
    temperature: Trend = "stable"


class SatelliteReading(BaseModel):
    ndvi: float = Field(..., ge=-1.0, le=1.0, description="Vegetation index proxy")
    soil_moisture: float = Field(..., ge=0.0, le=1.0, description="Root zone wetness (0-1)")
    precipitation: float = Field(..., ge=0.0, description="Precipitation (mm/day)")
    temperature: float = Field(..., description="Air temperature at 2 m (°C)")
    trends: SatelliteTrends = Field(default_factory=SatelliteTrends)
    available_fields: List[str] = Field(default_factory=list, description="Fields backed by live data")
    observed_on: Optional[date] = None
    source: str = "NASA POWER"
    simulated: bool = False

    def has_live(self, field: str) -> bool:
        return not self.simulated and field in self.available_fields
