# terraai/agents/imagery/models.py
"""
Pydantic models for the high-resolution imagery provider (STAC search)
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any


class StacItem(BaseModel):
    """The parts of a STAC feature we consume"""
    id: Optional[str] = None
    collection: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)
    assets: Dict[str, Any] = Field(default_factory=dict)

    @property
    def cloud_cover(self) -> Optional[float]:
        value = self.properties.get("eo:cloud_cover")
        try:
            return float(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    @property
    def acquired_at(self) -> Optional[str]:
        for name in ("datetime", "start_datetime"):
            value = self.properties.get(name)
            if isinstance(value, str) and value:
                return value
        return None

    def asset_href(self, name: str) -> Optional[str]:
        asset = self.assets.get(name)
        href = asset.get("href") if isinstance(asset, dict) else None
        return href if isinstance(href, str) else None


class FeatureCollection(BaseModel):
    type: str = "FeatureCollection"
    features: List[StacItem] = Field(default_factory=list)


class SentinelScene(BaseModel):
    ndvi: float
    cloud_cover: float
    quality: float
    acquired_at: Optional[str] = None
    resolution: str = "10m"
    item_id: Optional[str] = None
    bands: Dict[str, Optional[str]] = Field(default_factory=dict)
    simulated: bool = False


class CroplandInfo(BaseModel):
    crop_type: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    intensity: str
    irrigated: bool
    estimated: bool = Field(False, description="Label drawn locally, not read from the CDL raster")


class LocalWeather(BaseModel):
    temperature: float
    precipitation: float
    humidity: Optional[float] = None
    growing_degree_days: float
    days: int


class SoilProperties(BaseModel):
    ph: float
    organic_matter_pct: float
    drainage: str
    fertility: str


class HighResReading(BaseModel):
    ndvi: float = Field(..., ge=-1.0, le=1.0)
    resolution: str = "10m"
    cloud_cover: float = 0.0
    data_quality: float = Field(..., ge=0.0, le=100.0)
    crop_type: Optional[str] = None
    crop_confidence: Optional[float] = None
    crop_estimated: bool = False
    soil_properties: Optional[SoilProperties] = None
    local_weather: Optional[LocalWeather] = None
    item_id: Optional[str] = None
    acquired_at: Optional[str] = None
    source: str = "Microsoft Planetary Computer"
    simulated: bool = False


class SearchSummary(BaseModel):
    total_items: int
    collections: List[str]
    bbox: List[float]
    datetime: str
    items: List[StacItem] = Field(default_factory=list)
    processed: str
    simulated: bool = False
