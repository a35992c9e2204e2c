# terraai/agents/imagery/datasets.py
"""
Planetary Computer collections used for farm-scale analysis, by priority
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

STAC_COLLECTIONS_URL = "https://planetarycomputer.microsoft.com/api/stac/v1/collections"


class ProviderDatasetDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    resolution: str
    update_frequency: str
    stac_endpoint: str
    bands: Optional[List[str]] = None
    farming_use: str
    priority: int
    spatial_coverage: Literal["global", "conus", "regional"]


def _descriptor(id: str, **fields) -> ProviderDatasetDescriptor:
    return ProviderDatasetDescriptor(id=id, stac_endpoint=f"{STAC_COLLECTIONS_URL}/{id}", **fields)


PLANETARY_COMPUTER_DATASETS: List[ProviderDatasetDescriptor] = [
    # Priority 1: field level crop monitoring
    _descriptor(
        "sentinel-2-l2a",
        name="Sentinel-2 Level-2A",
        description="High-resolution multispectral imagery with NDVI at 10m resolution",
        resolution="10m-60m",
        update_frequency="5 days",
        bands=["B02", "B03", "B04", "B08", "B11", "B12", "SCL"],
        farming_use="Ultra-high resolution crop health monitoring, field-level NDVI analysis",
        priority=1,
        spatial_coverage="global",
    ),
    _descriptor(
        "hls2-l30",
        name="Harmonized Landsat Sentinel-2 (HLS) v2.0",
        description="Combined Landsat + Sentinel-2 for consistent 30m agriculture monitoring",
        resolution="30m",
        update_frequency="2-3 days",
        bands=["B02", "B03", "B04", "B05", "B8A", "B11", "B12"],
        farming_use="Consistent crop monitoring, time-series analysis, phenology tracking",
        priority=1,
        spatial_coverage="global",
    ),
    _descriptor(
        "usda-cdl",
        name="USDA Cropland Data Layers",
        description="Annual crop-specific land cover classification for US farmland",
        resolution="30m",
        update_frequency="Annual",
        farming_use="Identify crop types, validate farming areas, crop rotation analysis",
        priority=1,
        spatial_coverage="conus",
    ),
    # Priority 2: supplementary context
    _descriptor(
        "naip",
        name="National Agriculture Imagery Program",
        description="Ultra-high resolution aerial imagery of US agricultural areas",
        resolution="0.6m - 1m",
        update_frequency="2-3 years",
        farming_use="Individual plant-level analysis, precision agriculture, field boundary mapping",
        priority=2,
        spatial_coverage="conus",
    ),
    _descriptor(
        "modis-13Q1-061",
        name="MODIS Vegetation Indices 16-Day (250m)",
        description="Enhanced MODIS NDVI and EVI at 250m resolution",
        resolution="250m",
        update_frequency="16 days",
        farming_use="Regional vegetation trends, crop health baselines, long-term monitoring",
        priority=2,
        spatial_coverage="global",
    ),
    _descriptor(
        "gpm-imerg-hhr",
        name="GPM IMERG Precipitation",
        description="High-resolution global precipitation estimates",
        resolution="10km",
        update_frequency="30 minutes",
        farming_use="Real-time rainfall monitoring, irrigation scheduling, flood prediction",
        priority=2,
        spatial_coverage="global",
    ),
    _descriptor(
        "daymet-daily-na",
        name="Daymet Weather Data",
        description="Daily weather parameters including temperature, precipitation, humidity",
        resolution="1km",
        update_frequency="Daily",
        farming_use="Local weather conditions, growing degree days, frost prediction",
        priority=2,
        spatial_coverage="conus",
    ),
    _descriptor(
        "gnatsgo-rasters",
        name="gNATSGO Soil Database",
        description="Comprehensive soil properties database for agricultural planning",
        resolution="30m",
        update_frequency="Static",
        farming_use="Soil fertility analysis, drainage assessment, crop suitability mapping",
        priority=2,
        spatial_coverage="conus",
    ),
    # Priority 3: terrain and land cover
    _descriptor(
        "cop-dem-glo-30",
        name="Copernicus DEM GLO-30",
        description="Global digital elevation model at 30m resolution",
        resolution="30m",
        update_frequency="Static",
        farming_use="Terrain modeling, water flow simulation, slope analysis for farming",
        priority=3,
        spatial_coverage="global",
    ),
    _descriptor(
        "esa-worldcover",
        name="ESA WorldCover",
        description="Global land cover classification at 10m resolution",
        resolution="10m",
        update_frequency="Annual",
        farming_use="Land use validation, agricultural area identification, environment context",
        priority=3,
        spatial_coverage="global",
    ),
]


def get_dataset(dataset_id: str) -> Optional[ProviderDatasetDescriptor]:
    for dataset in PLANETARY_COMPUTER_DATASETS:
        if dataset.id == dataset_id:
            return dataset
    return None


def datasets_by_priority(max_priority: int = 3) -> List[ProviderDatasetDescriptor]:
    """Descriptors with ``priority <= max_priority``, highest priority first."""
    selected = [d for d in PLANETARY_COMPUTER_DATASETS if d.priority <= max_priority]
    return sorted(selected, key=lambda d: d.priority)
