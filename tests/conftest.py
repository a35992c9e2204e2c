"""
Shared fixtures for the agricultural data service tests.
All provider HTTP calls are mocked.
"""

import pytest

from terraai.agents.imagery.models import HighResReading
from terraai.agents.satellite.models import SatelliteReading
from terraai.core.cache import ResponseCache
from terraai.core.config import Settings

# Ames, Iowa
LONGITUDE = -93.625
LATITUDE = 42.0308


class FakeTimer:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def cache(timer):
    return ResponseCache(ttl=1800, timer=timer)


@pytest.fixture
def settings():
    """Settings isolated from the developer's .env"""
    return Settings(_env_file=None, provider_timeout_seconds=0.5, nasa_api_key="TEST_KEY")


def make_satellite(**overrides) -> SatelliteReading:
    values = dict(
        ndvi=0.5,
        soil_moisture=0.3,
        precipitation=0.5,
        temperature=24.0,
        available_fields=["ndvi", "soil_moisture", "precipitation", "temperature"],
    )
    values.update(overrides)
    return SatelliteReading(**values)


def make_high_res(**overrides) -> HighResReading:
    values = dict(ndvi=0.5, cloud_cover=5.0, data_quality=85.0)
    values.update(overrides)
    return HighResReading(**values)


def power_payload(days: int = 10, **series) -> dict:
    """NASA POWER daily point GeoJSON with constant or explicit series."""
    dates = [f"202406{d:02d}" for d in range(1, days + 1)]
    defaults = {"T2M": 24.0, "PRECTOTCORR": 4.0, "GWETROOT": 0.32, "ALLSKY_SFC_SW_DWN": 6.0}
    parameter = {}
    for name, default in defaults.items():
        value = series.get(name, default)
        values = value if isinstance(value, list) else [value] * days
        parameter[name] = dict(zip(dates, values))
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [LONGITUDE, LATITUDE, 300.0]},
        "properties": {"parameter": parameter},
    }


def stac_item(item_id: str, cloud: float, when: str, **properties) -> dict:
    return {
        "id": item_id,
        "collection": "sentinel-2-l2a",
        "properties": {"eo:cloud_cover": cloud, "datetime": when, **properties},
        "assets": {
            "B04": {"href": f"https://example.invalid/{item_id}/B04.tif"},
            "B08": {"href": f"https://example.invalid/{item_id}/B08.tif"},
        },
    }
