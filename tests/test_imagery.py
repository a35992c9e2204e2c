"""
Tests for the Planetary Computer imagery service.
STAC searches are mocked at request_json.
"""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from conftest import LATITUDE, LONGITUDE, stac_item
from terraai.agents.imagery.datasets import PLANETARY_COMPUTER_DATASETS, datasets_by_priority, get_dataset
from terraai.agents.imagery.models import StacItem
from terraai.agents.imagery.service import PlanetaryComputerService, select_best_item
from terraai.core.exceptions import NetworkError
from terraai.core.geo import create_bounding_box

REQUEST_JSON = "terraai.agents.imagery.service.request_json"

# Outside CONUS, so cropland and Daymet lookups are skipped
PARIS = (2.35, 48.85)


@pytest.fixture
def service(cache):
    return PlanetaryComputerService(config={"timeout": 1.0, "max_cloud_cover": 20.0, "seed": 7}, cache=cache)


def _collection(*items):
    return {"type": "FeatureCollection", "features": list(items)}


def test_bounding_box_uses_flat_degree_offset():
    bbox = create_bounding_box(0.0, 0.0, 11.132)
    assert bbox == pytest.approx([-0.1, -0.1, 0.1, 0.1])


def test_select_best_item_prefers_recent_low_cloud():
    items = [
        StacItem(**stac_item("older", 5.0, "2024-06-05T10:00:00Z")),
        StacItem(**stac_item("newer", 10.0, "2024-06-08T10:00:00Z")),
        StacItem(**stac_item("cloudy", 30.0, "2024-06-09T10:00:00Z")),
    ]
    assert select_best_item(items, 20.0).id == "newer"


def test_select_best_item_breaks_time_ties_on_cloud():
    items = [
        StacItem(**stac_item("hazy", 15.0, "2024-06-08T10:00:00Z")),
        StacItem(**stac_item("clear", 2.0, "2024-06-08T10:00:00Z")),
    ]
    assert select_best_item(items, 20.0).id == "clear"
    assert select_best_item(items, 1.0) is None


def test_scene_search_request_body(service):
    item = stac_item("S2A_1", 4.0, "2024-06-08T10:00:00Z", **{"s2:vegetation_percentage": 50.0})
    with patch(REQUEST_JSON, new_callable=AsyncMock) as mock_request:
        mock_request.return_value = _collection(item)
        scene = asyncio.run(service.get_sentinel2_scene(*PARIS))

    method, url = mock_request.await_args.args
    body = mock_request.await_args.kwargs["json"]
    assert method == "POST"
    assert url.endswith("/search")
    assert body["collections"] == ["sentinel-2-l2a"]
    assert body["query"] == {"eo:cloud_cover": {"lt": 20.0}}
    assert body["sortby"] == [{"field": "properties.datetime", "direction": "desc"}]
    assert body["bbox"] == pytest.approx(create_bounding_box(*PARIS, 2.0))

    assert scene.item_id == "S2A_1"
    assert scene.ndvi == pytest.approx(0.5)
    assert scene.quality == pytest.approx(96.0)
    assert scene.bands["red"].endswith("B04.tif")
    assert not scene.simulated


def test_empty_search_falls_back_to_simulated_scene(service):
    with patch(REQUEST_JSON, new_callable=AsyncMock) as mock_request:
        mock_request.return_value = _collection()
        first = asyncio.run(service.search_high_res_imagery(*PARIS))
        second = asyncio.run(service.search_high_res_imagery(*PARIS))

    assert first.simulated and second.simulated
    assert first.ndvi == second.ndvi
    assert first.source == "simulated"
    assert 0.2 <= first.ndvi <= 0.8


def test_network_failure_falls_back_to_simulated_scene(service, cache):
    with patch(REQUEST_JSON, new_callable=AsyncMock) as mock_request:
        mock_request.side_effect = NetworkError("timed out", provider="planetary-computer")
        reading = asyncio.run(service.search_high_res_imagery(*PARIS))
    assert reading.simulated
    assert len(cache) == 0


def test_malformed_search_response_falls_back(service):
    with patch(REQUEST_JSON, new_callable=AsyncMock) as mock_request:
        mock_request.return_value = {"features": "nope"}
        reading = asyncio.run(service.search_high_res_imagery(*PARIS))
    assert reading.simulated


def test_non_string_acquisition_time_does_not_break_selection(service):
    item = stac_item("S2A_4", 4.0, "unused", **{"s2:vegetation_percentage": 50.0})
    item["properties"]["datetime"] = 1717840800
    item["assets"]["B04"]["href"] = 42
    with patch(REQUEST_JSON, new_callable=AsyncMock) as mock_request:
        mock_request.return_value = _collection(item)
        reading = asyncio.run(service.search_high_res_imagery(*PARIS))

    assert reading.item_id == "S2A_4"
    assert reading.acquired_at is None
    assert not reading.simulated


def test_unusable_item_falls_back_to_simulated_scene(service):
    item = stac_item("S2A_5", 4.0, "2024-06-08T10:00:00Z")
    with patch(REQUEST_JSON, new=AsyncMock(return_value=_collection(item))), \
            patch.object(service, "scene_from_item", side_effect=TypeError("bad item")):
        reading = asyncio.run(service.search_high_res_imagery(*PARIS))
    assert reading.simulated


def test_process_agricultural_data_in_conus(service):
    async def fake_request(method, url, **kwargs):
        collection = kwargs["json"]["collections"][0]
        if collection == "sentinel-2-l2a":
            return _collection(stac_item("S2B_2", 3.0, "2024-06-08T10:00:00Z", **{"s2:vegetation_percentage": 75.0}))
        if collection == "usda-cdl":
            return _collection({"id": "cdl-2023", "properties": {}})
        return _collection(
            {"id": "d1", "properties": {"tmax": 30.0, "tmin": 18.0, "prcp": 2.0}},
            {"id": "d2", "properties": {"tmax": 28.0, "tmin": 16.0, "prcp": 0.0}},
        )

    with patch(REQUEST_JSON, new=AsyncMock(side_effect=fake_request)):
        reading = asyncio.run(service.process_agricultural_data(LONGITUDE, LATITUDE))

    assert reading.ndvi == pytest.approx(0.7)
    assert reading.crop_type in {"corn", "soybeans", "wheat", "cotton", "rice", "hay"}
    assert 0.85 <= reading.crop_confidence <= 1.0
    assert reading.crop_estimated
    assert reading.local_weather.temperature == pytest.approx(23.0)
    assert reading.local_weather.precipitation == pytest.approx(2.0)
    assert reading.local_weather.days == 2
    assert reading.soil_properties is not None
    assert not reading.simulated


def test_cropland_and_weather_skipped_outside_conus(service):
    with patch(REQUEST_JSON, new_callable=AsyncMock) as mock_request:
        mock_request.return_value = _collection()
        reading = asyncio.run(service.process_agricultural_data(*PARIS))

    collections = [call.kwargs["json"]["collections"] for call in mock_request.await_args_list]
    assert collections == [["sentinel-2-l2a"]]
    assert reading.crop_type is None
    assert reading.local_weather is None


def test_catalogue_search_failure_is_marked_simulated(service):
    with patch(REQUEST_JSON, new_callable=AsyncMock) as mock_request:
        mock_request.side_effect = NetworkError("HTTP 502", provider="planetary-computer", status=502)
        summary = asyncio.run(service.search_agricultural_data(*PARIS))
    assert summary.simulated
    assert summary.total_items == 0
    assert "sentinel-2-l2a" in summary.collections


def test_dataset_catalogue():
    assert len(PLANETARY_COMPUTER_DATASETS) == 10
    assert all(d.priority == 1 for d in datasets_by_priority(1))
    assert get_dataset("sentinel-2-l2a").resolution == "10m-60m"
    assert get_dataset("missing") is None


def test_estimated_ndvi_without_vegetation_share_is_in_range(service):
    item = StacItem(**stac_item("S2A_3", 10.0, date(2024, 7, 1).isoformat()))
    ndvi = service.estimate_item_ndvi(item, LONGITUDE, LATITUDE)
    assert 0.0 <= ndvi <= 1.0
    assert ndvi == service.estimate_item_ndvi(item, LONGITUDE, LATITUDE)
