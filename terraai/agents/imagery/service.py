# terraai/agents/imagery/service.py
"""
Imagery service - Microsoft Planetary Computer STAC search for high-resolution
Sentinel-2 scenes, USDA cropland and Daymet weather around a farm
"""
import asyncio
import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from terraai.agents.imagery.datasets import datasets_by_priority
from terraai.agents.imagery.models import (
    CroplandInfo, FeatureCollection, HighResReading, LocalWeather,
    SearchSummary, SentinelScene, SoilProperties, StacItem
)
from terraai.core.cache import ResponseCache, make_cache_key
from terraai.core.exceptions import MalformedResponseError, ProviderError
from terraai.core.geo import DateRange, create_bounding_box, is_within_conus
from terraai.core.http import request_json
from terraai.core.simulation import RngFactory, salted_rng_factory, uniform

logger = logging.getLogger(__name__)

SENTINEL_COLLECTION = "sentinel-2-l2a"
CROPLAND_COLLECTION = "usda-cdl"
DAYMET_COLLECTION = "daymet-daily-na"

CROP_TYPES = ["corn", "soybeans", "wheat", "cotton", "rice", "hay"]

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _parse_time(value: Optional[str]) -> datetime:
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def select_best_item(features: List[StacItem], max_cloud_cover: float) -> Optional[StacItem]:
    """Most recent item under the cloud threshold; equal times prefer less cloud."""
    candidates = [f for f in features if f.cloud_cover is not None and f.cloud_cover < max_cloud_cover]
    if not candidates:
        return None
    candidates.sort(key=lambda f: f.cloud_cover)
    candidates.sort(key=lambda f: _parse_time(f.acquired_at), reverse=True)
    return candidates[0]


def seasonal_factor(day: date, latitude: float) -> float:
    """+-0.2 swing peaking mid-summer, mirrored for the southern hemisphere"""
    phase = 2 * math.pi * (day.timetuple().tm_yday - 80) / 365.0
    swing = 0.2 * math.sin(phase)
    return swing if latitude >= 0 else -swing


class PlanetaryComputerService:
    """Client for the Planetary Computer STAC API"""

    PROVIDER = "planetary-computer"

    def __init__(
        self,
        config: Dict[str, Any],
        cache: Optional[ResponseCache] = None,
        rng_factory: Optional[RngFactory] = None,
    ):
        self.config = config
        self.cache = cache
        self.base_url = config.get("base_url", "https://planetarycomputer.microsoft.com/api/stac/v1").rstrip("/")
        self.timeout = float(config.get("timeout", 8.0))
        self.max_cloud_cover = float(config.get("max_cloud_cover", 20.0))
        self.recent_days = int(config.get("recent_days", 10))
        self.user_agent = config.get("user_agent")
        self.rng_factory = rng_factory or salted_rng_factory(config.get("seed", 0))

    # ---------- STAC SEARCH ----------

    async def search(
        self,
        collections: List[str],
        bbox: List[float],
        datetime_range: str,
        limit: int = 10,
        query: Optional[Dict[str, Any]] = None,
        sortby: Optional[List[Dict[str, str]]] = None,
    ) -> FeatureCollection:
        """POST {base}/search and parse the FeatureCollection"""
        body: Dict[str, Any] = {
            "collections": collections,
            "bbox": bbox,
            "datetime": datetime_range,
            "limit": limit,
        }
        if query:
            body["query"] = query
        if sortby:
            body["sortby"] = sortby

        payload = await request_json(
            "POST",
            f"{self.base_url}/search",
            provider=self.PROVIDER,
            json=body,
            timeout=self.timeout,
            user_agent=self.user_agent,
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("features", []), list):
            raise MalformedResponseError("STAC search did not return a FeatureCollection", provider=self.PROVIDER)
        try:
            return FeatureCollection(**payload)
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected STAC feature shape: {e}", provider=self.PROVIDER) from e

    async def _cached_search(self, cache_key: str, **search_kwargs) -> FeatureCollection:
        if self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.info(f"STAC cache hit: {cache_key}")
                return FeatureCollection(**cached)

        results = await self.search(**search_kwargs)
        if self.cache is not None:
            await self.cache.set(cache_key, results.model_dump(mode="json"))
        return results

    # ---------- SENTINEL-2 ----------

    def estimate_item_ndvi(self, item: StacItem, longitude: float, latitude: float) -> float:
        """
        Scene-level NDVI estimate from item metadata.

        Sentinel-2 L2A items carry ``s2:vegetation_percentage``; it is mapped
        linearly onto [0.1, 0.9]. Items without it get a coordinate-seeded
        estimate adjusted for season and cloud cover.
        """
        vegetation = item.properties.get("s2:vegetation_percentage")
        if vegetation is not None:
            try:
                share = min(1.0, max(0.0, float(vegetation) / 100.0))
                return 0.1 + 0.8 * share
            except (TypeError, ValueError):
                pass

        rng = self.rng_factory(longitude, latitude)
        acquired = _parse_time(item.acquired_at)
        day = acquired.date() if acquired != _EPOCH else date.today()
        cloud = item.cloud_cover or 0.0
        estimate = uniform(rng, 0.4, 0.8) + seasonal_factor(day, latitude) + (100 - cloud) / 100 * 0.1
        return max(0.0, min(1.0, estimate))

    def scene_from_item(self, item: StacItem, longitude: float, latitude: float) -> SentinelScene:
        cloud = item.cloud_cover or 0.0
        return SentinelScene(
            ndvi=self.estimate_item_ndvi(item, longitude, latitude),
            cloud_cover=cloud,
            quality=max(0.0, 100.0 - cloud),
            acquired_at=item.acquired_at,
            item_id=item.id,
            bands={
                "red": item.asset_href("B04"),
                "nir": item.asset_href("B08"),
                "swir": item.asset_href("B11"),
            },
        )

    def simulated_scene(self, longitude: float, latitude: float) -> SentinelScene:
        rng = self.rng_factory(longitude, latitude)
        return SentinelScene(
            ndvi=uniform(rng, 0.2, 0.8),
            cloud_cover=uniform(rng, 0.0, 30.0),
            quality=uniform(rng, 80.0, 100.0),
            acquired_at=datetime.now(timezone.utc).isoformat(),
            resolution="10m (simulated)",
            simulated=True,
        )

    async def get_sentinel2_scene(
        self,
        longitude: float,
        latitude: float,
        buffer_km: float = 2.0,
        date_range: Optional[DateRange] = None,
    ) -> SentinelScene:
        """Best recent low-cloud Sentinel-2 scene, or a simulated one"""
        bbox = create_bounding_box(longitude, latitude, buffer_km)
        window = (date_range or DateRange.last_days(self.recent_days)).to_stac()
        cache_key = make_cache_key(SENTINEL_COLLECTION, longitude, latitude, window, f"{buffer_km}km")

        try:
            results = await self._cached_search(
                cache_key,
                collections=[SENTINEL_COLLECTION],
                bbox=bbox,
                datetime_range=window,
                limit=10,
                query={"eo:cloud_cover": {"lt": self.max_cloud_cover}},
                sortby=[{"field": "properties.datetime", "direction": "desc"}],
            )
            item = select_best_item(results.features, self.max_cloud_cover)
            if item is None:
                logger.info(f"No Sentinel-2 scene under {self.max_cloud_cover}% cloud for ({latitude:.4f}, {longitude:.4f})")
                return self.simulated_scene(longitude, latitude)
            return self._checked_scene(item, longitude, latitude)
        except ProviderError as e:
            logger.warning(f"Sentinel-2 search failed for ({latitude:.4f}, {longitude:.4f}), using simulated scene: {e}")
            return self.simulated_scene(longitude, latitude)

    def _checked_scene(self, item: StacItem, longitude: float, latitude: float) -> SentinelScene:
        try:
            return self.scene_from_item(item, longitude, latitude)
        except (ValidationError, TypeError, ValueError) as e:
            raise MalformedResponseError(f"Unusable Sentinel-2 item {item.id}: {e}", provider=self.PROVIDER) from e

    async def search_high_res_imagery(
        self,
        longitude: float,
        latitude: float,
        buffer_km: float = 2.0,
        date_range: Optional[DateRange] = None,
    ) -> HighResReading:
        """Sentinel-2 based high-resolution reading, never raises for provider errors"""
        scene = await self.get_sentinel2_scene(longitude, latitude, buffer_km, date_range)
        return self._reading_from_scene(scene)

    def simulated_reading(self, longitude: float, latitude: float) -> HighResReading:
        return self._reading_from_scene(self.simulated_scene(longitude, latitude))

    def _reading_from_scene(self, scene: SentinelScene, **extra) -> HighResReading:
        return HighResReading(
            ndvi=scene.ndvi,
            resolution=scene.resolution,
            cloud_cover=scene.cloud_cover,
            data_quality=min(100.0, max(0.0, scene.quality)),
            item_id=scene.item_id,
            acquired_at=scene.acquired_at,
            source="simulated" if scene.simulated else "Microsoft Planetary Computer",
            simulated=scene.simulated,
            **extra,
        )

    # ---------- USDA CROPLAND ----------

    async def get_usda_crop_data(self, longitude: float, latitude: float) -> Optional[CroplandInfo]:
        """
        Dominant crop near a CONUS point, None outside CONUS or when no layer
        covers it. The layer is only located here; the crop label is drawn
        from a coordinate-seeded generator instead of reading the raster.
        """
        if not is_within_conus(longitude, latitude):
            return None

        year = date.today().year - 1
        window = f"{year}-01-01/{year}-12-31"
        cache_key = make_cache_key(CROPLAND_COLLECTION, longitude, latitude, year)
        try:
            results = await self._cached_search(
                cache_key,
                collections=[CROPLAND_COLLECTION],
                bbox=create_bounding_box(longitude, latitude, 1.0),
                datetime_range=window,
                limit=1,
            )
        except ProviderError as e:
            logger.warning(f"USDA cropland search failed: {e}")
            return None

        if not results.features:
            return None

        rng = self.rng_factory(longitude, latitude)
        return CroplandInfo(
            crop_type=CROP_TYPES[int(rng.integers(len(CROP_TYPES)))],
            confidence=uniform(rng, 0.85, 1.0),
            intensity="intensive" if rng.random() > 0.3 else "extensive",
            irrigated=bool(rng.random() > 0.6),
            estimated=True,
        )

    # ---------- DAYMET ----------

    async def get_daymet_weather(self, longitude: float, latitude: float, days: int = 7) -> Optional[LocalWeather]:
        """Average daily weather over the last ``days`` days, CONUS only"""
        if not is_within_conus(longitude, latitude):
            return None

        window = DateRange.last_days(days).to_stac()
        cache_key = make_cache_key(DAYMET_COLLECTION, longitude, latitude, window)
        try:
            results = await self._cached_search(
                cache_key,
                collections=[DAYMET_COLLECTION],
                bbox=create_bounding_box(longitude, latitude, 0.5),
                datetime_range=window,
                limit=days,
            )
        except ProviderError as e:
            logger.warning(f"Daymet search failed: {e}")
            return None

        return self.summarize_daymet(results.features)

    def summarize_daymet(self, features: List[StacItem]) -> Optional[LocalWeather]:
        if not features:
            return None

        def prop(item: StacItem, name: str, default: float) -> float:
            value = item.properties.get(name)
            return float(value) if isinstance(value, (int, float)) else default

        avg_temp = sum((prop(f, "tmax", 20.0) + prop(f, "tmin", 10.0)) / 2 for f in features) / len(features)
        total_precip = sum(prop(f, "prcp", 0.0) for f in features)
        return LocalWeather(
            temperature=avg_temp,
            precipitation=total_precip,
            growing_degree_days=max(0.0, avg_temp - 10.0) * len(features),
            days=len(features),
        )

    # ---------- SOIL ----------

    def estimate_soil_properties(self, longitude: float, latitude: float) -> SoilProperties:
        """Coordinate-seeded soil profile until gNATSGO rasters are read"""
        rng = self.rng_factory(longitude, latitude)
        return SoilProperties(
            ph=6.5 + float(rng.random()),
            organic_matter_pct=2.0 + float(rng.random()) * 3.0,
            drainage="well-drained" if rng.random() > 0.5 else "poorly-drained",
            fertility="high" if rng.random() > 0.3 else "medium",
        )

    # ---------- COMBINED ----------

    async def process_agricultural_data(
        self,
        longitude: float,
        latitude: float,
        buffer_km: float = 2.0,
    ) -> HighResReading:
        """Sentinel-2 scene, cropland and local weather gathered concurrently"""
        scene, cropland, weather = await asyncio.gather(
            self.get_sentinel2_scene(longitude, latitude, buffer_km),
            self.get_usda_crop_data(longitude, latitude),
            self.get_daymet_weather(longitude, latitude),
        )
        return self._reading_from_scene(
            scene,
            crop_type=cropland.crop_type if cropland else None,
            crop_confidence=cropland.confidence if cropland else None,
            crop_estimated=cropland.estimated if cropland else False,
            local_weather=weather,
            soil_properties=self.estimate_soil_properties(longitude, latitude),
        )

    async def search_agricultural_data(
        self,
        longitude: float,
        latitude: float,
        buffer_km: float = 5.0,
        date_range: Optional[DateRange] = None,
    ) -> SearchSummary:
        """Catalogue search across all priority 1-2 collections"""
        collections = [d.id for d in datasets_by_priority(max_priority=2)]
        bbox = create_bounding_box(longitude, latitude, buffer_km)
        window = (date_range or DateRange.last_days(30)).to_stac()
        processed = datetime.now(timezone.utc).isoformat()

        try:
            results = await self._cached_search(
                make_cache_key("catalogue", longitude, latitude, window, f"{buffer_km}km"),
                collections=collections,
                bbox=bbox,
                datetime_range=window,
                limit=50,
                sortby=[{"field": "properties.datetime", "direction": "desc"}],
            )
        except ProviderError as e:
            logger.warning(f"Catalogue search failed: {e}")
            return SearchSummary(
                total_items=0, collections=collections, bbox=bbox,
                datetime=window, processed=processed, simulated=True
            )

        return SearchSummary(
            total_items=len(results.features),
            collections=collections,
            bbox=bbox,
            datetime=window,
            items=results.features,
            processed=processed,
        )
