# terraai/agents/fusion/agent.py
"""
Agricultural data agent - fuses NASA POWER satellite data with Planetary
Computer high-resolution imagery for one farm location
"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from terraai.agents.base import BaseAgent
from terraai.agents.fusion.advisory import FarmAdvisoryService
from terraai.agents.fusion.models import (
    AgriculturalReading, CropInsights, DecisionSupport, EnhancedDataRequest,
    HighResCropAnalysis, ReadingMetadata
)
from terraai.agents.fusion.service import FusionService
from terraai.agents.imagery.models import HighResReading
from terraai.agents.imagery.service import PlanetaryComputerService
from terraai.agents.satellite.models import SatelliteReading
from terraai.agents.satellite.service import SatelliteDataService
from terraai.core.cache import ResponseCache
from terraai.core.config import Settings
from terraai.core.exceptions import AgentConfigError
from terraai.core.geo import Location, validate_coordinates

T = TypeVar("T")

SIMULATED_NOTE = "Using simulated data - limited recommendations available"


class AgriculturalDataAgent(BaseAgent[EnhancedDataRequest, AgriculturalReading]):
    """
    Multi-source agricultural data agent

    Features:
    - NASA POWER weather-driven vegetation and soil moisture readings
    - Sentinel-2, USDA cropland and Daymet data via Planetary Computer
    - Weighted NDVI fusion with a confidence score
    - Rule-based recommendations and farm advisory analyses
    """

    def __init__(
        self,
        cache: Optional[ResponseCache] = None,
        settings: Optional[Settings] = None,
        satellite_service: Optional[SatelliteDataService] = None,
        imagery_service: Optional[PlanetaryComputerService] = None,
        fusion_service: Optional[FusionService] = None,
    ):
        super().__init__("agricultural_data", cache=cache, settings=settings)
        self.satellite = satellite_service or SatelliteDataService(
            config=self.settings.get_agent_config("satellite"), cache=self.cache
        )
        self.imagery = imagery_service or PlanetaryComputerService(
            config=self.settings.get_agent_config("imagery"), cache=self.cache
        )
        self.fusion = fusion_service or FusionService(
            satellite_weight=self.config["satellite_weight"],
            high_res_weight=self.config["high_res_weight"],
            weight_policy=self.config["weight_policy"],
        )
        self.advisory = FarmAdvisoryService()
        self.timeout = float(self.config.get("provider_timeout_seconds", 8.0))
        self.buffer_km = float(self.config.get("imagery_buffer_km", 2.0))

    def _validate_config(self) -> None:
        """Validate fusion weights and provider settings"""
        required_config = ["satellite_weight", "high_res_weight", "weight_policy"]
        missing = [key for key in required_config if key not in self.config]
        if missing:
            raise AgentConfigError(f"Missing agricultural data config: {missing}")

        satellite_weight = self.config["satellite_weight"]
        high_res_weight = self.config["high_res_weight"]
        if satellite_weight < 0 or high_res_weight < 0 or abs(satellite_weight + high_res_weight - 1.0) > 1e-9:
            raise AgentConfigError(
                f"Fusion weights must be non-negative and sum to 1 (got {satellite_weight}, {high_res_weight})"
            )

        if self.config.get("provider_timeout_seconds", 8.0) <= 0:
            raise AgentConfigError("provider_timeout_seconds must be positive")

    async def _bounded(
        self,
        call: Awaitable[T],
        fallback: Callable[[], T],
        label: str,
    ) -> T:
        """Await a provider call within the timeout, substituting the fallback on any failure"""
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            self.logger.warning(f"{label} timed out after {self.timeout}s, using simulated data")
        except Exception as e:
            self.logger.warning(f"{label} failed, using simulated data: {e}")
        return fallback()

    async def gather_readings(self, location: Location):
        lon, lat = location.longitude, location.latitude
        return await asyncio.gather(
            self._bounded(
                self.satellite.fetch_satellite_reading(lon, lat),
                lambda: self.satellite.simulated_reading(lon, lat),
                "Satellite provider",
            ),
            self._bounded(
                self.imagery.process_agricultural_data(lon, lat, self.buffer_km),
                lambda: self.imagery.simulated_reading(lon, lat),
                "Imagery provider",
            ),
        )

    def build_reading(
        self,
        location: Location,
        satellite: SatelliteReading,
        high_res: HighResReading,
    ) -> AgriculturalReading:
        fused = self.fusion.fuse(satellite, high_res)
        degraded = satellite.simulated or high_res.simulated
        if satellite.simulated and high_res.simulated:
            fused.recommendations.insert(0, SIMULATED_NOTE)

        return AgriculturalReading(
            location=location,
            satellite=satellite,
            high_res=high_res,
            fusion=fused,
            metadata=ReadingMetadata(
                timestamp=datetime.now().isoformat(),
                spatial_resolution="10m (Sentinel-2) to ~50km (NASA POWER)",
                update_frequency="Daily NASA POWER + 5-day Sentinel-2",
                temporal_coverage=f"Current + {self.satellite.window_days}-day trends",
                degraded=degraded,
                sources=[satellite.source, high_res.source],
            ),
        )

    async def process_request(self, request: EnhancedDataRequest) -> AgriculturalReading:
        """Fetch both providers concurrently and fuse them"""
        location = validate_coordinates(request.longitude, request.latitude)
        self.logger.info(f"Fetching agricultural data for ({location.latitude:.4f}, {location.longitude:.4f})")

        satellite, high_res = await self.gather_readings(location)
        reading = self.build_reading(location, satellite, high_res)

        self.logger.info(
            f"Fused reading: ndvi={reading.fusion.combined_ndvi:.3f} "
            f"confidence={reading.fusion.confidence_level:.2f} degraded={reading.metadata.degraded}"
        )
        return reading

    def get_fallback_response(self, request: EnhancedDataRequest, error: Exception) -> AgriculturalReading:
        """Fully simulated reading when the fetch pipeline itself fails"""
        location = validate_coordinates(request.longitude, request.latitude)
        satellite = self.satellite.simulated_reading(location.longitude, location.latitude)
        high_res = self.imagery.simulated_reading(location.longitude, location.latitude)
        reading = self.build_reading(location, satellite, high_res)
        reading.metadata.update_frequency = "Simulated"
        reading.metadata.temporal_coverage = "Current"
        return reading

    # ---------- PUBLIC OPERATIONS ----------

    async def fetch_enhanced_agricultural_data(self, longitude: float, latitude: float) -> AgriculturalReading:
        """Fused reading for a point; raises only for invalid coordinates"""
        validate_coordinates(longitude, latitude)
        return await self.execute(EnhancedDataRequest(longitude=longitude, latitude=latitude))

    async def get_ultra_high_res_crop_analysis(self, longitude: float, latitude: float) -> HighResCropAnalysis:
        location = validate_coordinates(longitude, latitude)
        scene = await self._bounded(
            self.imagery.get_sentinel2_scene(location.longitude, location.latitude, self.buffer_km),
            lambda: self.imagery.simulated_scene(location.longitude, location.latitude),
            "Sentinel-2 scene",
        )
        return self.advisory.ultra_high_res_crop_analysis(scene)

    async def get_crop_specific_insights(
        self,
        longitude: float,
        latitude: float,
        crop_type: Optional[str] = None,
    ) -> CropInsights:
        location = validate_coordinates(longitude, latitude)
        lon, lat = location.longitude, location.latitude
        satellite, cropland = await asyncio.gather(
            self._bounded(
                self.satellite.fetch_satellite_reading(lon, lat),
                lambda: self.satellite.simulated_reading(lon, lat),
                "Satellite provider",
            ),
            self._bounded(self.imagery.get_usda_crop_data(lon, lat), lambda: None, "USDA cropland"),
        )
        soil = self.imagery.estimate_soil_properties(lon, lat)
        return self.advisory.crop_specific_insights(satellite, cropland, soil, crop_type)

    async def get_farming_decision_support(
        self,
        longitude: float,
        latitude: float,
        current_actions: Optional[list] = None,
        crop_type: Optional[str] = None,
    ) -> DecisionSupport:
        reading = await self.fetch_enhanced_agricultural_data(longitude, latitude)
        insights = self.advisory.crop_specific_insights(
            reading.satellite,
            None,
            reading.high_res.soil_properties,
            crop_type or reading.high_res.crop_type,
        )
        return self.advisory.decision_support(reading, insights, current_actions or [])

    async def analyze(self, request: EnhancedDataRequest) -> Dict[str, Any]:
        """Dispatch on ``analysis_type`` and wrap the result for the API"""
        analysis_type = request.analysis_type
        if analysis_type == "high-resolution":
            result = await self.get_ultra_high_res_crop_analysis(request.longitude, request.latitude)
        elif analysis_type == "crop-specific":
            result = await self.get_crop_specific_insights(request.longitude, request.latitude, request.crop_type)
        elif analysis_type == "decision-support":
            result = await self.get_farming_decision_support(
                request.longitude, request.latitude, request.current_actions, request.crop_type
            )
        else:
            result = await self.fetch_enhanced_agricultural_data(request.longitude, request.latitude)

        return {
            "success": True,
            "analysis_type": analysis_type,
            "location": {"longitude": request.longitude, "latitude": request.latitude},
            "data": result.model_dump(mode="json"),
            "timestamp": datetime.now().isoformat(),
        }
