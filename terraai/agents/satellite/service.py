# terraai/agents/satellite/service.py
"""
Satellite data service - NASA POWER daily point data normalized into a
SatelliteReading, with a simulated reading when the provider is unavailable
"""
import logging
import math
from datetime import date as dt_date, datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from terraai.agents.satellite.models import SatelliteReading, SatelliteTrends
from terraai.core.cache import ResponseCache, make_cache_key
from terraai.core.exceptions import MalformedResponseError, ProviderError
from terraai.core.geo import DateRange
from terraai.core.http import request_json
from terraai.core.simulation import RngFactory, salted_rng_factory, uniform

logger = logging.getLogger(__name__)

POWER_PARAMETERS = ["T2M", "PRECTOTCORR", "GWETROOT", "ALLSKY_SFC_SW_DWN"]
FILL_VALUE = -999.0

DEFAULTS = {
    "ndvi": 0.4,
    "soil_moisture": 0.25,
    "precipitation": 0.0,
    "temperature": 20.0,
}

# Vegetation proxy knobs
OPTIMAL_TEMP_C = 25.0
TEMP_TOLERANCE_C = 20.0
PRECIP_SATURATION_MM = 5.0
SOLAR_SATURATION_WM2 = 250.0
KWH_DAY_TO_WM2 = 1000.0 / 24.0
PRECIP_WINDOW_DAYS = 7


def estimate_ndvi(temperature: float, precipitation: float, solar_wm2: float) -> float:
    """NDVI proxy from weather drivers, clamped to [0.2, 0.9]."""
    temp_factor = max(0.0, 1 - abs(temperature - OPTIMAL_TEMP_C) / TEMP_TOLERANCE_C)
    water_factor = min(max(precipitation, 0.0) / PRECIP_SATURATION_MM, 1.0)
    solar_factor = min(max(solar_wm2, 0.0) / SOLAR_SATURATION_WM2, 1.0)
    return max(0.2, min(0.9, temp_factor * water_factor * solar_factor * 0.8))


def calculate_trend(values: List[float]) -> str:
    """Compare the mean of the last five values with the five before them."""
    if len(values) < 2:
        return "stable"
    recent = values[-5:]
    older = values[-10:-5]
    if not older:
        return "stable"
    recent_avg = sum(recent) / len(recent)
    older_avg = sum(older) / len(older)
    margin = abs(older_avg) * 0.1
    if recent_avg > older_avg + margin:
        return "increasing"
    if recent_avg < older_avg - margin:
        return "decreasing"
    return "stable"


class SatelliteDataService:
    """Client for the NASA POWER daily point API"""

    PROVIDER = "nasa-power"

    def __init__(
        self,
        config: Dict[str, Any],
        cache: Optional[ResponseCache] = None,
        rng_factory: Optional[RngFactory] = None,
    ):
        self.config = config
        self.cache = cache
        self.base_url = config.get("base_url", "https://power.larc.nasa.gov/api/temporal/daily/point")
        self.api_key = config.get("api_key")
        self.timeout = float(config.get("timeout", 8.0))
        self.window_days = int(config.get("window_days", 30))
        self.user_agent = config.get("user_agent")
        self.rng_factory = rng_factory or salted_rng_factory(config.get("seed", 0))

    def build_params(self, longitude: float, latitude: float, date_range: DateRange) -> Dict[str, Any]:
        params = {
            "parameters": ",".join(POWER_PARAMETERS),
            "community": "AG",
            "longitude": round(longitude, 4),
            "latitude": round(latitude, 4),
            "format": "JSON",
            **date_range.to_power(),
        }
        if self.api_key:
            params["api_key"] = self.api_key
        return params

    async def fetch_satellite_reading(
        self,
        longitude: float,
        latitude: float,
        date_range: Optional[DateRange] = None,
    ) -> SatelliteReading:
        """
        Fetch and normalize the satellite reading for a point.

        Never raises for provider problems: on a network failure, an error
        status or an unreadable payload a simulated reading is returned.
        Only live readings are cached.
        """
        date_range = date_range or DateRange.last_days(self.window_days)
        cache_key = make_cache_key(self.PROVIDER, longitude, latitude, date_range.to_stac())

        if self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.info(f"Satellite cache hit for ({latitude:.4f}, {longitude:.4f})")
                return SatelliteReading(**cached)

        try:
            payload = await request_json(
                "GET",
                self.base_url,
                provider=self.PROVIDER,
                params=self.build_params(longitude, latitude, date_range),
                timeout=self.timeout,
                user_agent=self.user_agent,
            )
            reading = self.normalize_payload(payload)
        except ProviderError as e:
            logger.warning(f"Satellite data unavailable for ({latitude:.4f}, {longitude:.4f}), using simulated reading: {e}")
            return self.simulated_reading(longitude, latitude)

        logger.info(
            f"Satellite reading for ({latitude:.4f}, {longitude:.4f}): "
            f"ndvi={reading.ndvi:.3f} soil_moisture={reading.soil_moisture:.3f} "
            f"live_fields={reading.available_fields}"
        )
        if self.cache is not None:
            await self.cache.set(cache_key, reading.model_dump(mode="json"))
        return reading

    # ---------- NORMALIZATION ----------

    def _series(self, parameters: Dict[str, Any], name: str) -> List[Tuple[str, float]]:
        raw = parameters.get(name)
        if raw is None:
            return []
        if not isinstance(raw, dict):
            raise MalformedResponseError(f"POWER parameter {name} is not a date map", provider=self.PROVIDER)
        series = []
        for day, value in sorted(raw.items()):
            try:
                number = float(value)
            except (TypeError, ValueError):
                continue
            if not math.isfinite(number) or number <= FILL_VALUE:
                continue
            series.append((day, number))
        return series

    def _parse_day(self, day: str) -> Optional[dt_date]:
        try:
            return datetime.strptime(day, "%Y%m%d").date()
        except (TypeError, ValueError):
            return None

    def _ndvi_series(
        self,
        temperature: List[Tuple[str, float]],
        precipitation: List[Tuple[str, float]],
        solar: List[Tuple[str, float]],
    ) -> List[float]:
        precip_by_day = dict(precipitation)
        solar_by_day = dict(solar)
        precip_days = [day for day, _ in precipitation]
        values = []
        for day, temp in temperature:
            if day not in precip_by_day or day not in solar_by_day:
                continue
            # trailing mean so one dry day does not read as stressed vegetation
            idx = precip_days.index(day)
            window = [precip_by_day[d] for d in precip_days[max(0, idx - PRECIP_WINDOW_DAYS + 1):idx + 1]]
            precip_mean = sum(window) / len(window)
            values.append(estimate_ndvi(temp, precip_mean, solar_by_day[day] * KWH_DAY_TO_WM2))
        return values

    def normalize_payload(self, payload: Any) -> SatelliteReading:
        """Convert a POWER GeoJSON feature into a SatelliteReading."""
        if not isinstance(payload, dict):
            raise MalformedResponseError("POWER payload is not an object", provider=self.PROVIDER)
        properties = payload.get("properties")
        if not isinstance(properties, dict):
            raise MalformedResponseError("POWER payload has no properties object", provider=self.PROVIDER)
        parameters = properties.get("parameter")
        if not isinstance(parameters, dict) or not parameters:
            messages = payload.get("messages") or payload.get("errors") or "no parameter block"
            raise MalformedResponseError(f"POWER payload missing parameters: {messages}", provider=self.PROVIDER)

        temperature = self._series(parameters, "T2M")
        precipitation = self._series(parameters, "PRECTOTCORR")
        soil = self._series(parameters, "GWETROOT")
        solar = self._series(parameters, "ALLSKY_SFC_SW_DWN")
        ndvi_values = self._ndvi_series(temperature, precipitation, solar)

        values = dict(DEFAULTS)
        available = []
        if ndvi_values:
            values["ndvi"] = ndvi_values[-1]
            available.append("ndvi")
        if soil:
            values["soil_moisture"] = min(1.0, max(0.0, soil[-1][1]))
            available.append("soil_moisture")
        if precipitation:
            values["precipitation"] = max(0.0, precipitation[-1][1])
            available.append("precipitation")
        if temperature:
            values["temperature"] = temperature[-1][1]
            available.append("temperature")

        latest = [s[-1][0] for s in (temperature, precipitation, soil) if s]
        observed_on = self._parse_day(max(latest)) if latest else None

        try:
            return SatelliteReading(
                **values,
                trends=SatelliteTrends(
                    ndvi=calculate_trend(ndvi_values),
                    soil_moisture=calculate_trend([v for _, v in soil]),
                    precipitation=calculate_trend([v for _, v in precipitation]),
                    temperature=calculate_trend([v for _, v in temperature]),
                ),
                available_fields=available,
                observed_on=observed_on,
            )
        except ValidationError as e:
            raise MalformedResponseError(f"POWER values out of range: {e}", provider=self.PROVIDER) from e

    # ---------- FALLBACK ----------

    def simulated_reading(self, longitude: float, latitude: float) -> SatelliteReading:
        """Plausible reading seeded from the coordinates, marked simulated"""
        rng = self.rng_factory(longitude, latitude)
        return SatelliteReading(
            ndvi=uniform(rng, 0.4, 0.7),
            soil_moisture=uniform(rng, 0.2, 0.4),
            precipitation=uniform(rng, 0.0, 2.0),
            temperature=uniform(rng, 20.0, 35.0),
            available_fields=[],
            observed_on=dt_date.today(),
            source="simulated",
            simulated=True,
        )
