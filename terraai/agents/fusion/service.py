# terraai/agents/fusion/service.py
"""
Fusion service - weighted NDVI combination, confidence scoring and
recommendations for one satellite and one high-resolution reading
"""
import logging
from typing import Union

from terraai.agents.fusion.insights import generate_recommendations
from terraai.agents.fusion.models import FusedReading, SourceWeights
from terraai.agents.imagery.models import HighResReading
from terraai.agents.satellite.models import SatelliteReading
from terraai.core.config import WeightPolicy
from terraai.core.exceptions import AgentConfigError

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.5
SATELLITE_NDVI_BONUS = 0.2
SATELLITE_MOISTURE_BONUS = 0.1
HIGH_RES_QUALITY_BONUS = 0.2
CROP_CONFIDENCE_BONUS = 0.1
QUALITY_BONUS_THRESHOLD = 80.0
CROP_CONFIDENCE_THRESHOLD = 0.8


class FusionService:
    """Combines the two provider readings into one FusedReading"""

    def __init__(
        self,
        satellite_weight: float = 0.6,
        high_res_weight: float = 0.4,
        weight_policy: Union[WeightPolicy, str] = WeightPolicy.FIXED,
    ):
        if satellite_weight < 0 or high_res_weight < 0:
            raise AgentConfigError("Fusion weights must be non-negative")
        if abs(satellite_weight + high_res_weight - 1.0) > 1e-9:
            raise AgentConfigError(
                f"Fusion weights must sum to 1 (got {satellite_weight} + {high_res_weight})"
            )
        try:
            self.weight_policy = WeightPolicy(weight_policy)
        except ValueError:
            raise AgentConfigError(f"Unknown weight policy: {weight_policy}")
        self.satellite_weight = satellite_weight
        self.high_res_weight = high_res_weight

    def resolve_weights(self, satellite: SatelliteReading, high_res: HighResReading) -> SourceWeights:
        """
        Weights for this pair of readings.

        ``fixed`` always applies the configured weights, even when one side
        is simulated. ``renormalize`` gives a simulated side weight 0 as long
        as the other side is live.
        """
        fixed = SourceWeights(satellite=self.satellite_weight, high_res=self.high_res_weight)
        if satellite.simulated == high_res.simulated:
            return fixed

        if self.weight_policy == WeightPolicy.RENORMALIZE:
            if satellite.simulated:
                return SourceWeights(satellite=0.0, high_res=1.0)
            return SourceWeights(satellite=1.0, high_res=0.0)

        simulated_side = "satellite" if satellite.simulated else "high-resolution"
        logger.warning(
            f"Blending simulated {simulated_side} reading at fixed weight "
            f"({self.satellite_weight}/{self.high_res_weight})"
        )
        return fixed

    @staticmethod
    def combine_ndvi(satellite_ndvi: float, high_res_ndvi: float, weights: SourceWeights) -> float:
        combined = satellite_ndvi * weights.satellite + high_res_ndvi * weights.high_res
        # keep float rounding from stepping outside the two inputs
        low, high = min(satellite_ndvi, high_res_ndvi), max(satellite_ndvi, high_res_ndvi)
        return min(max(combined, low), high)

    @staticmethod
    def calculate_confidence(satellite: SatelliteReading, high_res: HighResReading) -> float:
        """Additive completeness score; simulated data and estimated crop labels earn nothing. Clamped to [0, 1]"""
        confidence = BASE_CONFIDENCE

        if satellite.has_live("ndvi"):
            confidence += SATELLITE_NDVI_BONUS
        if satellite.has_live("soil_moisture"):
            confidence += SATELLITE_MOISTURE_BONUS

        if not high_res.simulated and high_res.data_quality > QUALITY_BONUS_THRESHOLD:
            confidence += HIGH_RES_QUALITY_BONUS
        if (
            not high_res.crop_estimated
            and high_res.crop_confidence is not None
            and high_res.crop_confidence > CROP_CONFIDENCE_THRESHOLD
        ):
            confidence += CROP_CONFIDENCE_BONUS

        return min(1.0, max(0.0, confidence))

    def fuse(self, satellite: SatelliteReading, high_res: HighResReading) -> FusedReading:
        weights = self.resolve_weights(satellite, high_res)
        combined_ndvi = self.combine_ndvi(satellite.ndvi, high_res.ndvi, weights)

        return FusedReading(
            combined_ndvi=combined_ndvi,
            confidence_level=self.calculate_confidence(satellite, high_res),
            weights=weights,
            weight_policy=self.weight_policy.value,
            recommendations=generate_recommendations(combined_ndvi, satellite, high_res),
        )
