# terraai/agents/fusion/insights.py
"""
Rule-based recommendations for a fused reading.

Rules are checked in order and each one that matches appends its message;
they are not mutually exclusive, apart from the two NDVI bands.
"""
from typing import List

from terraai.agents.imagery.models import HighResReading
from terraai.agents.satellite.models import SatelliteReading

LOW_NDVI_THRESHOLD = 0.3
HEALTHY_NDVI_THRESHOLD = 0.7
CRITICAL_SOIL_MOISTURE = 0.15
HIGH_DATA_QUALITY = 90.0

LOW_VEGETATION_MESSAGE = "🚨 Low vegetation health detected - consider fertilization"
HEALTHY_VEGETATION_MESSAGE = "✅ Excellent vegetation health - maintain current practices"
CRITICAL_IRRIGATION_MESSAGE = "💧 Soil moisture critically low - immediate irrigation recommended"
HIGH_QUALITY_MESSAGE = "📊 High-quality satellite data available - precision agriculture optimal"
CROP_SPECIFIC_TEMPLATE = "🌾 {crop} detected - applying crop-specific insights"


def generate_recommendations(
    combined_ndvi: float,
    satellite: SatelliteReading,
    high_res: HighResReading,
) -> List[str]:
    recommendations: List[str] = []

    if combined_ndvi < LOW_NDVI_THRESHOLD:
        recommendations.append(LOW_VEGETATION_MESSAGE)
    elif combined_ndvi > HEALTHY_NDVI_THRESHOLD:
        recommendations.append(HEALTHY_VEGETATION_MESSAGE)

    if satellite.soil_moisture < CRITICAL_SOIL_MOISTURE:
        recommendations.append(CRITICAL_IRRIGATION_MESSAGE)

    if high_res.data_quality > HIGH_DATA_QUALITY:
        recommendations.append(HIGH_QUALITY_MESSAGE)

    if high_res.crop_type:
        recommendations.append(CROP_SPECIFIC_TEMPLATE.format(crop=high_res.crop_type.capitalize()))

    return recommendations
