"""
Tests for the rule-based recommendations and farm advisory analyses.
"""

import pytest

from conftest import LATITUDE, LONGITUDE, make_high_res, make_satellite
from terraai.agents.fusion.advisory import FarmAdvisoryService
from terraai.agents.fusion.insights import (
    CRITICAL_IRRIGATION_MESSAGE, HEALTHY_VEGETATION_MESSAGE, HIGH_QUALITY_MESSAGE,
    LOW_VEGETATION_MESSAGE, generate_recommendations
)
from terraai.agents.fusion.models import AgriculturalReading, ReadingMetadata
from terraai.agents.fusion.service import FusionService
from terraai.agents.imagery.models import CroplandInfo, SentinelScene, SoilProperties
from terraai.core.geo import Location


def test_critical_soil_moisture_triggers_irrigation_warning():
    recommendations = generate_recommendations(0.5, make_satellite(soil_moisture=0.10), make_high_res())
    assert CRITICAL_IRRIGATION_MESSAGE in recommendations


def test_quality_and_crop_notes():
    recommendations = generate_recommendations(
        0.5, make_satellite(), make_high_res(data_quality=95.0, crop_type="corn")
    )
    assert HIGH_QUALITY_MESSAGE in recommendations
    assert any("Corn detected" in r for r in recommendations)


def test_ndvi_bands_are_exclusive():
    low = generate_recommendations(0.2, make_satellite(), make_high_res())
    high = generate_recommendations(0.8, make_satellite(), make_high_res())
    middle = generate_recommendations(0.5, make_satellite(), make_high_res())
    assert LOW_VEGETATION_MESSAGE in low and HEALTHY_VEGETATION_MESSAGE not in low
    assert HEALTHY_VEGETATION_MESSAGE in high and LOW_VEGETATION_MESSAGE not in high
    assert middle == []


def test_rules_accumulate_in_order():
    recommendations = generate_recommendations(
        0.1,
        make_satellite(soil_moisture=0.05),
        make_high_res(data_quality=92.0, crop_type="wheat"),
    )
    assert recommendations[:3] == [LOW_VEGETATION_MESSAGE, CRITICAL_IRRIGATION_MESSAGE, HIGH_QUALITY_MESSAGE]
    assert len(recommendations) == 4


@pytest.fixture
def advisory():
    return FarmAdvisoryService()


def _reading(satellite, high_res):
    return AgriculturalReading(
        location=Location(longitude=LONGITUDE, latitude=LATITUDE),
        satellite=satellite,
        high_res=high_res,
        fusion=FusionService().fuse(satellite, high_res),
        metadata=ReadingMetadata(
            timestamp="2024-06-10T00:00:00",
            spatial_resolution="10m",
            update_frequency="daily",
            temporal_coverage="30 days",
        ),
    )


def test_stressed_field_analysis(advisory):
    scene = SentinelScene(ndvi=0.25, cloud_cover=30.0, quality=70.0)
    analysis = advisory.ultra_high_res_crop_analysis(scene)
    assert analysis.crop_health_zones.healthy == "Low"
    assert analysis.crop_health_zones.stressed_areas == "Detected"
    assert analysis.crop_health_zones.recommendation == "Targeted intervention needed"
    assert len(analysis.precision_recommendations) == 4
    assert analysis.precision_recommendations[-1] == "Use precision irrigation based on field zones"


def test_healthy_field_analysis(advisory):
    analysis = advisory.ultra_high_res_crop_analysis(SentinelScene(ndvi=0.75, cloud_cover=5.0, quality=95.0))
    assert analysis.crop_health_zones.healthy == "High"
    assert analysis.crop_health_zones.stressed_areas == "None"
    assert analysis.precision_recommendations == ["Use precision irrigation based on field zones"]


def test_corn_insights(advisory):
    satellite = make_satellite(ndvi=0.72, temperature=25.0, soil_moisture=0.3)
    soil = SoilProperties(ph=6.8, organic_matter_pct=3.0, drainage="well-drained", fertility="high")
    cropland = CroplandInfo(crop_type="corn", confidence=0.9, intensity="intensive", irrigated=False)

    insights = advisory.crop_specific_insights(satellite, cropland, soil)

    assert insights.crop_type == "corn"
    assert insights.current_match.overall_score == 1.0
    assert insights.growth_stage == "maturity"
    assert insights.action_priority == []
    # 150 * 0.72 / 0.6 * 1.1
    assert insights.yield_prediction.predicted == 198
    assert insights.yield_prediction.confidence == 0.85


def test_requested_crop_overrides_detected(advisory):
    cropland = CroplandInfo(crop_type="corn", confidence=0.9, intensity="intensive", irrigated=False)
    insights = advisory.crop_specific_insights(make_satellite(), cropland, None, crop_type="Soybean")
    assert insights.crop_type == "soybeans"
    assert insights.optimal_conditions.ndvi == [0.5, 0.7]


def test_unknown_crop_uses_mixed_ranges(advisory):
    insights = advisory.crop_specific_insights(
        make_satellite(ndvi=0.2, soil_moisture=0.1, temperature=38.0, simulated=True), None, None
    )
    assert insights.crop_type == "mixed"
    assert insights.growth_stage == "seedling"
    assert insights.action_priority == ["irrigation", "fertilization", "heat_protection"]
    assert insights.current_match.overall_score == 0.0
    assert insights.yield_prediction.confidence == 0.6


def test_decision_support_skips_actions_underway(advisory):
    reading = _reading(
        make_satellite(ndvi=0.2, soil_moisture=0.1, precipitation=3.0, temperature=37.0),
        make_high_res(ndvi=0.2),
    )
    support = advisory.decision_support(reading, None, ["irrigation"])

    assert len(support.immediate_actions) == 2
    assert not any("Irrigate" in action for action in support.immediate_actions)
    assert support.risk_assessment.drought == "High"
    assert support.risk_assessment.heat_stress == "High"
    assert support.risk_assessment.crop_health == "At Risk"
    assert support.risk_assessment.overall == "High"
    assert support.data_confidence == reading.fusion.confidence_level


def test_decision_support_low_risk(advisory):
    reading = _reading(make_satellite(ndvi=0.7), make_high_res(ndvi=0.7))
    support = advisory.decision_support(reading, None, [])
    assert support.immediate_actions == []
    assert support.risk_assessment.overall == "Low"
    assert "day1" in support.weekly_plan
