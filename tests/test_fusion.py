"""
Tests for NDVI fusion, weight policies and confidence scoring.
"""

import itertools
import logging

import numpy as np
import pytest

from conftest import make_high_res, make_satellite
from terraai.agents.fusion.service import FusionService
from terraai.core.config import WeightPolicy
from terraai.core.exceptions import AgentConfigError


def test_weighted_ndvi_example():
    fused = FusionService().fuse(make_satellite(ndvi=0.8), make_high_res(ndvi=0.4))
    assert fused.combined_ndvi == pytest.approx(0.64)
    assert fused.weights.satellite == 0.6
    assert fused.weights.high_res == 0.4


@pytest.mark.parametrize("seed", range(20))
def test_combined_ndvi_between_inputs(seed):
    rng = np.random.default_rng(seed)
    a, b = (float(v) for v in rng.uniform(-1, 1, size=2))
    fused = FusionService().fuse(make_satellite(ndvi=a), make_high_res(ndvi=b))
    assert fused.combined_ndvi == pytest.approx(0.6 * a + 0.4 * b)
    assert min(a, b) <= fused.combined_ndvi <= max(a, b)


def test_equal_inputs_combine_to_same_value():
    fused = FusionService().fuse(make_satellite(ndvi=0.55), make_high_res(ndvi=0.55))
    assert fused.combined_ndvi == 0.55


def test_full_live_data_confidence_is_capped():
    satellite = make_satellite()
    high_res = make_high_res(data_quality=95.0, crop_type="corn", crop_confidence=0.9)
    # 0.5 + 0.2 + 0.1 + 0.2 + 0.1 = 1.1 before clamping
    assert FusionService.calculate_confidence(satellite, high_res) == 1.0


def test_confidence_without_bonuses_is_base():
    satellite = make_satellite(available_fields=[])
    high_res = make_high_res(data_quality=50.0)
    assert FusionService.calculate_confidence(satellite, high_res) == pytest.approx(0.5)


def test_simulated_readings_earn_no_bonus():
    satellite = make_satellite(simulated=True, source="simulated")
    high_res = make_high_res(data_quality=99.0, simulated=True, source="simulated")
    assert FusionService.calculate_confidence(satellite, high_res) == pytest.approx(0.5)


@pytest.mark.parametrize("quality", [0.0, 80.0, 80.1, 100.0])
@pytest.mark.parametrize("crop_confidence", [None, 0.5, 0.95])
def test_confidence_always_within_bounds(quality, crop_confidence):
    confidence = FusionService.calculate_confidence(
        make_satellite(),
        make_high_res(data_quality=quality, crop_confidence=crop_confidence),
    )
    assert 0.0 <= confidence <= 1.0


def test_fixed_policy_warns_on_simulated_source(caplog):
    service = FusionService()
    with caplog.at_level(logging.WARNING):
        fused = service.fuse(make_satellite(simulated=True), make_high_res())
    assert fused.weights.satellite == 0.6
    assert "simulated satellite" in caplog.text


def test_renormalize_policy_drops_simulated_side():
    service = FusionService(weight_policy="renormalize")
    fused = service.fuse(make_satellite(ndvi=0.2, simulated=True), make_high_res(ndvi=0.7))
    assert fused.weights.satellite == 0.0
    assert fused.weights.high_res == 1.0
    assert fused.combined_ndvi == pytest.approx(0.7)
    assert fused.weight_policy == WeightPolicy.RENORMALIZE.value


def test_renormalize_keeps_fixed_weights_when_both_live():
    service = FusionService(weight_policy=WeightPolicy.RENORMALIZE)
    weights = service.resolve_weights(make_satellite(), make_high_res())
    assert (weights.satellite, weights.high_res) == (0.6, 0.4)
    assert weights.satellite + weights.high_res == pytest.approx(1.0)


@pytest.mark.parametrize("kwargs", [
    {"satellite_weight": 0.7, "high_res_weight": 0.4},
    {"satellite_weight": -0.2, "high_res_weight": 1.2},
    {"weight_policy": "average"},
])
def test_invalid_configuration_is_rejected(kwargs):
    with pytest.raises(AgentConfigError):
        FusionService(**kwargs)


COMPLETENESS_FACTORS = ("live_ndvi", "live_soil_moisture", "live_quality", "confident_crop")


def _readings_with(factors):
    fields = [name for flag, name in (("live_ndvi", "ndvi"), ("live_soil_moisture", "soil_moisture")) if flag in factors]
    satellite = make_satellite(available_fields=fields)
    high_res = make_high_res(
        data_quality=95.0 if "live_quality" in factors else 60.0,
        crop_type="corn" if "confident_crop" in factors else None,
        crop_confidence=0.9 if "confident_crop" in factors else None,
    )
    return satellite, high_res


SUBSETS = [
    frozenset(combo)
    for size in range(len(COMPLETENESS_FACTORS) + 1)
    for combo in itertools.combinations(COMPLETENESS_FACTORS, size)
]


@pytest.mark.parametrize("smaller", SUBSETS)
def test_confidence_never_drops_as_data_completes(smaller):
    base = FusionService.calculate_confidence(*_readings_with(smaller))
    for larger in SUBSETS:
        if smaller < larger:
            assert FusionService.calculate_confidence(*_readings_with(larger)) >= base


def test_estimated_crop_label_earns_no_bonus():
    satellite = make_satellite(available_fields=[])
    confirmed = make_high_res(data_quality=50.0, crop_type="corn", crop_confidence=0.95)
    estimated = make_high_res(data_quality=50.0, crop_type="corn", crop_confidence=0.95, crop_estimated=True)
    assert FusionService.calculate_confidence(satellite, confirmed) == pytest.approx(0.6)
    assert FusionService.calculate_confidence(satellite, estimated) == pytest.approx(0.5)
