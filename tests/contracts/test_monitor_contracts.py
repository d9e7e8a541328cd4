"""Tests for monitor contracts.

These tests verify that contracts are enforced at stage boundaries.
They test contract violations directly, without defensive logic downstream.
"""

import numpy as np
import pytest

pytestmark = pytest.mark.unit

from rivercast.contracts import (
    ContractViolation,
    require,
    assert_distance_table,
    assert_samples_ordered,
    assert_feature_collection,
)
from rivercast.core.types import IntensitySample, TileAddress
from rivercast.river.risk_zones import circular_buffer


def _sample(i, intensity=1.0):
    return IntensitySample(
        path_index=i,
        coordinates=(0.0, 0.0),
        intensity=intensity,
        tile=TileAddress(0, 0, 0),
        pixel=(0, 0),
    )


def _feature(is_static=True, ring_points=32, **props):
    ring = circular_buffer((0.0, 0.0), 100.0, ring_points)
    properties = {"riskLevel": "low", "radius": 100.0, "intensity": 0.5,
                  "segmentIndex": 0, "isStatic": is_static}
    properties.update(props)
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


class TestRequire:

    def test_require_passes_silently(self):
        require(True, "never raised")

    def test_require_raises_contract_violation(self):
        with pytest.raises(ContractViolation, match="broken"):
            require(False, "broken")

    def test_contract_violation_is_runtime_error(self):
        assert issubclass(ContractViolation, RuntimeError)


class TestDistanceTableContract:

    def test_valid_table_passes(self):
        assert_distance_table(np.array([0.0, 10.0, 10.0, 25.0]), 4)

    def test_empty_table_for_degenerate_path_passes(self):
        assert_distance_table(np.array([]), 1)

    def test_length_mismatch_fails(self):
        with pytest.raises(ContractViolation, match="expected 3"):
            assert_distance_table(np.array([0.0, 1.0]), 3)

    def test_nonzero_start_fails(self):
        with pytest.raises(ContractViolation, match="table\\[0\\]"):
            assert_distance_table(np.array([5.0, 10.0]), 2)

    def test_decreasing_table_fails(self):
        with pytest.raises(ContractViolation, match="nondecreasing"):
            assert_distance_table(np.array([0.0, 10.0, 5.0]), 3)

    def test_list_instead_of_array_fails(self):
        with pytest.raises(ContractViolation, match="1-D ndarray"):
            assert_distance_table([0.0, 1.0], 2)


class TestSamplingContract:

    def test_ordered_samples_pass(self):
        assert_samples_ordered([_sample(0), _sample(2), _sample(3)], 4)

    def test_out_of_order_fails(self):
        with pytest.raises(ContractViolation, match="follows"):
            assert_samples_ordered([_sample(2), _sample(1)], 4)

    def test_duplicate_index_fails(self):
        with pytest.raises(ContractViolation):
            assert_samples_ordered([_sample(1), _sample(1)], 4)

    def test_index_out_of_range_fails(self):
        with pytest.raises(ContractViolation, match="out of range"):
            assert_samples_ordered([_sample(5)], 4)

    def test_negative_intensity_fails(self):
        with pytest.raises(ContractViolation, match="negative intensity"):
            assert_samples_ordered([_sample(0, intensity=-1.0)], 2)


class TestZoneContract:

    def test_static_then_moving_passes(self):
        fc = {"type": "FeatureCollection", "features": [
            _feature(True),
            _feature(False, parcelId="1-0"),
        ]}
        assert_feature_collection(fc, 32)

    def test_empty_collection_passes(self):
        assert_feature_collection({"type": "FeatureCollection", "features": []}, 32)

    def test_wrong_type_fails(self):
        with pytest.raises(ContractViolation, match="not a FeatureCollection"):
            assert_feature_collection({"type": "Feature"}, 32)

    def test_static_after_moving_fails(self):
        fc = {"type": "FeatureCollection", "features": [
            _feature(False, parcelId="1-0"),
            _feature(True),
        ]}
        with pytest.raises(ContractViolation, match="static zone after a moving zone"):
            assert_feature_collection(fc, 32)

    def test_missing_property_fails(self):
        feature = _feature(True)
        del feature["properties"]["riskLevel"]
        with pytest.raises(ContractViolation, match="riskLevel"):
            assert_feature_collection({"type": "FeatureCollection", "features": [feature]}, 32)

    def test_open_ring_fails(self):
        feature = _feature(True)
        feature["geometry"]["coordinates"][0].pop()
        with pytest.raises(ContractViolation, match="closed ring"):
            assert_feature_collection({"type": "FeatureCollection", "features": [feature]}, 32)

    def test_zero_radius_fails(self):
        feature = _feature(True, radius=0.0)
        with pytest.raises(ContractViolation, match="non-positive radius"):
            assert_feature_collection({"type": "FeatureCollection", "features": [feature]}, 32)


def test_every_documented_stage_has_a_requirement():
    from rivercast.contracts.invariants import MONITOR_INVARIANTS, STAGE_REQUIREMENTS

    assert set(MONITOR_INVARIANTS) == set(STAGE_REQUIREMENTS)
    assert set(STAGE_REQUIREMENTS.values()) <= {"REQUIRED", "OPTIONAL"}
    assert all(MONITOR_INVARIANTS[stage] for stage in MONITOR_INVARIANTS)
