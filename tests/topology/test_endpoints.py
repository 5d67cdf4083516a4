"""
Tests for sensor/actuator attachment and emission distributions.
"""

import pytest
import sys
import os

# Add src directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '../../src'))

import numpy as np

from distribution import (DeterministicDistribution, UniformDistribution, NormalDistribution,
                          create_distribution)
from endpoints import attach_endpoints, SENSOR_TUPLE_TYPE, ACTUATOR_TYPE
from errors import TopologyError
from network import build_hierarchy
from resources import EntityIdGenerator


@pytest.fixture
def topology():
    _, devices = build_hierarchy(2, 2, EntityIdGenerator())
    return {d.name: d for d in devices}


class TestAttachEndpoints:
    """Test suite for attach_endpoints."""

    def test_gateways_and_latencies(self, topology):
        camera = topology["camera-1-of-router-0"]
        router = topology["router-0"]

        sensor, actuator = attach_endpoints(camera, router, 7, "DCNS", "1-of-router-0")

        assert sensor.name == "sensor-1-of-router-0"
        assert actuator.name == "ptz-1-of-router-0"
        assert sensor.gateway_device_id == camera.id
        assert actuator.gateway_device_id == router.id == camera.parent_id
        assert sensor.latency == 40.0
        assert actuator.latency == 1.0
        assert sensor.tuple_type == SENSOR_TUPLE_TYPE
        assert actuator.actuator_type == ACTUATOR_TYPE
        assert sensor.app_id == actuator.app_id == "DCNS"
        assert sensor.user_id == actuator.user_id == 7
        assert sensor.paired_actuator == actuator.name

    def test_default_period(self, topology):
        sensor, _ = attach_endpoints(topology["camera-0-of-router-1"], topology["router-1"],
                                     1, "DCNS", "0-of-router-1")
        assert isinstance(sensor.distribution, DeterministicDistribution)
        assert sensor.distribution.next_value() == 5.0

    def test_router_must_be_parent(self, topology):
        with pytest.raises(TopologyError, match="not the parent"):
            attach_endpoints(topology["camera-0-of-router-1"], topology["router-0"],
                             1, "DCNS", "0-of-router-1")

    def test_gateway_must_be_camera(self, topology):
        with pytest.raises(TopologyError, match="not a camera"):
            attach_endpoints(topology["router-0"], topology["proxy-server"], 1, "DCNS", "x")


class TestDistributions:
    """Test suite for emission distributions."""

    def test_deterministic(self):
        dist = DeterministicDistribution(5)
        assert dist.next_value(np.random.default_rng(1)) == 5
        assert dist.mean_inter_arrival_time() == 5

    def test_uniform_range(self):
        rng = np.random.default_rng(3)
        dist = UniformDistribution(2.5, 7.5)
        values = [dist.next_value(rng) for _ in range(200)]
        assert all(2.5 <= v < 7.5 for v in values)
        assert dist.mean_inter_arrival_time() == 5.0

    def test_normal_never_negative(self):
        rng = np.random.default_rng(3)
        dist = NormalDistribution(1.0, 2.0)
        assert all(dist.next_value(rng) > 0 for _ in range(200))

    def test_factory(self):
        assert isinstance(create_distribution("uniform", 5), UniformDistribution)
        assert isinstance(create_distribution("normal", 5), NormalDistribution)
        with pytest.raises(ValueError, match="Unknown distribution"):
            create_distribution("poisson", 5)

    def test_invalid_period(self):
        with pytest.raises(ValueError):
            DeterministicDistribution(0)


if __name__ == "__main__":
    pytest.main([__file__])
