"""
Tests for the resource factory and the device hierarchy builder.
"""

import pytest
import sys
import os

# Add src directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '../../src'))

import networkx as nx

from FogDevice import DeviceRole
from errors import ConfigurationError, TopologyError
from graph import create_fog_graph, is_valid_hierarchy, route
from network import build_hierarchy, add_device, path_to_root, devices_with_role
from resources import EntityIdGenerator, make_device, CAMERA_PROFILE


class TestMakeDevice:
    """Test suite for the resource descriptor factory."""

    def test_sets_level_and_values(self):
        ids = EntityIdGenerator(100)
        device = make_device("router-0", 2800, 4000, 1000, 10000, 2, 0.0, 107.339, 83.4333, ids=ids)

        assert device.id == 100
        assert device.level == 2
        assert device.role == DeviceRole.ROUTER
        assert device.mips == 2800
        assert device.ram == 4000
        assert device.uplink_bandwidth == 1000
        assert device.downlink_bandwidth == 10000
        assert device.parent_id == -1
        assert device.characteristics.arch == "x86"

    def test_ids_are_unique(self):
        ids = EntityIdGenerator()
        first = make_device("a", 1, 1, 1, 1, 3, 0, 1, 1, ids=ids)
        second = make_device("b", 1, 1, 1, 1, 3, 0, 1, 1, ids=ids)
        assert first.id != second.id

    @pytest.mark.parametrize("mips,ram,up_bw,down_bw", [
        (0, 1000, 100, 100),
        (500, -1, 100, 100),
        (500, 1000, 0, 100),
        (500, 1000, 100, 0),
    ])
    def test_rejects_non_positive_provisioning(self, mips, ram, up_bw, down_bw):
        with pytest.raises(ConfigurationError):
            make_device("bad", mips, ram, up_bw, down_bw, 3, 0.0, 1.0, 1.0, ids=EntityIdGenerator())

    def test_rejects_negative_level(self):
        with pytest.raises(ConfigurationError, match="level"):
            make_device("bad", 1, 1, 1, 1, -1, 0.0, 1.0, 1.0, ids=EntityIdGenerator())


class TestBuildHierarchy:
    """Test suite for the cloud/proxy/router/camera tree."""

    @pytest.mark.parametrize("areas,cameras", [(0, 0), (0, 3), (1, 0), (1, 2), (3, 4)])
    def test_device_count(self, areas, cameras):
        root, devices = build_hierarchy(areas, cameras, EntityIdGenerator())

        assert len(devices) == 2 + areas + areas * cameras
        assert len(devices_with_role(devices, DeviceRole.CAMERA)) == areas * cameras
        assert root is devices[0]
        assert root.is_root

    def test_reference_scenario_names_and_latencies(self):
        _, devices = build_hierarchy(1, 2, EntityIdGenerator())
        names = [d.name for d in devices]

        assert names == ["cloud", "proxy-server", "router-0",
                         "camera-0-of-router-0", "camera-1-of-router-0"]
        by_name = {d.name: d for d in devices}
        assert by_name["proxy-server"].uplink_latency == 100
        assert by_name["router-0"].uplink_latency == 2
        assert by_name["camera-1-of-router-0"].uplink_latency == 2
        assert by_name["camera-1-of-router-0"].parent_id == by_name["router-0"].id
        assert by_name["router-0"].parent_id == by_name["proxy-server"].id

    def test_parents_precede_children(self):
        _, devices = build_hierarchy(2, 3, EntityIdGenerator())
        seen = set()
        for device in devices:
            if not device.is_root:
                assert device.parent_id in seen
                assert device.level > device.Parent.level
            seen.add(device.id)

    def test_levels_follow_roles(self):
        _, devices = build_hierarchy(2, 2, EntityIdGenerator())
        levels = {DeviceRole.CLOUD: 0, DeviceRole.PROXY: 1, DeviceRole.ROUTER: 2, DeviceRole.CAMERA: 3}
        for device in devices:
            assert device.level == levels[device.role]

    def test_rejects_negative_counts(self):
        with pytest.raises(ConfigurationError):
            build_hierarchy(-1, 2, EntityIdGenerator())

    def test_path_to_root(self):
        _, devices = build_hierarchy(1, 1, EntityIdGenerator())
        cloud, proxy, router, camera = devices

        assert path_to_root(camera) == [camera, router, proxy, cloud]
        assert path_to_root(cloud) == [cloud]


class TestAddDevice:
    """Test suite for topology integrity checks."""

    def test_unknown_parent(self):
        ids = EntityIdGenerator()
        orphan_parent = make_device("router-x", **_router_kwargs(), ids=ids)
        camera = make_device("camera-x", *_camera_args(), ids=ids)

        with pytest.raises(TopologyError, match="unknown parent"):
            add_device([], {}, camera, orphan_parent, 2)

    def test_level_must_increase(self):
        ids = EntityIdGenerator()
        devices, index = [], {}
        camera = make_device("camera-a", *_camera_args(), ids=ids)
        other = make_device("camera-b", *_camera_args(), ids=ids)
        add_device(devices, index, camera)

        with pytest.raises(TopologyError, match="must sit below"):
            add_device(devices, index, other, camera, 2)


class TestFogGraph:
    """Test suite for the networkx view of the topology."""

    def test_graph_is_tree_towards_cloud(self):
        root, devices = build_hierarchy(2, 2, EntityIdGenerator())
        graph = create_fog_graph(devices)

        assert graph.number_of_nodes() == len(devices)
        assert graph.number_of_edges() == len(devices) - 1
        assert is_valid_hierarchy(graph)
        assert nx.has_path(graph, devices[-1].id, root.id)

    def test_route_directions(self):
        _, devices = build_hierarchy(1, 2, EntityIdGenerator())
        cloud, proxy, router, cam0, cam1 = devices
        graph = create_fog_graph(devices)

        assert route(graph, cam0.id, cam0.id) == []
        assert route(graph, cam0.id, proxy.id) == [(cam0.id, router.id, True), (router.id, proxy.id, True)]
        assert route(graph, cloud.id, router.id) == [(cloud.id, proxy.id, False), (proxy.id, router.id, False)]
        assert route(graph, cam0.id, cam1.id) == [(cam0.id, router.id, True), (router.id, cam1.id, False)]


def _camera_args():
    p = CAMERA_PROFILE
    return (p.mips, p.ram, p.uplink_bandwidth, p.downlink_bandwidth, p.level,
            p.rate_per_mips, p.busy_power, p.idle_power)


def _router_kwargs():
    return dict(mips=2800, ram=4000, up_bw=1000, down_bw=10000, level=2,
                rate_per_mips=0.0, busy_power=107.339, idle_power=83.4333)


if __name__ == "__main__":
    pytest.main([__file__])
