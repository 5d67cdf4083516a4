"""
Build the fixed-shape device hierarchy: cloud -> proxy -> routers -> cameras.

Device names are positional (`router-<area>`, `camera-<camera>-of-router-<area>`)
and are relied on by the endpoint and mapping stages.
"""

import logging
from typing import Dict, List, Optional, Tuple

from FogDevice import FogDevice, DeviceRole
from errors import ConfigurationError, TopologyError
from resources import (EntityIdGenerator, make_device_from_profile,
                       CLOUD_PROFILE, PROXY_PROFILE, ROUTER_PROFILE, CAMERA_PROFILE)

logger = logging.getLogger(__name__)

CLOUD_NAME = "cloud"
PROXY_NAME = "proxy-server"

PROXY_UPLINK_LATENCY = 100.0
ROUTER_UPLINK_LATENCY = 2.0
CAMERA_UPLINK_LATENCY = 2.0


def router_name(area_id) -> str:
    return f"router-{area_id}"


def camera_id(camera_index, area_id) -> str:
    """Positional id shared by a camera and its endpoints."""
    return f"{camera_index}-of-router-{area_id}"


def camera_name(camera_index, area_id) -> str:
    return f"camera-{camera_id(camera_index, area_id)}"


def add_device(devices: List[FogDevice], index: Dict[int, FogDevice], device: FogDevice,
               parent: Optional[FogDevice] = None, uplink_latency: float = 0.0) -> FogDevice:
    """
    Register `device` in the topology, linking it below `parent` if given.

    Raises:
        TopologyError: If the parent is not registered yet, the level does not
            increase along the link, or the id is already taken
    """
    if device.id in index:
        raise TopologyError(f"Duplicate device id {device.id} for {device.name!r}")
    if parent is not None:
        if parent.id not in index:
            raise TopologyError(
                f"Device {device.name!r} references unknown parent id {parent.id}")
        if device.level <= parent.level:
            raise TopologyError(
                f"Device {device.name!r} (level {device.level}) must sit below "
                f"{parent.name!r} (level {parent.level})")
        device.attach_to(parent, uplink_latency)
    devices.append(device)
    index[device.id] = device
    return device


def build_hierarchy(num_areas: int, cameras_per_area: int,
                    ids: Optional[EntityIdGenerator] = None) -> Tuple[FogDevice, List[FogDevice]]:
    """
    Create the device tree.

    Args:
        num_areas: Number of routers below the proxy
        cameras_per_area: Number of cameras below every router
        ids: Id generator for the devices

    Returns:
        (cloud root, all devices in creation order)
    """
    if num_areas < 0 or cameras_per_area < 0:
        raise ConfigurationError(
            f"Area and camera counts must be >= 0, got {num_areas} areas, {cameras_per_area} cameras")

    devices: List[FogDevice] = []
    index: Dict[int, FogDevice] = {}

    cloud = make_device_from_profile(CLOUD_NAME, CLOUD_PROFILE, DeviceRole.CLOUD, ids)
    add_device(devices, index, cloud)

    proxy = make_device_from_profile(PROXY_NAME, PROXY_PROFILE, DeviceRole.PROXY, ids)
    add_device(devices, index, proxy, cloud, PROXY_UPLINK_LATENCY)

    for area in range(num_areas):
        add_area(devices, index, str(area), proxy, cameras_per_area, ids)

    logger.info(f"[NETWORK] Built hierarchy with {len(devices)} devices "
                f"({num_areas} areas x {cameras_per_area} cameras)")
    return cloud, devices


def add_area(devices: List[FogDevice], index: Dict[int, FogDevice], area_id: str,
             proxy: FogDevice, cameras_per_area: int,
             ids: Optional[EntityIdGenerator] = None) -> FogDevice:
    # the router acts as the fog node of its area
    router = make_device_from_profile(router_name(area_id), ROUTER_PROFILE, DeviceRole.ROUTER, ids)
    add_device(devices, index, router, proxy, ROUTER_UPLINK_LATENCY)

    for i in range(cameras_per_area):
        camera = make_device_from_profile(camera_name(i, area_id), CAMERA_PROFILE,
                                          DeviceRole.CAMERA, ids)
        add_device(devices, index, camera, router, CAMERA_UPLINK_LATENCY)
    return router


def path_to_root(device: FogDevice) -> List[FogDevice]:
    """`device` followed by every ancestor up to the root."""
    path = [device]
    while path[-1].Parent is not None:
        path.append(path[-1].Parent)
    return path


def devices_with_role(devices: List[FogDevice], role: DeviceRole) -> List[FogDevice]:
    return [device for device in devices if device.role == role]
