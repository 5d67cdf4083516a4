"""
Resource descriptor factory.

Turns a compact set of provisioning numbers into a FogDevice the engine can
consume. Invalid numbers are rejected, never clamped.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Optional

from FogDevice import FogDevice, DeviceRole, DeviceCharacteristics
from errors import ConfigurationError

logger = logging.getLogger(__name__)


class EntityIdGenerator:
    """Hands out unique entity ids, starting at `start`."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def next_id(self) -> int:
        return next(self._counter)


_default_ids = EntityIdGenerator()


def generate_entity_id() -> int:
    """Next id from the process-wide generator."""
    return _default_ids.next_id()


@dataclass(frozen=True)
class DeviceProfile:
    """Provisioning values for one level of the hierarchy."""

    mips: int
    ram: int
    uplink_bandwidth: float
    downlink_bandwidth: float
    level: int
    rate_per_mips: float
    busy_power: float
    idle_power: float


CLOUD_PROFILE = DeviceProfile(44800, 40000, 100, 10000, 0, 0.01, 16 * 103, 16 * 83.25)
PROXY_PROFILE = DeviceProfile(2800, 4000, 10000, 10000, 1, 0.0, 107.339, 83.433)
ROUTER_PROFILE = DeviceProfile(2800, 4000, 1000, 10000, 2, 0.0, 107.339, 83.4333)
CAMERA_PROFILE = DeviceProfile(500, 1000, 10000, 10000, 3, 0.0, 87.53, 82.44)


def make_device(name: str, mips: int, ram: int, up_bw: float, down_bw: float,
                level: int, rate_per_mips: float, busy_power: float, idle_power: float,
                role: Optional[DeviceRole] = None,
                ids: Optional[EntityIdGenerator] = None) -> FogDevice:
    """
    Create a fully provisioned device.

    Args:
        name: Device name, unique within a topology
        mips: Processing capacity of the single processing element
        ram: Memory in MB
        up_bw: Uplink bandwidth
        down_bw: Downlink bandwidth
        level: Hierarchy level (0 = cloud)
        rate_per_mips: Cost per used MIPS
        busy_power: Power draw at full load (W)
        idle_power: Power draw when idle (W)
        role: Hierarchy role; derived from the level when omitted
        ids: Id generator to draw from (process-wide one by default)

    Returns:
        FogDevice with its level already set

    Raises:
        ConfigurationError: If any capacity, bandwidth or power value is invalid
    """
    for label, value in (("mips", mips), ("ram", ram),
                         ("uplink bandwidth", up_bw), ("downlink bandwidth", down_bw)):
        if value is None or value <= 0:
            raise ConfigurationError(f"Device {name!r}: {label} must be positive, got {value}")
    if level < 0:
        raise ConfigurationError(f"Device {name!r}: level must be >= 0, got {level}")
    if rate_per_mips < 0:
        raise ConfigurationError(f"Device {name!r}: rate per mips must be >= 0, got {rate_per_mips}")
    if busy_power < 0 or idle_power < 0:
        raise ConfigurationError(
            f"Device {name!r}: power values must be >= 0, got busy={busy_power}, idle={idle_power}")

    if role is None:
        roles = list(DeviceRole)
        role = roles[min(level, len(roles) - 1)]

    device_id = ids.next_id() if ids is not None else generate_entity_id()
    device = FogDevice(
        id=device_id,
        name=name,
        role=role,
        mips=mips,
        ram=ram,
        uplink_bandwidth=up_bw,
        downlink_bandwidth=down_bw,
        rate_per_mips=rate_per_mips,
        busy_power=busy_power,
        idle_power=idle_power,
        characteristics=DeviceCharacteristics(),
    )
    device.level = level
    logger.debug(f"[RESOURCES] Created {device!r}")
    return device


def make_device_from_profile(name: str, profile: DeviceProfile, role: DeviceRole,
                             ids: Optional[EntityIdGenerator] = None) -> FogDevice:
    return make_device(name, profile.mips, profile.ram, profile.uplink_bandwidth,
                       profile.downlink_bandwidth, profile.level, profile.rate_per_mips,
                       profile.busy_power, profile.idle_power, role=role, ids=ids)
