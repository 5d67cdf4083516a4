"""
Sensing and actuation endpoints attached to camera devices.

A camera's sensor uses the camera itself as gateway; the paired actuator
hangs off the camera's parent router.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from FogDevice import FogDevice, DeviceRole
from distribution import Distribution, DeterministicDistribution
from errors import TopologyError

logger = logging.getLogger(__name__)

SENSOR_TUPLE_TYPE = "camera"
ACTUATOR_TYPE = "PTZ_CONTROL"

SENSOR_LATENCY = 40.0
ACTUATOR_LATENCY = 1.0
CAM_TRANSMISSION_TIME = 5.0


@dataclass
class Sensor:
    """Periodic data source feeding `tuple_type` tuples into its gateway."""

    name: str
    tuple_type: str
    user_id: int
    app_id: str
    distribution: Distribution
    gateway_device_id: int = -1
    latency: float = 0.0
    paired_actuator: Optional[str] = None


@dataclass
class Actuator:
    """Command sink receiving `actuator_type` tuples from its gateway."""

    name: str
    user_id: int
    app_id: str
    actuator_type: str
    gateway_device_id: int = -1
    latency: float = 0.0


def attach_endpoints(camera: FogDevice, router: FogDevice, user_id: int, app_id: str,
                     endpoint_id: str,
                     distribution: Distribution = None,
                     sensor_latency: float = SENSOR_LATENCY,
                     actuator_latency: float = ACTUATOR_LATENCY) -> Tuple[Sensor, Actuator]:
    """
    Create the sensor/actuator pair for one camera.

    Args:
        camera: Leaf device that becomes the sensor gateway
        router: Parent of the camera; becomes the actuator gateway
        user_id: Owning user (broker) id
        app_id: Owning application id
        endpoint_id: Positional suffix shared by both endpoint names
        distribution: Emission distribution, deterministic every 5 units by default

    Raises:
        TopologyError: If `router` is not the parent of `camera`
    """
    if camera.role != DeviceRole.CAMERA:
        raise TopologyError(f"Sensor gateway {camera.name!r} is not a camera")
    if camera.parent_id != router.id:
        raise TopologyError(
            f"Actuator gateway id {router.id} is not the parent of {camera.name!r} "
            f"(parent id {camera.parent_id})")

    if distribution is None:
        distribution = DeterministicDistribution(CAM_TRANSMISSION_TIME)

    sensor = Sensor(f"sensor-{endpoint_id}", SENSOR_TUPLE_TYPE, user_id, app_id, distribution)
    sensor.gateway_device_id = camera.id
    sensor.latency = sensor_latency

    actuator = Actuator(f"ptz-{endpoint_id}", user_id, app_id, ACTUATOR_TYPE)
    actuator.gateway_device_id = router.id
    actuator.latency = actuator_latency
    sensor.paired_actuator = actuator.name

    logger.debug(f"[ENDPOINTS] {sensor.name} -> {camera.name}, {actuator.name} -> {router.name}")
    return sensor, actuator
