"""
Simulation Environment - Scenario orchestrator for the smart car parking system.

Separates the build phase (devices, endpoints, application graph) from the
submission and run phases. A scenario moves CONFIGURED -> SUBMITTED ->
COMPLETED, or ends in FAILED on the first error.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

import numpy as np

from FogDevice import FogDevice, DeviceRole
from application import Application, create_application, PICTURE_CAPTURE, SLOT_DETECTOR
from distribution import create_distribution
from endpoints import Sensor, Actuator, attach_endpoints, CAM_TRANSMISSION_TIME
from engine import Controller, FogBroker, SimulationClock, SimulationResults
from errors import ConfigurationError, ScenarioError
from network import build_hierarchy, devices_with_role
from placement import (ModuleMapping, ModulePlacement, ModulePlacementEdgewards,
                       ModulePlacementMapping, create_module_mapping)
from resources import EntityIdGenerator

# ==================== SCENARIO CONFIGURATION ====================

logger = logging.getLogger(__name__)

MAX_SIMULATION_TIME = 10000.0
DEFAULT_APP_ID = "DCNS"

# Roles allowed to host each module in edge-ward mode
CANDIDATE_ROLES: Dict[str, Iterable[DeviceRole]] = {
    PICTURE_CAPTURE: (DeviceRole.CAMERA, DeviceRole.CLOUD),
    SLOT_DETECTOR: (DeviceRole.ROUTER,),
}


class ScenarioState(Enum):
    CONFIGURED = "configured"
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    FAILED = "failed"


DEFAULT_SEED = 12345


@dataclass
class ScenarioConfig:
    """Configuration class for the parking scenario parameters."""

    # Topology parameters
    num_areas: int = 1
    cameras_per_area: int = 2

    # Camera takes a picture every `cam_transmission_time` time units
    cam_transmission_time: float = CAM_TRANSMISSION_TIME
    emission: str = "deterministic"

    # True sends everything to the cloud, False places modules edge-wards
    is_cloud: bool = False

    simulation_time: float = MAX_SIMULATION_TIME
    app_id: str = DEFAULT_APP_ID
    # None reads $SCENARIO_SEED, falling back to DEFAULT_SEED
    seed: Optional[int] = None
    trace: bool = False

    def validate(self) -> None:
        if self.num_areas < 0 or self.cameras_per_area < 0:
            raise ConfigurationError(
                f"Area and camera counts must be >= 0, got {self.num_areas}/{self.cameras_per_area}")
        if self.cam_transmission_time <= 0:
            raise ConfigurationError(
                f"Camera transmission time must be positive, got {self.cam_transmission_time}")
        if self.simulation_time <= 0:
            raise ConfigurationError(f"Simulation time must be positive, got {self.simulation_time}")
        if self.emission not in ("deterministic", "uniform", "normal"):
            raise ConfigurationError(f"Unknown emission distribution {self.emission!r}")
        self.resolved_seed()

    def resolved_seed(self) -> int:
        if self.seed is not None:
            return self.seed
        raw = os.environ.get("SCENARIO_SEED")
        if raw is None:
            return DEFAULT_SEED
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(f"SCENARIO_SEED must be an integer, got {raw!r}")

    @classmethod
    def create_direct_cloud(cls, **kwargs) -> "ScenarioConfig":
        """Configuration sending every module to the cloud."""
        return cls(is_cloud=True, **kwargs)

    @classmethod
    def create_edgeward(cls, **kwargs) -> "ScenarioConfig":
        """Configuration placing modules close to the cameras."""
        return cls(is_cloud=False, **kwargs)


@dataclass
class ScenarioBuild:
    """Everything the builder produced, owned by the scenario until submission."""

    broker: FogBroker
    root: FogDevice
    devices: List[FogDevice]
    sensors: List[Sensor]
    actuators: List[Actuator]
    application: Application
    module_mapping: ModuleMapping


class ScenarioBuilder:
    """Builds devices, endpoints, the application and the module mapping."""

    def __init__(self, config: ScenarioConfig, ids: Optional[EntityIdGenerator] = None):
        self.config = config
        self.ids = ids if ids is not None else EntityIdGenerator()

    def build(self) -> ScenarioBuild:
        self.config.validate()

        broker = FogBroker("broker", self.ids)
        application = create_application(self.config.app_id, broker.id)

        root, devices = build_hierarchy(self.config.num_areas, self.config.cameras_per_area, self.ids)
        sensors, actuators = self.attach_all_endpoints(devices, broker.id)

        module_mapping = create_module_mapping(devices, CANDIDATE_ROLES, self.config.is_cloud)

        return ScenarioBuild(broker, root, devices, sensors, actuators, application, module_mapping)

    def attach_all_endpoints(self, devices: List[FogDevice], user_id: int):
        sensors, actuators = [], []
        by_id = {d.id: d for d in devices}
        for camera in devices_with_role(devices, DeviceRole.CAMERA):
            router = by_id[camera.parent_id]
            # camera names are camera-<index>-of-router-<area>
            endpoint_id = camera.name[len("camera-"):]
            sensor, actuator = attach_endpoints(
                camera, router, user_id, self.config.app_id, endpoint_id,
                distribution=create_distribution(self.config.emission,
                                                 self.config.cam_transmission_time),
            )
            sensors.append(sensor)
            actuators.append(actuator)
        logger.info(f"[NETWORK] Attached {len(sensors)} sensors and {len(actuators)} actuators")
        return sensors, actuators


def select_placement(build: ScenarioBuild, is_cloud: bool) -> ModulePlacement:
    """Static cloud mapping in direct cloud mode, edge-ward search otherwise."""
    if is_cloud:
        return ModulePlacementMapping(build.devices, build.application, build.module_mapping)
    return ModulePlacementEdgewards(build.devices, build.sensors, build.actuators,
                                    build.application, build.module_mapping)


class Scenario:
    """
    Single-shot scenario run.

    `run()` drives the whole life cycle and never raises: failures are logged
    and leave the scenario in FAILED.
    """

    def __init__(self, config: ScenarioConfig, builder: Optional[ScenarioBuilder] = None):
        self.config = config
        self.builder = builder if builder is not None else ScenarioBuilder(config)
        self.state: Optional[ScenarioState] = None
        self.build: Optional[ScenarioBuild] = None
        self.placement: Optional[ModulePlacement] = None
        self.clock = SimulationClock()
        self.controller: Optional[Controller] = None
        self.results: Optional[SimulationResults] = None
        self.error: Optional[BaseException] = None

    def configure(self) -> ScenarioBuild:
        self.clock.init(num_users=1, trace_flag=self.config.trace)
        self.build = self.builder.build()
        self._transition(None, ScenarioState.CONFIGURED)
        return self.build

    def submit(self) -> ModulePlacement:
        self._require(ScenarioState.CONFIGURED)
        build = self.build
        self.placement = select_placement(build, self.config.is_cloud)
        self.controller = Controller("master-controller", build.devices, build.sensors,
                                     build.actuators, self.clock,
                                     rng=np.random.default_rng(self.config.resolved_seed()))
        self.controller.submit_application(build.application, self.placement)
        self._transition(ScenarioState.CONFIGURED, ScenarioState.SUBMITTED)
        return self.placement

    def simulate(self) -> SimulationResults:
        self._require(ScenarioState.SUBMITTED)
        self.clock.start_simulation(self.config.simulation_time)
        self.clock.stop_simulation()
        self.results = self.controller.results()
        self._transition(ScenarioState.SUBMITTED, ScenarioState.COMPLETED)
        return self.results

    def run(self) -> ScenarioState:
        try:
            self.configure()
            self.submit()
            self.simulate()
            self.results.log()
        except Exception as e:
            self.error = e
            self.state = ScenarioState.FAILED
            kind = "Scenario" if isinstance(e, ScenarioError) else "Unexpected"
            logger.exception(f"{kind} error, scenario failed: {e}")
        return self.state

    def _require(self, state: ScenarioState) -> None:
        if self.state != state:
            raise ScenarioError(f"Scenario must be {state.value}, is {self.state}")

    def _transition(self, current: Optional[ScenarioState], target: ScenarioState) -> None:
        if self.state != current:
            raise ScenarioError(f"Cannot move from {self.state} to {target.value}")
        logger.debug(f"[SCENARIO] {current} -> {target.value}")
        self.state = target
