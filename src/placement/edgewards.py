"""
Edge-ward placement.

For every sensor, walk from its gateway device towards the cloud and put
each module on the lowest candidate device that still has room. A module
never lands below the module feeding it on the same path.
"""

from typing import Dict, List

from application.model import Application
from endpoints import Sensor, Actuator
from FogDevice import FogDevice
from errors import PlacementError
from network import path_to_root
from .base import ModulePlacement
from .logging import get_placement_logger
from .mapping import ModuleMapping

logger = get_placement_logger(__name__)


class ModulePlacementEdgewards(ModulePlacement):

    def __init__(self, fog_devices: List[FogDevice], sensors: List[Sensor],
                 actuators: List[Actuator], application: Application,
                 module_mapping: ModuleMapping):
        super().__init__(fog_devices, application, module_mapping)
        self.sensors = [s for s in sensors if s.app_id == application.app_id]
        self.actuators = [a for a in actuators if a.app_id == application.app_id]
        self._devices_by_id: Dict[int, FogDevice] = {d.id: d for d in self.fog_devices}

    def is_candidate(self, module_name: str, device: FogDevice) -> bool:
        """Mapped modules may only use their mapped devices, others any device."""
        if not self.module_mapping.has_module(module_name):
            return True
        return device.name in self.module_mapping.get_devices(module_name)

    def map_modules(self):
        order = self.application.module_order()
        logger.debug(f"Module order: {order}")

        for sensor in sorted(self.sensors, key=lambda s: s.name):
            gateway = self._devices_by_id.get(sensor.gateway_device_id)
            if gateway is None:
                raise PlacementError(
                    f"Sensor {sensor.name} references unknown gateway id {sensor.gateway_device_id}")
            self.place_along_path(path_to_root(gateway), order)

    def place_along_path(self, path: List[FogDevice], order: List[str]) -> None:
        floor = 0
        for module_name in order:
            module = self.application.modules[module_name]
            for position in range(floor, len(path)):
                device = path[position]
                if self.is_deployed(module, device):
                    break
                if self.is_candidate(module_name, device) and self.can_host(module, device):
                    self.deploy(module, device)
                    break
            else:
                raise PlacementError(
                    f"No device on path {[d.name for d in path[floor:]]} can host {module_name!r}")
            floor = position
