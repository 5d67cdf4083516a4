"""Base interface for module placement strategies."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from application.model import Application, AppModule
from FogDevice import FogDevice
from errors import PlacementError
from .logging import get_placement_logger, placement_decision_line
from .mapping import ModuleMapping

logger = get_placement_logger(__name__)


class ModulePlacement(ABC):
    """
    Abstract base class for all placement strategies.

    A strategy is bound to one application and one device list. The
    assignment is computed once on the first call to `place` and reused.
    """

    def __init__(self, fog_devices: List[FogDevice], application: Application,
                 module_mapping: ModuleMapping):
        self.fog_devices = list(fog_devices)
        self.application = application
        self.module_mapping = module_mapping
        self._devices_by_name = {d.name: d for d in self.fog_devices}
        self._used_mips: Dict[int, int] = {d.id: 0 for d in self.fog_devices}
        self._used_ram: Dict[int, int] = {d.id: 0 for d in self.fog_devices}
        self._device_to_modules: Optional[Dict[int, List[str]]] = None

    @property
    def name(self) -> str:
        return type(self).__name__

    def place(self) -> Dict[int, List[str]]:
        """
        Compute the assignment.

        Returns:
            Device id -> names of the modules deployed on it

        Raises:
            PlacementError: If a module cannot be hosted
        """
        if self._device_to_modules is None:
            self._device_to_modules = {}
            self.map_modules()
            logger.info(placement_decision_line(self.name, self.describe(self._device_to_modules)))
        return {k: list(v) for k, v in self._device_to_modules.items()}

    @abstractmethod
    def map_modules(self) -> None:
        """Fill the assignment through `deploy`."""
        pass

    def device_by_name(self, name: str) -> FogDevice:
        device = self._devices_by_name.get(name)
        if device is None:
            raise PlacementError(f"Mapping references unknown device {name!r}")
        return device

    def is_deployed(self, module: AppModule, device: FogDevice) -> bool:
        return module.name in self._device_to_modules.get(device.id, [])

    def can_host(self, module: AppModule, device: FogDevice) -> bool:
        return (self._used_mips[device.id] + module.mips <= device.mips
                and self._used_ram[device.id] + module.ram <= device.ram)

    def deploy(self, module: AppModule, device: FogDevice) -> None:
        if self.is_deployed(module, device):
            return
        if not self.can_host(module, device):
            raise PlacementError(
                f"Device {device.name!r} lacks resources for module {module.name!r} "
                f"(free mips {device.mips - self._used_mips[device.id]}, "
                f"free ram {device.ram - self._used_ram[device.id]})")
        self._used_mips[device.id] += module.mips
        self._used_ram[device.id] += module.ram
        self._device_to_modules.setdefault(device.id, []).append(module.name)
        logger.debug(f"Deployed {module.name} on {device.name}")

    def describe(self, device_to_modules: Dict[int, List[str]]) -> str:
        names = {d.id: d.name for d in self.fog_devices}
        return ", ".join(f"{names[i]}={mods}" for i, mods in sorted(device_to_modules.items())) or "nothing placed"
