"""Static placement: modules go exactly where the mapping says."""

from .base import ModulePlacement
from .logging import get_placement_logger
from errors import PlacementError

logger = get_placement_logger(__name__)


class ModulePlacementMapping(ModulePlacement):
    """
    Deploy every module on every device it is mapped to.

    All modules of the application must be mapped; unknown modules or
    devices in the mapping are rejected.
    """

    def map_modules(self):
        unmapped = [m for m in self.application.modules if not self.module_mapping.get_devices(m)]
        if unmapped:
            raise PlacementError(f"Modules without a device in the static mapping: {unmapped}")

        for module_name in self.module_mapping.modules():
            module = self.application.modules.get(module_name)
            if module is None:
                raise PlacementError(
                    f"Mapping references module {module_name!r} unknown to {self.application.app_id}")
            for device_name in self.module_mapping.get_devices(module_name):
                self.deploy(module, self.device_by_name(device_name))
