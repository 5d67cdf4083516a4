from typing import Dict, List


class ModuleMapping:
    """Module name -> device names allowed (or required) to host it."""

    def __init__(self):
        self.module_mapping: Dict[str, List[str]] = {}

    @classmethod
    def create_module_mapping(cls) -> "ModuleMapping":
        return cls()

    def add_module_to_device(self, module_name: str, device_name: str) -> None:
        devices = self.module_mapping.setdefault(module_name, [])
        if device_name not in devices:
            devices.append(device_name)

    def get_devices(self, module_name: str) -> List[str]:
        return list(self.module_mapping.get(module_name, []))

    def has_module(self, module_name: str) -> bool:
        return module_name in self.module_mapping

    def modules(self) -> List[str]:
        return list(self.module_mapping)

    def __eq__(self, other):
        return isinstance(other, ModuleMapping) and self.module_mapping == other.module_mapping

    def __repr__(self):
        return f"ModuleMapping({self.module_mapping})"
