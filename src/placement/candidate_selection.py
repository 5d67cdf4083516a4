"""
Candidate device selection.

Builds the module mapping for a scenario from the device roles: in direct
cloud mode everything is pinned to the cloud, otherwise each module gets the
devices of the roles allowed to host it.
"""

from typing import Dict, Iterable, List

from FogDevice import FogDevice, DeviceRole
from errors import PlacementError
from .logging import get_placement_logger
from .mapping import ModuleMapping

logger = get_placement_logger(__name__)


def select_candidates(devices: List[FogDevice], roles: Iterable[DeviceRole]) -> List[FogDevice]:
    wanted = set(roles)
    return [device for device in devices if device.role in wanted]


def create_module_mapping(devices: List[FogDevice],
                          candidate_roles: Dict[str, Iterable[DeviceRole]],
                          is_cloud: bool) -> ModuleMapping:
    """
    Args:
        devices: All devices of the topology
        candidate_roles: Module name -> roles allowed to host it (edge-ward mode)
        is_cloud: Pin every module to the cloud device instead

    Returns:
        ModuleMapping for the chosen mode
    """
    mapping = ModuleMapping.create_module_mapping()

    if is_cloud:
        clouds = select_candidates(devices, [DeviceRole.CLOUD])
        if not clouds:
            raise PlacementError("Direct cloud mode needs a cloud device")
        for module_name in candidate_roles:
            mapping.add_module_to_device(module_name, clouds[0].name)
    else:
        for module_name, roles in candidate_roles.items():
            for device in select_candidates(devices, roles):
                mapping.add_module_to_device(module_name, device.name)

    logger.debug(f"Module mapping (cloud={is_cloud}): {mapping}")
    return mapping
