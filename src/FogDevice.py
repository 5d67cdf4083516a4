from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DeviceRole(Enum):
    """Position of a device in the cloud/proxy/router/camera hierarchy."""

    CLOUD = "cloud"
    PROXY = "proxy"
    ROUTER = "router"
    CAMERA = "camera"


@dataclass(frozen=True)
class DeviceCharacteristics:
    """Host provisioning values handed to the engine with every device."""

    arch: str = "x86"
    os: str = "Linux"
    vmm: str = "Xen"
    time_zone: float = 10.0
    cost: float = 3.0
    cost_per_mem: float = 0.05
    cost_per_storage: float = 0.001
    cost_per_bw: float = 0.0
    storage: int = 1000000
    host_bw: int = 10000
    num_pes: int = 1


class FogDevice():

    def __init__(self, id: int, name: str, role: DeviceRole, mips: int, ram: int,
                 uplink_bandwidth: float, downlink_bandwidth: float,
                 rate_per_mips: float, busy_power: float, idle_power: float,
                 characteristics: Optional[DeviceCharacteristics] = None,
                 scheduling_interval: float = 10):
        self.id = id
        self.name = name
        self.role = role
        self.mips = mips
        self.ram = ram
        self.uplink_bandwidth = uplink_bandwidth
        self.downlink_bandwidth = downlink_bandwidth
        self.rate_per_mips = rate_per_mips
        self.busy_power = busy_power
        self.idle_power = idle_power
        self.characteristics = characteristics or DeviceCharacteristics()
        self.scheduling_interval = scheduling_interval
        self.level = 0
        self.parent_id = -1
        self.uplink_latency = 0.0
        self.Parent = None
        self.Child = []

    @property
    def is_root(self) -> bool:
        return self.parent_id == -1

    def attach_to(self, parent: "FogDevice", uplink_latency: float) -> None:
        """Link this device below `parent` with the given uplink latency."""
        self.parent_id = parent.id
        self.uplink_latency = uplink_latency
        self.Parent = parent
        parent.Child.append(self)

    def __str__(self):
        child_ids = [child.id for child in self.Child] if self.Child else None

        return (f"FogDevice {self.id} ({self.name})\n"
                f"Role: {self.role.value}\n"
                f"Level: {self.level}\n"
                f"MIPS: {self.mips}\n"
                f"RAM: {self.ram}\n"
                f"Uplink: {self.uplink_bandwidth} bw / {self.uplink_latency} latency\n"
                f"Downlink: {self.downlink_bandwidth} bw\n"
                f"Parent: {self.parent_id if not self.is_root else None}\n"
                f"Child: {child_ids}\n")

    def __repr__(self):
        return f"FogDevice(id={self.id}, name={self.name!r}, level={self.level})"
