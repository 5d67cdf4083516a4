from dataclasses import dataclass, field, replace
from typing import List, Optional

from application.model import AppEdge
from resources import EntityIdGenerator, generate_entity_id


class FogBroker:
    """Owner of submitted applications; its id is the application user id."""

    def __init__(self, name: str, ids: Optional[EntityIdGenerator] = None):
        self.name = name
        self.id = ids.next_id() if ids is not None else generate_entity_id()

    def __repr__(self):
        return f"FogBroker(id={self.id}, name={self.name!r})"


@dataclass
class AppTuple:
    """One tuple travelling along an application edge."""

    tuple_id: int
    root_id: int
    app_id: str
    tuple_type: str
    source_sensor: str
    sensor_tag: str
    nw_length: float
    cpu_length: float
    emitted_at: float
    actuator: Optional[str] = None
    visited: List[str] = field(default_factory=list)

    def derive(self, edge: AppEdge, tuple_id: int) -> "AppTuple":
        """Output tuple produced for `edge` after processing this one."""
        return replace(self, tuple_id=tuple_id, tuple_type=edge.tuple_type,
                       nw_length=edge.nw_length, cpu_length=edge.cpu_length,
                       visited=list(self.visited))
