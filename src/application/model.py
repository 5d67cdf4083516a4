"""
Application model: modules, edges, tuple mappings and loops.

The application is a directed graph over sensor tags, module names and
actuator tags. `Application.validate` checks the whole graph before the
application is handed to the controller.
"""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import networkx as nx
import numpy as np

from errors import GraphIntegrityError

DEFAULT_MODULE_MIPS = 100
DEFAULT_MODULE_SIZE = 10000
DEFAULT_MODULE_BW = 1000


class EdgeType(Enum):
    """Role of an edge: fed by a sensor, between modules, or into an actuator."""

    SENSOR = "sensor"
    MODULE = "module"
    ACTUATOR = "actuator"


@dataclass(frozen=True)
class AppModule:
    name: str
    ram: int
    mips: int = DEFAULT_MODULE_MIPS
    size: int = DEFAULT_MODULE_SIZE
    bw: int = DEFAULT_MODULE_BW


@dataclass(frozen=True)
class AppEdge:
    """
    Directed edge carrying tuples of `tuple_type`.

    `nw_length` is the data volume per tuple, `cpu_length` the processing
    length consumed by the receiving module. Actuator edges may add a fixed
    `actuation_length` processed at the actuator's gateway.
    """

    source: str
    destination: str
    nw_length: float
    cpu_length: float
    tuple_type: str
    edge_type: EdgeType
    actuation_length: float = 0.0


@dataclass(frozen=True)
class FractionalSelectivity:
    """Emit one output tuple per input tuple with probability `fraction`."""

    fraction: float

    def __post_init__(self):
        if not 0.0 <= self.fraction <= 1.0:
            raise GraphIntegrityError(f"Selectivity must lie in [0, 1], got {self.fraction}")

    def can_select(self, rng: Optional["np.random.Generator"] = None) -> bool:
        if self.fraction >= 1.0:
            return True
        if self.fraction <= 0.0:
            return False
        rng = rng if rng is not None else np.random.default_rng()
        return bool(rng.random() < self.fraction)


_loop_ids = itertools.count(1)


@dataclass
class AppLoop:
    """Ordered node names whose end-to-end delay is tracked."""

    modules: List[str]
    loop_id: int = field(default_factory=lambda: next(_loop_ids))

    def ending_module(self) -> str:
        return self.modules[-1]

    def __str__(self):
        return " -> ".join(self.modules)


class Application:

    def __init__(self, app_id: str, user_id: int):
        self.app_id = app_id
        self.user_id = user_id
        self.modules: Dict[str, AppModule] = {}
        self.edges: List[AppEdge] = []
        # (module, input tuple type) -> (output tuple type, selectivity)
        self.tuple_mappings: Dict[Tuple[str, str], Tuple[str, FractionalSelectivity]] = {}
        self.loops: List[AppLoop] = []

    @classmethod
    def create_application(cls, app_id: str, user_id: int) -> "Application":
        return cls(app_id, user_id)

    def add_app_module(self, name: str, ram: int, mips: int = DEFAULT_MODULE_MIPS,
                       size: int = DEFAULT_MODULE_SIZE, bw: int = DEFAULT_MODULE_BW) -> AppModule:
        if name in self.modules:
            raise GraphIntegrityError(f"Module {name!r} declared twice in {self.app_id}")
        if ram <= 0 or mips <= 0:
            raise GraphIntegrityError(f"Module {name!r} needs positive ram and mips")
        module = AppModule(name, ram, mips, size, bw)
        self.modules[name] = module
        return module

    def add_app_edge(self, source: str, destination: str, nw_length: float, cpu_length: float,
                     tuple_type: str, edge_type: EdgeType, actuation_length: float = 0.0) -> AppEdge:
        if nw_length < 0 or cpu_length < 0 or actuation_length < 0:
            raise GraphIntegrityError(f"Edge {source} -> {destination} has negative lengths")
        edge = AppEdge(source, destination, nw_length, cpu_length, tuple_type, edge_type,
                       actuation_length)
        self.edges.append(edge)
        return edge

    def add_tuple_mapping(self, module: str, input_tuple_type: str, output_tuple_type: str,
                          selectivity: FractionalSelectivity) -> None:
        self.tuple_mappings[(module, input_tuple_type)] = (output_tuple_type, selectivity)

    def set_loops(self, loops: List[AppLoop]) -> None:
        self.loops = list(loops)

    @property
    def sensor_tags(self) -> List[str]:
        return sorted({e.source for e in self.edges if e.edge_type == EdgeType.SENSOR})

    @property
    def actuator_tags(self) -> List[str]:
        return sorted({e.destination for e in self.edges if e.edge_type == EdgeType.ACTUATOR})

    def to_graph(self) -> nx.DiGraph:
        graph = nx.DiGraph()
        graph.add_nodes_from((name, {'kind': 'module'}) for name in self.modules)
        graph.add_nodes_from((tag, {'kind': 'sensor'}) for tag in self.sensor_tags)
        graph.add_nodes_from((tag, {'kind': 'actuator'}) for tag in self.actuator_tags)
        for edge in self.edges:
            graph.add_edge(edge.source, edge.destination, edge=edge)
        return graph

    def validate(self) -> None:
        """
        Check that every edge, tuple mapping and loop refers to declared nodes.

        Raises:
            GraphIntegrityError: On the first dangling reference found
        """
        sensors = set(self.sensor_tags)
        actuators = set(self.actuator_tags)
        clashes = (sensors | actuators) & set(self.modules)
        if clashes or sensors & actuators:
            raise GraphIntegrityError(
                f"Names used for more than one node kind: {sorted(clashes or sensors & actuators)}")

        for edge in self.edges:
            source_ok = (edge.source in sensors if edge.edge_type == EdgeType.SENSOR
                         else edge.source in self.modules)
            destination_ok = (edge.destination in actuators if edge.edge_type == EdgeType.ACTUATOR
                              else edge.destination in self.modules)
            if not (source_ok and destination_ok):
                raise GraphIntegrityError(
                    f"Edge {edge.source} -> {edge.destination} ({edge.edge_type.value}) "
                    f"references an undeclared node")

        for (module, input_type), (output_type, _) in self.tuple_mappings.items():
            if module not in self.modules:
                raise GraphIntegrityError(f"Tuple mapping for undeclared module {module!r}")
            if not any(e.destination == module and e.tuple_type == input_type for e in self.edges):
                raise GraphIntegrityError(
                    f"Module {module!r} maps {input_type!r} but no edge delivers it")
            if not any(e.source == module and e.tuple_type == output_type for e in self.edges):
                raise GraphIntegrityError(
                    f"Module {module!r} maps to {output_type!r} but no edge carries it")

        graph = self.to_graph()
        for loop in self.loops:
            if len(loop.modules) < 2:
                raise GraphIntegrityError(f"Loop {loop} needs at least two nodes")
            for name in loop.modules:
                if name not in graph:
                    raise GraphIntegrityError(f"Loop {loop} references undeclared node {name!r}")
            for source, destination in zip(loop.modules, loop.modules[1:]):
                if not graph.has_edge(source, destination):
                    raise GraphIntegrityError(
                        f"Loop {loop} has no edge {source} -> {destination}")

    def module_order(self) -> List[str]:
        """Modules in dependency order, sources first."""
        graph = self.to_graph().subgraph(self.modules)
        if not nx.is_directed_acyclic_graph(graph):
            raise GraphIntegrityError(f"Module graph of {self.app_id} has a cycle")
        return list(nx.lexicographical_topological_sort(graph))

    def get_output_edges(self, module: str, input_tuple_type: str,
                         rng: Optional["np.random.Generator"] = None) -> List[AppEdge]:
        """Edges a module emits on after processing one `input_tuple_type` tuple."""
        mapping = self.tuple_mappings.get((module, input_tuple_type))
        if mapping is None:
            return []
        output_type, selectivity = mapping
        if not selectivity.can_select(rng):
            return []
        return [e for e in self.edges if e.source == module and e.tuple_type == output_type]

    def __repr__(self):
        return (f"Application({self.app_id!r}, modules={len(self.modules)}, "
                f"edges={len(self.edges)}, loops={len(self.loops)})")
