"""
Controller: the entry point into the simulation engine.

Takes the devices, sensors and actuators of a scenario, accepts applications
together with a placement strategy, and schedules the tuple traffic on the
simulation clock.
"""

import itertools
import logging
from typing import Dict, List, Optional

import numpy as np
import simpy

from application.model import Application, AppEdge, EdgeType
from endpoints import Sensor, Actuator
from FogDevice import FogDevice
from errors import RoutingError, SubmissionError, TopologyError
from graph import create_fog_graph, is_valid_hierarchy, route
from placement.base import ModulePlacement
from .clock import SimulationClock
from .entities import AppTuple
from .results import RunMetrics, SimulationResults, build_results

logger = logging.getLogger(__name__)


class Controller:

    def __init__(self, name: str, fog_devices: List[FogDevice], sensors: List[Sensor],
                 actuators: List[Actuator], clock: SimulationClock,
                 rng: Optional["np.random.Generator"] = None):
        self.name = name
        self.fog_devices = list(fog_devices)
        self.sensors = list(sensors)
        self.actuators = list(actuators)
        self.clock = clock
        self.rng = rng if rng is not None else np.random.default_rng()

        self.devices: Dict[int, FogDevice] = {d.id: d for d in self.fog_devices}
        self.topology = create_fog_graph(self.fog_devices)
        if not is_valid_hierarchy(self.topology):
            raise TopologyError(f"{name}: devices do not form a single tree")

        self.applications: Dict[str, Application] = {}
        self.placements: Dict[str, Dict[int, List[str]]] = {}
        self.metrics = RunMetrics()
        self._cpus = {}
        self._tuple_ids = itertools.count(1)
        self._root_ids = itertools.count(1)

    def submit_application(self, application: Application, placement: ModulePlacement) -> None:
        """
        Place `application` with `placement` and schedule its sensors.

        Raises:
            GraphIntegrityError: If the application graph is inconsistent
            TopologyError: If an endpoint references an unknown gateway
            SubmissionError: If endpoints do not match the application or the
                placement fails
        """
        if self.clock.env is None:
            raise SubmissionError("Simulation clock must be initialised before submission")
        if application.app_id in self.applications:
            raise SubmissionError(f"Application {application.app_id} submitted twice")
        if placement.application is not application:
            raise SubmissionError(f"Placement {placement.name} was built for another application")

        application.validate()
        sensors, actuators = self._check_endpoints(application)

        self.placements[application.app_id] = placement.place()
        self.applications[application.app_id] = application

        for sensor in sensors:
            self.clock.env.process(self._emit(sensor, application))
        logger.info(f"[CONTROLLER] Submitted {application.app_id} with {placement.name}: "
                    f"{len(sensors)} sensors, {len(actuators)} actuators")

    def _check_endpoints(self, application: Application):
        sensors = [s for s in self.sensors if s.app_id == application.app_id]
        actuators = [a for a in self.actuators if a.app_id == application.app_id]

        for endpoint in sensors + actuators:
            if endpoint.gateway_device_id not in self.devices:
                raise TopologyError(
                    f"{endpoint.name} references unknown gateway id {endpoint.gateway_device_id}")
        for sensor in sensors:
            if sensor.tuple_type not in application.sensor_tags:
                raise SubmissionError(
                    f"Sensor {sensor.name} emits {sensor.tuple_type!r}, unknown to {application.app_id}")
        for actuator in actuators:
            if actuator.actuator_type not in application.actuator_tags:
                raise SubmissionError(
                    f"Actuator {actuator.name} of type {actuator.actuator_type!r} "
                    f"unknown to {application.app_id}")
        return sensors, actuators

    def _emit(self, sensor: Sensor, application: Application):
        env = self.clock.env
        edges = [e for e in application.edges
                 if e.edge_type == EdgeType.SENSOR and e.source == sensor.tuple_type]
        while True:
            yield env.timeout(sensor.distribution.next_value(self.rng))
            for edge in edges:
                root_id = next(self._root_ids)
                tup = AppTuple(
                    tuple_id=next(self._tuple_ids),
                    root_id=root_id,
                    app_id=application.app_id,
                    tuple_type=edge.tuple_type,
                    source_sensor=sensor.name,
                    sensor_tag=sensor.tuple_type,
                    nw_length=edge.nw_length,
                    cpu_length=edge.cpu_length,
                    emitted_at=env.now,
                    actuator=sensor.paired_actuator,
                    visited=[sensor.tuple_type],
                )
                self.metrics.tuple_emitted(root_id)
                env.process(self._sensor_transmit(sensor, application, edge, tup))

    def _sensor_transmit(self, sensor: Sensor, application: Application, edge: AppEdge,
                         tup: AppTuple):
        yield self.clock.env.timeout(sensor.latency)
        yield from self._forward(application, edge, tup, sensor.gateway_device_id)

    def _forward(self, application: Application, edge: AppEdge, tup: AppTuple, device_id: int):
        env = self.clock.env

        if edge.edge_type == EdgeType.ACTUATOR:
            actuator = self._actuator_for(application, tup, edge.destination, device_id)
            yield from self._transmit(tup, device_id, actuator.gateway_device_id)
            if edge.actuation_length:
                gateway = self.devices[actuator.gateway_device_id]
                yield env.timeout(edge.actuation_length / gateway.mips)
            yield env.timeout(actuator.latency)
            self._deliver(application, tup, edge.destination)
            return

        host = self._find_host(application, edge.destination, device_id)
        yield from self._transmit(tup, device_id, host)
        yield from self._execute(edge.destination, tup, host)
        tup.visited.append(edge.destination)

        outputs = application.get_output_edges(edge.destination, tup.tuple_type, self.rng)
        if not outputs:
            self.metrics.tuple_dropped(tup.root_id)
            return
        for out_edge in outputs:
            child = tup.derive(out_edge, next(self._tuple_ids))
            env.process(self._forward(application, out_edge, child, host))

    def _find_host(self, application: Application, module: str, device_id: int) -> int:
        """Nearest device at or above `device_id` running `module`."""
        deployed = self.placements[application.app_id]
        device = self.devices[device_id]
        while device is not None:
            if module in deployed.get(device.id, []):
                return device.id
            device = device.Parent
        raise RoutingError(
            f"No device above {self.devices[device_id].name} hosts {module!r}")

    def _actuator_for(self, application: Application, tup: AppTuple, actuator_type: str,
                      device_id: int) -> Actuator:
        candidates = [a for a in self.actuators
                      if a.app_id == application.app_id and a.actuator_type == actuator_type]
        for actuator in candidates:
            if actuator.name == tup.actuator:
                return actuator
        if not candidates:
            raise RoutingError(f"No actuator of type {actuator_type!r} for {application.app_id}")
        # unpaired tuples go to the closest actuator of the type
        return min(candidates,
                   key=lambda a: (len(route(self.topology, device_id, a.gateway_device_id)), a.name))

    def _transmit(self, tup: AppTuple, source: int, destination: int):
        env = self.clock.env
        for hop_from, hop_to, upwards in route(self.topology, source, destination):
            sender = self.devices[hop_from]
            if upwards:
                latency = sender.uplink_latency
                delay = tup.nw_length / sender.uplink_bandwidth + latency
            else:
                latency = self.devices[hop_to].uplink_latency
                delay = tup.nw_length / sender.downlink_bandwidth + latency
            self.metrics.link_used(latency, tup.nw_length)
            yield env.timeout(delay)

    def _execute(self, module: str, tup: AppTuple, device_id: int):
        env = self.clock.env
        device = self.devices[device_id]
        cpu = self._cpus.get(device_id)
        if cpu is None:
            cpu = self._cpus[device_id] = simpy.Resource(env, capacity=device.characteristics.num_pes)
        with cpu.request() as request:
            yield request
            started = env.now
            yield env.timeout(tup.cpu_length / device.mips)
            self.metrics.tuple_executed(tup.tuple_type, env.now - started,
                                        device.rate_per_mips * tup.cpu_length)
        if self.clock.trace_flag:
            logger.debug(f"[CONTROLLER] t={env.now:.3f} {module} on {device.name} "
                         f"processed tuple {tup.tuple_id} ({tup.tuple_type})")

    def _deliver(self, application: Application, tup: AppTuple, actuator_type: str) -> None:
        now = self.clock.env.now
        self.metrics.tuple_delivered(tup.root_id)
        path = tup.visited + [actuator_type]
        for loop in application.loops:
            if loop.ending_module() == actuator_type and _follows(loop.modules, path):
                self.metrics.loop_completed(str(loop), now - tup.emitted_at)

    def results(self) -> SimulationResults:
        return build_results(
            self.metrics,
            self.applications,
            self.placements,
            {d.id: d.name for d in self.fog_devices},
            simulated_time=self.clock.now,
            execution_time=self.clock.execution_time,
        )


def _follows(loop_nodes: List[str], path: List[str]) -> bool:
    """True if `loop_nodes` appear in `path` in order."""
    remaining = iter(path)
    return all(node in remaining for node in loop_nodes)
