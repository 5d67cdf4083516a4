"""
Run metrics and the result tables reported after a simulation.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Set

import numpy as np
import pandas as pd

from application.model import Application

logger = logging.getLogger(__name__)


class RunMetrics:
    """Counters and samples collected while the engine runs."""

    def __init__(self):
        self.emitted: Set[int] = set()
        self.delivered: List[int] = []
        self.dropped: Set[int] = set()
        self.loop_delays: Dict[str, List[float]] = defaultdict(list)
        self.tuple_cpu_delays: Dict[str, List[float]] = defaultdict(list)
        self.network_usage = 0.0
        self.execution_cost = 0.0

    def tuple_emitted(self, root_id: int) -> None:
        self.emitted.add(root_id)

    def tuple_dropped(self, root_id: int) -> None:
        self.dropped.add(root_id)

    def tuple_delivered(self, root_id: int) -> None:
        self.delivered.append(root_id)

    def tuple_executed(self, tuple_type: str, delay: float, cost: float) -> None:
        self.tuple_cpu_delays[tuple_type].append(delay)
        self.execution_cost += cost

    def loop_completed(self, loop_name: str, delay: float) -> None:
        self.loop_delays[loop_name].append(delay)

    def link_used(self, latency: float, nw_length: float) -> None:
        self.network_usage += latency * nw_length

    @property
    def in_flight(self) -> int:
        return len(self.emitted) - len(set(self.delivered)) - len(self.dropped)


@dataclass
class SimulationResults:
    """Summary of one finished run."""

    loop_delays: pd.DataFrame
    tuple_cpu_delays: pd.DataFrame
    placements: pd.DataFrame
    network_usage: float
    execution_cost: float
    tuples_emitted: int
    tuples_delivered: int
    tuples_dropped: int
    tuples_in_flight: int
    simulated_time: float
    execution_time: float

    def average_loop_delay(self, loop_name: str) -> float:
        row = self.loop_delays[self.loop_delays["loop"] == loop_name]
        if row.empty:
            return float("nan")
        return float(row["average_delay"].iloc[0])

    def log(self, log: logging.Logger = logger) -> None:
        log.info(f"[RESULTS] Execution time: {self.execution_time:.3f}s, "
                 f"simulated time: {self.simulated_time}")
        log.info(f"[RESULTS] Tuples emitted={self.tuples_emitted}, delivered={self.tuples_delivered}, "
                 f"dropped={self.tuples_dropped}, in flight={self.tuples_in_flight}")
        log.info(f"[RESULTS] Application loop delays:\n{self.loop_delays.to_string(index=False)}")
        log.info(f"[RESULTS] Tuple CPU execution delays:\n"
                 f"{self.tuple_cpu_delays.to_string(index=False)}")
        log.info(f"[RESULTS] Placements:\n{self.placements.to_string(index=False)}")
        log.info(f"[RESULTS] Network usage: {self.network_usage:.4f}")
        log.info(f"[RESULTS] Cost of execution: {self.execution_cost:.4f}")


def _summarise(samples: Dict[str, List[float]], key: str, value: str) -> pd.DataFrame:
    rows = [
        {key: name, value: float(np.mean(values)) if values else float("nan"), "count": len(values)}
        for name, values in sorted(samples.items())
    ]
    return pd.DataFrame(rows, columns=[key, value, "count"])


def build_results(metrics: RunMetrics, applications: Dict[str, Application],
                  placements: Dict[str, Dict[int, List[str]]], device_names: Dict[int, str],
                  simulated_time: float, execution_time: float) -> SimulationResults:
    loop_samples = {}
    for app in applications.values():
        for loop in app.loops:
            loop_samples[str(loop)] = metrics.loop_delays.get(str(loop), [])
    loop_frame = _summarise(loop_samples, "loop", "average_delay")

    placement_rows = [
        {"app_id": app_id, "device": device_names[device_id], "module": module}
        for app_id, device_to_modules in placements.items()
        for device_id, modules in sorted(device_to_modules.items())
        for module in modules
    ]

    return SimulationResults(
        loop_delays=loop_frame,
        tuple_cpu_delays=_summarise(metrics.tuple_cpu_delays, "tuple_type", "average_delay"),
        placements=pd.DataFrame(placement_rows, columns=["app_id", "device", "module"]),
        network_usage=metrics.network_usage / simulated_time if simulated_time > 0 else 0.0,
        execution_cost=metrics.execution_cost,
        tuples_emitted=len(metrics.emitted),
        tuples_delivered=len(metrics.delivered),
        tuples_dropped=len(metrics.dropped),
        tuples_in_flight=metrics.in_flight,
        simulated_time=simulated_time,
        execution_time=execution_time,
    )
