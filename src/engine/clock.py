"""
Simulation clock wrapping a simpy environment.

Mirrors the init / start / stop triple the scenario drives: `init` creates a
fresh environment, `start_simulation` runs it until the given time and
`stop_simulation` closes the run.
"""

import logging
import time
from typing import Optional

import simpy

from errors import SubmissionError

logger = logging.getLogger(__name__)


class SimulationClock:

    def __init__(self):
        self.env: Optional[simpy.Environment] = None
        self.num_users = 0
        self.trace_flag = False
        self.running = False
        self.stopped = False
        self.simulation_start_time: Optional[float] = None
        self.simulation_end_time: Optional[float] = None

    def init(self, num_users: int = 1, trace_flag: bool = False) -> simpy.Environment:
        self.env = simpy.Environment()
        self.num_users = num_users
        self.trace_flag = trace_flag
        self.running = False
        self.stopped = False
        self.simulation_start_time = None
        self.simulation_end_time = None
        logger.debug(f"[CLOCK] Initialised for {num_users} user(s), trace={trace_flag}")
        return self.env

    @property
    def now(self) -> float:
        return self.env.now if self.env is not None else 0.0

    def start_simulation(self, until: float) -> float:
        """
        Run every scheduled process until simulated time `until`.

        Returns:
            Simulated time reached
        """
        if self.env is None:
            raise SubmissionError("Simulation clock used before init()")
        if self.stopped:
            raise SubmissionError("Simulation clock already stopped; call init() again")
        if until <= 0:
            raise SubmissionError(f"Simulation time must be positive, got {until}")

        self.running = True
        self.simulation_start_time = time.time()
        logger.info(f"[CLOCK] Starting simulation until t={until}")
        try:
            self.env.run(until=until)
        finally:
            self.running = False
            self.simulation_end_time = time.time()
        return self.env.now

    def stop_simulation(self) -> None:
        self.stopped = True
        logger.info(f"[CLOCK] Simulation stopped at t={self.now}")

    @property
    def execution_time(self) -> float:
        """Wall-clock seconds spent in the last run."""
        if self.simulation_start_time is None or self.simulation_end_time is None:
            return 0.0
        return self.simulation_end_time - self.simulation_start_time
