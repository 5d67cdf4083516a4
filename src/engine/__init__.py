"""
Simulation engine boundary.

The scenario hands devices, endpoints, an application and a placement
strategy to the `Controller`; the `SimulationClock` drives the run.
"""

from .clock import SimulationClock
from .controller import Controller
from .entities import FogBroker, AppTuple
from .results import SimulationResults

__all__ = ['SimulationClock', 'Controller', 'FogBroker', 'AppTuple', 'SimulationResults']
