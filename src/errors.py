"""
Error taxonomy for scenario construction and submission.

Every class is fatal for the run: the orchestrator logs it and stops.
"""


class ScenarioError(Exception):
    """Base class for all scenario failures."""


class ConfigurationError(ScenarioError, ValueError):
    """Invalid numeric parameters (non-positive capacity, bandwidth, ...)."""


class TopologyError(ScenarioError):
    """A device or endpoint references a device that does not exist."""


class GraphIntegrityError(ScenarioError):
    """An edge, loop or tuple mapping references an undeclared node."""


class SubmissionError(ScenarioError):
    """The engine rejected the application or the placement."""


class PlacementError(SubmissionError):
    """No device could host a module."""


class RoutingError(ScenarioError):
    """A tuple could not be routed to a hosting device during the run."""
