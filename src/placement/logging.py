"""
Loggers for the placement package.

Placement loggers live under the `placement` namespace and carry no
handlers of their own: level, console and file output come from the
logging setup of the entry point.
"""

import logging

NAMESPACE = "placement"


def get_placement_logger(name: str) -> logging.Logger:
    """
    Logger for a placement component.

    Args:
        name: Module name (typically __name__); prefixed with the placement
            namespace unless it already lives there

    Returns:
        Logger propagating to the root configuration
    """
    if name != NAMESPACE and not name.startswith(f"{NAMESPACE}."):
        name = f"{NAMESPACE}.{name}"
    return logging.getLogger(name)


def placement_decision_line(strategy: str, placed: str) -> str:
    """Status line reported once a strategy has assigned every module."""
    return f"[PLACEMENT] {strategy}: {placed}"
