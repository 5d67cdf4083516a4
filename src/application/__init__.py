"""
Application graph package.

Declares processing modules, the edges tuples travel on, per-module
selectivity and the loops whose latency is reported.
"""

from .model import (Application, AppModule, AppEdge, AppLoop, EdgeType,
                    FractionalSelectivity)
from .smart_parking import create_application, PICTURE_CAPTURE, SLOT_DETECTOR

__all__ = ['Application', 'AppModule', 'AppEdge', 'AppLoop', 'EdgeType',
           'FractionalSelectivity', 'create_application', 'PICTURE_CAPTURE', 'SLOT_DETECTOR']
