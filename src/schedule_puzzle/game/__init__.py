"""Game module for the schedule packing puzzle.

Exports the engine and its supporting classes:
- ScheduleGrid: occupancy table and placement validation
- Piece: one schedule block with a fixed shape
- GridGeometry: pixel layout used to map pointer positions to cells
- DragController: drag-and-drop input onto the grid
- RoundController: one timed attempt and its outcome
- RoundConfig: per-day round configuration
- ScheduleSession: the once-per-day schedule app flow
"""

from .errors import ConfigurationError
from .pieces import Piece, PlacementState, SHAPE_CATALOG, make_shape, shape_from_spec
from .grid import ScheduleGrid
from .geometry import GridGeometry
from .config import RoundConfig
from .round import RoundController, RoundState
from .drag import CellHighlight, DragController, DragState
from .stats import PlayerStats
from .days import DEFAULT_DAYS, load_days
from .session import ScheduleSession, SessionView

__all__ = [
    "ConfigurationError",
    "Piece",
    "PlacementState",
    "SHAPE_CATALOG",
    "make_shape",
    "shape_from_spec",
    "ScheduleGrid",
    "GridGeometry",
    "RoundConfig",
    "RoundController",
    "RoundState",
    "CellHighlight",
    "DragController",
    "DragState",
    "PlayerStats",
    "DEFAULT_DAYS",
    "load_days",
    "ScheduleSession",
    "SessionView",
]
