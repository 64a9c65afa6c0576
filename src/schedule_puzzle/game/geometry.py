from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from .pieces import Shape, Vec2


@dataclass(frozen=True)
class GridGeometry:
    """Pixel layout of the grid in the drag surface's local space.

    Local space is y-up: ``center`` is the middle of the grid, the top edge sits
    at ``center.y + pixel_height / 2`` and grid row 0 is the top row.
    """

    columns: int
    rows: int
    pixel_width: float
    pixel_height: float
    center: Vec2 = (0.0, 0.0)
    # Constant nudge applied to snapped pieces (e.g. to clear a label strip)
    snap_offset: Vec2 = (0.0, 0.0)

    def __post_init__(self) -> None:
        if self.columns <= 0 or self.rows <= 0:
            raise ValueError("Grid must have at least one column and one row")
        if self.pixel_width <= 0 or self.pixel_height <= 0:
            raise ValueError("Grid pixel size must be positive")

    @property
    def cell_width(self) -> float:
        return self.pixel_width / self.columns

    @property
    def cell_height(self) -> float:
        return self.pixel_height / self.rows

    @property
    def left(self) -> float:
        return self.center[0] - self.pixel_width / 2.0

    @property
    def top(self) -> float:
        return self.center[1] + self.pixel_height / 2.0

    def cell_at(self, point: Vec2) -> Tuple[int, int]:
        """Map a local point to the (column, row) containing it.

        Points outside the grid map to out-of-range (possibly negative) cells.
        """
        px, py = point
        col = math.floor((px - self.left) / self.cell_width)
        row = math.floor((self.top - py) / self.cell_height)
        return int(col), int(row)

    def cell_center(self, col: int, row: int) -> Vec2:
        x = self.left + self.cell_width / 2.0 + col * self.cell_width
        y = self.top - self.cell_height / 2.0 - row * self.cell_height
        return x, y

    def snap_position(self, shape: Shape, col: int, row: int) -> Vec2:
        """Anchor position that centres ``shape`` over the cells it covers at (col, row)."""
        shape_h, shape_w = shape.shape
        cx, cy = self.cell_center(col, row)
        offset_x = (shape_w - 1) * self.cell_width / 2.0
        offset_y = -(shape_h - 1) * self.cell_height / 2.0
        return cx + offset_x + self.snap_offset[0], cy + offset_y + self.snap_offset[1]
