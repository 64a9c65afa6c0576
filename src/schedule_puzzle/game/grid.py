from __future__ import annotations

import weakref
from typing import List, Optional, Tuple

import numpy as np

from .pieces import Piece, Shape


Coordinate = Tuple[int, int]


class ScheduleGrid:
    """Discrete 2D occupancy table for schedule blocks.

    Cells hold 0 when empty and the occupying piece's ``piece_id`` otherwise.
    The grid never owns pieces; ``occupant_at`` resolves ids through weak
    references, so a piece dropped by its owner simply stops resolving.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.cells = np.zeros((self.height, self.width), dtype=np.int32)
        self._occupants: "weakref.WeakValueDictionary[int, Piece]" = weakref.WeakValueDictionary()

    def reset(self) -> None:
        self.cells.fill(0)
        self._occupants.clear()

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_occupied(self, x: int, y: int) -> bool:
        return bool(self.cells[y, x] != 0)

    def occupant_at(self, x: int, y: int) -> Optional[Piece]:
        piece_id = int(self.cells[y, x])
        if piece_id == 0:
            return None
        return self._occupants.get(piece_id)

    def can_place(self, shape: Shape, x: int, y: int) -> bool:
        """Check that ``shape`` anchored at (x, y) is in bounds and hits only empty cells."""
        shape_h, shape_w = shape.shape
        if x < 0 or y < 0:
            return False
        if x + shape_w > self.width or y + shape_h > self.height:
            return False
        window = self.cells[y : y + shape_h, x : x + shape_w]
        return not bool(np.any(window[shape] != 0))

    def place(self, shape: Shape, x: int, y: int, piece: Piece) -> None:
        """Mark the cells covered by ``shape`` as occupied by ``piece``.

        Assumes ``can_place`` already returned True for the same arguments.
        """
        shape_h, shape_w = shape.shape
        window = self.cells[y : y + shape_h, x : x + shape_w]
        window[shape] = piece.piece_id
        self._occupants[piece.piece_id] = piece

    def remove(self, piece: Piece) -> int:
        """Clear every cell held by ``piece``; returns the number of cells freed."""
        mask = self.cells == piece.piece_id
        freed = int(np.count_nonzero(mask))
        if freed:
            self.cells[mask] = 0
        self._occupants.pop(piece.piece_id, None)
        return freed

    def covered_cells(self, shape: Shape, x: int, y: int, clip: bool = False) -> List[Coordinate]:
        ys, xs = np.nonzero(shape)
        cells = [(x + int(dx), y + int(dy)) for dy, dx in zip(ys, xs)]
        if clip:
            cells = [(cx, cy) for cx, cy in cells if self.is_inside(cx, cy)]
        return cells

    def valid_placements(self, shape: Shape) -> List[Coordinate]:
        """All (x, y) origins where ``shape`` currently fits."""
        shape_h, shape_w = shape.shape
        positions: List[Coordinate] = []
        for y in range(self.height - shape_h + 1):
            for x in range(self.width - shape_w + 1):
                if self.can_place(shape, x, y):
                    positions.append((x, y))
        return positions

    def filled_ratio(self) -> float:
        return float(np.count_nonzero(self.cells)) / float(self.width * self.height)

    def clone_state(self) -> np.ndarray:
        return self.cells.copy()
