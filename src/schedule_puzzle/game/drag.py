from __future__ import annotations

from enum import IntEnum
from typing import Dict, Optional, Tuple

from .grid import Coordinate
from .pieces import Piece, Vec2
from .round import RoundController


class DragState(IntEnum):
    IDLE = 0
    DRAGGING = 1


class CellHighlight(IntEnum):
    NORMAL = 0
    HIGHLIGHTED = 1
    OCCUPIED = 2
    INVALID = 3


class DragController:
    """Turns pointer drags into grid placements for the active round.

    The dragged piece's anchor follows the pointer, keeping the offset between
    anchor and pointer from the moment the drag began. The pointer itself (not
    the anchor) picks the grid origin, i.e. the cell under the pointer receives
    the shape's local (0, 0).
    """

    def __init__(self, round_controller: RoundController) -> None:
        self.round = round_controller
        self.state = DragState.IDLE
        self.piece: Optional[Piece] = None
        self.preview: Dict[Coordinate, CellHighlight] = {}
        self.candidate: Optional[Tuple[int, int]] = None
        self.candidate_valid = False
        self._drag_start: Vec2 = (0.0, 0.0)
        self._grab_offset: Vec2 = (0.0, 0.0)

    def begin_drag(self, piece: Piece, pointer: Vec2) -> bool:
        if not self.round.is_active:
            return False
        if not self.round.owns(piece):
            raise ValueError(f"Piece {piece.label!r} does not belong to the current round")
        if self.state == DragState.DRAGGING:
            self.cancel_drag()
        if piece.is_placed:
            self.round.lift_piece(piece)
        self.clear_preview()
        self.piece = piece
        self.state = DragState.DRAGGING
        self._drag_start = piece.position
        self._grab_offset = (piece.position[0] - pointer[0], piece.position[1] - pointer[1])
        return True

    def drag(self, pointer: Vec2) -> bool:
        """Move the dragged piece and refresh the preview; returns placement validity."""
        if self.state != DragState.DRAGGING or self.piece is None:
            return False
        self.piece.position = (pointer[0] + self._grab_offset[0], pointer[1] + self._grab_offset[1])
        if not self.round.is_active:
            self.clear_preview()
            return False
        origin = self.grid_origin(pointer)
        valid = self._can_place(origin)
        self._show_preview(origin, valid)
        return valid

    def end_drag(self, pointer: Vec2) -> bool:
        """Drop the dragged piece; snaps it onto the grid or reverts it to where the drag began."""
        if self.state != DragState.DRAGGING or self.piece is None:
            return False
        piece = self.piece
        self.clear_preview()
        self.piece = None
        self.state = DragState.IDLE

        geometry = self.round.geometry
        placed = False
        if self.round.is_active and geometry is not None:
            col, row = geometry.cell_at(pointer)
            placed = self.round.place_piece(piece, col, row)
            if placed:
                piece.position = geometry.snap_position(piece.shape, col, row)
        if not placed:
            piece.position = self._drag_start
        return placed

    def cancel_drag(self) -> None:
        if self.piece is not None:
            self.piece.position = self._drag_start
        self.piece = None
        self.state = DragState.IDLE
        self.clear_preview()

    def grid_origin(self, pointer: Vec2) -> Tuple[int, int]:
        geometry = self.round.geometry
        if geometry is None:
            raise ValueError("No active round to map pointer positions onto")
        return geometry.cell_at(pointer)

    def clear_preview(self) -> None:
        self.preview = {}
        self.candidate = None
        self.candidate_valid = False

    def cell_state(self, x: int, y: int) -> CellHighlight:
        """Visual state of a grid cell, with the live preview drawn over occupancy."""
        state = self.preview.get((x, y))
        if state is not None:
            return state
        grid = self.round.grid
        if grid is not None and grid.is_occupied(x, y):
            return CellHighlight.OCCUPIED
        return CellHighlight.NORMAL

    def _can_place(self, origin: Tuple[int, int]) -> bool:
        grid = self.round.grid
        assert grid is not None and self.piece is not None
        return grid.can_place(self.piece.shape, origin[0], origin[1])

    def _show_preview(self, origin: Tuple[int, int], valid: bool) -> None:
        grid = self.round.grid
        assert grid is not None and self.piece is not None
        highlight = CellHighlight.HIGHLIGHTED if valid else CellHighlight.INVALID
        self.preview = {
            cell: highlight for cell in grid.covered_cells(self.piece.shape, origin[0], origin[1], clip=True)
        }
        self.candidate = origin
        self.candidate_valid = valid
