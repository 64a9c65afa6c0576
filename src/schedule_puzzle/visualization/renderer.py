from __future__ import annotations

from typing import Optional, Tuple

import pygame

from schedule_puzzle.game import CellHighlight, DragController, GridGeometry, Piece


Color = Tuple[int, int, int]

CELL_COLORS = {
    CellHighlight.NORMAL: (40, 40, 48),
    CellHighlight.HIGHLIGHTED: (200, 190, 60),  # valid drop
    CellHighlight.OCCUPIED: (70, 160, 90),
    CellHighlight.INVALID: (200, 70, 70),
}
PIECE_COLOR: Color = (90, 140, 220)
PIECE_DRAG_COLOR: Color = (130, 170, 240)
PIECE_PLACED_COLOR: Color = (80, 120, 190)


class Renderer:
    """Draws the schedule grid and blocks.

    Engine coordinates are y-up around ``origin`` (the screen point of local
    (0, 0)); pygame screen coordinates are y-down.
    """

    def __init__(self, origin: Tuple[int, int], font: Optional[pygame.font.Font] = None) -> None:
        self.origin = origin
        self.font = font

    def to_screen(self, point: Tuple[float, float]) -> Tuple[int, int]:
        return int(round(self.origin[0] + point[0])), int(round(self.origin[1] - point[1]))

    def to_local(self, screen_point: Tuple[int, int]) -> Tuple[float, float]:
        return float(screen_point[0] - self.origin[0]), float(self.origin[1] - screen_point[1])

    def _cell_rect(self, geometry: GridGeometry, center: Tuple[float, float]) -> pygame.Rect:
        sx, sy = self.to_screen(center)
        w, h = int(geometry.cell_width), int(geometry.cell_height)
        return pygame.Rect(sx - w // 2, sy - h // 2, w - 1, h - 1)

    def draw_grid(self, screen: pygame.Surface, drag: DragController) -> None:
        geometry = drag.round.geometry
        if geometry is None:
            return
        for row in range(geometry.rows):
            for col in range(geometry.columns):
                rect = self._cell_rect(geometry, geometry.cell_center(col, row))
                pygame.draw.rect(screen, CELL_COLORS[drag.cell_state(col, row)], rect)

    def draw_piece(self, screen: pygame.Surface, geometry: GridGeometry, piece: Piece, dragging: bool) -> None:
        w, h = piece.size
        # Anchor is the centre of the shape's bounding box
        left = piece.position[0] - (w - 1) * geometry.cell_width / 2.0
        top = piece.position[1] + (h - 1) * geometry.cell_height / 2.0
        color = PIECE_DRAG_COLOR if dragging else (PIECE_PLACED_COLOR if piece.is_placed else PIECE_COLOR)
        for dy in range(h):
            for dx in range(w):
                if piece.shape[dy, dx]:
                    center = (left + dx * geometry.cell_width, top - dy * geometry.cell_height)
                    rect = self._cell_rect(geometry, center)
                    pygame.draw.rect(screen, color, rect)
                    pygame.draw.rect(screen, (230, 230, 240), rect, 1)
        if self.font is not None:
            img = self.font.render(piece.label, True, (240, 240, 240))
            screen.blit(img, img.get_rect(center=self.to_screen(piece.position)))

    def piece_at(self, geometry: GridGeometry, piece: Piece, screen_point: Tuple[int, int]) -> bool:
        """Hit test against the filled cells of ``piece``."""
        px, py = self.to_local(screen_point)
        w, h = piece.size
        left = piece.position[0] - w * geometry.cell_width / 2.0
        top = piece.position[1] + h * geometry.cell_height / 2.0
        dx = int((px - left) // geometry.cell_width)
        dy = int((top - py) // geometry.cell_height)
        return 0 <= dx < w and 0 <= dy < h and bool(piece.shape[dy, dx])

    def draw_text(self, screen: pygame.Surface, text: str, pos: Tuple[int, int], color: Color = (230, 230, 230)) -> None:
        if self.font is None:
            return
        img = self.font.render(text, True, color)
        screen.blit(img, pos)
