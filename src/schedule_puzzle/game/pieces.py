from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import ConfigurationError


Shape = np.ndarray
ShapeLike = Union[Shape, Sequence[Sequence[Union[int, bool]]]]
Vec2 = Tuple[float, float]


class PlacementState(IntEnum):
    UNPLACED = 0
    PLACED = 1


def make_shape(data: ShapeLike) -> Shape:
    """Normalise nested rows of 0/1 (or bools) into a read-only bool array.

    Rows run along grid ``y`` and columns along grid ``x``, so the result has
    size ``(shape_h, shape_w)``.
    """
    try:
        arr = np.array(data, dtype=np.bool_)
    except (TypeError, ValueError) as exc:
        # Ragged rows end up here on recent numpy versions
        raise ConfigurationError(f"Shape is not a rectangular matrix: {data!r}") from exc
    if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ConfigurationError(f"Shape must be a non-empty 2D matrix, got {data!r}")
    if not arr.any():
        raise ConfigurationError("Shape must mark at least one cell")
    arr.setflags(write=False)
    return arr


# Blocks used by the day configurations. Keys follow the block prefab names.
SHAPE_CATALOG: Dict[str, Shape] = {
    "1a": make_shape([[1, 1], [1, 0], [1, 0], [1, 0]]),  # 2x4 L
    "1b": make_shape([[1, 1], [1, 1]]),  # 2x2 square
    "1c": make_shape([[1, 1], [0, 1], [0, 1], [0, 1]]),  # 2x4 mirrored L
    "1d": make_shape([[0, 1, 1, 0], [1, 1, 1, 1]]),  # 4x2 bump
}


def shape_from_spec(spec: Union[str, ShapeLike]) -> Shape:
    """Resolve a catalog name or an explicit matrix into a shape."""
    if isinstance(spec, str):
        try:
            return SHAPE_CATALOG[spec]
        except KeyError:
            raise ConfigurationError(f"Unknown shape name: {spec!r}") from None
    return make_shape(spec)


@dataclass(eq=False)
class Piece:
    """One schedule block: a fixed shape plus its placement status.

    Pieces compare by identity; the grid keeps only weak back-references.
    """

    piece_id: int
    label: str
    shape: Shape
    position: Vec2 = (0.0, 0.0)
    state: PlacementState = PlacementState.UNPLACED
    grid_origin: Optional[Tuple[int, int]] = None
    spawn_position: Vec2 = field(init=False)

    def __post_init__(self) -> None:
        if self.piece_id <= 0:
            raise ValueError("piece_id must be positive")
        self.shape = make_shape(self.shape)
        self.position = (float(self.position[0]), float(self.position[1]))
        self.spawn_position = self.position

    @property
    def is_placed(self) -> bool:
        return self.state == PlacementState.PLACED

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) of the shape's bounding box in cells."""
        h, w = self.shape.shape
        return w, h

    @property
    def cell_count(self) -> int:
        return int(np.count_nonzero(self.shape))

    def get_shape(self) -> Shape:
        return self.shape

    def set_placed(self, placed: bool, origin: Optional[Tuple[int, int]] = None) -> None:
        self.state = PlacementState.PLACED if placed else PlacementState.UNPLACED
        self.grid_origin = origin if placed else None

    def cells_at(self, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
        ys, xs = np.nonzero(self.shape)
        return [(origin_x + int(dx), origin_y + int(dy)) for dy, dx in zip(ys, xs)]
