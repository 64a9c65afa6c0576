from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Tuple

from .errors import ConfigurationError
from .geometry import GridGeometry
from .pieces import Shape, ShapeLike, Vec2, make_shape, shape_from_spec


@dataclass(frozen=True, eq=False)
class RoundConfig:
    """Everything one schedule round needs; immutable while the round runs."""

    grid_width: int = 4
    grid_height: int = 5
    time_limit: float = 60.0
    failure_penalty: int = -3
    shapes: Tuple[ShapeLike, ...] = ()
    labels: Tuple[str, ...] = ()
    positions: Tuple[Vec2, ...] = ()
    grid_pixel_size: Vec2 = (400.0, 500.0)
    grid_center: Vec2 = (0.0, 0.0)
    snap_offset: Vec2 = (0.0, 0.0)

    @property
    def piece_count(self) -> int:
        return len(self.labels)

    def validate(self) -> None:
        if self.grid_width <= 0 or self.grid_height <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got {self.grid_width}x{self.grid_height}"
            )
        if not self.time_limit > 0:
            raise ConfigurationError(f"Time limit must be positive, got {self.time_limit}")
        if self.grid_pixel_size[0] <= 0 or self.grid_pixel_size[1] <= 0:
            raise ConfigurationError("Grid pixel size must be positive")
        if not self.labels:
            raise ConfigurationError("A round needs at least one schedule item")
        if len(self.labels) > len(self.shapes):
            raise ConfigurationError(
                f"{len(self.labels)} schedule items but only {len(self.shapes)} shape definitions"
            )
        if len(self.labels) != len(self.shapes):
            raise ConfigurationError(
                f"{len(self.shapes)} shape definitions for {len(self.labels)} schedule items"
            )
        if len(self.positions) != len(self.labels):
            raise ConfigurationError(
                f"{len(self.positions)} initial positions for {len(self.labels)} schedule items"
            )
        for label, shape in zip(self.labels, self.resolved_shapes()):
            shape_h, shape_w = shape.shape
            if shape_w > self.grid_width or shape_h > self.grid_height:
                raise ConfigurationError(
                    f"Shape for {label!r} ({shape_w}x{shape_h}) does not fit a "
                    f"{self.grid_width}x{self.grid_height} grid"
                )

    def resolved_shapes(self) -> Tuple[Shape, ...]:
        return tuple(make_shape(s) for s in self.shapes)

    def geometry(self) -> GridGeometry:
        return GridGeometry(
            columns=self.grid_width,
            rows=self.grid_height,
            pixel_width=float(self.grid_pixel_size[0]),
            pixel_height=float(self.grid_pixel_size[1]),
            center=self.grid_center,
            snap_offset=self.snap_offset,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RoundConfig":
        """Build a config from plain data (e.g. parsed JSON).

        ``items`` is a list of ``{"label", "shape", "position"}`` entries where
        ``shape`` is a catalog name or nested 0/1 rows.
        """
        try:
            items: Sequence[Mapping[str, Any]] = data["items"]
            config = cls(
                grid_width=_whole(data.get("grid_width", 4), "grid_width"),
                grid_height=_whole(data.get("grid_height", 5), "grid_height"),
                time_limit=float(data.get("time_limit", 60.0)),
                failure_penalty=_whole(data.get("failure_penalty", -3), "failure_penalty"),
                shapes=tuple(shape_from_spec(item["shape"]) for item in items),
                labels=tuple(str(item["label"]) for item in items),
                positions=tuple(_vec2(item.get("position", (0.0, 0.0))) for item in items),
                grid_pixel_size=_vec2(data.get("grid_pixel_size", (400.0, 500.0))),
                grid_center=_vec2(data.get("grid_center", (0.0, 0.0))),
                snap_offset=_vec2(data.get("snap_offset", (0.0, 0.0))),
            )
        except ConfigurationError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"Malformed round configuration: {exc}") from exc
        config.validate()
        return config


def _vec2(value: Sequence[float]) -> Vec2:
    x, y = value
    return float(x), float(y)


def _whole(value: Any, name: str) -> int:
    # JSON numbers may arrive as floats; 4.0 is fine, 2.7 is not
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a whole number, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ConfigurationError(f"{name} must be a whole number, got {value!r}")
    return int(value)
