from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Sequence, Union

from .config import RoundConfig
from .errors import ConfigurationError
from .pieces import SHAPE_CATALOG


# Blocks wait at the sides of the grid until dragged in
_SIDE_POSITIONS = ((-380.0, 150.0), (-380.0, -200.0), (380.0, 150.0), (380.0, -200.0))
_BLOCKS = ("1a", "1b", "1c", "1d")


def _day(labels: Sequence[str], time_limit: float = 60.0, failure_penalty: int = -3) -> RoundConfig:
    return RoundConfig(
        grid_width=4,
        grid_height=5,
        time_limit=time_limit,
        failure_penalty=failure_penalty,
        shapes=tuple(SHAPE_CATALOG[name] for name in _BLOCKS[: len(labels)]),
        labels=tuple(labels),
        positions=_SIDE_POSITIONS[: len(labels)],
        grid_pixel_size=(320.0, 400.0),
    )


DEFAULT_DAYS: Dict[int, RoundConfig] = {
    1: _day(["Team meeting", "Lunch", "Dentist", "Phoenix"]),
    2: _day(
        [
            "Department meeting",
            "Lunch with Art team",
            "Work on Phoenix character designs",
            "Call with lead programmer (important)",
        ],
        time_limit=50.0,
    ),
    3: _day(["Sprint review", "Gym", "Phoenix playtest", "Dinner with Mia"], time_limit=45.0),
    4: _day(["Investor call", "Lunch", "Phoenix build", "Team retro"], time_limit=40.0, failure_penalty=-5),
    5: _day(["Launch prep", "Quick lunch", "Press interview", "Phoenix launch"], time_limit=35.0, failure_penalty=-5),
}


def load_days(path: Union[str, Path]) -> Dict[int, RoundConfig]:
    """Read ``{"<day>": {round config dict}, ...}`` from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in day file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Day file {path} must hold an object keyed by day number")
    days: Dict[int, RoundConfig] = {}
    for key, data in raw.items():
        try:
            day = int(key)
        except ValueError:
            raise ConfigurationError(f"Day key {key!r} is not a number") from None
        days[day] = RoundConfig.from_dict(data)
    return days
