from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from schedule_puzzle.game import DEFAULT_DAYS, RoundConfig, RoundController, RoundState


CELL_PX = 24
TIMER_PX = 6
GRID_LINE = (55, 55, 64)
EMPTY_CELL = (30, 30, 36)
TIMER_COLOR = (230, 190, 90)
# Cycled by piece id so neighbouring blocks stay distinguishable
PIECE_COLORS = (
    (231, 111, 81),
    (42, 157, 143),
    (233, 196, 106),
    (69, 123, 157),
    (168, 98, 179),
    (120, 200, 90),
)


def piece_color(piece_id: int) -> Tuple[int, int, int]:
    return PIECE_COLORS[(piece_id - 1) % len(PIECE_COLORS)]



def _compute_action_mask(controller: RoundController, k: int, width: int, height: int) -> np.ndarray:
    mask = np.zeros((k, width, height), dtype=np.bool_)
    if controller.grid is None or not controller.is_active:
        return mask
    for piece_idx, x, y in _valid_actions(controller):
        mask[piece_idx, x, y] = True
    return mask


def _valid_actions(controller: RoundController) -> List[Tuple[int, int, int]]:
    """List of (piece_idx, x, y) placements that would currently succeed."""
    grid = controller.grid
    if grid is None or not controller.is_active:
        return []
    actions: List[Tuple[int, int, int]] = []
    for piece_idx, piece in enumerate(controller.pieces):
        if piece.is_placed:
            # A placed piece may move anywhere its own cells leave free
            grid.remove(piece)
            positions = grid.valid_placements(piece.shape)
            assert piece.grid_origin is not None
            grid.place(piece.shape, piece.grid_origin[0], piece.grid_origin[1], piece)
        else:
            positions = grid.valid_placements(piece.shape)
        actions.extend((piece_idx, x, y) for x, y in positions)
    return actions


class SchedulePuzzleEnv(gym.Env):
    """One schedule round per episode.

    Action ``(piece_idx, x, y)`` drops that piece with its local (0, 0) on grid
    cell (x, y); an already placed piece is picked up first. Every step costs
    ``seconds_per_step`` of round time. The round is committed as soon as all
    pieces are placed.
    """

    metadata = {"render_modes": ["rgb_array", "ansi"], "render_fps": 30}

    def __init__(self, config: Optional[RoundConfig] = None, render_mode: Optional[str] = None,
                 seconds_per_step: float = 1.0,
                 invalid_action_penalty: float = -0.1,
                 placement_reward: float = 1.0,
                 success_reward: float = 10.0) -> None:
        super().__init__()
        self.config = config or DEFAULT_DAYS[1]
        self.config.validate()
        self.render_mode = render_mode
        self.seconds_per_step = float(seconds_per_step)
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.placement_reward = float(placement_reward)
        self.success_reward = float(success_reward)

        self._penalties: List[int] = []
        self.controller = RoundController(apply_stat_delta=self._penalties.append)

        k = self.config.piece_count
        w, h = self.config.grid_width, self.config.grid_height
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(h, w), dtype=np.int8),
                "placed": spaces.Box(low=0, high=1, shape=(k,), dtype=np.int8),
                "time_left": spaces.Box(low=0.0, high=float(self.config.time_limit), shape=(1,), dtype=np.float32),
            }
        )
        # Action: (piece_idx, x, y)
        self.action_space = spaces.MultiDiscrete((k, w, h))

        self._last_grid = np.zeros((h, w), dtype=np.int8)
        self._last_placed = np.zeros((k,), dtype=np.int8)
        self._last_ids = np.zeros((h, w), dtype=np.int32)

    def _snapshot(self) -> None:
        if self.controller.grid is not None:
            self._last_ids = self.controller.grid.cells.copy()
            self._last_grid = (self._last_ids != 0).astype(np.int8)
            self._last_placed = np.array([int(p.is_placed) for p in self.controller.pieces], dtype=np.int8)

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "grid": self._last_grid.copy(),
            "placed": self._last_placed.copy(),
            "time_left": np.array([self.controller.remaining], dtype=np.float32),
        }

    def _get_info(self) -> Dict[str, Any]:
        k = self.config.piece_count
        return {
            "action_mask": _compute_action_mask(self.controller, k, self.config.grid_width, self.config.grid_height),
            "valid_actions": _valid_actions(self.controller),
            "state": self.controller.state.name,
            "time_left": self.controller.remaining,
        }

    def get_action_mask(self) -> np.ndarray:
        k = self.config.piece_count
        return _compute_action_mask(self.controller, k, self.config.grid_width, self.config.grid_height)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self._penalties.clear()
        self.controller.start_round(self.config)
        self._snapshot()
        return self._get_obs(), self._get_info()

    def step(self, action: np.ndarray | Tuple[int, int, int]):
        piece_idx, x, y = map(int, action)

        if not self.controller.is_active:
            return self._get_obs(), 0.0, True, False, self._get_info()

        reward_components: Dict[str, float] = {}
        success = False
        if 0 <= piece_idx < len(self.controller.pieces):
            success = self.controller.place_piece(self.controller.pieces[piece_idx], x, y)
        if success:
            reward_components["placement"] = self.placement_reward
        else:
            reward_components["invalid"] = self.invalid_action_penalty
        self._snapshot()

        if self.controller.can_commit:
            self.controller.commit_success()
            reward_components["success"] = self.success_reward
        else:
            self.controller.tick(self.seconds_per_step)
            if self.controller.state == RoundState.FAILURE:
                reward_components["timeout"] = float(sum(self._penalties))

        terminated = self.controller.state in (RoundState.SUCCESS, RoundState.FAILURE)
        reward = float(sum(reward_components.values()))
        info = self._get_info()
        info["reward_components"] = reward_components
        return self._get_obs(), reward, terminated, False, info

    def render(self) -> Optional[np.ndarray | str]:
        if self.render_mode == "rgb_array":
            return self._render_rgb()
        if self.render_mode == "ansi":
            return self._render_ansi()
        return None

    def _render_rgb(self) -> np.ndarray:
        """Grid cells coloured by occupying piece, with a time bar underneath."""
        h, w = self._last_ids.shape
        img = np.empty((h * CELL_PX + TIMER_PX, w * CELL_PX, 3), dtype=np.uint8)
        img[...] = GRID_LINE
        for (y, x), piece_id in np.ndenumerate(self._last_ids):
            color = piece_color(int(piece_id)) if piece_id else EMPTY_CELL
            img[y * CELL_PX + 1 : (y + 1) * CELL_PX - 1, x * CELL_PX + 1 : (x + 1) * CELL_PX - 1] = color
        left = self.controller.remaining / float(self.config.time_limit)
        img[h * CELL_PX + 1 :, : int(round(w * CELL_PX * left))] = TIMER_COLOR
        return img

    def _render_ansi(self) -> str:
        # One letter per piece id, '.' for free cells, then a legend
        rows = [
            "".join(chr(ord("A") + int(pid) - 1) if pid else "." for pid in row)
            for row in self._last_ids
        ]
        legend = [
            f"{chr(ord('A') + i)} {label}{' *' if self._last_placed[i] else ''}"
            for i, label in enumerate(self.config.labels)
        ]
        return "\n".join(rows + [""] + legend + ["", self.controller.timer_text()])

    def close(self) -> None:
        if self.controller.is_active:
            self.controller.cancel()
