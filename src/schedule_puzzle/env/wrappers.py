from __future__ import annotations

from typing import Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces


class FlattenDiscreteActionWrapper(gym.ActionWrapper):
    """Flattens MultiDiscrete (piece, x, y) -> Discrete(N).

    Also exposes `get_action_mask()` returning a 1D boolean mask of shape (N,).
    Order: piece, x, y (C-order flattening).
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.MultiDiscrete)
        k, width, height = map(int, env.action_space.nvec)
        self.k = k
        self.width = width
        self.height = height
        self.n = int(k * width * height)
        self.action_space = spaces.Discrete(self.n)

    def _unflatten(self, idx: int) -> tuple[int, int, int]:
        y = idx % self.height
        idx //= self.height
        x = idx % self.width
        piece = idx // self.width
        return int(piece), int(x), int(y)

    def action(self, action: int):  # type: ignore[override]
        return np.array(self._unflatten(int(action)), dtype=np.int64)

    def get_action_mask(self) -> np.ndarray:
        return self.env.unwrapped.get_action_mask().reshape(-1)


class ResampleInvalidActionWrapper(gym.Wrapper):
    """Swaps an action the round would reject for a uniformly drawn valid one.

    Works over the flat ``Discrete`` space of ``FlattenDiscreteActionWrapper``
    as well as the raw ``(piece, x, y)`` space. Out-of-range actions count as
    invalid. Every step reports ``info["resampled"]``; a swapped step also
    carries the original ``info["requested_action"]``. When nothing is valid
    the request goes through unchanged.
    """

    def step(self, action):  # type: ignore[override]
        mask = self.get_action_mask()
        requested = action
        idx = _flat_index(action, mask.shape)
        resampled = False
        if idx is None or not mask.reshape(-1)[idx]:
            choices = np.flatnonzero(mask)
            if choices.size > 0:
                pick = int(self.np_random.choice(choices))
                if mask.ndim == 1:
                    action = pick
                else:
                    action = np.array(np.unravel_index(pick, mask.shape), dtype=np.int64)
                resampled = True
        obs, reward, terminated, truncated, info = self.env.step(action)
        info["resampled"] = resampled
        if resampled:
            info["requested_action"] = requested
        return obs, reward, terminated, truncated, info

    def get_action_mask(self) -> np.ndarray:
        source = self.env if hasattr(self.env, "get_action_mask") else self.env.unwrapped
        if not hasattr(source, "get_action_mask"):
            raise AttributeError("Underlying env does not provide get_action_mask")
        return source.get_action_mask()


def _flat_index(action, shape: tuple[int, ...]) -> Optional[int]:
    coords = np.atleast_1d(np.asarray(action, dtype=np.int64))
    if coords.shape != (len(shape),):
        return None
    if np.any(coords < 0) or np.any(coords >= np.asarray(shape)):
        return None
    return int(np.ravel_multi_index(tuple(coords), shape))
