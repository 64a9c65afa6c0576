"""Gymnasium environments for the schedule packing puzzle."""

from __future__ import annotations

from gymnasium.envs.registration import register

# One timed schedule round per episode (day 1 layout unless a config is passed)
register(
    id="SchedulePuzzle-v0",
    entry_point="schedule_puzzle.env.schedule_env:SchedulePuzzleEnv",
)

__all__ = ["SchedulePuzzle-v0"]
