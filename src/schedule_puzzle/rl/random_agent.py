from __future__ import annotations

import argparse
import random

import gymnasium as gym

import schedule_puzzle.env  # noqa: F401  ensure registration
from schedule_puzzle.game import DEFAULT_DAYS


def run_random(episodes: int = 5, day: int = 1, seed: int | None = None) -> float:
    rng = random.Random(seed)
    env = gym.make("SchedulePuzzle-v0", config=DEFAULT_DAYS[day])
    total_reward = 0.0
    wins = 0
    for episode in range(episodes):
        obs, info = env.reset(seed=None if seed is None else seed + episode)
        done = False
        while not done:
            # Prefer valid placements if available
            valid = info.get("valid_actions", [])
            if valid:
                action = rng.choice(valid)
            else:
                action = env.action_space.sample()
            obs, reward, terminated, truncated, info = env.step(action)
            total_reward += float(reward)
            done = terminated or truncated
        if info["state"] == "SUCCESS":
            wins += 1
    env.close()
    print(f"Random agent: {wins}/{episodes} schedules completed, total reward {total_reward:.2f}")
    return total_reward


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--episodes", type=int, default=5)
    p.add_argument("--day", type=int, choices=sorted(DEFAULT_DAYS), default=1)
    p.add_argument("--seed", type=int, default=None)
    return p


def main() -> None:
    args = build_parser().parse_args()
    run_random(args.episodes, args.day, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
