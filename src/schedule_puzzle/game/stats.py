from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PlayerStats:
    """In-memory sentience/dependency counters, both floored at zero."""

    sentience: int = 0
    dependency: int = 0

    def modify(self, sentience_change: int, dependency_change: int) -> None:
        self.sentience = max(0, self.sentience + int(sentience_change))
        self.dependency = max(0, self.dependency + int(dependency_change))

    def apply_dependency_delta(self, delta: int) -> None:
        # Schedule penalties only ever touch dependency
        self.modify(0, delta)

    def reset(self) -> None:
        self.sentience = 0
        self.dependency = 0
