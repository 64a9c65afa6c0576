from __future__ import annotations

from enum import Enum
from typing import Callable, Mapping, Optional

from .config import RoundConfig
from .errors import ConfigurationError
from .round import RoundController
from .stats import PlayerStats


class SessionView(str, Enum):
    INSTRUCTIONS = "instructions"
    COMPLETED = "completed"


RULES = (
    "• Drag the schedule blocks from the sides",
    "• Drop them into the grid to organize your day",
    "• All blocks must fit within the grid boundaries",
    "• Blocks cannot overlap with each other",
    "• Complete the puzzle before time runs out",
)


class ScheduleSession:
    """The schedule app for one in-game day.

    Each day allows a single attempt. Reopening the app after that attempt only
    shows a completion message. Round outcomes feed the stat store and are
    forwarded to ``on_day_finished(day, success)``.
    """

    def __init__(
        self,
        days: Mapping[int, RoundConfig],
        stats: Optional[PlayerStats] = None,
        on_day_finished: Optional[Callable[[int, bool], None]] = None,
        resolution_delay: float = 2.0,
        day: int = 1,
    ) -> None:
        self.days = days
        self.stats = stats if stats is not None else PlayerStats()
        self.on_day_finished = on_day_finished
        self.round = RoundController(
            on_resolved=self._round_resolved,
            apply_stat_delta=self.stats.apply_dependency_delta,
            resolution_delay=resolution_delay,
            on_outcome=self._round_outcome,
        )
        self.day = day
        self._resolved_day = day
        self.has_completed = False
        self.attempted = False

    @property
    def config(self) -> RoundConfig:
        try:
            return self.days[self.day]
        except KeyError:
            raise ConfigurationError(f"No schedule configured for day {self.day}") from None

    def reset_for_new_day(self, day: int) -> None:
        if self.round.is_active:
            self.round.cancel()
        # A pending hand-off still reports against the day that was played
        self.round.finish_handoff()
        self.day = day
        self.has_completed = False
        self.attempted = False

    def open(self) -> SessionView:
        if self.has_completed or self.attempted:
            return SessionView.COMPLETED
        return SessionView.INSTRUCTIONS

    def instructions_text(self) -> str:
        config = self.config
        lines = [
            f"Day {self.day} - Time Limit: {config.time_limit:g} seconds",
            "",
            "HOW TO PLAY:",
            "",
            *RULES,
            "",
            "SCHEDULE ITEMS:",
            *(f"• {label}" for label in config.labels),
            "",
            "Press BEGIN when you're ready to start!",
        ]
        return "\n".join(lines)

    def completion_message(self) -> str:
        if self.has_completed:
            return "Schedule already organized for today!"
        return "Schedule attempt completed. Check back tomorrow!"

    def begin(self) -> RoundController:
        """Start today's round; a day that was already attempted cannot be replayed."""
        if self.open() == SessionView.COMPLETED:
            raise RuntimeError(f"Schedule for day {self.day} was already attempted")
        self.round.start_round(self.config)
        return self.round

    def _round_outcome(self, success: bool) -> None:
        self.attempted = True
        self.has_completed = success
        self._resolved_day = self.day

    def _round_resolved(self, success: bool) -> None:
        if self.on_day_finished is not None:
            self.on_day_finished(self._resolved_day, success)
