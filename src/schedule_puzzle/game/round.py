from __future__ import annotations

import math
from enum import IntEnum
from typing import Callable, List, Optional

from .config import RoundConfig
from .geometry import GridGeometry
from .grid import ScheduleGrid
from .pieces import Piece


ResolvedCallback = Callable[[bool], None]
StatDeltaCallback = Callable[[int], None]
PlacementCallback = Callable[[bool], None]


class RoundState(IntEnum):
    IDLE = 0
    CONFIGURING = 1
    ACTIVE = 2
    SUCCESS = 3
    FAILURE = 4
    CANCELLED = 5


class RoundController:
    """Owns one timed schedule attempt from configuration to resolution.

    Collaborators are injected: ``on_resolved(success)`` is the dialogue sink,
    fired exactly once per resolved round after the hand-off delay;
    ``on_outcome(success)`` fires at the moment of resolution, before it.
    ``apply_stat_delta(delta)`` is the stat sink, called once with the
    configured penalty on failure only.
    Time advances only through ``tick(dt)``, called once per frame.
    """

    def __init__(
        self,
        on_resolved: Optional[ResolvedCallback] = None,
        apply_stat_delta: Optional[StatDeltaCallback] = None,
        resolution_delay: float = 0.0,
        on_placement_changed: Optional[PlacementCallback] = None,
        on_outcome: Optional[ResolvedCallback] = None,
    ) -> None:
        if resolution_delay < 0:
            raise ValueError("resolution_delay must be >= 0")
        self.on_resolved = on_resolved
        self.apply_stat_delta = apply_stat_delta
        self.on_placement_changed = on_placement_changed
        self.on_outcome = on_outcome
        self.resolution_delay = float(resolution_delay)

        self.state = RoundState.IDLE
        self.config: Optional[RoundConfig] = None
        self.grid: Optional[ScheduleGrid] = None
        self.geometry: Optional[GridGeometry] = None
        self.pieces: List[Piece] = []
        self.remaining = 0.0
        self.all_placed = False
        self._delay_left = 0.0
        self._notified = True

    # ------------------------------------------------------------------ lifecycle

    def start_round(self, config: RoundConfig) -> None:
        """Validate ``config`` and begin a fresh attempt, replacing any previous one.

        Raises ConfigurationError without touching the current round when the
        configuration is unusable.
        """
        config.validate()
        self._teardown()

        self.state = RoundState.CONFIGURING
        self.config = config
        self.grid = ScheduleGrid(config.grid_width, config.grid_height)
        self.geometry = config.geometry()
        self.pieces = [
            Piece(piece_id=i + 1, label=label, shape=shape, position=position)
            for i, (label, shape, position) in enumerate(
                zip(config.labels, config.resolved_shapes(), config.positions)
            )
        ]
        self.remaining = float(config.time_limit)
        self.all_placed = False
        self._delay_left = 0.0
        self._notified = False
        self.state = RoundState.ACTIVE

    def tick(self, dt: float) -> None:
        if dt < 0:
            raise ValueError(f"Frame duration must be >= 0, got {dt}")
        if self.state == RoundState.ACTIVE:
            self.remaining = max(0.0, self.remaining - dt)
            if self.remaining <= 0.0:
                self._resolve(False)
        elif self.is_resolved and not self._notified:
            self._delay_left = max(0.0, self._delay_left - dt)
            if self._delay_left <= 0.0:
                self._notify()

    def commit_success(self) -> bool:
        """Finish the round as a success; rejected unless active with every piece placed."""
        if not self.can_commit:
            return False
        self._resolve(True)
        return True

    def cancel(self) -> bool:
        """Abandon the active round: no penalty and no resolution callback."""
        if self.state not in (RoundState.ACTIVE, RoundState.CONFIGURING):
            return False
        self.state = RoundState.CANCELLED
        self._notified = True
        self._teardown()
        return True

    def finish_handoff(self) -> bool:
        """Skip whatever is left of the hand-off delay and notify now."""
        if not self.awaiting_handoff:
            return False
        self._notify()
        return True

    # ------------------------------------------------------------------ placement

    def place_piece(self, piece: Piece, x: int, y: int) -> bool:
        """Commit ``piece`` at grid origin (x, y) if the round accepts it there."""
        if not self.is_active:
            return False
        self._require_member(piece)
        assert self.grid is not None
        if piece.is_placed:
            self.grid.remove(piece)
            piece.set_placed(False)
        if not self.grid.can_place(piece.shape, x, y):
            self._update_all_placed()
            return False
        self.grid.place(piece.shape, x, y, piece)
        piece.set_placed(True, (x, y))
        self._update_all_placed()
        return True

    def lift_piece(self, piece: Piece) -> None:
        """Take ``piece`` off the grid and mark it unplaced."""
        self._require_member(piece)
        if self.grid is not None:
            self.grid.remove(piece)
        was_placed = piece.is_placed
        piece.set_placed(False)
        if was_placed:
            self._update_all_placed()

    # ------------------------------------------------------------------ queries

    @property
    def is_active(self) -> bool:
        return self.state == RoundState.ACTIVE

    @property
    def is_resolved(self) -> bool:
        return self.state in (RoundState.SUCCESS, RoundState.FAILURE)

    @property
    def awaiting_handoff(self) -> bool:
        """Resolved, but still inside the post-resolution delay."""
        return self.is_resolved and not self._notified

    @property
    def can_commit(self) -> bool:
        return self.is_active and self.all_placed

    def owns(self, piece: Piece) -> bool:
        return any(piece is p for p in self.pieces)

    def piece_for_label(self, label: str) -> Optional[Piece]:
        for piece in self.pieces:
            if piece.label == label:
                return piece
        return None

    def timer_text(self) -> str:
        if self.state == RoundState.FAILURE:
            return "FAILED"
        return f"Time: {int(math.ceil(self.remaining))}s"

    def status_text(self) -> str:
        if self.state == RoundState.SUCCESS:
            return "Schedule completed successfully!"
        if self.state == RoundState.FAILURE:
            return "Time's up! Schedule organization failed."
        if self.can_commit:
            return "All blocks placed! Click Complete to finish."
        return "Drag schedule blocks to fit them in the grid!"

    # ------------------------------------------------------------------ internals

    def _require_member(self, piece: Piece) -> None:
        if not self.owns(piece):
            raise ValueError(f"Piece {piece.label!r} does not belong to the current round")

    def _update_all_placed(self) -> None:
        all_placed = bool(self.pieces) and all(p.is_placed for p in self.pieces)
        changed = all_placed != self.all_placed
        self.all_placed = all_placed
        if changed and self.on_placement_changed is not None:
            self.on_placement_changed(all_placed)

    def _resolve(self, success: bool) -> None:
        assert self.config is not None
        self.state = RoundState.SUCCESS if success else RoundState.FAILURE
        if not success and self.apply_stat_delta is not None:
            self.apply_stat_delta(self.config.failure_penalty)
        if self.on_outcome is not None:
            self.on_outcome(success)
        self._delay_left = self.resolution_delay
        if self._delay_left <= 0.0:
            self._notify()

    def _notify(self) -> None:
        # Single notification per round; the round is gone afterwards
        self._notified = True
        success = self.state == RoundState.SUCCESS
        self._teardown()
        if self.on_resolved is not None:
            self.on_resolved(success)

    def _teardown(self) -> None:
        self.grid = None
        self.geometry = None
        self.pieces = []
        self.all_placed = False
