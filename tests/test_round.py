from typing import List

import pytest

from schedule_puzzle.game import (
    ConfigurationError,
    DEFAULT_DAYS,
    RoundConfig,
    RoundController,
    RoundState,
)


SQUARE = [[1, 1], [1, 1]]
BAR = [[1, 1]]


def _config(shapes=(SQUARE,), time_limit: float = 60.0, penalty: int = -3, **kwargs) -> RoundConfig:
    params = dict(
        grid_width=4,
        grid_height=5,
        time_limit=time_limit,
        failure_penalty=penalty,
        shapes=tuple(shapes),
        labels=tuple(f"item {i}" for i in range(len(shapes))),
        positions=tuple((-300.0, 100.0 * i) for i in range(len(shapes))),
    )
    params.update(kwargs)
    return RoundConfig(**params)


class Recorder:
    def __init__(self) -> None:
        self.resolved: List[bool] = []
        self.deltas: List[int] = []

    def controller(self, **kwargs) -> RoundController:
        return RoundController(on_resolved=self.resolved.append, apply_stat_delta=self.deltas.append, **kwargs)


def test_start_round_spawns_pieces_at_configured_positions():
    rec = Recorder()
    rc = rec.controller()
    rc.start_round(_config(shapes=(SQUARE, BAR)))

    assert rc.state == RoundState.ACTIVE
    assert rc.remaining == 60.0
    assert [p.label for p in rc.pieces] == ["item 0", "item 1"]
    assert [p.position for p in rc.pieces] == [(-300.0, 0.0), (-300.0, 100.0)]
    assert not any(p.is_placed for p in rc.pieces)
    assert rc.grid is not None and rc.grid.width == 4 and rc.grid.height == 5


def test_square_example_on_four_by_five_grid():
    rc = Recorder().controller()
    rc.start_round(_config(shapes=(SQUARE, BAR)))
    square, bar = rc.pieces

    assert rc.place_piece(square, 3, 4) is False
    assert rc.place_piece(square, 2, 3) is True
    assert square.grid_origin == (2, 3)
    assert rc.place_piece(bar, 2, 3) is False
    assert rc.place_piece(bar, 1, 4) is False
    assert rc.place_piece(bar, 0, 4) is True


def test_timeout_resolves_failure_once_with_penalty():
    rec = Recorder()
    rc = rec.controller()
    rc.start_round(_config(time_limit=5.0, penalty=-3))

    for _ in range(4):
        rc.tick(1.0)
    assert rc.state == RoundState.ACTIVE
    assert rec.resolved == []

    rc.tick(1.0)
    assert rc.state == RoundState.FAILURE
    assert rc.remaining == 0.0
    assert rec.resolved == [False]
    assert rec.deltas == [-3]

    # Further ticks and commits do nothing
    rc.tick(1.0)
    rc.tick(10.0)
    assert rc.commit_success() is False
    assert rec.resolved == [False]
    assert rec.deltas == [-3]


def test_timer_decreases_monotonically_and_clamps_at_zero():
    rc = Recorder().controller()
    rc.start_round(_config(time_limit=1.0))
    readings = []
    for _ in range(7):
        rc.tick(0.3)
        readings.append(rc.remaining)
    assert readings[:3] == sorted(readings[:3], reverse=True)
    assert readings[0] > readings[1] > readings[2]
    assert all(r >= 0.0 for r in readings)
    assert readings[-1] == 0.0


def test_all_placed_unlocks_commit_but_does_not_auto_resolve():
    rec = Recorder()
    changes: List[bool] = []
    rc = rec.controller(on_placement_changed=changes.append)
    rc.start_round(_config(shapes=(SQUARE, BAR)))
    square, bar = rc.pieces

    rc.place_piece(square, 0, 0)
    assert rc.all_placed is False
    assert rc.commit_success() is False

    rc.place_piece(bar, 0, 4)
    assert rc.all_placed is True
    assert rc.can_commit
    assert rc.state == RoundState.ACTIVE
    assert rec.resolved == []
    assert changes == [True]


def test_lifting_a_piece_before_commit_blocks_success():
    rec = Recorder()
    rc = rec.controller()
    rc.start_round(_config(shapes=(SQUARE, BAR)))
    square, bar = rc.pieces
    rc.place_piece(square, 0, 0)
    rc.place_piece(bar, 2, 0)
    assert rc.all_placed

    rc.lift_piece(bar)
    assert rc.all_placed is False
    assert rc.commit_success() is False
    assert rec.resolved == []

    rc.place_piece(bar, 2, 2)
    assert rc.commit_success() is True
    assert rec.resolved == [True]


def test_commit_success_stops_timer_and_skips_stat_sink():
    rec = Recorder()
    rc = rec.controller()
    rc.start_round(_config(time_limit=10.0))
    rc.tick(2.5)
    rc.place_piece(rc.pieces[0], 1, 1)

    assert rc.commit_success() is True
    assert rc.state == RoundState.SUCCESS
    assert rc.remaining == pytest.approx(7.5)

    rc.tick(100.0)
    assert rc.remaining == pytest.approx(7.5)
    assert rc.commit_success() is False
    assert rec.resolved == [True]
    assert rec.deltas == []


def test_all_placed_but_uncommitted_still_times_out():
    rec = Recorder()
    rc = rec.controller()
    rc.start_round(_config(time_limit=3.0, penalty=-2))
    rc.place_piece(rc.pieces[0], 0, 0)
    rc.tick(3.0)
    assert rc.state == RoundState.FAILURE
    assert rec.resolved == [False]
    assert rec.deltas == [-2]


def test_resolution_is_delayed_until_ticks_cover_the_delay():
    rec = Recorder()
    rc = rec.controller(resolution_delay=2.0)
    rc.start_round(_config(time_limit=1.0))

    rc.tick(1.0)
    assert rc.state == RoundState.FAILURE
    assert rec.deltas == [-3]
    assert rec.resolved == []
    assert rc.awaiting_handoff
    assert rc.pieces

    rc.tick(1.5)
    assert rec.resolved == []
    rc.tick(0.5)
    assert rec.resolved == [False]
    assert not rc.awaiting_handoff
    assert rc.pieces == []
    assert rc.grid is None

    rc.tick(5.0)
    assert rec.resolved == [False]


def test_outcome_reported_at_resolution_and_handoff_can_be_flushed():
    rec = Recorder()
    outcomes: List[bool] = []
    rc = rec.controller(resolution_delay=2.0, on_outcome=outcomes.append)
    rc.start_round(_config(time_limit=1.0))
    assert rc.finish_handoff() is False

    rc.tick(1.0)
    assert outcomes == [False]
    assert rec.resolved == []

    assert rc.finish_handoff() is True
    assert rec.resolved == [False]
    assert rc.pieces == []
    assert rc.finish_handoff() is False
    rc.tick(5.0)
    assert outcomes == [False]
    assert rec.resolved == [False]


def test_placements_ignored_once_resolved():
    rc = Recorder().controller(resolution_delay=1.0)
    rc.start_round(_config(shapes=(SQUARE, BAR), time_limit=1.0))
    square = rc.pieces[0]
    rc.tick(1.0)
    assert rc.place_piece(square, 0, 0) is False
    assert not square.is_placed


def test_cancel_tears_down_without_penalty_or_callback():
    rec = Recorder()
    rc = rec.controller()
    rc.start_round(_config())
    assert rc.cancel() is True
    assert rc.state == RoundState.CANCELLED
    assert rc.pieces == []
    rc.tick(100.0)
    assert rec.resolved == []
    assert rec.deltas == []
    assert rc.cancel() is False


def test_starting_new_round_replaces_previous_one():
    rec = Recorder()
    rc = rec.controller()
    rc.start_round(_config(shapes=(SQUARE, BAR)))
    old_pieces = list(rc.pieces)
    rc.place_piece(old_pieces[0], 0, 0)

    rc.start_round(_config(shapes=(BAR,), time_limit=30.0))

    assert len(rc.pieces) == 1
    assert rc.pieces[0] is not old_pieces[0]
    assert rc.grid is not None and not rc.grid.cells.any()
    assert rc.remaining == 30.0
    with pytest.raises(ValueError):
        rc.place_piece(old_pieces[0], 0, 0)


@pytest.mark.parametrize(
    "overrides",
    [
        dict(grid_width=0),
        dict(grid_height=-1),
        dict(time_limit=0.0),
        dict(time_limit=-5.0),
        dict(labels=("a", "b")),
        dict(labels=()),
        dict(shapes=(SQUARE, BAR), labels=("a",), positions=((0.0, 0.0),)),
        dict(positions=()),
        dict(shapes=([[1, 1, 1, 1, 1]],)),
        dict(shapes=([[0, 0]],)),
    ],
)
def test_bad_configuration_fails_fast(overrides):
    rc = Recorder().controller()
    with pytest.raises(ConfigurationError):
        rc.start_round(_config(**overrides))
    assert rc.state == RoundState.IDLE


def test_bad_configuration_leaves_running_round_untouched():
    rc = Recorder().controller()
    rc.start_round(_config())
    pieces = list(rc.pieces)
    with pytest.raises(ConfigurationError):
        rc.start_round(_config(time_limit=0.0))
    assert rc.is_active
    assert rc.pieces == pieces


def test_timer_and_status_text():
    rc = Recorder().controller()
    rc.start_round(_config(time_limit=5.0))
    rc.tick(0.2)
    assert rc.timer_text() == "Time: 5s"
    assert rc.status_text() == "Drag schedule blocks to fit them in the grid!"
    rc.place_piece(rc.pieces[0], 0, 0)
    assert rc.status_text() == "All blocks placed! Click Complete to finish."
    rc.lift_piece(rc.pieces[0])
    rc.tick(5.0)
    assert rc.timer_text() == "FAILED"
    assert rc.status_text() == "Time's up! Schedule organization failed."


def test_default_day_one_can_be_fully_tiled():
    rec = Recorder()
    rc = rec.controller()
    rc.start_round(DEFAULT_DAYS[1])
    a, b, c, d = rc.pieces
    assert rc.place_piece(a, 0, 0)
    assert rc.place_piece(c, 2, 0)
    assert rc.place_piece(b, 1, 1)
    assert rc.place_piece(d, 0, 3)
    assert rc.grid is not None and rc.grid.filled_ratio() == 1.0
    assert rc.commit_success()
    assert rec.resolved == [True]


def test_negative_tick_rejected():
    rc = Recorder().controller()
    rc.start_round(_config())
    with pytest.raises(ValueError):
        rc.tick(-0.1)
