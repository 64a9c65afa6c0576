import numpy as np
import pytest

from schedule_puzzle.game import (
    ConfigurationError,
    Piece,
    PlacementState,
    SHAPE_CATALOG,
    make_shape,
    shape_from_spec,
)


def test_make_shape_normalises_to_read_only_bools():
    shape = make_shape([[1, 0, 1], [1, 1, 1]])
    assert shape.dtype == np.bool_
    assert shape.shape == (2, 3)
    with pytest.raises(ValueError):
        shape[0, 1] = True


@pytest.mark.parametrize("bad", [[], [[]], [[0, 0], [0, 0]], [[1, 1], [1]], [1, 1, 1]])
def test_make_shape_rejects_malformed(bad):
    with pytest.raises(ConfigurationError):
        make_shape(bad)


def test_catalog_blocks_tile_the_default_grid():
    assert sum(int(s.sum()) for s in SHAPE_CATALOG.values()) == 4 * 5
    assert SHAPE_CATALOG["1b"].shape == (2, 2)
    assert SHAPE_CATALOG["1d"].shape == (2, 4)


def test_shape_from_spec_accepts_names_and_matrices():
    assert shape_from_spec("1b") is SHAPE_CATALOG["1b"]
    assert shape_from_spec([[1, 1, 1]]).shape == (1, 3)
    with pytest.raises(ConfigurationError):
        shape_from_spec("9z")


def test_piece_geometry_queries():
    piece = Piece(piece_id=1, label="Lunch", shape=[[1, 0], [1, 1]], position=(10, -5))
    assert piece.size == (2, 2)
    assert piece.cell_count == 3
    assert piece.position == (10.0, -5.0)
    assert piece.spawn_position == (10.0, -5.0)
    assert piece.cells_at(2, 3) == [(2, 3), (2, 4), (3, 4)]


def test_set_placed_toggles_state_and_origin():
    piece = Piece(piece_id=1, label="Lunch", shape=SHAPE_CATALOG["1b"])
    assert piece.state == PlacementState.UNPLACED
    assert not piece.is_placed

    piece.set_placed(True, (1, 2))
    assert piece.is_placed
    assert piece.grid_origin == (1, 2)

    piece.set_placed(False)
    assert not piece.is_placed
    assert piece.grid_origin is None


def test_pieces_compare_by_identity():
    a = Piece(piece_id=1, label="x", shape=[[1]])
    b = Piece(piece_id=1, label="x", shape=[[1]])
    assert a != b
    assert a == a


def test_piece_id_must_be_positive():
    with pytest.raises(ValueError):
        Piece(piece_id=0, label="x", shape=[[1]])
