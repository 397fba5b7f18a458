# tests/test_sudoku_board.py
import pytest

from conftest import CLASSIC_PUZZLE, CLASSIC_SOLUTION, board_of
from sudoku_board import (
    BLOCKS,
    COLUMNS,
    DIGITS,
    GROUPS,
    GROUPS_OF,
    PEERS,
    ROWS,
    Board,
    Recompute,
    Resolved,
    Unresolved,
    block_of,
    board_to_csv,
    board_to_text,
    find_conflicts,
    group_label,
    verify,
)


def test_groups_partition_the_board():
    assert len(GROUPS) == 27
    for family in (ROWS, COLUMNS, BLOCKS):
        cells = sorted(pos for group in family for pos in group)
        assert cells == list(range(81))
    for pos in range(81):
        memberships = [group for group in GROUPS if pos in group]
        assert len(memberships) == 3
        assert list(GROUPS_OF[pos]) == memberships
        assert len(PEERS[pos]) == 20
        assert pos not in PEERS[pos]


def test_block_index_formula():
    assert block_of(0) == 0
    assert block_of(8) == 2
    assert block_of(30) == 4
    assert block_of(60) == 8
    assert BLOCKS[4] == (30, 31, 32, 39, 40, 41, 48, 49, 50)


def test_group_labels():
    assert group_label(0) == "Row 1"
    assert group_label(9) == "Column 1"
    assert group_label(26) == "Block 9"


def test_from_grid_and_back():
    grid = [[(r * 3 + r // 3 + c) % 9 + 1 for c in range(9)] for r in range(9)]
    board = Board.from_grid(grid)
    assert board.is_complete()
    assert board.to_grid() == grid


def test_from_values_rejects_bad_input():
    with pytest.raises(ValueError):
        Board.from_values([0] * 80)
    with pytest.raises(ValueError):
        Board.from_values([10] + [0] * 80)


def test_cell_queries(classic_board):
    assert classic_board.is_resolved(0)
    assert classic_board.digit_of(0) == 5
    assert not classic_board.is_resolved(2)
    assert classic_board.digit_of(2) is None
    assert classic_board.candidates_of(2) == DIGITS
    assert classic_board.candidates_of(1) == frozenset({3})
    assert 2 in classic_board.unresolved_positions()
    assert not classic_board.is_complete()


def test_recompute_candidates_narrows_to_peer_free_digits(classic_board):
    # r1c3 sees 5,3,7 in its row, 8 in its column, 6,9,8 in its block
    assert classic_board.recompute_candidates(2) is Recompute.UNCHANGED
    assert classic_board.candidates_of(2) == frozenset({1, 2, 4})


def test_recompute_candidates_resolves_single():
    board = board_of("12345678" + "." * 73)
    assert board.recompute_candidates(8) is Recompute.RESOLVED
    assert board.cells[8] == Resolved(9)


def test_recompute_candidates_reports_contradiction():
    values = [1, 2, 3, 4, 5, 6, 7, 8, 0] + [0] * 71 + [9]
    board = Board.from_values(values)
    assert board.recompute_candidates(8) is Recompute.CONTRADICTION
    assert board.cells[8] == Unresolved(frozenset())
    assert not board.is_resolved(8)


def test_recompute_candidates_is_idempotent(classic_board):
    for pos in classic_board.unresolved_positions():
        first = classic_board.recompute_candidates(pos)
        state = classic_board.snapshot()
        assert classic_board.recompute_candidates(pos) is first
        assert classic_board.snapshot() == state


def test_snapshot_and_restore_are_independent(classic_board):
    saved = classic_board.snapshot()
    classic_board.resolve(2, 4)
    assert classic_board.digit_of(2) == 4
    classic_board.restore(saved)
    assert classic_board.digit_of(2) is None
    assert classic_board == board_of(CLASSIC_PUZZLE)


def test_resolve_rejects_non_digits(classic_board):
    with pytest.raises(ValueError):
        classic_board.resolve(2, 0)


def test_verify_accepts_legal_boards(classic_board):
    assert verify(classic_board)
    assert verify(board_of(CLASSIC_SOLUTION))
    assert verify(Board())


def test_verify_detects_duplicates_in_every_group_kind():
    row_dup = board_of("55" + "." * 79)
    col_dup = board_of("5" + "." * 26 + "5" + "." * 53)
    block_dup = board_of("5" + "." * 9 + "5" + "." * 70)
    for board in (row_dup, col_dup, block_dup):
        assert not verify(board)
        assert verify(board) == verify(board)
    assert find_conflicts(row_dup) == ["Row 1 repeats digit(s) [5]", "Block 1 repeats digit(s) [5]"]
    assert find_conflicts(col_dup) == ["Column 1 repeats digit(s) [5]"]
    assert find_conflicts(block_dup) == ["Block 1 repeats digit(s) [5]"]


def test_renderings():
    grid = board_of("53" + "." * 79).to_grid()
    assert board_to_text(grid).splitlines()[0] == "5 3 . . . . . . ."
    assert board_to_csv(grid).splitlines()[0] == "5,3,-,-,-,-,-,-,-"
    assert len(board_to_csv(grid).splitlines()) == 9
