# tests/conftest.py
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so the top-level solver modules import without installing
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sudoku_board import Board  # noqa: E402

# Well-known example puzzle and its unique solution.
CLASSIC_PUZZLE = (
    "53..7...."
    "6..195..."
    ".98....6."
    "8...6...3"
    "4..8.3..1"
    "7...2...6"
    ".6....28."
    "...419..5"
    "....8..79"
)
CLASSIC_SOLUTION = (
    "534678912"
    "672195348"
    "198342567"
    "859761423"
    "426853791"
    "713924856"
    "961537284"
    "287419635"
    "345286179"
)

# First entry of the 17-clue collection; its solution is unique.
SEVENTEEN_PUZZLE = (
    "000000010"
    "400000000"
    "020000000"
    "000050407"
    "008000300"
    "001090000"
    "300400200"
    "050100000"
    "000806000"
)
SEVENTEEN_SOLUTION = (
    "693784512"
    "487512936"
    "125963874"
    "932651487"
    "568247391"
    "741398625"
    "319475268"
    "856129743"
    "274836159"
)


def values_of(text):
    return [int(ch) if ch in "123456789" else 0 for ch in text]


def board_of(text):
    return Board.from_values(values_of(text))


def assert_legal_solution(board, puzzle_text):
    """Every group holds 1-9 exactly once and every given is preserved."""

    from sudoku_board import DIGITS, GROUPS

    assert board.is_complete()
    for group in GROUPS:
        assert {board.digit_of(pos) for pos in group} == set(DIGITS)
    for pos, given in enumerate(values_of(puzzle_text)):
        if given:
            assert board.digit_of(pos) == given


@pytest.fixture
def classic_board():
    return board_of(CLASSIC_PUZZLE)
