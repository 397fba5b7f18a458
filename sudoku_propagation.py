"""
Constraint propagation for the candidate model.

Two deductions are applied until neither changes the board:
- elimination: every unresolved cell drops the digits resolved among its peers
- unique placement: a candidate that no other unresolved cell of a row, column
  or block can take is placed there
"""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import List, Optional, Tuple

from loguru import logger

from sudoku_board import CELL_COUNT, GROUPS, SIZE, Board, Recompute, block_of, column_of, row_of


class Outcome(Enum):
    SOLVED_SO_FAR = "solved_so_far"
    CONTRADICTION = "contradiction"


# indexes into GROUPS of the row, column and block of every position
GROUP_INDEXES_OF: Tuple[Tuple[int, int, int], ...] = tuple(
    (row_of(p), SIZE + column_of(p), 2 * SIZE + block_of(p)) for p in range(CELL_COUNT)
)


def eliminate(board: Board) -> bool:
    """Recompute candidates of all unresolved cells to a fixed point.

    Passes repeat until one of them resolves nothing. Returns False as soon as
    some cell is left without candidates.
    """

    changed = True
    while changed:
        changed = False
        for pos in board.unresolved_positions():
            result = board.recompute_candidates(pos)
            if result is Recompute.CONTRADICTION:
                logger.debug("Contradiction: r{}c{} has no candidates", row_of(pos) + 1, column_of(pos) + 1)
                return False
            if result is Recompute.RESOLVED:
                changed = True
    return True


def _holder_counts(board: Board) -> List[Counter]:
    """For every group, how many unresolved cells still carry each digit."""

    counts: List[Counter] = []
    for group in GROUPS:
        tally: Counter = Counter()
        for pos in group:
            if not board.is_resolved(pos):
                tally.update(board.candidates_of(pos))
        counts.append(tally)
    return counts


def find_unique_placement(board: Board) -> Optional[Tuple[int, int]]:
    """Return the first (position, digit) whose digit fits nowhere else in a group.

    Cells are scanned in ascending position and digits in ascending order; the
    row is checked before the column and the block.
    """

    counts = _holder_counts(board)
    for pos in board.unresolved_positions():
        for digit in sorted(board.candidates_of(pos)):
            if any(counts[index][digit] == 1 for index in GROUP_INDEXES_OF[pos]):
                return pos, digit
    return None


def propagate(board: Board) -> Outcome:
    """Run elimination and unique placement until the board stops changing."""

    while True:
        if not eliminate(board):
            return Outcome.CONTRADICTION
        placement = find_unique_placement(board)
        if placement is None:
            return Outcome.SOLVED_SO_FAR
        pos, digit = placement
        logger.debug("Unique placement: r{}c{} = {}", row_of(pos) + 1, column_of(pos) + 1, digit)
        board.resolve(pos, digit)


__all__ = [
    "GROUP_INDEXES_OF",
    "Outcome",
    "eliminate",
    "find_unique_placement",
    "propagate",
]
