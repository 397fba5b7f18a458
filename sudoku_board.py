"""
Candidate model for 9x9 Sudoku boards.

The board is a row-major sequence of 81 cells. Every cell is either
``Resolved`` to one digit or ``Unresolved`` with the set of digits that are
still possible. This module provides:
- the group geometry (rows, columns, blocks, peers)
- the ``Board`` container with candidate recomputation
- ``verify`` / ``find_conflicts`` for the one-digit-per-group rule
- text renderings of a board
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple, Union

BASE = 3
SIZE = BASE * BASE
CELL_COUNT = SIZE * SIZE
DIGITS: FrozenSet[int] = frozenset(range(1, SIZE + 1))

Grid = List[List[int]]


def row_of(pos: int) -> int:
    return pos // SIZE


def column_of(pos: int) -> int:
    return pos % SIZE


def block_of(pos: int) -> int:
    return (pos // (SIZE * BASE)) * BASE + (pos % SIZE) // BASE


ROWS: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(r * SIZE + c for c in range(SIZE)) for r in range(SIZE)
)
COLUMNS: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(r * SIZE + c for r in range(SIZE)) for c in range(SIZE)
)
BLOCKS: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(p for p in range(CELL_COUNT) if block_of(p) == b) for b in range(SIZE)
)
GROUPS: Tuple[Tuple[int, ...], ...] = ROWS + COLUMNS + BLOCKS

# (row, column, block) of every position, in that order
GROUPS_OF: Tuple[Tuple[Tuple[int, ...], ...], ...] = tuple(
    (ROWS[row_of(p)], COLUMNS[column_of(p)], BLOCKS[block_of(p)])
    for p in range(CELL_COUNT)
)
PEERS: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(sorted({q for group in GROUPS_OF[p] for q in group} - {p}))
    for p in range(CELL_COUNT)
)

_GROUP_LABELS = ("Row", "Column", "Block")


def group_label(index: int) -> str:
    """Human name of ``GROUPS[index]``, e.g. ``Row 1`` or ``Block 9``."""

    return f"{_GROUP_LABELS[index // SIZE]} {index % SIZE + 1}"


@dataclass(frozen=True)
class Resolved:
    digit: int


@dataclass(frozen=True)
class Unresolved:
    candidates: FrozenSet[int] = DIGITS


CellState = Union[Resolved, Unresolved]
Snapshot = Tuple[CellState, ...]


class Recompute(Enum):
    """What ``Board.recompute_candidates`` did to a cell."""

    RESOLVED = "resolved"
    CONTRADICTION = "contradiction"
    UNCHANGED = "unchanged"


class Board:
    """81 cell states, mutated in place while solving."""

    def __init__(self, cells: Optional[Iterable[CellState]] = None) -> None:
        self.cells: List[CellState] = (
            list(cells) if cells is not None else [Unresolved() for _ in range(CELL_COUNT)]
        )
        if len(self.cells) != CELL_COUNT:
            raise ValueError(f"A board needs {CELL_COUNT} cells, got {len(self.cells)}.")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_values(cls, values: Sequence[int]) -> "Board":
        """Build a board from 81 ints, 0 meaning blank."""

        if len(values) != CELL_COUNT:
            raise ValueError(f"A board needs {CELL_COUNT} values, got {len(values)}.")
        cells: List[CellState] = []
        for pos, value in enumerate(values):
            if value == 0:
                cells.append(Unresolved())
            elif value in DIGITS:
                cells.append(Resolved(value))
            else:
                raise ValueError(f"Cell {pos} contains invalid value {value}.")
        return cls(cells)

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[int]]) -> "Board":
        if len(grid) != SIZE or any(len(row) != SIZE for row in grid):
            raise ValueError("A 9x9 board must have 9 rows of 9 values.")
        return cls.from_values([value for row in grid for value in row])

    def copy(self) -> "Board":
        return Board(self.cells)

    # ------------------------------------------------------------------
    # Cell queries
    # ------------------------------------------------------------------
    def is_resolved(self, pos: int) -> bool:
        return isinstance(self.cells[pos], Resolved)

    def digit_of(self, pos: int) -> Optional[int]:
        cell = self.cells[pos]
        return cell.digit if isinstance(cell, Resolved) else None

    def candidates_of(self, pos: int) -> FrozenSet[int]:
        cell = self.cells[pos]
        if isinstance(cell, Resolved):
            return frozenset((cell.digit,))
        return cell.candidates

    def unresolved_positions(self) -> List[int]:
        return [pos for pos, cell in enumerate(self.cells) if isinstance(cell, Unresolved)]

    def is_complete(self) -> bool:
        return all(isinstance(cell, Resolved) for cell in self.cells)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def resolve(self, pos: int, digit: int) -> None:
        if digit not in DIGITS:
            raise ValueError(f"{digit} is not a Sudoku digit.")
        self.cells[pos] = Resolved(digit)

    def recompute_candidates(self, pos: int) -> Recompute:
        """Rebuild the candidates of ``pos`` from the digits resolved among its peers.

        A single remaining digit is committed as the cell's resolved value. A
        cell that is already resolved is left alone and reports ``RESOLVED``.
        """

        if self.is_resolved(pos):
            return Recompute.RESOLVED

        taken = {self.cells[peer].digit for peer in PEERS[pos] if self.is_resolved(peer)}
        remaining = DIGITS - taken
        if not remaining:
            self.cells[pos] = Unresolved(frozenset())
            return Recompute.CONTRADICTION
        if len(remaining) == 1:
            (digit,) = remaining
            self.cells[pos] = Resolved(digit)
            return Recompute.RESOLVED
        self.cells[pos] = Unresolved(frozenset(remaining))
        return Recompute.UNCHANGED

    def snapshot(self) -> Snapshot:
        # cell states are frozen, so a shallow tuple is an independent copy
        return tuple(self.cells)

    def restore(self, snapshot: Snapshot) -> None:
        self.cells[:] = snapshot

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def values(self) -> List[int]:
        return [self.digit_of(pos) or 0 for pos in range(CELL_COUNT)]

    def to_grid(self) -> Grid:
        values = self.values()
        return [values[r * SIZE:(r + 1) * SIZE] for r in range(SIZE)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.cells == other.cells

    def __repr__(self) -> str:
        return f"Board({''.join(str(v) if v else '.' for v in self.values())!r})"

    def __str__(self) -> str:
        return board_to_text(self.to_grid())


def find_conflicts(board: Board) -> List[str]:
    """Describe every group that holds the same resolved digit more than once."""

    issues: List[str] = []
    for index, group in enumerate(GROUPS):
        seen: Set[int] = set()
        duplicates: Set[int] = set()
        for pos in group:
            digit = board.digit_of(pos)
            if digit is None:
                continue
            if digit in seen:
                duplicates.add(digit)
            seen.add(digit)
        if duplicates:
            issues.append(f"{group_label(index)} repeats digit(s) {sorted(duplicates)}")
    return issues


def verify(board: Board) -> bool:
    """True iff no row, column, or block repeats a resolved digit."""

    return not find_conflicts(board)


def board_to_text(board: Sequence[Sequence[int]]) -> str:
    """Render a grid as space separated rows, '.' for blanks."""

    return "\n".join(
        " ".join(str(value) if value else "." for value in row) for row in board
    )


def board_to_csv(board: Sequence[Sequence[int]]) -> str:
    """Render a grid as comma separated rows, '-' for blanks."""

    return "\n".join(
        ",".join(str(value) if value else "-" for value in row) for row in board
    )


__all__ = [
    "BLOCKS",
    "Board",
    "CELL_COUNT",
    "COLUMNS",
    "CellState",
    "DIGITS",
    "GROUPS",
    "GROUPS_OF",
    "Grid",
    "PEERS",
    "ROWS",
    "Recompute",
    "Resolved",
    "SIZE",
    "Snapshot",
    "Unresolved",
    "block_of",
    "board_to_csv",
    "board_to_text",
    "column_of",
    "find_conflicts",
    "group_label",
    "row_of",
    "verify",
]
