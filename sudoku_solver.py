"""
Search controller: constraint propagation plus chronological backtracking.

``SudokuSolver`` drives a small state machine over the candidate model. When
propagation stalls it guesses on the cell with the fewest candidates, pushes a
checkpoint, and on contradiction restores the newest checkpoint and tries the
next digit there. ``solve_board`` wraps the machine with verification of the
input and of the final board.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from loguru import logger

from sudoku_board import CELL_COUNT, Board, Snapshot, column_of, find_conflicts, row_of, verify
from sudoku_propagation import Outcome, propagate


class SudokuError(Exception):
    """Base class of the errors raised by the solver."""


class InputContradiction(SudokuError, ValueError):
    """The givens already break the one-digit-per-group rule."""

    def __init__(self, conflicts: List[str]) -> None:
        self.conflicts = list(conflicts)
        super().__init__("Puzzle has a contradiction and cannot be solved: " + "; ".join(self.conflicts))


class InternalInvariantViolation(SudokuError, RuntimeError):
    """The solver reported success on a board that does not verify."""


class SearchBudgetExceeded(SudokuError):
    """More guesses were needed than the configured budget allows."""


class SearchState(Enum):
    PROPAGATING = "propagating"
    GUESSING = "guessing"
    BACKTRACKING = "backtracking"
    SOLVED = "solved"
    UNSOLVABLE = "unsolvable"


class SolveStatus(Enum):
    SOLVED = "solved"
    UNSOLVABLE = "unsolvable"


@dataclass
class Checkpoint:
    snapshot: Snapshot
    position: int
    digit: int  # last digit tried at ``position``


@dataclass
class SearchStats:
    guesses: int = 0
    backtracks: int = 0
    propagations: int = 0
    max_depth: int = 0
    duration_ms: int = 0

    def as_dict(self) -> dict:
        return {
            "guesses": self.guesses,
            "backtracks": self.backtracks,
            "propagations": self.propagations,
            "max_depth": self.max_depth,
            "duration_ms": self.duration_ms,
        }


@dataclass
class SolveResult:
    status: SolveStatus
    board: Board
    stats: SearchStats = field(default_factory=SearchStats)

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.SOLVED


def _cell_name(pos: int) -> str:
    return f"r{row_of(pos) + 1}c{column_of(pos) + 1}"


class SudokuSolver:
    """Solve one board in place (propagation + MRV guessing + checkpoint stack)."""

    def __init__(self, board: Board, *, max_guesses: Optional[int] = None) -> None:
        self.board = board
        self.max_guesses = max_guesses
        self.stack: List[Checkpoint] = []
        self.stats = SearchStats()

    def solve(self) -> SolveResult:
        """Run the search until the board is solved or proven unsolvable."""

        handlers = {
            SearchState.PROPAGATING: self._propagating,
            SearchState.GUESSING: self._guessing,
            SearchState.BACKTRACKING: self._backtracking,
        }
        start = time.perf_counter()
        state = SearchState.PROPAGATING
        try:
            while state not in (SearchState.SOLVED, SearchState.UNSOLVABLE):
                state = handlers[state]()
        finally:
            self.stack.clear()
            self.stats.duration_ms = int((time.perf_counter() - start) * 1000)

        status = SolveStatus.SOLVED if state is SearchState.SOLVED else SolveStatus.UNSOLVABLE
        logger.debug(
            "Search finished: {} after {} guess(es), {} backtrack(s)",
            status.value,
            self.stats.guesses,
            self.stats.backtracks,
        )
        return SolveResult(status=status, board=self.board, stats=self.stats)

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------
    def _propagating(self) -> SearchState:
        self.stats.propagations += 1
        if propagate(self.board) is Outcome.CONTRADICTION:
            return SearchState.BACKTRACKING if self.stack else SearchState.UNSOLVABLE
        if self.board.is_complete():
            return SearchState.SOLVED
        return SearchState.GUESSING

    def _guessing(self) -> SearchState:
        pos, digit = self.select_guess()
        if self.max_guesses is not None and self.stats.guesses >= self.max_guesses:
            raise SearchBudgetExceeded(f"Gave up after {self.stats.guesses} guesses.")

        self.stack.append(Checkpoint(self.board.snapshot(), pos, digit))
        self.stats.guesses += 1
        self.stats.max_depth = max(self.stats.max_depth, len(self.stack))
        logger.debug("Guess: {} = {} (depth {})", _cell_name(pos), digit, len(self.stack))
        self.board.resolve(pos, digit)
        return SearchState.PROPAGATING

    def _backtracking(self) -> SearchState:
        self.stats.backtracks += 1
        while self.stack:
            checkpoint = self.stack[-1]
            self.board.restore(checkpoint.snapshot)
            candidates = self.board.candidates_of(checkpoint.position)
            following = [d for d in sorted(candidates) if d > checkpoint.digit]
            if following:
                checkpoint.digit = following[0]
                logger.debug("Backtrack: {} = {}", _cell_name(checkpoint.position), checkpoint.digit)
                self.board.resolve(checkpoint.position, checkpoint.digit)
                return SearchState.PROPAGATING
            logger.debug("Exhausted {}, dropping checkpoint", _cell_name(checkpoint.position))
            self.stack.pop()
        return SearchState.UNSOLVABLE

    # ------------------------------------------------------------------
    # Heuristics
    # ------------------------------------------------------------------
    def select_guess(self) -> Tuple[int, int]:
        """Unresolved cell with the fewest candidates (lowest position on ties) and its lowest digit."""

        best_pos: Optional[int] = None
        best_count = 10
        for pos in self.board.unresolved_positions():
            count = len(self.board.candidates_of(pos))
            if count < best_count:
                best_pos, best_count = pos, count
                if count == 2:
                    break
        if best_pos is None:
            raise InternalInvariantViolation("Asked to guess on a board with no unresolved cells.")
        return best_pos, min(self.board.candidates_of(best_pos))


def solve_board(board: Board, *, max_guesses: Optional[int] = None) -> SolveResult:
    """Verify the givens, solve in place, and verify the result.

    Raises ``InputContradiction`` for contradictory givens and
    ``InternalInvariantViolation`` if a board reported as solved does not
    verify. An unsolvable puzzle is a normal ``SolveStatus.UNSOLVABLE`` result.
    """

    conflicts = find_conflicts(board)
    if conflicts:
        raise InputContradiction(conflicts)
    logger.info("Puzzle is verified and accepted ({} given(s))", CELL_COUNT - len(board.unresolved_positions()))

    result = SudokuSolver(board, max_guesses=max_guesses).solve()
    if result.solved and not (board.is_complete() and verify(board)):
        raise InternalInvariantViolation(
            "Solver produced an invalid board: " + "; ".join(find_conflicts(board) or ["unresolved cells remain"])
        )
    return result


__all__ = [
    "Checkpoint",
    "InputContradiction",
    "InternalInvariantViolation",
    "SearchBudgetExceeded",
    "SearchState",
    "SearchStats",
    "SolveResult",
    "SolveStatus",
    "SudokuError",
    "SudokuSolver",
    "solve_board",
]
