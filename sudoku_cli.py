"""
Command line front end for the propagation solver.

Usage examples
--------------

Tokens on the command line (81 of them, '-' or anything else for blanks):

    sudoku-solve 5 3 - - 7 - - - - 6 - - 1 9 5 - - - ...

A plain-text puzzle file, printed in the comma style:

    sudoku-solve --file puzzle.txt --format csv

One entry of a JSON dataset (``{"puzzles": [{"puzzle": ..., "solution": ...}]}``):

    sudoku-solve --dataset sudoku_9x9.json --index 3 --format json

Exit status: 0 solved, 1 no solution, 2 usage error, 3 contradictory input,
4 solver defect, 5 search budget exhausted. ``SUDOKU_LOG_LEVEL`` and
``SUDOKU_OUTPUT_FORMAT`` provide defaults for ``--log-level`` and ``--format``.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from sudoku_board import Board, Grid, board_to_csv, board_to_text
from sudoku_input import (
    TokenCountError,
    board_from_tokens,
    load_dataset_puzzle,
    read_tokens,
)
from sudoku_solver import (
    InputContradiction,
    InternalInvariantViolation,
    SearchBudgetExceeded,
    SolveResult,
    solve_board,
)

EXIT_SOLVED = 0
EXIT_UNSOLVABLE = 1
EXIT_USAGE = 2
EXIT_REJECTED = 3
EXIT_DEFECT = 4
EXIT_BUDGET = 5

LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
OUTPUT_FORMATS = ["text", "csv", "json"]

USAGE_HINT = "USAGE: sudoku-solve {1,-,2,9,-,-...} (exactly 81 tokens)"


@dataclass(frozen=True)
class CliSettings:
    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    output_format: str = "text"
    max_guesses: Optional[int] = None
    quiet: bool = False


def _env_choice(name: str, choices: Sequence[str], default: str) -> str:
    value = (os.getenv(name) or "").strip().lower()
    for choice in choices:
        if choice.lower() == value:
            return choice
    return default


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sudoku-solve",
        description="Solve a 9x9 Sudoku by constraint propagation and backtracking.",
    )
    parser.add_argument(
        "tokens",
        nargs="*",
        help="81 cell tokens in row-major order; digits 1-9 are givens, anything else is blank.",
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Read the 81 tokens from a text file instead of the command line.",
    )
    parser.add_argument(
        "--dataset",
        type=Path,
        default=None,
        help="Read the puzzle from a JSON dataset with a 'puzzles' list.",
    )
    parser.add_argument(
        "--index",
        type=int,
        default=0,
        help="Puzzle index inside --dataset (default: 0).",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default=_env_choice("SUDOKU_OUTPUT_FORMAT", OUTPUT_FORMATS, "text"),
        help="Output style: text ('.' blanks), csv ('-' blanks), or json.",
    )
    parser.add_argument(
        "--max-guesses",
        type=int,
        default=None,
        help="Abort the search after this many guesses (default: unlimited).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Print only the solved board.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=_env_choice("SUDOKU_LOG_LEVEL", LOG_LEVELS, "WARNING"),
        help="Console logging level (default: WARNING).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a DEBUG log of the search to this file.",
    )
    return parser


def configure_logging(settings: CliSettings) -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    if settings.log_file is not None:
        logger.add(settings.log_file, level="DEBUG", encoding="utf-8")


def load_puzzle(args: argparse.Namespace) -> Tuple[List[str], Optional[Grid]]:
    sources = sum(bool(source) for source in (args.tokens, args.file, args.dataset))
    if sources > 1:
        raise ValueError("Give the puzzle either as tokens, with --file, or with --dataset.")
    if args.dataset:
        return load_dataset_puzzle(args.dataset, args.index)
    if args.file:
        return read_tokens(args.file), None
    return list(args.tokens), None


def render(grid: Grid, output_format: str) -> str:
    return board_to_csv(grid) if output_format == "csv" else board_to_text(grid)


def _emit_json(status: str, given: Optional[Board], result: Optional[SolveResult], **extra: Any) -> None:
    payload: Dict[str, Any] = {
        "status": status,
        "input": given.to_grid() if given is not None else None,
        "solution": result.board.to_grid() if result is not None and result.solved else None,
        "stats": result.stats.as_dict() if result is not None else None,
    }
    payload.update(extra)
    print(json.dumps(payload, ensure_ascii=False))


def run(settings: CliSettings, tokens: Sequence[str], reference: Optional[Grid] = None) -> int:
    """Solve one puzzle and print it; returns the process exit status."""

    as_json = settings.output_format == "json"
    try:
        board = board_from_tokens(tokens)
    except TokenCountError as exc:
        logger.error("{}", exc)
        print(USAGE_HINT, file=sys.stderr)
        return EXIT_USAGE

    given = board.copy()
    try:
        result = solve_board(board, max_guesses=settings.max_guesses)
    except InputContradiction as exc:
        for conflict in exc.conflicts:
            logger.error("Input rejected: {}", conflict)
        if as_json:
            _emit_json("rejected", given, None, conflicts=exc.conflicts)
        return EXIT_REJECTED
    except SearchBudgetExceeded as exc:
        logger.error("Search budget exhausted: {}", exc)
        if as_json:
            _emit_json("budget-exhausted", given, None)
        return EXIT_BUDGET
    except InternalInvariantViolation as exc:
        logger.critical("Solver defect, not a property of the puzzle: {}", exc)
        if as_json:
            _emit_json("internal-error", given, None, error=str(exc))
        return EXIT_DEFECT

    stats = result.stats
    logger.info(
        "Search {} in {} ms: guesses={} backtracks={} propagations={} max_depth={}",
        result.status.value,
        stats.duration_ms,
        stats.guesses,
        stats.backtracks,
        stats.propagations,
        stats.max_depth,
    )

    if result.solved and reference is not None and result.board.to_grid() != reference:
        logger.warning("Solution differs from the dataset's reference solution (puzzle may not be unique).")

    if as_json:
        _emit_json(result.status.value, given, result)
        return EXIT_SOLVED if result.solved else EXIT_UNSOLVABLE

    if not settings.quiet:
        print("INPUT:")
        print(render(given.to_grid(), settings.output_format))
        print()

    if not result.solved:
        logger.warning("This puzzle has no solutions")
        return EXIT_UNSOLVABLE

    if not settings.quiet:
        print("SOLUTION:")
    print(render(result.board.to_grid(), settings.output_format))
    return EXIT_SOLVED


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = CliSettings(
        log_level=args.log_level,
        log_file=args.log_file,
        output_format=args.output_format,
        max_guesses=args.max_guesses,
        quiet=args.quiet,
    )
    configure_logging(settings)

    try:
        tokens, reference = load_puzzle(args)
    except (OSError, ValueError, IndexError) as exc:
        logger.error("Could not read puzzle: {}", exc)
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    return run(settings, tokens, reference)


if __name__ == "__main__":
    sys.exit(main())
