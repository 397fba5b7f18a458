"""
Puzzle input helpers.

A puzzle is 81 tokens in row-major order. A token that is exactly one of the
digits 1-9 is a given; any other token is a blank. Tokens can come from the
command line, from a plain-text file, or from an entry of a JSON dataset of
the form ``{"puzzles": [{"puzzle": [[...]], "solution": [[...]]}]}``.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from sudoku_board import CELL_COUNT, SIZE, Board, Grid

TOKEN_SEPARATORS = re.compile(r"[\s,]+")


class TokenCountError(ValueError):
    """The input did not contain exactly 81 tokens."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"Expected {CELL_COUNT} tokens, got {count}.")


def parse_token(token: str) -> int:
    """Digit value of a given, 0 for anything that is not a single digit 1-9."""

    token = token.strip()
    if len(token) == 1 and token in "123456789":
        return int(token)
    return 0


def split_tokens(text: str) -> List[str]:
    """Split puzzle text into tokens.

    Accepts whitespace or comma separated tokens, one contiguous string of 81
    characters, or nine rows of nine contiguous characters such as
    ``53..7....``. Anything else is returned as split, so a wrong count is
    reported rather than guessed at.
    """

    tokens = [token for token in TOKEN_SEPARATORS.split(text.strip()) if token]
    if len(tokens) == 1 and len(tokens[0]) == CELL_COUNT:
        return list(tokens[0])
    if len(tokens) == SIZE and all(len(token) == SIZE for token in tokens):
        return list("".join(tokens))
    return tokens


def tokens_to_values(tokens: Sequence[str]) -> List[int]:
    if len(tokens) != CELL_COUNT:
        raise TokenCountError(len(tokens))
    return [parse_token(token) for token in tokens]


def board_from_tokens(tokens: Sequence[str]) -> Board:
    return Board.from_values(tokens_to_values(tokens))


def read_tokens(path: Path) -> List[str]:
    with Path(path).open("r", encoding="utf-8") as fh:
        return split_tokens(fh.read())


def _grid_tokens(grid: Any, label: str) -> List[str]:
    if (
        not isinstance(grid, list)
        or len(grid) != SIZE
        or any(not isinstance(row, list) or len(row) != SIZE for row in grid)
    ):
        raise ValueError(f"Invalid dataset: {label} must be {SIZE} rows of {SIZE} values.")
    if any(isinstance(value, bool) or not isinstance(value, int) for row in grid for value in row):
        raise ValueError(f"Invalid dataset: {label} values must be integers.")
    return [str(value) for row in grid for value in row]


def load_dataset_puzzle(path: Path, index: int = 0) -> Tuple[List[str], Optional[Grid]]:
    """Return (tokens, reference solution or None) for one dataset entry."""

    with Path(path).open("r", encoding="utf-8") as fh:
        payload = json.load(fh)

    puzzles = payload.get("puzzles") if isinstance(payload, dict) else None
    if not isinstance(puzzles, list):
        raise ValueError("Invalid dataset: missing 'puzzles' list.")
    if not 0 <= index < len(puzzles):
        raise IndexError(f"Dataset has {len(puzzles)} puzzle(s); index {index} is out of range.")

    entry = puzzles[index]
    if not isinstance(entry, dict):
        raise ValueError(f"Invalid dataset: entry {index} is not an object.")
    if "puzzle" not in entry:
        raise ValueError(f"Invalid dataset: entry {index} missing 'puzzle' grid.")

    tokens = _grid_tokens(entry["puzzle"], "puzzle")
    solution = entry.get("solution")
    if solution is None:
        return tokens, None
    values = [int(token) for token in _grid_tokens(solution, "solution")]
    return tokens, [values[r * SIZE:(r + 1) * SIZE] for r in range(SIZE)]


__all__ = [
    "TokenCountError",
    "board_from_tokens",
    "load_dataset_puzzle",
    "parse_token",
    "read_tokens",
    "split_tokens",
    "tokens_to_values",
]
