"""
Inputs Module - Locate and read puzzle input files.

Each puzzle reads <input_dir>/<puzzle_id>.txt.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PuzzleInputError(Exception):
    """Puzzle input file is missing or unreadable."""


def input_path(puzzle_id: str, input_dir: Path) -> Path:
    """
    Get the input file location for a puzzle.

    Args:
        puzzle_id: Puzzle id (e.g. "day01")
        input_dir: Directory holding input files

    Returns:
        Path to the input file (may not exist)
    """
    return Path(input_dir) / f"{puzzle_id}.txt"


def load_input(puzzle_id: str, input_dir: Path) -> str:
    """
    Read a puzzle's input text.

    Args:
        puzzle_id: Puzzle id
        input_dir: Directory holding input files

    Returns:
        File contents

    Raises:
        PuzzleInputError: If the file is missing or cannot be read
    """
    path = input_path(puzzle_id, input_dir)
    if not path.is_file():
        raise PuzzleInputError(f"No input for {puzzle_id}: {path} not found")

    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise PuzzleInputError(f"Cannot read {path}: {e}") from e

    logger.debug(f"Loaded input for {puzzle_id}: {len(text)} chars from {path}")
    return text
