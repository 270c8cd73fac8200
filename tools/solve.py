#!/usr/bin/env python3
"""
Run one puzzle without the terminal UI and print its answer.

Uses the same task body as the UI, so failures are reported the same way.

Usage:
    python tools/solve.py day01
    python tools/solve.py day02 --input-dir ./inputs
"""

import argparse
import sys
import threading
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from aoc_runner.inputs import load_input
from aoc_runner.messages import TaskFinished
from aoc_runner.puzzles import create_puzzle, get_puzzle_ids
from aoc_runner.settings import get_input_dir, load_settings
from aoc_runner.task_runner import execute


def main():
    parser = argparse.ArgumentParser(description="Solve one puzzle headlessly")
    parser.add_argument("puzzle", choices=get_puzzle_ids())
    parser.add_argument("--input-dir", "-i", default=None)
    args = parser.parse_args()

    settings = load_settings()
    if args.input_dir:
        settings["input_dir"] = args.input_dir
    input_dir = get_input_dir(settings)

    message = execute(
        1,
        args.puzzle,
        create_puzzle,
        lambda puzzle_id: load_input(puzzle_id, input_dir),
        threading.Event(),
    )

    if isinstance(message, TaskFinished):
        print(message.answer)
        print(f"({message.elapsed_ms:.1f}ms)", file=sys.stderr)
        return 0

    print(f"Error: {message.error}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
