"""
aoc-runner - Entry Point

Launches the terminal UI for picking and running Advent of Code puzzle
solutions.

Example:
    python main.py
    python main.py --puzzle day02 --tick-rate 100
    python main.py --list
"""

import sys
import os
import logging
import argparse
from pathlib import Path

from PyQt5.QtCore import QCoreApplication
from rich.console import Console
from rich.table import Table

from aoc_runner import __version__
from aoc_runner.app import Application
from aoc_runner.puzzles import get_puzzle_info
from aoc_runner.settings import (
    LOG_FILENAME, LOG_LEVEL_ENV,
    get_config_dir, get_data_dir, get_input_dir, load_settings,
)


logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    """
    Configure logging to a file in the data directory.

    The terminal belongs to the UI, so nothing is logged to the console.

    Args:
        debug: Log at DEBUG level (otherwise $AOC_RUNNER_LOG_LEVEL or INFO)
    """
    data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)

    level = "DEBUG" if debug else os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s (%(threadName)s): %(message)s",
        datefmt="%H:%M:%S",
        handlers=[
            logging.FileHandler(data_dir / LOG_FILENAME, mode='w', encoding='utf-8')
        ]
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="aoc-runner - Advent of Code solutions in a terminal UI"
    )
    parser.add_argument(
        "--tick-rate", "-t",
        type=int,
        default=None,
        help="Tick interval in milliseconds (default: from settings, 250)"
    )
    parser.add_argument(
        "--input-dir", "-i",
        default=None,
        help="Directory holding <puzzle>.txt input files"
    )
    parser.add_argument(
        "--puzzle", "-p",
        default=None,
        help="Puzzle to highlight on start (default: last one run)"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Log at DEBUG level"
    )
    parser.add_argument(
        "--list", "-l",
        action="store_true",
        help="List available puzzles and exit"
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    return parser.parse_args(argv)


def list_puzzles(settings, input_dir=None) -> None:
    """Print the puzzle registry and where each input is expected."""
    input_dir = Path(input_dir).expanduser() if input_dir else get_input_dir(settings)
    table = Table(title="Puzzles")
    table.add_column("Id")
    table.add_column("Title")
    table.add_column("Input")
    for info in get_puzzle_info():
        path = input_dir / f"{info['name']}.txt"
        table.add_row(info["name"], info["title"], str(path) if path.exists() else f"[dim]{path} (missing)[/dim]")
    Console().print(table)


def main():
    """Initialize and run aoc-runner."""
    args = parse_args()
    configure_logging(args.debug)

    settings = load_settings()

    if args.list:
        list_puzzles(settings, args.input_dir)
        return

    if not sys.stdin.isatty():
        print("aoc-runner needs an interactive terminal", file=sys.stderr)
        sys.exit(2)

    logger.info(f"Config dir: {get_config_dir()}, data dir: {get_data_dir()}")

    app = QCoreApplication(sys.argv)

    application = Application(
        settings,
        tick_rate_ms=args.tick_rate,
        input_dir=args.input_dir,
        puzzle=args.puzzle,
    )
    sys.exit(application.run(app))


if __name__ == "__main__":
    main()
