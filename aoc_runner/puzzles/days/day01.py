"""
Day 1: Trebuchet?! - Recover calibration values from each line.
"""

from typing import Dict, List, Optional

from ..base import PuzzleSolver
from ..context import SolveContext
from ..factory import register_puzzle


SPELLED_DIGITS: Dict[str, int] = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9,
}


def find_digits(line: str, spelled: bool = False) -> List[int]:
    """
    Find digits in a line in order of appearance.

    Spelled-out digits may overlap ("eightwo" yields 8 then 2).

    Args:
        line: Input line
        spelled: Also match spelled-out digits

    Returns:
        Digits found, left to right
    """
    digits = []
    for i, ch in enumerate(line):
        if ch.isdigit():
            digits.append(int(ch))
        elif spelled:
            for word, value in SPELLED_DIGITS.items():
                if line.startswith(word, i):
                    digits.append(value)
                    break
    return digits


def calibration_value(line: str, spelled: bool = False) -> Optional[int]:
    """Two-digit number from the first and last digit, or None if there is none."""
    digits = find_digits(line, spelled)
    if not digits:
        return None
    return digits[0] * 10 + digits[-1]


@register_puzzle
class Day01(PuzzleSolver):
    """Sum calibration values, first with numeric digits only, then with spelled ones."""
    name = "day01"
    title = "Trebuchet?!"

    def solve(self, context: SolveContext) -> str:
        part_one = 0
        part_two = 0

        for line in self.iter_with_progress(context, context.lines(), "line"):
            # Lines with only spelled-out digits have no part one value
            part_one += calibration_value(line) or 0

            value = calibration_value(line, spelled=True)
            if value is None:
                raise ValueError(f"No digits in line: {line!r}")
            part_two += value

        return self.format_parts(part_one, part_two)
