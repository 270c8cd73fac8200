"""
Day 2: Cube Conundrum - Check games against a bag of coloured cubes.
"""

from typing import Dict, List, Tuple

from ..base import PuzzleSolver
from ..context import SolveContext
from ..factory import register_puzzle


BAG_LIMITS: Dict[str, int] = {"red": 12, "green": 13, "blue": 14}

Draw = Dict[str, int]


def parse_game(line: str) -> Tuple[int, List[Draw]]:
    """
    Parse one game record.

    Example:
        "Game 3: 8 green, 6 blue; 5 blue, 4 red" -> (3, [{...}, {...}])

    Args:
        line: Game record line

    Returns:
        (game_id, draws)

    Raises:
        ValueError: If the line is malformed
    """
    header, sep, body = line.partition(":")
    if not sep or not header.startswith("Game "):
        raise ValueError(f"Malformed game record: {line!r}")
    game_id = int(header[len("Game "):])

    draws: List[Draw] = []
    for chunk in body.split(";"):
        draw: Draw = {}
        for entry in chunk.split(","):
            count, _, colour = entry.strip().partition(" ")
            if colour not in BAG_LIMITS:
                raise ValueError(f"Unknown cube colour {colour!r} in game {game_id}")
            draw[colour] = draw.get(colour, 0) + int(count)
        draws.append(draw)
    return game_id, draws


def minimum_bag(draws: List[Draw]) -> Draw:
    """Fewest cubes of each colour that make every draw possible."""
    bag = {colour: 0 for colour in BAG_LIMITS}
    for draw in draws:
        for colour, count in draw.items():
            bag[colour] = max(bag[colour], count)
    return bag


@register_puzzle
class Day02(PuzzleSolver):
    name = "day02"
    title = "Cube Conundrum"

    def solve(self, context: SolveContext) -> str:
        possible_ids = 0
        total_power = 0

        for line in self.iter_with_progress(context, context.lines(), "game"):
            game_id, draws = parse_game(line)
            bag = minimum_bag(draws)

            if all(bag[colour] <= limit for colour, limit in BAG_LIMITS.items()):
                possible_ids += game_id
            total_power += bag["red"] * bag["green"] * bag["blue"]

        return self.format_parts(possible_ids, total_power)
