"""
Puzzle registry.

Day modules register their solver class with @register_puzzle when they are
imported; the UI lists puzzles from here and the task runner instantiates
them by id.
"""

from typing import Any, Dict, List, Type

from .base import PuzzleSolver


_PUZZLES: Dict[str, Type[PuzzleSolver]] = {}


def register_puzzle(cls: Type[PuzzleSolver]) -> Type[PuzzleSolver]:
    """
    Class decorator adding a solver to the registry under cls.name.

    Raises:
        ValueError: If the class has no id, or another class already uses it
    """
    puzzle_id = getattr(cls, "name", "")
    if not puzzle_id or puzzle_id == PuzzleSolver.name:
        raise ValueError(f"{cls.__name__} has no puzzle id")

    existing = _PUZZLES.get(puzzle_id)
    if existing is not None and existing.__qualname__ != cls.__qualname__:
        raise ValueError(f"Puzzle id {puzzle_id!r} already used by {existing.__name__}")

    _PUZZLES[puzzle_id] = cls
    return cls


def create_puzzle(name: str, **kwargs: Any) -> PuzzleSolver:
    """Instantiate the solver registered as `name`; ValueError if there is none."""
    try:
        cls = _PUZZLES[name]
    except KeyError:
        available = ", ".join(get_puzzle_ids()) or "none"
        raise ValueError(f"Unknown puzzle: {name}. Available: {available}") from None
    return cls(**kwargs)


def get_puzzle_ids() -> List[str]:
    return sorted(_PUZZLES)


def get_puzzle_info() -> List[Dict[str, str]]:
    """Id and title of every puzzle, ordered by id, for listing."""
    return [{"name": puzzle_id, "title": _PUZZLES[puzzle_id].title} for puzzle_id in get_puzzle_ids()]
