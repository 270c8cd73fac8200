"""
Days Package - Concrete puzzle solvers.

Import this module to register all built-in solvers.
"""

from .day01 import Day01
from .day02 import Day02

__all__ = [
    "Day01",
    "Day02",
]
