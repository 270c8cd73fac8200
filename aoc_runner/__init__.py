"""
aoc-runner - Advent of Code solutions behind a terminal UI.

Modules:
    - messages: Message and Command values
    - model: AppState and the pure update() function
    - event_source: Terminal input and tick timer as messages
    - task_runner: Cancellable background puzzle runs
    - renderer: AppState to rich frame
    - terminal: Terminal setup and drawing
    - app: Loop driver and application wiring
    - puzzles: Solver registry and daily solvers
"""

__version__ = "0.3.0"
