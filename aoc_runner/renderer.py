"""
Renderer Module - Draws the application state as a rich renderable.

render() reads nothing but the AppState it is given, so the same state
always produces the same frame.
"""

from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from .model import AppState, RunStatus


__all__ = ["render"]


SPINNER_FRAMES = "|/-\\"

STATUS_STYLES = {
    RunStatus.IDLE: "green",
    RunStatus.RUNNING: "yellow",
    RunStatus.ERRORED: "bold red",
    RunStatus.QUIT: "dim",
}

LIST_WIDTH = 32
FOOTER_HEIGHT = 3


def render(state: AppState) -> RenderableType:
    """
    Build the full frame for a state.

    Args:
        state: State to draw

    Returns:
        Layout with the puzzle list, the output panel and the footer
    """
    layout = Layout(name="root")
    layout.split_column(
        Layout(name="body", ratio=1),
        Layout(name="footer", size=FOOTER_HEIGHT),
    )
    layout["body"].split_row(
        Layout(name="puzzles", size=LIST_WIDTH),
        Layout(name="output", ratio=1),
    )

    layout["puzzles"].update(_render_puzzle_list(state))
    layout["output"].update(_render_output(state))
    layout["footer"].update(_render_footer(state))
    return layout


def _render_puzzle_list(state: AppState) -> Panel:
    table = Table.grid(padding=(0, 1))
    table.add_column(width=1)
    table.add_column(no_wrap=True)
    table.add_column(style="dim", no_wrap=True, overflow="ellipsis")

    for index, puzzle_id in enumerate(state.puzzle_ids):
        is_cursor = index == state.cursor
        if state.is_running and puzzle_id == state.selected:
            marker = SPINNER_FRAMES[state.ticks % len(SPINNER_FRAMES)]
        elif is_cursor:
            marker = ">"
        else:
            marker = " "
        title = state.puzzle_titles[index] if index < len(state.puzzle_titles) else ""
        style = "reverse" if is_cursor else ""
        table.add_row(marker, Text(puzzle_id, style=style), title)

    if not state.puzzle_ids:
        table.add_row(" ", Text("no puzzles registered", style="dim"), "")

    return Panel(table, title="Puzzles", border_style="dim")


def _render_output(state: AppState) -> Panel:
    status = Text.assemble(
        ("Status: ", "bold"),
        (state.get_status_string(), STATUS_STYLES[state.status]),
    )
    parts = [status, Text("")]

    if state.status == RunStatus.RUNNING:
        parts.append(ProgressBar(total=1.0, completed=state.progress, width=40))
        parts.append(Text(f"{state.progress * 100:5.1f}%  {state.progress_note}", style="dim"))
    elif state.status == RunStatus.ERRORED:
        parts.append(Text(state.error or "unknown error", style="red"))
    elif state.output is not None:
        parts.append(Text(state.output, style="bold"))
        if state.elapsed_ms is not None:
            parts.append(Text(f"\nsolved in {state.elapsed_ms:.1f}ms", style="dim"))
    else:
        hint = state.progress_note or "press enter to run the highlighted puzzle"
        parts.append(Text(hint, style="dim"))

    title = state.selected or "--"
    return Panel(Group(*parts), title=title, border_style="dim")


def _render_footer(state: AppState) -> Panel:
    usage = Text.assemble(
        ("j/k", "bold"), (" move  ", "dim"),
        ("enter", "bold"), (" run  ", "dim"),
        ("c", "bold"), (" cancel  ", "dim"),
        ("q", "bold"), (" quit", "dim"),
    )
    rate = Text(f"{state.tick_rate:.2f} tps", style="dim")

    grid = Table.grid(expand=True)
    grid.add_column()
    grid.add_column(justify="right")
    grid.add_row(usage, rate)
    return Panel(grid, title="Usage", title_align="left", border_style="dim")
