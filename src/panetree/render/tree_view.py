"""Pane tree to text renderer using Rich library.

Debug view of the layout tree for logs and the REPL; not a UI renderer.
"""

import io
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from ..core.ids import short_id

if TYPE_CHECKING:
    from ..pane.pane import Pane


def _format_size(size: list[float]) -> str:
    return "[" + ", ".join(f"{s:g}" for s in size) + "]"


def _pane_label(pane: "Pane") -> str:
    if pane.children:
        return (
            f"[bold]Container[/bold] {short_id(pane.id)} "
            f"{pane.direction.value} size={escape(_format_size(pane.size))}"
        )
    return f"[bold]Leaf[/bold] {short_id(pane.id)}"


def build_tree_view(root: "Pane") -> Tree:
    """Build a Rich tree of panes and their windows.

    Active windows are marked with "*", closing windows are dimmed.
    """
    view = Tree(_pane_label(root))
    stack: list[tuple["Pane", Tree]] = [(root, view)]
    while stack:
        pane, node = stack.pop()
        for window in pane.windows:
            mark = "*" if window.id == pane.active_window_id else " "
            label = f"{mark} {short_id(window.id)} ({window.state.value})"
            node.add(f"[dim]{label}[/dim]" if window.is_closed else label)
        children = [(child, node.add(_pane_label(child))) for child in pane.children]
        stack.extend(reversed(children))
    return view


def format_pane_tree(root: "Pane", width: int = 100) -> str:
    """Render the pane tree to plain text."""
    console = Console(
        record=True,
        width=width,
        file=io.StringIO(),
        color_system=None,
    )
    console.print(build_tree_view(root))
    return console.export_text()


def print_pane_tree(root: "Pane", console: Console | None = None) -> None:
    """Print the pane tree to the terminal."""
    (console or Console()).print(build_tree_view(root))
