"""Render module - debug views of the pane tree"""

from .tree_view import build_tree_view, format_pane_tree, print_pane_tree

__all__ = [
    "build_tree_view",
    "format_pane_tree",
    "print_pane_tree",
]
