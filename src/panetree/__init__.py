"""panetree - recursively splittable pane layout with tabbed windows"""

from .pane import (
    PaneDirection,
    WindowInsertPosition,
    WindowInsertPanePosition,
    WindowState,
    SplitResult,
    InvalidSplitPositionError,
    Window,
    Pane,
    PaneData,
    WindowData,
    WindowManager,
)
from .timer import Timer

__version__ = "0.1.0"

__all__ = [
    "PaneDirection",
    "WindowInsertPosition",
    "WindowInsertPanePosition",
    "WindowState",
    "SplitResult",
    "InvalidSplitPositionError",
    "Window",
    "Pane",
    "PaneData",
    "WindowData",
    "WindowManager",
    "Timer",
]
