"""Pane 模块

提供布局树的核心组件：
- types: 数据类型定义（PaneDirection, WindowInsertPanePosition, WindowState 等）
- window: Window 内容单元
- pane: Pane 树节点（split / insert / prune / merge-up）
- layout: 比例尺寸换算
- snapshot: 快照契约与整树重建
- manager: WindowManager
"""

from .types import (
    PaneDirection,
    WindowInsertPosition,
    WindowInsertPanePosition,
    WindowState,
    SplitResult,
    InvalidSplitPositionError,
)
from .window import Window
from .pane import Pane
from .layout import rescale_sizes, layout_tree
from .snapshot import WindowData, PaneData, parse_snapshot, snapshot_of, build_pane_tree
from .manager import WindowManager

__all__ = [
    # Types
    "PaneDirection",
    "WindowInsertPosition",
    "WindowInsertPanePosition",
    "WindowState",
    "SplitResult",
    "InvalidSplitPositionError",
    # Window / Pane
    "Window",
    "Pane",
    # Layout
    "rescale_sizes",
    "layout_tree",
    # Snapshot
    "WindowData",
    "PaneData",
    "parse_snapshot",
    "snapshot_of",
    "build_pane_tree",
    # Manager
    "WindowManager",
]
