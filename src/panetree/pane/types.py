"""Pane 模块数据类型定义

包含：
- PaneDirection: 子 pane 排布方向
- WindowInsertPosition: 窗口相对邻居的插入位置
- WindowInsertPanePosition: 相对 pane 的分割/插入位置
- WindowState: 窗口生命周期状态
- SplitResult: split_pane 的返回值
- InvalidSplitPositionError: 非法分割位置
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .pane import Pane


class PaneDirection(Enum):
    """布局方向（作用于 children 的排布轴）"""
    HORIZONTAL = "Horizontal"  # 水平，children 左右排布，size 对应宽度
    VERTICAL = "Vertical"  # 垂直，children 上下排布，size 对应高度


class WindowInsertPosition(Enum):
    """相对邻居窗口的插入位置"""
    LEFT = "Left"
    RIGHT = "Right"


class WindowInsertPanePosition(Enum):
    """相对 pane 的插入位置（由拖拽手势层解析得出）"""
    TOP = "Top"
    RIGHT = "Right"
    BOTTOM = "Bottom"
    LEFT = "Left"
    MIDDLE = "Middle"

    @property
    def direction(self) -> PaneDirection:
        """分割后容器的布局方向"""
        if self in {WindowInsertPanePosition.LEFT, WindowInsertPanePosition.RIGHT}:
            return PaneDirection.HORIZONTAL
        return PaneDirection.VERTICAL

    @property
    def original_first(self) -> bool:
        """分割后原内容是否排在新 pane 之前（Bottom/Right）"""
        return self in {WindowInsertPanePosition.BOTTOM, WindowInsertPanePosition.RIGHT}


class WindowState(Enum):
    """窗口生命周期状态

    OPEN → (close) → CLOSING → (destroy) → DESTROYED
    """
    OPEN = "open"
    CLOSING = "closing"
    DESTROYED = "destroyed"

    @property
    def is_alive(self) -> bool:
        """是否参与 active 选择和布局计算"""
        return self == WindowState.OPEN


@dataclass
class SplitResult:
    """split_pane 结果

    Attributes:
        new_pane: 新建的空 pane
        original_pane: 承接原内容的 pane
    """
    new_pane: "Pane"
    original_pane: "Pane"


class InvalidSplitPositionError(ValueError):
    """用 Middle 调用 split_pane（调用方契约错误）"""
