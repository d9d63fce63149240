"""Pane - 可递归分割的布局树节点

职责：
- 叶子节点：持有有序的 Window 列表和 active 窗口
- 容器节点：持有有序的子 Pane、布局方向和比例尺寸
- split / insert / close / remove
- 自底向上清理空 pane 并向上合并单子节点
- 将比例尺寸换算为具体尺寸（委托 layout 模块）
"""

from ..telemetry import get_logger, metrics, format_pane_log
from ..config import SPLIT_SIZE_WEIGHT
from ..core.ids import ensure_id
from .types import (
    PaneDirection,
    WindowInsertPosition,
    WindowState,
    WindowInsertPanePosition,
    SplitResult,
    InvalidSplitPositionError,
)
from .window import Window
from . import layout

logger = get_logger(__name__)


class Pane:
    """布局树节点

    children 为空时是叶子，非空时是容器。修改过程中容器可以暂时同时持有
    窗口和子节点，下一次 clear_empty_panes() 会把它们整理好。

    Attributes:
        id: 全局唯一标识，快照往返保持不变
        active_window_id: 当前 active 的存活窗口 id，没有时为 ""
        direction: children 的排布方向
        children: 子 pane
        size: 每个子 pane 的比例尺寸（与 children 一一对应）
        parent_pane: 父 pane（非拥有引用，根为 None）
        width / height: 测量得到的容器尺寸，未测量为 None
    """

    def __init__(self, pane_id: str | None = None):
        self.id = ensure_id(pane_id)
        self._windows: list[Window] = []
        self.active_window_id = ""
        self.direction = PaneDirection.HORIZONTAL
        self.children: list["Pane"] = []
        self.size: list[float] = []
        self.parent_pane: "Pane | None" = None
        self.width: float | None = None
        self.height: float | None = None

    def __repr__(self) -> str:
        return (
            f"Pane(id={self.id!r}, windows={len(self._windows)}, "
            f"children={len(self.children)})"
        )

    # === 属性 ===

    @property
    def windows(self) -> list[Window]:
        """所有窗口（含 CLOSING），返回副本"""
        return list(self._windows)

    @property
    def alive_windows(self) -> list[Window]:
        """未关闭的窗口"""
        return [w for w in self._windows if w.state.is_alive]

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_empty(self) -> bool:
        """没有存活窗口且没有子节点"""
        return not self.children and not self.alive_windows

    @property
    def active_window(self) -> Window | None:
        return self.get_window(self.active_window_id) if self.active_window_id else None

    def get_window(self, window_id: str) -> Window | None:
        """按 id 查找本 pane 中的窗口"""
        return next((w for w in self._windows if w.id == window_id), None)

    def _index_of(self, window_id: str) -> int | None:
        for i, window in enumerate(self._windows):
            if window.id == window_id:
                return i
        return None

    # === 窗口列表 ===

    def set_windows(self, windows: list[Window]) -> None:
        """替换窗口列表并重新挂载 parent"""
        for window in windows:
            window.parent_pane = self
        self._windows = list(windows)

    def _attach_window(self, window: Window, index: int | None = None) -> None:
        """挂入窗口（index 为 None 时追加）"""
        window.parent_pane = self
        if index is None:
            self._windows.append(window)
        else:
            self._windows.insert(index, window)

    def _detach_window(self, window: Window) -> None:
        """摘出窗口（移动用，不改变窗口状态）"""
        self._windows = [w for w in self._windows if w is not window]
        window.parent_pane = None

    def insert_window(
        self,
        window: Window,
        position: WindowInsertPosition = WindowInsertPosition.RIGHT,
        neighbor_id: str | None = None,
    ) -> bool:
        """插入窗口并设为 active

        无邻居时追加到末尾；有邻居时插入到邻居之前（Left）或之后（Right）。
        窗口仍属于其他 pane 时按移动处理。
        关闭中的窗口只加入列表，不成为 active；已销毁的窗口被拒绝。

        Args:
            window: 要插入的窗口
            position: 相对邻居的位置
            neighbor_id: 邻居窗口 id

        Returns:
            是否插入（邻居不存在或窗口已销毁时为 False）
        """
        if window.parent_pane is not None:
            return window.move_to_other_pane(self, position, neighbor_id)

        if window.state == WindowState.DESTROYED:
            logger.warning(
                format_pane_log("Pane", self.id, f"Insert rejected: window {window.id[:8]} destroyed")
            )
            metrics.inc("pane.insert_rejected", {"reason": "destroyed"})
            return False

        index = None
        if neighbor_id is not None:
            index = self._index_of(neighbor_id)
            if index is None:
                logger.debug(
                    format_pane_log("Pane", self.id, f"Insert skipped: neighbor {neighbor_id} not found")
                )
                return False
            if position == WindowInsertPosition.RIGHT:
                index += 1

        self._attach_window(window, index)
        if window.state.is_alive:
            self.active_window_id = window.id
        logger.debug(format_pane_log("Pane", self.id, f"Inserted window {window.id[:8]}"))
        return True

    def close_window(self, window_id: str) -> bool:
        """关闭窗口（进入 CLOSING，延迟销毁）"""
        window = self.get_window(window_id)
        if window is None:
            return False
        return window.close()

    def remove_window(self, window_id: str) -> Window | None:
        """硬删除窗口

        Returns:
            被删除的窗口，不存在时返回 None
        """
        index = self._index_of(window_id)
        if index is None:
            return None

        window = self._windows[index]
        if self.active_window_id == window_id:
            self.activate_next_window(window_id)
            if self.active_window_id == window_id:
                self.active_window_id = ""

        del self._windows[index]
        window._mark_destroyed()
        logger.debug(format_pane_log("Pane", self.id, f"Removed window {window_id[:8]}"))
        return window

    # === active 选择 ===

    def set_active_window(self, window_id: str) -> bool:
        """设置 active 窗口（只接受存活窗口）"""
        if not any(w.id == window_id for w in self.alive_windows):
            return False
        self.active_window_id = window_id
        return True

    def activate_next_window(self, window_id: str) -> None:
        """把 active 交给 window_id 之后的存活窗口（循环）

        没有其他存活窗口时 active 置空。
        """
        alive = self.alive_windows
        index = next((i for i, w in enumerate(alive) if w.id == window_id), None)
        if index is None:
            return
        if len(alive) == 1:
            self.active_window_id = ""
            return
        self.active_window_id = alive[(index + 1) % len(alive)].id

    def activate_previous_window(self, window_id: str) -> None:
        """把 active 交给 window_id 之前的存活窗口（位于开头时回绕到最后一个）"""
        alive = self.alive_windows
        index = next((i for i, w in enumerate(alive) if w.id == window_id), None)
        if index is None:
            return
        if len(alive) == 1:
            self.active_window_id = ""
            return
        prev_index = index - 1 if index > 0 else len(alive) - 1
        self.active_window_id = alive[prev_index].id

    # === 分割 / 插入 ===

    def split_pane(self, position: WindowInsertPanePosition) -> SplitResult:
        """分割当前 pane

        当前 pane 变为容器，原内容移入 original 子节点，另建一个空的 new 子节点。
        Bottom/Right 时 original 在前，Top/Left 时 new 在前。

        Args:
            position: 分割位置（不能是 Middle）

        Returns:
            SplitResult(new_pane, original_pane)

        Raises:
            InvalidSplitPositionError: position 为 Middle
        """
        if position == WindowInsertPanePosition.MIDDLE:
            raise InvalidSplitPositionError(
                "WindowInsertPanePosition.MIDDLE does not split; insert into the pane instead"
            )
        result = self._wrap_with(Pane(), position)
        metrics.inc("pane.split", {"position": position.value})
        logger.debug(format_pane_log("Pane", self.id, f"Split → {position.value}"))
        return result

    def insert_pane(self, pane: "Pane", position: WindowInsertPanePosition) -> SplitResult:
        """把另一个 pane 插入到当前 pane 的某一侧

        当前 pane 的完整状态被复制到一个兄弟节点，给定的 pane 作为另一个子节点，
        排序和方向规则与 split_pane 相同。Middle 时把给定 leaf 的窗口并入当前 pane。

        Args:
            pane: 要插入的 pane（会先从原父节点摘下）
            position: 插入位置

        Returns:
            SplitResult(new_pane=pane, original_pane=兄弟节点)；Middle 时 original_pane 为当前 pane

        Raises:
            InvalidSplitPositionError: Middle 且给定 pane 不是叶子
            ValueError: 给定 pane 是当前 pane 或其祖先
        """
        if pane is self or self._is_descendant_of(pane):
            raise ValueError("Cannot insert a pane into its own subtree")

        if position == WindowInsertPanePosition.MIDDLE:
            return self._merge_windows_from(pane)

        pane._detach_from_parent()
        result = self._wrap_with(pane, position)
        metrics.inc("pane.insert", {"position": position.value})
        logger.debug(format_pane_log("Pane", self.id, f"Inserted pane {pane.id[:8]} → {position.value}"))
        return result

    def _wrap_with(self, new_pane: "Pane", position: WindowInsertPanePosition) -> SplitResult:
        """把当前状态移入 original 子节点，与 new_pane 组成两路容器"""
        original = Pane()
        original.active_window_id = self.active_window_id
        original.direction = self.direction
        original.children = self.children
        original.size = self.size
        for child in original.children:
            child.parent_pane = original
        original.set_windows(self._windows)

        original.parent_pane = self
        new_pane.parent_pane = self
        self._windows = []
        self.children = [original, new_pane] if position.original_first else [new_pane, original]
        self.direction = position.direction
        self.size = [SPLIT_SIZE_WEIGHT, SPLIT_SIZE_WEIGHT]
        self.active_window_id = ""
        self.do_layout_pane()
        return SplitResult(new_pane=new_pane, original_pane=original)

    def _merge_windows_from(self, pane: "Pane") -> SplitResult:
        """Middle 插入：把给定 leaf 的窗口并入当前 pane"""
        if pane.children:
            raise InvalidSplitPositionError(
                "WindowInsertPanePosition.MIDDLE only accepts a leaf pane"
            )
        active_id = pane.active_window_id
        for window in pane.windows:
            window.move_to_other_pane(self)
        if active_id:
            self.set_active_window(active_id)
        metrics.inc("pane.insert", {"position": WindowInsertPanePosition.MIDDLE.value})
        return SplitResult(new_pane=pane, original_pane=self)

    def _detach_from_parent(self) -> None:
        """从父节点摘下（连同对应的 size 项）"""
        parent = self.parent_pane
        if parent is None:
            return
        index = next((i for i, c in enumerate(parent.children) if c is self), None)
        if index is not None:
            del parent.children[index]
            if index < len(parent.size):
                del parent.size[index]
        self.parent_pane = None

    def _is_descendant_of(self, pane: "Pane") -> bool:
        current = self.parent_pane
        while current is not None:
            if current is pane:
                return True
            current = current.parent_pane
        return False

    # === 清理 / 合并 ===

    def clear_empty_panes(self) -> bool:
        """自底向上清理空 pane 并合并单子节点

        深度优先后序：子节点先于父节点处理。空子节点被移除，其尺寸平均分给
        剩余兄弟节点；只剩一个子节点且自身没有存活窗口时，吸收该子节点
        （窗口、子节点、方向、active 和 id），直到不能再合并。

        Returns:
            处理后是否为空（没有存活窗口也没有子节点）
        """
        order: list[Pane] = []
        stack: list[Pane] = [self]
        while stack:
            pane = stack.pop()
            order.append(pane)
            stack.extend(pane.children)

        for pane in reversed(order):
            pane._remove_empty_children()
            pane._merge_up()

        return self.is_empty

    def _remove_empty_children(self) -> None:
        """移除空子节点，释放的尺寸平均分配给剩余子节点"""
        for i in range(len(self.children) - 1, -1, -1):
            child = self.children[i]
            if not child.is_empty:
                continue

            removed_size = self.size.pop(i) if i < len(self.size) else 0
            del self.children[i]
            child.parent_pane = None
            metrics.inc("pane.pruned")
            logger.debug(format_pane_log("Pane", self.id, f"Pruned empty child {child.id[:8]}"))

            if self.children:
                total = sum(self.size) + removed_size
                self.size = [total / len(self.children) for _ in self.children]

    def _merge_up(self) -> None:
        """只剩一个子节点且没有存活窗口时吸收该子节点（重复直到不满足）"""
        while len(self.children) == 1 and not self.alive_windows:
            only_child = self.children[0]
            parent_total_size = sum(self.size)

            for window in only_child._windows:
                window.parent_pane = self
                self._windows.append(window)
            self.direction = only_child.direction
            self.children = only_child.children
            for child in self.children:
                child.parent_pane = self
            self.size = list(only_child.size) if only_child.children else [parent_total_size]
            self.active_window_id = only_child.active_window_id

            old_id = self.id
            self.id = only_child.id

            only_child.children = []
            only_child._windows = []
            only_child.parent_pane = None

            metrics.inc("pane.merge_up")
            logger.debug(format_pane_log("Pane", old_id, f"Merged up child, adopted id {self.id[:8]}"))

    # === 布局 ===

    def do_layout_pane(self, width: float | None = None, height: float | None = None) -> None:
        """把比例尺寸换算为具体尺寸并递归到子节点

        Args:
            width: 容器宽度（给出时更新测量值）
            height: 容器高度（给出时更新测量值）
        """
        if width is not None:
            self.width = width
        if height is not None:
            self.height = height
        layout.layout_tree(self)

    # === 序列化 ===

    def get_data(self) -> dict:
        """转换为快照字典

        自顶向下逐层填充 children，树的深度不受递归深度限制。
        """
        root = self._node_data()
        stack: list[tuple[Pane, dict]] = [(self, root)]
        while stack:
            pane, data = stack.pop()
            for child in pane.children:
                child_data = child._node_data()
                data["children"].append(child_data)
                stack.append((child, child_data))
        return root

    def _node_data(self) -> dict:
        """单个节点的快照字典（children 留空）"""
        return {
            "id": self.id,
            "windows": [window.get_data() for window in self._windows],
            "activeWindowId": self.active_window_id,
            "direction": self.direction.value,
            "children": [],
            "size": list(self.size),
        }
