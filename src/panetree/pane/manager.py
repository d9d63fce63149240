"""WindowManager - pane 树的唯一管理者

协调整棵树：
- 持有唯一的根 Pane（只有这里可以整体替换）
- 按 id 查找 pane / 窗口（广度优先）
- 快照导出与整树重建
- 驱动全树的空 pane 清理
- 记录已加载的 pane id（供外部渲染层使用）
"""

from collections import deque
from typing import Any, Callable, Iterator, TYPE_CHECKING

from ..telemetry import get_logger, metrics
from .pane import Pane
from .window import Window
from .snapshot import PaneData, parse_snapshot, build_pane_tree

if TYPE_CHECKING:
    from ..timer import Timer

logger = get_logger(__name__)

# 回调类型
OnRootChangeCallback = Callable[[Pane], Any]


class WindowManager:
    """pane 树管理者

    显式构造，不是全局单例；每个实例管理一棵独立的树。

    Attributes:
        root_pane: 当前根 pane
        timer: 绑定到窗口的 Timer（延迟销毁）
    """

    def __init__(self, timer: "Timer | None" = None, root: Pane | None = None):
        """初始化

        Args:
            timer: Timer 实例
            root: 初始根 pane，None 时新建空根
        """
        self._timer = timer
        self._root = root or Pane()
        self._loaded_pane_ids: list[str] = []
        self._on_root_change: OnRootChangeCallback | None = None

    # === 配置 ===

    @property
    def timer(self) -> "Timer | None":
        return self._timer

    def set_timer(self, timer: "Timer | None") -> None:
        """设置 Timer，并同步到树中所有窗口"""
        self._timer = timer
        for window in self.all_windows:
            window.set_timer(timer)

    def set_on_root_change(self, callback: OnRootChangeCallback | None) -> None:
        """设置根替换回调（参数为新的根 pane）"""
        self._on_root_change = callback

    # === 树访问 ===

    @property
    def root_pane(self) -> Pane:
        return self._root

    @property
    def all_windows(self) -> list[Window]:
        """树中所有窗口（含 CLOSING），深度优先先序"""
        windows: list[Window] = []
        stack: list[Pane] = [self._root]
        while stack:
            pane = stack.pop()
            windows.extend(pane.windows)
            stack.extend(reversed(pane.children))
        return windows

    def iter_panes(self) -> Iterator[Pane]:
        """广度优先遍历所有 pane"""
        queue: deque[Pane] = deque([self._root])
        while queue:
            pane = queue.popleft()
            yield pane
            queue.extend(pane.children)

    def create_window(self, data: Any = None, window_id: str | None = None) -> Window:
        """创建绑定本管理者 Timer 的窗口"""
        return Window(data, window_id=window_id, timer=self._timer)

    # === 查找 ===

    def find_pane(self, pane_id: str) -> Pane | None:
        """按 id 查找 pane（广度优先）"""
        for pane in self.iter_panes():
            if pane.id == pane_id:
                return pane
        return None

    def find_pane_by_window_id(self, window_id: str) -> Pane | None:
        """查找持有该窗口的 pane（广度优先）"""
        for pane in self.iter_panes():
            if pane.get_window(window_id) is not None:
                return pane
        return None

    def find_window(self, window_id: str) -> Window | None:
        """按 id 查找窗口"""
        pane = self.find_pane_by_window_id(window_id)
        return pane.get_window(window_id) if pane else None

    # === 快照 ===

    def get_snapshot(self) -> dict:
        """导出整棵树的快照字典"""
        return self._root.get_data()

    def set_root_pane(self, snapshot: PaneData | dict) -> list[Window]:
        """用快照整体替换根

        旧树中的所有窗口被收集返回，由调用方完成最终释放；它们未触发的
        延迟销毁任务在这里取消。之前拿到的 Pane/Window 引用全部失效，
        需要按 id 重新查找。

        Args:
            snapshot: 快照字典或 PaneData

        Returns:
            旧树中的所有窗口

        Raises:
            pydantic.ValidationError: 快照结构不合法
        """
        data = parse_snapshot(snapshot)

        old_windows = self.all_windows
        for window in old_windows:
            window._cancel_destroy_task()

        self._root = build_pane_tree(data, timer=self._timer)
        metrics.inc("manager.set_root")
        logger.info(
            f"[WindowManager] Root replaced: {data.id[:8]} "
            f"(released {len(old_windows)} windows)"
        )

        if self._on_root_change:
            self._on_root_change(self._root)

        return old_windows

    # === 清理 / 布局 ===

    def clear_empty_pane(self) -> bool:
        """从根开始清理空 pane 并向上合并

        合并时父节点采用被吸收子节点的 id，合并前建立的 id 引用继续指向
        存活的节点。

        Returns:
            根是否为空
        """
        is_empty = self._root.clear_empty_panes()
        metrics.gauge("tree.panes", sum(1 for _ in self.iter_panes()))
        logger.debug(f"[WindowManager] Cleared empty panes (root empty={is_empty})")
        return is_empty

    def do_layout(self, width: float, height: float) -> None:
        """测量根容器并布局整棵树"""
        self._root.do_layout_pane(width, height)

    # === 已加载 pane ===

    @property
    def loaded_pane_ids(self) -> list[str]:
        return list(self._loaded_pane_ids)

    def add_loaded_pane(self, pane_id: str) -> None:
        """记录已加载的 pane（重复忽略）"""
        if pane_id not in self._loaded_pane_ids:
            self._loaded_pane_ids.append(pane_id)

    def remove_loaded_pane(self, pane_id: str) -> None:
        """移除已加载的 pane 记录"""
        self._loaded_pane_ids = [i for i in self._loaded_pane_ids if i != pane_id]

    # === 调试 ===

    def format_tree(self, width: int = 100) -> str:
        """树结构的文本表示"""
        from ..render import format_pane_tree
        return format_pane_tree(self._root, width=width)

    def pretty_print(self) -> None:
        """把树结构输出到终端"""
        from ..render import print_pane_tree
        print_pane_tree(self._root)
