"""Window - pane 中的内容单元（tab）

职责：
- 持有不透明的 data（调用方领域数据，不解释）
- 维护生命周期：OPEN → CLOSING → DESTROYED
- close() 后通过 Timer 延迟销毁（可取消）
- 在 pane 之间移动（重新挂载 parent_pane）
"""

from typing import Any, TYPE_CHECKING

from ..telemetry import get_logger, metrics, format_pane_log
from ..config import WINDOW_DESTROY_TIME_MS
from ..core.ids import ensure_id
from .types import WindowInsertPosition, WindowState

if TYPE_CHECKING:
    from ..timer import Timer
    from .pane import Pane

logger = get_logger(__name__)


class Window:
    """窗口（tab）

    同一时刻只属于一个 Pane。CLOSING 状态的窗口仍留在 pane 的列表中，
    但不参与 active 选择，直到被 destroy() 硬删除。

    Attributes:
        id: 全局唯一标识，移动和快照重建后保持不变
        data: 不透明负载
        parent_pane: 当前所属 Pane（非拥有引用）
        destroy_time: close() 到硬删除的宽限期（毫秒）
    """

    def __init__(
        self,
        data: Any = None,
        window_id: str | None = None,
        timer: "Timer | None" = None,
        destroy_time: int | None = None,
    ):
        """初始化 Window

        Args:
            data: 不透明负载
            window_id: 指定 id（快照重建时使用），None 自动生成
            timer: Timer 实例（用于延迟销毁），None 时 close() 立即销毁
            destroy_time: 宽限期（毫秒），None 使用配置默认值
        """
        self.id = ensure_id(window_id)
        self.data = data
        self.parent_pane: "Pane | None" = None
        self.destroy_time = destroy_time if destroy_time is not None else WINDOW_DESTROY_TIME_MS
        self._timer = timer
        self._state = WindowState.OPEN
        self._destroy_task_name = f"window_destroy_{self.id}"

    def __repr__(self) -> str:
        return f"Window(id={self.id!r}, state={self._state.value})"

    # === 属性 ===

    @property
    def state(self) -> WindowState:
        return self._state

    @property
    def is_closed(self) -> bool:
        """是否已关闭（CLOSING 或 DESTROYED）"""
        return self._state != WindowState.OPEN

    @property
    def timer(self) -> "Timer | None":
        return self._timer

    @property
    def destroy_task_name(self) -> str:
        return self._destroy_task_name

    def set_timer(self, timer: "Timer | None") -> None:
        """设置 Timer"""
        self._timer = timer

    # === 生命周期 ===

    def close(self) -> bool:
        """关闭窗口

        如果是所属 pane 的 active 窗口，先把 active 交给循环意义上的下一个
        存活窗口，再进入 CLOSING，并注册延迟销毁任务。

        Returns:
            是否发生状态变化（重复关闭返回 False）
        """
        if self._state != WindowState.OPEN:
            logger.debug(format_pane_log("Window", self.id, f"Close ignored: {self._state.value}"))
            return False

        pane = self.parent_pane
        if pane is not None and pane.active_window_id == self.id:
            pane.activate_next_window(self.id)

        self._state = WindowState.CLOSING
        metrics.inc("window.closed")

        if self._timer is None:
            logger.debug(format_pane_log("Window", self.id, "Closed without timer, destroying now"))
            self.destroy()
            return True

        self._timer.register_delay(
            self._destroy_task_name,
            self.destroy_time / 1000,
            self.destroy,
        )
        logger.debug(
            format_pane_log("Window", self.id, f"Closing, destroy in {self.destroy_time}ms")
        )
        return True

    def destroy(self) -> "Window | None":
        """硬删除窗口

        从当前 parent 的列表中按 id 移除。已移除或已脱离树时是安全的空操作。

        Returns:
            被移除的窗口，未移除时返回 None
        """
        pane = self.parent_pane
        if pane is not None:
            return pane.remove_window(self.id)

        self._mark_destroyed()
        return None

    def _mark_destroyed(self) -> None:
        """进入终态（由 Pane.remove_window 回调）"""
        self._cancel_destroy_task()
        if self._state != WindowState.DESTROYED:
            self._state = WindowState.DESTROYED
            metrics.inc("window.destroyed")
        self.parent_pane = None

    def _cancel_destroy_task(self) -> bool:
        """取消未触发的延迟销毁任务"""
        if self._timer and self._timer.has_delay(self._destroy_task_name):
            return self._timer.cancel_delay(self._destroy_task_name)
        return False

    # === 移动 ===

    def move(self, pane: "Pane") -> bool:
        """移动到另一个 pane 的末尾"""
        return self.move_to_other_pane(pane)

    def move_to_other_pane(
        self,
        target: "Pane",
        position: WindowInsertPosition = WindowInsertPosition.RIGHT,
        neighbor_id: str | None = None,
    ) -> bool:
        """移动到目标 pane

        有邻居时插入到邻居之前（Left）或之后（Right），邻居只在目标 pane 的
        存活窗口中查找；无邻居时追加到末尾。OPEN 的窗口会成为目标 pane 的
        active 窗口。

        Args:
            target: 目标 pane（可以是当前 pane，即重新排序）
            position: 相对邻居的位置
            neighbor_id: 邻居窗口 id

        Returns:
            是否移动成功（相对自身移动、邻居不存在、已销毁时返回 False）
        """
        if neighbor_id is not None and neighbor_id == self.id:
            logger.warning(
                format_pane_log("Window", self.id, "Move rejected: neighbor is the window itself")
            )
            metrics.inc("window.move_rejected", {"reason": "self_neighbor"})
            return False

        if self._state == WindowState.DESTROYED:
            logger.warning(format_pane_log("Window", self.id, "Move rejected: window destroyed"))
            metrics.inc("window.move_rejected", {"reason": "destroyed"})
            return False

        neighbor: "Window | None" = None
        if neighbor_id is not None:
            neighbor = next((w for w in target.alive_windows if w.id == neighbor_id), None)
            if neighbor is None:
                logger.debug(
                    format_pane_log("Window", self.id, f"Move skipped: neighbor {neighbor_id} not found")
                )
                return False

        is_open = self._state == WindowState.OPEN
        source = self.parent_pane
        if source is not None:
            if is_open and source.active_window_id == self.id:
                source.activate_next_window(self.id)
            source._detach_window(self)

        index = None
        if neighbor is not None:
            index = target.windows.index(neighbor)
            if position == WindowInsertPosition.RIGHT:
                index += 1
        target._attach_window(self, index)

        if is_open:
            target.active_window_id = self.id

        metrics.inc("window.moved")
        logger.debug(
            format_pane_log(
                "Window", self.id,
                f"Moved {source.id[:8] if source else 'detached'} → {target.id[:8]}",
            )
        )
        return True

    # === 序列化 ===

    def get_data(self) -> dict:
        """转换为快照字典"""
        return {
            "id": self.id,
            "data": self.data,
        }
