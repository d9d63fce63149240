"""Timer - 单线程延迟任务服务

提供一次性延迟（delay）任务，用于窗口关闭后的延迟销毁。
支持同步/异步回调，异常隔离，可取消。

所有回调都在运行 Timer 的同一个 asyncio 线程上执行，
与树的同步修改不会交错。

使用示例:
    timer = Timer()

    # 注册延迟任务（0.3 秒后销毁窗口）
    timer.register_delay("window_destroy_123", 0.3, window.destroy)

    # 取消延迟任务
    timer.cancel_delay("window_destroy_123")

    # 启动/停止
    await timer.run()
    timer.stop()
"""

import asyncio
import inspect
import time
from dataclasses import dataclass
from typing import Callable, Any, Coroutine

from .telemetry import get_logger, metrics
from .config import METRICS_ENABLED, TIMER_TICK_INTERVAL

logger = get_logger(__name__)

DelayCallback = Callable[[], Any | Coroutine[Any, Any, Any]]


@dataclass
class DelayTask:
    """延迟任务"""
    name: str
    delay: float  # 秒
    callback: DelayCallback
    scheduled_at: float = 0.0  # 调度时间（clock 时间）
    trigger_at: float = 0.0  # 触发时间
    cancelled: bool = False


class Timer:
    """延迟任务服务

    设计原则:
    1. 单个 Timer 实例负责一棵 pane 树的所有延迟任务
    2. 支持同步/异步回调（协程在 tick 内 await）
    3. 异常隔离：单个回调失败不影响其他任务
    4. 同名任务覆盖旧任务
    """

    def __init__(
        self,
        tick_interval: float | None = None,
        clock: Callable[[], float] | None = None,
    ):
        """初始化 Timer

        Args:
            tick_interval: tick 间隔（秒），None 使用配置默认值
            clock: 时钟函数，默认 time.monotonic（测试可注入）
        """
        self._tick_interval = tick_interval or TIMER_TICK_INTERVAL
        self._clock = clock or time.monotonic
        self._delay_tasks: dict[str, DelayTask] = {}
        self._running = False
        self._task: asyncio.Task | None = None

    def register_delay(
        self,
        name: str,
        delay: float,
        callback: DelayCallback,
    ) -> DelayTask:
        """注册延迟任务

        如果已存在同名任务，会被覆盖（取消旧任务）。

        Args:
            name: 任务名（用于日志和取消）
            delay: 延迟时间（秒）
            callback: 回调函数（同步或异步）

        Returns:
            新注册的 DelayTask
        """
        now = self._clock()

        # 覆盖旧任务
        old = self._delay_tasks.get(name)
        if old is not None:
            old.cancelled = True
            logger.debug(f"[Timer] Overwriting delay task: {name}")

        task = DelayTask(
            name=name,
            delay=delay,
            callback=callback,
            scheduled_at=now,
            trigger_at=now + delay,
        )
        self._delay_tasks[name] = task
        logger.debug(f"[Timer] Registered delay task: {name} ({delay}s)")
        return task

    def cancel_delay(self, name: str) -> bool:
        """取消延迟任务

        Args:
            name: 任务名

        Returns:
            是否成功取消
        """
        task = self._delay_tasks.pop(name, None)
        if task is None:
            return False
        task.cancelled = True
        logger.debug(f"[Timer] Cancelled delay task: {name}")
        return True

    def has_delay(self, name: str) -> bool:
        """检查是否存在延迟任务"""
        return name in self._delay_tasks

    async def run(self) -> None:
        """启动 Timer 主循环

        持续运行直到调用 stop()。
        """
        if self._running:
            logger.warning("[Timer] Already running")
            return

        self._running = True
        self._task = asyncio.current_task()
        logger.info(f"[Timer] Started (tick={self._tick_interval}s)")

        try:
            while self._running:
                await self.tick()
                await asyncio.sleep(self._tick_interval)
        except asyncio.CancelledError:
            logger.info("[Timer] Cancelled")
        finally:
            self._cleanup()

    def stop(self) -> None:
        """停止 Timer

        取消所有未触发的延迟任务。
        """
        if not self._running:
            return

        self._running = False
        logger.info("[Timer] Stopping...")

        for name in list(self._delay_tasks.keys()):
            self.cancel_delay(name)

        if self._task and not self._task.done() and self._task is not asyncio.current_task():
            self._task.cancel()

    def _cleanup(self) -> None:
        """清理资源"""
        self._running = False
        self._task = None
        self._delay_tasks.clear()
        logger.debug("[Timer] Cleaned up")

    async def tick(self) -> int:
        """执行一次 tick

        按触发时间顺序执行所有到期的延迟任务。
        回调中新注册的任务最早在下一次 tick 执行。

        Returns:
            本次执行的任务数
        """
        now = self._clock()

        due = sorted(
            (task for task in self._delay_tasks.values() if now >= task.trigger_at),
            key=lambda t: t.trigger_at,
        )

        executed = 0
        for task in due:
            # 前一个回调可能已取消或覆盖该任务
            if task.cancelled or self._delay_tasks.get(task.name) is not task:
                continue
            del self._delay_tasks[task.name]
            await self._execute_callback(task.name, task.callback)
            executed += 1
        return executed

    async def _execute_callback(self, name: str, callback: DelayCallback) -> None:
        """执行回调（带异常隔离）"""
        try:
            result = callback()
            if inspect.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(f"[Timer] Task '{name}' failed: {e}")
            if METRICS_ENABLED:
                metrics.inc("timer.errors", {"task": name})

    # === 状态查询（用于测试）===

    @property
    def is_running(self) -> bool:
        """是否正在运行"""
        return self._running

    @property
    def delay_task_count(self) -> int:
        """延迟任务数量"""
        return len(self._delay_tasks)

    def get_delay_tasks(self) -> list[str]:
        """获取所有延迟任务名"""
        return list(self._delay_tasks.keys())
