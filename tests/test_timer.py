"""Timer 模块测试"""

import asyncio
import pytest

from panetree.timer import Timer
from panetree.telemetry import metrics


@pytest.fixture
def timer():
    """创建测试用 Timer"""
    return Timer(tick_interval=0.05)  # 快速 tick 用于测试


@pytest.fixture
def manual_timer(clock):
    """使用手动时钟的 Timer"""
    return Timer(tick_interval=0.05, clock=clock)


class TestTimerDelay:
    """延迟任务测试"""

    @pytest.mark.asyncio
    async def test_register_delay_triggers(self, timer):
        """测试延迟任务准时触发"""
        triggered = {"value": False}

        def callback():
            triggered["value"] = True

        timer.register_delay("test_delay", 0.2, callback)
        assert timer.delay_task_count == 1

        task = asyncio.create_task(timer.run())
        await asyncio.sleep(0.1)
        assert triggered["value"] is False  # 还没到时间

        await asyncio.sleep(0.25)
        assert triggered["value"] is True  # 已触发

        timer.stop()
        await asyncio.sleep(0.1)

        # 触发后任务被清理
        assert timer.delay_task_count == 0
        assert task.done()

    @pytest.mark.asyncio
    async def test_cancel_delay(self, timer):
        """测试取消延迟任务"""
        triggered = {"value": False}

        def callback():
            triggered["value"] = True

        timer.register_delay("test_cancel", 0.1, callback)
        assert timer.has_delay("test_cancel") is True

        result = timer.cancel_delay("test_cancel")
        assert result is True
        assert timer.has_delay("test_cancel") is False

        # 取消不存在的任务
        assert timer.cancel_delay("nonexistent") is False

        task = asyncio.create_task(timer.run())
        await asyncio.sleep(0.2)
        timer.stop()
        await asyncio.sleep(0.1)

        assert triggered["value"] is False

    @pytest.mark.asyncio
    async def test_async_callback(self, timer):
        """测试异步回调被 await"""
        results = []

        async def callback():
            await asyncio.sleep(0)
            results.append("done")

        timer.register_delay("async_delay", 0.05, callback)

        task = asyncio.create_task(timer.run())
        await asyncio.sleep(0.2)
        timer.stop()
        await asyncio.sleep(0.1)

        assert results == ["done"]

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_delays(self, timer):
        """测试 stop 取消未触发的延迟任务"""
        triggered = {"value": False}

        def callback():
            triggered["value"] = True

        timer.register_delay("pending", 1.0, callback)

        task = asyncio.create_task(timer.run())
        await asyncio.sleep(0.1)
        timer.stop()
        await asyncio.sleep(0.1)

        assert triggered["value"] is False
        assert timer.delay_task_count == 0


class TestTimerTick:
    """手动时钟下的 tick 行为"""

    @pytest.mark.asyncio
    async def test_tick_runs_only_due_tasks(self, manual_timer, clock):
        """只执行到期任务"""
        results = []
        manual_timer.register_delay("short", 0.1, lambda: results.append("short"))
        manual_timer.register_delay("long", 1.0, lambda: results.append("long"))

        assert await manual_timer.tick() == 0

        clock.advance(0.1)
        assert await manual_timer.tick() == 1
        assert results == ["short"]
        assert manual_timer.get_delay_tasks() == ["long"]

        clock.advance(1.0)
        await manual_timer.tick()
        assert results == ["short", "long"]
        assert manual_timer.delay_task_count == 0

    @pytest.mark.asyncio
    async def test_tick_runs_in_trigger_order(self, manual_timer, clock):
        """同一 tick 内按触发时间顺序执行"""
        results = []
        manual_timer.register_delay("second", 0.3, lambda: results.append("second"))
        manual_timer.register_delay("first", 0.1, lambda: results.append("first"))

        clock.advance(1.0)
        await manual_timer.tick()

        assert results == ["first", "second"]

    @pytest.mark.asyncio
    async def test_delay_overwrite(self, manual_timer, clock):
        """同名任务覆盖旧任务"""
        results = []
        first = manual_timer.register_delay("same", 0.3, lambda: results.append("first"))
        manual_timer.register_delay("same", 0.2, lambda: results.append("second"))

        assert first.cancelled is True
        assert manual_timer.delay_task_count == 1

        clock.advance(0.5)
        await manual_timer.tick()

        assert results == ["second"]

    @pytest.mark.asyncio
    async def test_callback_can_cancel_later_task(self, manual_timer, clock):
        """回调中取消同一 tick 内稍后到期的任务"""
        results = []

        def first():
            results.append("first")
            manual_timer.cancel_delay("second")

        manual_timer.register_delay("first", 0.1, first)
        manual_timer.register_delay("second", 0.2, lambda: results.append("second"))

        clock.advance(1.0)
        await manual_timer.tick()

        assert results == ["first"]


class TestTimerErrorHandling:
    """异常处理测试"""

    @pytest.mark.asyncio
    async def test_callback_exception_isolated(self, manual_timer, clock):
        """测试回调异常不影响其他任务"""
        results = []

        def bad_callback():
            raise ValueError("Test error")

        manual_timer.register_delay("bad", 0.1, bad_callback)
        manual_timer.register_delay("good", 0.2, lambda: results.append("good"))

        clock.advance(1.0)
        await manual_timer.tick()

        assert results == ["good"]
        assert metrics.get_counter("timer.errors", {"task": "bad"}) == 1

    @pytest.mark.asyncio
    async def test_async_callback_exception_isolated(self, manual_timer, clock):
        """测试异步回调异常被隔离"""

        async def bad_callback():
            raise RuntimeError("Async error")

        manual_timer.register_delay("bad", 0.1, bad_callback)

        clock.advance(1.0)
        await manual_timer.tick()

        assert metrics.get_counter("timer.errors", {"task": "bad"}) == 1


class TestTimerLifecycle:
    """生命周期测试"""

    @pytest.mark.asyncio
    async def test_double_run_warning(self, timer, caplog):
        """测试重复 run 产生警告"""
        task = asyncio.create_task(timer.run())
        await asyncio.sleep(0.1)
        assert timer.is_running is True

        # 再次 run 应该立即返回
        await timer.run()
        assert "Already running" in caplog.text

        timer.stop()
        await asyncio.sleep(0.1)
        assert timer.is_running is False

    @pytest.mark.asyncio
    async def test_stop_idempotent(self, timer):
        """测试 stop 是幂等的"""
        timer.stop()  # 未启动时 stop
        timer.stop()

        task = asyncio.create_task(timer.run())
        await asyncio.sleep(0.1)
        timer.stop()
        timer.stop()
        await asyncio.sleep(0.1)

        assert task.done()
