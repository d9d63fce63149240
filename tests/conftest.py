"""Pytest 配置"""

import pytest

from panetree.telemetry import metrics


class FakeClock:
    """可手动推进的时钟（注入 Timer）"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """创建测试用时钟"""
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()
