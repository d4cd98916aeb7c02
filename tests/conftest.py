import logging

import pytest

from metriccatcher.metrics.registry import MetricRegistry


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock) -> MetricRegistry:
    return MetricRegistry(max_metrics=500, clock=clock)


@pytest.fixture(autouse=True)
def reset_app_logger():
    yield
    logger = logging.getLogger("metriccatcher")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
