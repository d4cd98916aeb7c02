from __future__ import annotations

import math

TICK_INTERVAL_SEC = 5.0


class EWMA:
    """Exponentially weighted moving average of an event rate.

    ``update`` accumulates events; ``tick`` folds them into the average and
    must be called every ``TICK_INTERVAL_SEC`` seconds by the owning meter.
    """

    def __init__(self, alpha: float, interval_sec: float = TICK_INTERVAL_SEC) -> None:
        self.alpha = alpha
        self.interval_sec = interval_sec
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False

    @classmethod
    def for_minutes(cls, minutes: int) -> "EWMA":
        return cls(1.0 - math.exp(-TICK_INTERVAL_SEC / 60.0 / minutes))

    @classmethod
    def one_minute(cls) -> "EWMA":
        return cls.for_minutes(1)

    @classmethod
    def five_minute(cls) -> "EWMA":
        return cls.for_minutes(5)

    @classmethod
    def fifteen_minute(cls) -> "EWMA":
        return cls.for_minutes(15)

    def update(self, n: int) -> None:
        self._uncounted += n

    def tick(self) -> None:
        count = self._uncounted
        self._uncounted = 0
        instant_rate = count / self.interval_sec
        if self._initialized:
            self._rate += self.alpha * (instant_rate - self._rate)
        else:
            self._rate = instant_rate
            self._initialized = True

    def rate_per_second(self) -> float:
        return self._rate


__all__ = ["EWMA", "TICK_INTERVAL_SEC"]
