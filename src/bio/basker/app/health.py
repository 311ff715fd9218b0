import asyncio
import logging
from typing import NoReturn

logger = logging.getLogger(__name__)


class HealthGauge:
    """
    Failure counter behind the readiness probe.

    Every request that ends in an unexpected error records a failure. A
    background task decays the counter over time, so only a burst of failures
    pushes it past the threshold and fails /internal/ready.
    """

    def __init__(self, failures: int = 0, threshold: int = 100) -> None:
        self._failures = failures
        self._threshold = threshold
        self._lock = asyncio.Lock()

    @property
    def failures(self) -> int:
        return self._failures

    async def record_failure(self, count: int = 1) -> int:
        async with self._lock:
            self._failures += int(count)
            return self._failures

    async def decay(self) -> None:
        async with self._lock:
            self._failures = max(0, self._failures - 1)

    async def is_healthy(self) -> bool:
        async with self._lock:
            return self._failures <= self._threshold


async def tick_health_task(health_gauge: HealthGauge, metrics_client, interval: float) -> NoReturn:
    logger.info("Starting health gauge task")
    while True:
        await health_gauge.decay()
        metrics_client.gauge("basker.health.failures", health_gauge.failures)
        await asyncio.sleep(interval)
