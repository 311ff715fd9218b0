"""
Unit tests for the failure gauge in bio.basker.app.health
"""

import asyncio
from unittest.mock import Mock

import pytest

from bio.basker.app.health import HealthGauge, tick_health_task


class TestHealthGauge:
    @pytest.mark.asyncio
    async def test_threshold(self):
        gauge = HealthGauge(threshold=2)
        assert await gauge.is_healthy()
        await gauge.record_failure(2)
        assert await gauge.is_healthy()
        await gauge.record_failure()
        assert not await gauge.is_healthy()

    @pytest.mark.asyncio
    async def test_decay_stops_at_zero(self):
        gauge = HealthGauge(failures=1)
        await gauge.decay()
        await gauge.decay()
        assert gauge.failures == 0

    @pytest.mark.asyncio
    async def test_tick_task_decays_and_reports(self):
        gauge = HealthGauge(failures=5)
        metrics_client = Mock()

        task = asyncio.create_task(tick_health_task(gauge, metrics_client, 0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert gauge.failures < 5
        metrics_client.gauge.assert_called()
        assert metrics_client.gauge.call_args.args[0] == "basker.health.failures"
