"""
Unit tests for the metrics abstraction in bio.basker.app.metrics
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from bio.basker.app.metrics import (
    MetricsClient,
    NoOpMetricsClient,
    TelegrafMetricsClient,
    create_metrics_client,
)


class TestMetricsClientInterface:
    def test_interface_is_abstract(self):
        with pytest.raises(TypeError):
            MetricsClient()


class TestNoOpMetricsClient:
    @pytest.mark.asyncio
    async def test_operations_do_nothing(self):
        client = NoOpMetricsClient()
        client.increment("test.counter", 1, {"tag": "value"})
        client.increment("test.counter")
        client.gauge("test.gauge", 42.5)
        client.timer("test.timer", 0.001, {"path": "/"})
        await client.connect()
        await client.close()


class TestTelegrafMetricsClient:
    @pytest.fixture
    def statsd(self):
        mock = Mock()
        mock.connect = AsyncMock()
        mock.close = AsyncMock()
        return mock

    def test_increment(self, statsd):
        TelegrafMetricsClient(statsd).increment("test.counter", 3, {"method": "POST"})
        statsd.increment.assert_called_once_with(
            "test.counter", 3, tag_dict={"method": "POST"}
        )

    def test_timer_without_tags(self, statsd):
        TelegrafMetricsClient(statsd).timer("test.timer", 1.5)
        statsd.timer.assert_called_once_with("test.timer", 1.5, tag_dict={})

    def test_gauge(self, statsd):
        TelegrafMetricsClient(statsd).gauge("test.gauge", 4)
        statsd.gauge.assert_called_once_with("test.gauge", 4, tag_dict={})

    @pytest.mark.asyncio
    async def test_connect_and_close(self, statsd):
        client = TelegrafMetricsClient(statsd)
        await client.connect()
        await client.close()
        statsd.connect.assert_awaited_once()
        statsd.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_errors_are_logged(self, statsd):
        statsd.close.side_effect = OSError("socket gone")
        await TelegrafMetricsClient(statsd).close()


class TestCreateMetricsClient:
    def test_none(self):
        assert isinstance(create_metrics_client("none"), NoOpMetricsClient)

    def test_case_insensitive(self):
        assert isinstance(create_metrics_client("NONE"), NoOpMetricsClient)

    @patch("bio.basker.app.metrics.TelegrafStatsdClient")
    def test_telegraf(self, mock_statsd_class):
        client = create_metrics_client("telegraf", host="telegraf", port=8125)
        assert isinstance(client, TelegrafMetricsClient)
        mock_statsd_class.assert_called_once_with(host="telegraf", port=8125, debug=False)

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid metrics backend"):
            create_metrics_client("otel")
