"""
Metrics abstraction for the Basker server.

Handlers and middleware talk to a MetricsClient and never to a concrete
backend. Two backends exist: Telegraf/StatsD through aio-statsd, and a no-op
client for tests and local development.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from aio_statsd import TelegrafStatsdClient

logger = logging.getLogger(__name__)

TagDict = Optional[Dict[str, Any]]


class MetricsClient(ABC):
    """
    Backend-agnostic metrics client.

    Tags are StatsD-style dictionaries. Timer values are in seconds.
    """

    async def connect(self) -> None:
        pass

    @abstractmethod
    def increment(
        self, name: str, value: Union[int, float] = 1, tag_dict: TagDict = None
    ) -> None:
        pass

    @abstractmethod
    def gauge(self, name: str, value: Union[int, float], tag_dict: TagDict = None) -> None:
        pass

    @abstractmethod
    def timer(self, name: str, value: Union[int, float], tag_dict: TagDict = None) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class TelegrafMetricsClient(MetricsClient):
    """Sends metrics to Telegraf's StatsD listener."""

    def __init__(self, client: TelegrafStatsdClient) -> None:
        self.client = client

    async def connect(self) -> None:
        await self.client.connect()

    def increment(
        self, name: str, value: Union[int, float] = 1, tag_dict: TagDict = None
    ) -> None:
        self.client.increment(name, value, tag_dict=tag_dict or {})

    def gauge(self, name: str, value: Union[int, float], tag_dict: TagDict = None) -> None:
        self.client.gauge(name, value, tag_dict=tag_dict or {})

    def timer(self, name: str, value: Union[int, float], tag_dict: TagDict = None) -> None:
        self.client.timer(name, value, tag_dict=tag_dict or {})

    async def close(self) -> None:
        try:
            await self.client.close()
        except Exception as e:
            logger.warning("Error closing Telegraf client: %s", e)


class NoOpMetricsClient(MetricsClient):
    def increment(
        self, name: str, value: Union[int, float] = 1, tag_dict: TagDict = None
    ) -> None:
        pass

    def gauge(self, name: str, value: Union[int, float], tag_dict: TagDict = None) -> None:
        pass

    def timer(self, name: str, value: Union[int, float], tag_dict: TagDict = None) -> None:
        pass

    async def close(self) -> None:
        pass


def create_metrics_client(
    backend: str,
    host: str = "localhost",
    port: int = 8125,
    debug: bool = False,
) -> MetricsClient:
    """
    Create the metrics client for a backend name.

    Args:
        backend: 'telegraf' or 'none'
        host: Telegraf/StatsD host
        port: Telegraf/StatsD port
        debug: Enable aio-statsd debug output

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = backend.lower()
    if backend == "telegraf":
        return TelegrafMetricsClient(
            TelegrafStatsdClient(host=host, port=port, debug=debug)
        )
    if backend == "none":
        logger.info("Metrics collection disabled (no-op client)")
        return NoOpMetricsClient()
    raise ValueError(
        f"Invalid metrics backend: {backend}. Supported backends: 'telegraf', 'none'"
    )
