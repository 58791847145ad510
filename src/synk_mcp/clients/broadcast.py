"""Broadcast channel interface and concrete adapters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import httpx

from synk_mcp.config import BroadcastConfig, StoreConfig
from synk_mcp.errors import CollaboratorFailure

logger = logging.getLogger(__name__)


class DeliveryStatus(str, Enum):
    OK = "ok"
    ERROR = "error"
    TIMED_OUT = "timed out"

    def __str__(self) -> str:
        return self.value


class BroadcastChannelClient(Protocol):
    """Fan-out channel contract used by `trigger_broadcast`."""

    async def publish(self, topic: str, event: str, payload: dict[str, Any]) -> DeliveryStatus:
        """Publish one event to every subscriber of `topic`."""


@dataclass(slots=True)
class PublishedEvent:
    topic: str
    event: str
    payload: dict[str, Any]


class InMemoryBroadcastChannel:
    """Records published events; injected in tests in place of the realtime channel."""

    def __init__(self, status: DeliveryStatus = DeliveryStatus.OK) -> None:
        self.status = status
        self.published: list[PublishedEvent] = []

    async def publish(self, topic: str, event: str, payload: dict[str, Any]) -> DeliveryStatus:
        self.published.append(PublishedEvent(topic=topic, event=event, payload=dict(payload)))
        return self.status


class RealtimeBroadcastChannel:
    """Publishes through the realtime service's HTTP broadcast endpoint.

    Delivery is at-most-once: a rejected or timed-out publish is reported as a
    status and never retried.
    """

    def __init__(
        self,
        store_config: StoreConfig,
        config: BroadcastConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not store_config.configured:
            raise ValueError("realtime url and service key are required")
        self._store_config = store_config
        self._config = config or BroadcastConfig()
        self._client = client or httpx.AsyncClient(timeout=self._config.timeout_seconds)

    @property
    def endpoint(self) -> str:
        return f"{str(self._store_config.url).rstrip('/')}/realtime/v1/api/broadcast"

    async def publish(self, topic: str, event: str, payload: dict[str, Any]) -> DeliveryStatus:
        key = str(self._store_config.service_key)
        body = {"messages": [{"topic": topic, "event": event, "payload": payload}]}
        try:
            response = await self._client.post(
                self.endpoint,
                json=body,
                headers={"apikey": key, "Authorization": f"Bearer {key}"},
            )
        except httpx.TimeoutException:
            logger.warning("broadcast to %s timed out", topic)
            return DeliveryStatus.TIMED_OUT
        except httpx.HTTPError as exc:
            raise CollaboratorFailure(str(exc) or exc.__class__.__name__) from exc

        if response.is_success:
            return DeliveryStatus.OK
        logger.warning("broadcast to %s rejected with status %s", topic, response.status_code)
        return DeliveryStatus.ERROR

    async def aclose(self) -> None:
        await self._client.aclose()
