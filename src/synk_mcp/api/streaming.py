"""Per-request response tracking for streamed and plain responses."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum

from starlette.datastructures import MutableHeaders
from starlette.types import Message, Receive, Send

logger = logging.getLogger(__name__)

EVENT_STREAM = "text/event-stream"

UNBUFFERED_HEADERS = {"X-Accel-Buffering": "no"}


class StreamState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    CLOSED = "closed"


class ResponseStream:
    """Wraps the ASGI `receive`/`send` pair of one request.

    The state moves IDLE -> STREAMING when the response starts and to CLOSED
    after the final body chunk. A client disconnect moves it straight to
    CLOSED; whatever the transport writes afterwards is dropped, and the
    handler producing it is left to finish or be cancelled by the server.
    """

    def __init__(self, receive: Receive, send: Send, headers: Mapping[str, str] | None = None) -> None:
        self._receive = receive
        self._send = send
        self._headers = dict(headers or {})
        self.state = StreamState.IDLE
        self.status_code = 0
        self.chunks_sent = 0

    @property
    def started(self) -> bool:
        return self.state is not StreamState.IDLE

    async def receive(self) -> Message:
        message = await self._receive()
        if message["type"] == "http.disconnect" and self.state is not StreamState.CLOSED:
            logger.debug("client disconnected after %d chunks", self.chunks_sent)
            self.state = StreamState.CLOSED
        return message

    async def send(self, message: Message) -> None:
        if self.state is StreamState.CLOSED:
            return
        if message["type"] == "http.response.start":
            self._start(message)
        elif message["type"] == "http.response.body":
            self.chunks_sent += 1
            if not message.get("more_body", False):
                self.state = StreamState.CLOSED
        await self._send(message)

    def _start(self, message: Message) -> None:
        self.state = StreamState.STREAMING
        self.status_code = message["status"]
        message.setdefault("headers", [])
        headers = MutableHeaders(scope=message)
        headers.update(self._headers)
        if headers.get("content-type", "").startswith(EVENT_STREAM):
            headers.update(UNBUFFERED_HEADERS)
