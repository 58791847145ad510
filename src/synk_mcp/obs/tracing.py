"""Logging setup, timing helpers and tool-trace reporting."""

from __future__ import annotations

import logging
import time

from synk_mcp.types import ToolTrace

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_trace_logger = logging.getLogger("synk_mcp.tools")


def configure_logging(level: str | int = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def log_tool_trace(trace: ToolTrace) -> None:
    """Registry observer that reports every tool invocation."""

    if trace.is_error:
        _trace_logger.warning(
            "tool %s failed after %.1f ms: %s", trace.name, trace.latency_ms, trace.output_preview
        )
    else:
        _trace_logger.info("tool %s completed in %.1f ms", trace.name, trace.latency_ms)


class Timer:
    """Simple context timer used around request handling."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
