"""Operation context, step logging hook and cooperative deadlines."""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class ProcessingCancelled(RuntimeError):
    """Raised when a cancellation signal fires or the time budget is spent."""


@dataclass(slots=True)
class ProcessingContext:
    """Per-invocation state reported to the step sink."""

    operation: str
    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    started: float = field(default_factory=time.perf_counter)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.started


class StepSink(Protocol):
    """Diagnostic side channel the pipeline reports progress to."""

    def log_step(self, context: ProcessingContext, message: str, **fields: Any) -> None:
        """Record a single step of an operation."""

    def log_summary(
        self, context: ProcessingContext, success: bool, error: Optional[str] = None
    ) -> None:
        """Record the outcome of an operation."""


class LoggingStepSink:
    """Forward pipeline steps to the standard logging module."""

    def __init__(self, name: str = "datafold.steps") -> None:
        self._logger = logging.getLogger(name)

    def log_step(self, context: ProcessingContext, message: str, **fields: Any) -> None:
        self._logger.debug(
            "[%s %s] %s (%.3fs) %s",
            context.operation,
            context.correlation_id,
            message,
            context.elapsed,
            fields or "",
        )

    def log_summary(
        self, context: ProcessingContext, success: bool, error: Optional[str] = None
    ) -> None:
        if success:
            self._logger.info(
                "%s completed in %.3fs (correlation_id=%s)",
                context.operation,
                context.elapsed,
                context.correlation_id,
            )
        else:
            self._logger.warning(
                "%s failed after %.3fs (correlation_id=%s): %s",
                context.operation,
                context.elapsed,
                context.correlation_id,
                error,
            )


class NullStepSink:
    """Discard every step."""

    def log_step(self, context: ProcessingContext, message: str, **fields: Any) -> None:
        del context, message, fields

    def log_summary(
        self, context: ProcessingContext, success: bool, error: Optional[str] = None
    ) -> None:
        del context, success, error


class SafeStepSink:
    """Wrap a sink so that its failures never reach the pipeline."""

    def __init__(self, sink: StepSink) -> None:
        self._sink = sink

    def log_step(self, context: ProcessingContext, message: str, **fields: Any) -> None:
        try:
            self._sink.log_step(context, message, **fields)
        except Exception:
            logger.warning("Step sink failed while logging %r", message, exc_info=True)

    def log_summary(
        self, context: ProcessingContext, success: bool, error: Optional[str] = None
    ) -> None:
        try:
            self._sink.log_summary(context, success, error)
        except Exception:
            logger.warning("Step sink failed while logging summary", exc_info=True)


class Deadline:
    """Cooperative cancellation checked by parsers while materializing rows."""

    def __init__(self, seconds: float | None, cancel_event: asyncio.Event | None = None) -> None:
        self._seconds = seconds
        self._expires = None if seconds is None else time.monotonic() + seconds
        self._cancel_event = cancel_event

    @classmethod
    def unlimited(cls) -> "Deadline":
        return cls(None)

    def remaining(self) -> float | None:
        if self._expires is None:
            return None
        return max(0.0, self._expires - time.monotonic())

    def expired(self) -> bool:
        return self._expires is not None and time.monotonic() >= self._expires

    def check(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise ProcessingCancelled("Processing was cancelled")
        if self.expired():
            raise ProcessingCancelled(
                f"Processing exceeded the maximum processing time of {self._seconds:g} seconds"
            )
