"""JSON logging pipeline for command-line uploads."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from queue import Full, Queue
from typing import IO, Iterable
from uuid import uuid4

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

__all__ = [
    "BoundedQueueHandler",
    "JsonFormatter",
    "configure_structured_logging",
    "shutdown_listeners",
]

LOGGER = logging.getLogger(__name__)

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName", "trace_id"}


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line.

    Values passed through ``extra`` end up under ``context``.
    """

    def __init__(self, *, default_trace_id: str | None = None) -> None:
        super().__init__()
        self._default_trace_id = default_trace_id

    @override
    def format(self, record: logging.LogRecord) -> str:
        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES
        }
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "trace_id": getattr(record, "trace_id", None) or self._default_trace_id,
            "context": context,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            payload["exception"] = record.exc_text
        return json.dumps(payload, default=str)


class BoundedQueueHandler(logging.handlers.QueueHandler):
    """Queue handler that drops records instead of blocking when full."""

    @override
    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except Full:
            self.handleError(record)

    @override
    def handleError(self, record: logging.LogRecord) -> None:
        return


def configure_structured_logging(
    logger: logging.Logger,
    *,
    trace_id: str | None = None,
    level: int = logging.INFO,
    stream: IO[str] | None = None,
) -> logging.handlers.QueueListener:
    """Attach a queued JSON handler to ``logger``.

    Args:
        logger: Logger to configure, usually the ``weave_ops`` root logger.
        trace_id: Identifier stamped on every record; a random one is
            generated when omitted.
        level: Logging threshold.
        stream: Destination stream, ``sys.stderr`` by default.

    Returns:
        The started queue listener; stop it with :func:`shutdown_listeners`.
    """

    logger.setLevel(level)
    record_queue: Queue[logging.LogRecord] = Queue(maxsize=1024)
    logger.addHandler(BoundedQueueHandler(record_queue))

    stream_handler = logging.StreamHandler(stream or sys.stderr)
    stream_handler.setFormatter(JsonFormatter(default_trace_id=trace_id or str(uuid4())))

    listener = logging.handlers.QueueListener(record_queue, stream_handler)
    listener.start()
    return listener


def shutdown_listeners(listeners: Iterable[logging.handlers.QueueListener]) -> None:
    """Stop queue listeners, logging (not raising) shutdown failures."""

    for listener in listeners:
        try:
            listener.stop()
        except Exception as exc:  # pragma: no cover - logging cleanup
            LOGGER.warning("Failed to stop logging listener", exc_info=exc)
