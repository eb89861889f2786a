"""Tests for structured logging pipeline utilities."""

from __future__ import annotations

import io
import json
import logging
from logging.handlers import QueueListener
from queue import Queue

import pytest

from weave_ops import logging_pipeline


def test_configure_structured_logging_emits_json() -> None:
    logger = logging.getLogger("weave-ops-test")
    buffer = io.StringIO()
    listener = logging_pipeline.configure_structured_logging(
        logger, trace_id="trace-123", level=logging.DEBUG, stream=buffer
    )

    logger.debug("Transaction committed", extra={"tx_id": "abc"})
    logging_pipeline.shutdown_listeners([listener])

    payload = json.loads(buffer.getvalue().strip())
    assert payload["message"] == "Transaction committed"
    assert payload["level"] == "DEBUG"
    assert payload["trace_id"] == "trace-123"
    assert payload["context"] == {"tx_id": "abc"}


def test_configure_structured_logging_generates_trace_id() -> None:
    logger = logging.getLogger("weave-ops-auto-trace")
    buffer = io.StringIO()
    listener = logging_pipeline.configure_structured_logging(logger, stream=buffer)

    logger.info("auto-trace")
    logging_pipeline.shutdown_listeners([listener])

    payload = json.loads(buffer.getvalue())
    assert isinstance(payload["trace_id"], str) and payload["trace_id"]


def test_bounded_queue_handler_drops_when_full() -> None:
    handler = logging_pipeline.BoundedQueueHandler(Queue(maxsize=1))
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    handler.enqueue(record)
    handler.enqueue(record)
    assert handler.queue.qsize() == 1  # type: ignore[attr-defined]


def test_shutdown_listeners_logs_failures(caplog: pytest.LogCaptureFixture) -> None:
    class _FailingListener(QueueListener):
        def __init__(self) -> None:
            super().__init__(Queue(), logging.StreamHandler())

        def stop(self) -> None:
            raise RuntimeError("stop failure")

    with caplog.at_level(logging.WARNING):
        logging_pipeline.shutdown_listeners([_FailingListener()])

    assert "Failed to stop logging listener" in caplog.text
