"""Tests for localcert.logging.setup: formatters, filter, configure_logging."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from localcert.config.settings import LoggingSettings
from localcert.logging import configure_logging
from localcert.logging.setup import (
    IssuanceContextFilter,
    StructuredFormatter,
    TextFormatter,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_record(msg="hello %s", args=("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="localcert.states",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture()
def restore_localcert_logger():
    logger = logging.getLogger("localcert")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield logger
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]


# ---------------------------------------------------------------------------
# StructuredFormatter
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    def test_basic_fields(self):
        data = json.loads(StructuredFormatter().format(_make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "localcert.states"
        assert data["message"] == "hello world"
        assert "timestamp" in data
        assert "order_url" not in data

    def test_extras_included(self):
        record = _make_record(
            event="phase_transition",
            order_url="https://acme.test/order/1",
            from_phase="ordered",
            to_phase="authorized",
        )

        data = json.loads(StructuredFormatter().format(record))

        assert data["event"] == "phase_transition"
        assert data["order_url"] == "https://acme.test/order/1"
        assert data["from_phase"] == "ordered"
        assert data["to_phase"] == "authorized"

    def test_placeholder_order_url_omitted(self):
        data = json.loads(StructuredFormatter().format(_make_record(order_url="-")))
        assert "order_url" not in data

    def test_private_attrs_skipped(self):
        data = json.loads(StructuredFormatter().format(_make_record(_secret="x")))
        assert "_secret" not in data

    def test_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _make_record(msg="failed", args=())
            record.exc_info = sys.exc_info()

        data = json.loads(StructuredFormatter().format(record))

        assert "ValueError: boom" in data["exception"]

    def test_unserialisable_extra_is_stringified(self):
        data = json.loads(StructuredFormatter().format(_make_record(obj=object())))
        assert data["obj"].startswith("<object object")


# ---------------------------------------------------------------------------
# TextFormatter and filter
# ---------------------------------------------------------------------------


class TestTextFormatter:
    def test_includes_order_url(self):
        record = _make_record(order_url="https://acme.test/order/1")
        line = TextFormatter().format(record)

        assert "[https://acme.test/order/1]" in line
        assert "INFO" in line
        assert line.endswith("hello world")

    def test_filter_supplies_placeholder(self):
        record = _make_record()

        assert IssuanceContextFilter().filter(record) is True
        assert record.order_url == "-"
        assert "[-]" in TextFormatter().format(record)

    def test_filter_keeps_existing(self):
        record = _make_record(order_url="u")
        IssuanceContextFilter().filter(record)
        assert record.order_url == "u"


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    def test_json_setup(self, restore_localcert_logger):
        logger = configure_logging(LoggingSettings(level="DEBUG", format="json"))

        assert logger is restore_localcert_logger
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        handler = logger.handlers[0]
        assert isinstance(handler.formatter, StructuredFormatter)
        assert any(isinstance(f, IssuanceContextFilter) for f in handler.filters)

    def test_text_setup_replaces_handlers(self, restore_localcert_logger):
        configure_logging(LoggingSettings(level="INFO", format="json"))
        logger = configure_logging(LoggingSettings(level="warning", format="text"))

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, TextFormatter)

    def test_writes_to_stderr(self, restore_localcert_logger, capsys):
        configure_logging(LoggingSettings(level="INFO", format="json"))

        logging.getLogger("localcert.states").info("hi", extra={"event": "x"})

        line = capsys.readouterr().err.strip()
        data = json.loads(line)
        assert data["message"] == "hi"
        assert data["event"] == "x"
