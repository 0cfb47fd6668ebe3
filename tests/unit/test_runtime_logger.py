# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import json
import logging

import pytest
from opentelemetry import trace
from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags

from stmtid.runtime import (
    STATEMENTS_LOGGER_NAME,
    StatementLogger,
    log_with_statement,
    split_attributes,
)


def test_ph5_rt_001_split_attributes_strips_injected_id() -> None:
    assert split_attributes(({"stmt_id": "abc", "user": "a"},)) == ("abc", {"user": "a"})
    assert split_attributes(({"id": "abc"},)) == ("abc", {})
    assert split_attributes(({"user": "a"}, {"stmt_id": "abc"})) == ("abc", {"user": "a"})
    assert split_attributes(({"user": "a"},)) == (None, {"user": "a"})
    assert split_attributes(()) == (None, {})


def test_ph5_rt_002_statement_logger_emits_json_line(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger=STATEMENTS_LOGGER_NAME):
        entry = StatementLogger.warn("slow query", {"ms": 120, "stmt_id": "5c2e003a488c8168"})

    assert entry["level"] == "warn"
    assert entry["message"] == "slow query"
    assert entry["ms"] == 120
    assert entry["stmt_id"] == "5c2e003a488c8168"
    assert "trace.id" not in entry
    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert json.loads(record.getMessage()) == entry


def test_ph5_rt_003_active_span_adds_trace_fields(caplog: pytest.LogCaptureFixture) -> None:
    context = SpanContext(
        trace_id=0x0AF7651916CD43DD8448EB211C80319C,
        span_id=0x00F067AA0BA902B7,
        is_remote=False,
        trace_flags=TraceFlags(TraceFlags.SAMPLED),
    )

    with caplog.at_level(logging.INFO, logger=STATEMENTS_LOGGER_NAME):
        with trace.use_span(NonRecordingSpan(context), end_on_exit=False):
            entry = log_with_statement("checkout", {"stmt_id": "f50fc3f8eaa6a8a6"})

    assert entry["trace.id"] == "0af7651916cd43dd8448eb211c80319c"
    assert entry["span.id"] == "00f067aa0ba902b7"
    assert entry["level"] == "info"
