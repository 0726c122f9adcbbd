from __future__ import annotations

import io
import logging
from datetime import timedelta

import pytest
from rich.console import Console

from rcpu.models import UtilizationSample
from rcpu.sinks import LogSink, TerminalTable
from rcpu.sinks.terminal import HEADERS
from tests.conftest import T0


def _console() -> Console:
    return Console(file=io.StringIO(), width=160, color_system=None)


# ── UtilizationSample ───────────────────────────────────


def test_sample_derives_remaining_and_difference():
    s = UtilizationSample.from_usages(T0, 50.0, 80.0)
    assert s.naive_remaining_percent == pytest.approx(50.0)
    assert s.adjusted_remaining_percent == pytest.approx(20.0)
    assert s.difference_percent == pytest.approx(30.0)


# ── TerminalTable ───────────────────────────────────────


@pytest.mark.asyncio
async def test_table_renders_formatted_values():
    console = _console()
    table = TerminalTable(console=console, clear=False)
    await table.handle_sample(UtilizationSample.from_usages(T0, 50.0, 80.0))

    out = console.file.getvalue()
    for header in HEADERS:
        assert header in out
    assert "50.00%" in out
    assert "80.00%" in out
    assert "20.00%" in out
    assert "30.00%" in out


@pytest.mark.asyncio
async def test_table_keeps_bounded_history():
    table = TerminalTable(console=_console(), max_rows=3, clear=False)
    for i in range(5):
        await table.handle_sample(UtilizationSample.from_usages(T0 + timedelta(seconds=i), 10.0, 20.0))

    rows = table.rows
    assert len(rows) == 3
    assert rows[0].timestamp == T0 + timedelta(seconds=2)
    assert table.build_table().row_count == 3


# ── LogSink ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_log_sink_writes_one_line(caplog):
    with caplog.at_level(logging.INFO, logger="rcpu.sinks.log_sink"):
        await LogSink().handle_sample(UtilizationSample.from_usages(T0, 50.0, 80.0))

    assert len(caplog.records) == 1
    message = caplog.records[0].getMessage()
    assert "adjusted usage 80.00%" in message
    assert "RCPU 20.00%" in message
