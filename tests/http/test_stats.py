import asyncio
from types import SimpleNamespace

import pytest

from ufetch.http.stats import (
    FetchStats,
    build_trace_config,
    on_request_chunk_sent,
    on_request_end,
    on_request_exception,
    on_request_start,
)


class Sink:
    def __init__(self):
        self.sent = 0

    def record_sent(self, size):
        self.sent += size


def run(coro):
    return asyncio.run(coro)


def test_start_and_end_update_counters():
    stats = FetchStats()
    ctx = SimpleNamespace()
    resp = SimpleNamespace(status=200, content_length=10)

    run(on_request_start(None, ctx, None, stats))
    assert stats.in_flight == 1

    run(on_request_end(None, ctx, SimpleNamespace(response=resp), stats))

    assert stats.total_requests == 1
    assert stats.in_flight == 0
    assert stats.status_counts == {200: 1}
    assert stats.bytes_received == 10
    assert stats.min_latency is not None
    assert stats.min_latency == stats.max_latency


def test_exception_counts_error():
    stats = FetchStats()
    ctx = SimpleNamespace()

    run(on_request_start(None, ctx, None, stats))
    run(on_request_exception(None, ctx, SimpleNamespace(exception=OSError()), stats))

    assert stats.error_count == 1
    assert stats.in_flight == 0


def test_chunk_sent_feeds_transfer():
    stats = FetchStats()
    sink = Sink()
    ctx = SimpleNamespace(trace_request_ctx=sink)

    run(on_request_chunk_sent(None, ctx, SimpleNamespace(chunk=b"abcd"), stats))
    run(on_request_chunk_sent(None, ctx, SimpleNamespace(chunk=b"ef"), stats))

    assert sink.sent == 6
    assert stats.bytes_sent == 6


def test_chunk_sent_without_transfer():
    stats = FetchStats()
    ctx = SimpleNamespace(trace_request_ctx=None)

    run(on_request_chunk_sent(None, ctx, SimpleNamespace(chunk=b"abcd"), stats))

    assert stats.bytes_sent == 4


def test_trace_config_registers_hooks():
    trace_config = build_trace_config(FetchStats())

    assert len(trace_config.on_request_start) == 1
    assert len(trace_config.on_request_chunk_sent) == 1
    assert len(trace_config.on_request_end) == 1
    assert len(trace_config.on_request_exception) == 1
