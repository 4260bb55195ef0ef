"""
tests/test_scanner.py
Unit tests for the scan engine: concurrency gate, ordering, progress,
cancellation and real loopback connects.
Run: pytest tests/test_scanner.py -v
"""

import sys
import os
import asyncio
import socket
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import patch

from core.models import ScanSpec, PortRecord
from core.scanner_engine import ScanEngine, ScanCancelled, scan_ports
from utils.constants import PortState


def make_spec(start=1, end=10, concurrent=5, timeout_s=0.5, host="127.0.0.1"):
    return ScanSpec(host=host, start_port=start, end_port=end,
                    max_concurrent=concurrent, timeout_s=timeout_s)


class FakeNetwork:
    """Stand-in for ScanEngine._try_connect with a fixed set of open ports."""

    def __init__(self, open_ports=(), delay_s=0.0):
        self.open_ports = set(open_ports)
        self.delay_s = delay_s
        self.in_flight = 0
        self.max_in_flight = 0
        self.attempted = []

    async def __call__(self, host, port, timeout_s):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.attempted.append(port)
        try:
            # stagger completions so they arrive out of port order
            await asyncio.sleep(self.delay_s or (0.001 * (port % 7)))
            return port in self.open_ports
        finally:
            self.in_flight -= 1


def engine_with(net: FakeNetwork) -> ScanEngine:
    engine = ScanEngine()
    engine._try_connect = net
    return engine


def closed_port() -> int:
    """A loopback port nobody listens on (bound, then released)."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


# ─── Fan-out / ordering ───────────────────────────────────────────────────────

class TestScanResults:

    @pytest.mark.asyncio
    async def test_only_open_ports_returned_sorted(self):
        net = FakeNetwork(open_ports={22, 80, 443, 3})
        records, elapsed = await engine_with(net).scan(make_spec(1, 500, 50))
        assert [r.port for r in records] == [3, 22, 80, 443]
        assert all(r.state == PortState.OPEN for r in records)
        assert elapsed >= 0

    @pytest.mark.asyncio
    async def test_every_port_attempted_exactly_once(self):
        net = FakeNetwork()
        outcomes, _ = await engine_with(net).collect(make_spec(100, 349, 20))
        assert sorted(net.attempted) == list(range(100, 350))
        assert sorted(o.port for o in outcomes) == list(range(100, 350))

    @pytest.mark.asyncio
    async def test_example_range_20_to_25(self):
        net = FakeNetwork(open_ports={22})
        summary = await engine_with(net).run(make_spec(20, 25, 100))
        assert list(summary.open_ports) == [PortRecord(22, "ssh", PortState.OPEN)]
        assert summary.closed_count == 5
        assert summary.total_count == 6

    @pytest.mark.asyncio
    async def test_single_port_sequential(self):
        net = FakeNetwork(open_ports={443})
        summary = await engine_with(net).run(make_spec(443, 443, 1))
        assert net.attempted == [443]
        assert [r.port for r in summary.open_ports] == [443]
        assert summary.open_ports[0].service == "https"
        assert summary.closed_count == 0

    @pytest.mark.asyncio
    async def test_nothing_reachable(self):
        summary = await engine_with(FakeNetwork()).run(make_spec(1, 64, 8))
        assert summary.open_ports == ()
        assert summary.closed_count == summary.total_count == 64

    @pytest.mark.asyncio
    async def test_concurrency_does_not_change_result(self):
        open_ports = {2, 7, 13, 21, 22, 40}
        total = 40
        seen = set()
        for concurrent in (1, 2, 3, 7, total - 1, total, total + 50):
            records, _ = await engine_with(FakeNetwork(open_ports)).scan(
                make_spec(1, total, concurrent)
            )
            seen.add(tuple(records))
        assert len(seen) == 1
        assert [r.port for r in next(iter(seen))] == sorted(open_ports)


# ─── Admission gate ───────────────────────────────────────────────────────────

class TestConcurrencyLimit:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 4, 25])
    async def test_in_flight_never_exceeds_limit(self, limit):
        net = FakeNetwork(delay_s=0.005)
        await engine_with(net).collect(make_spec(1, 100, limit))
        assert net.max_in_flight == limit

    @pytest.mark.asyncio
    async def test_limit_above_range_size(self):
        net = FakeNetwork(delay_s=0.01)
        outcomes, _ = await engine_with(net).collect(make_spec(1, 10, 1000))
        assert len(outcomes) == 10
        assert net.max_in_flight == 10

    @pytest.mark.asyncio
    async def test_elapsed_reflects_parallelism(self):
        net = FakeNetwork(delay_s=0.2)
        _, elapsed = await engine_with(net).collect(make_spec(1, 50, 50))
        assert 0.19 <= elapsed < 1.0

    @pytest.mark.asyncio
    async def test_sequential_elapsed_adds_up(self):
        net = FakeNetwork(delay_s=0.05)
        _, elapsed = await engine_with(net).collect(make_spec(1, 5, 1))
        assert elapsed >= 0.24


# ─── Progress ─────────────────────────────────────────────────────────────────

class TestProgress:

    @pytest.mark.asyncio
    async def test_progress_monotonic_and_final(self):
        calls = []
        spec = make_spec(1, 30, 6)
        await engine_with(FakeNetwork()).collect(
            spec, progress=lambda c, t: calls.append((c, t))
        )
        assert [c for c, _ in calls] == list(range(1, 31))
        assert all(t == 30 for _, t in calls)
        assert calls[-1] == (30, 30)

    @pytest.mark.asyncio
    async def test_failing_progress_does_not_abort_scan(self):
        def boom(completed, total):
            raise RuntimeError("renderer broke")

        summary = await engine_with(FakeNetwork({5})).run(
            make_spec(1, 10, 3), progress=boom
        )
        assert [r.port for r in summary.open_ports] == [5]


# ─── Cancellation ─────────────────────────────────────────────────────────────

class TestCancellation:

    @pytest.mark.asyncio
    async def test_cancel_stops_dispatch(self):
        cancel = asyncio.Event()
        net = FakeNetwork(delay_s=0.001)

        def progress(completed, total):
            if completed == 3:
                cancel.set()

        with pytest.raises(ScanCancelled) as info:
            await engine_with(net).collect(
                make_spec(1, 100, 1), progress=progress, cancel=cancel
            )
        assert 3 <= info.value.completed < 100
        assert info.value.total == 100
        assert len(net.attempted) == info.value.completed
        assert net.in_flight == 0

    @pytest.mark.asyncio
    async def test_cancel_set_after_last_dispatch_is_ignored(self):
        cancel = asyncio.Event()

        def progress(completed, total):
            if completed == total:
                cancel.set()

        outcomes, _ = await engine_with(FakeNetwork()).collect(
            make_spec(1, 5, 5), progress=progress, cancel=cancel
        )
        assert len(outcomes) == 5

    @pytest.mark.asyncio
    async def test_task_cancellation_drains_attempts(self):
        net = FakeNetwork(delay_s=0.05)
        task = asyncio.create_task(engine_with(net).collect(make_spec(1, 100, 4)))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert net.in_flight == 0


# ─── Real loopback connects ───────────────────────────────────────────────────

class TestTryConnect:

    @pytest.mark.asyncio
    async def test_listening_port_is_open(self):
        server = await asyncio.start_server(
            lambda r, w: w.close(), "127.0.0.1", 0
        )
        port = server.sockets[0].getsockname()[1]
        try:
            summary = await ScanEngine().run(make_spec(port, port, 1))
        finally:
            server.close()
            await server.wait_closed()
        assert [r.port for r in summary.open_ports] == [port]
        assert summary.closed_count == 0

    @pytest.mark.asyncio
    async def test_refused_port_is_not_open(self):
        assert await ScanEngine()._try_connect("127.0.0.1", closed_port(), 0.5) is False

    @pytest.mark.asyncio
    async def test_timeout_is_not_open(self):
        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        with patch.object(asyncio, "open_connection", hang):
            assert await ScanEngine()._try_connect("127.0.0.1", 80, 0.05) is False

    @pytest.mark.asyncio
    async def test_unresolvable_host_is_not_open(self):
        async def gaierror(*args, **kwargs):
            raise socket.gaierror(-2, "Name or service not known")

        with patch.object(asyncio, "open_connection", gaierror):
            assert await ScanEngine()._try_connect("nope.invalid", 80, 0.5) is False

    def test_scan_ports_sync_wrapper(self):
        port = closed_port()
        summary = scan_ports(make_spec(port, port, 1))
        assert summary.open_ports == ()
        assert summary.total_count == 1
        assert summary.error is None


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short", "-x"])
