"""
core/scanner_engine.py
Async TCP-connect scan engine with:
  • asyncio.open_connection — non-blocking, no raw sockets needed
  • Semaphore admission gate: at most max_concurrent attempts in flight
  • One attempt per port, per-attempt timeout, no retries
  • Fan-out / fan-in over the whole range, results ordered by port
  • Progress callback support (completed, total)
  • Optional cancel event: stop dispatching, drain in-flight attempts
  • No imports of web/reporting (clean layering)
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, List, Optional, Tuple

from core.aggregator import aggregate, open_records
from core.models import PortOutcome, PortRecord, ScanSpec, ScanSummary
from utils.logger import get_logger

log = get_logger("portsweep.engine")

ProgressCallback = Callable[[int, int], None]


class ScanCancelled(Exception):
    """Raised when the cancel event stopped a scan before every port ran."""

    def __init__(self, completed: int, total: int):
        super().__init__(f"Scan cancelled after {completed}/{total} ports")
        self.completed = completed
        self.total = total


# ─── Core Engine ─────────────────────────────────────────────────────────────

class ScanEngine:
    """
    Bounded-concurrency TCP-connect scanner for one host and a port range.

    Layering contract:
      Imports only: core/models.py, core/aggregator.py, utils/
      Does NOT import: web, reporting, main
    """

    # ── Public scan API ───────────────────────────────────────────────────────

    async def collect(
        self,
        spec: ScanSpec,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> Tuple[List[PortOutcome], float]:
        """
        Attempt one connection to every port in spec.ports. Returns (outcomes, elapsed_s).

        Outcomes are in completion order. Raises ScanCancelled if cancel
        was set before the last port was dispatched.
        """
        total = spec.total_ports
        sem = asyncio.Semaphore(spec.max_concurrent)
        outcomes: List[PortOutcome] = []
        tasks: List[asyncio.Task] = []
        completed = 0

        async def _attempt(port: int) -> None:
            nonlocal completed
            try:
                reachable = await self._try_connect(spec.host, port, spec.timeout_s)
            finally:
                sem.release()
            outcomes.append(PortOutcome(port=port, reachable=reachable))
            completed += 1
            self._report(progress, completed, total)

        log.info(
            f"Scanning {spec.host} ports {spec.start_port}-{spec.end_port} "
            f"({total} ports, concurrency {spec.max_concurrent}, "
            f"timeout {spec.timeout_s * 1000:.0f}ms)"
        )

        t0 = time.monotonic()
        try:
            for port in spec.ports:
                await sem.acquire()
                if cancel is not None and cancel.is_set():
                    sem.release()
                    break
                tasks.append(asyncio.create_task(_attempt(port)))
        except asyncio.CancelledError:
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        await asyncio.gather(*tasks)
        elapsed = time.monotonic() - t0

        if len(tasks) < total:
            log.warning(
                f"Scan of {spec.host} cancelled: {completed}/{total} ports attempted"
            )
            raise ScanCancelled(completed, total)

        return outcomes, elapsed

    async def scan(
        self,
        spec: ScanSpec,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> Tuple[List[PortRecord], float]:
        """Returns (open ports ascending by port, elapsed_s)."""
        outcomes, elapsed = await self.collect(spec, progress, cancel)
        return open_records(outcomes), elapsed

    async def run(
        self,
        spec: ScanSpec,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> ScanSummary:
        """Scan and aggregate into a ScanSummary."""
        outcomes, elapsed = await self.collect(spec, progress, cancel)
        summary = aggregate(spec, outcomes, elapsed)
        log.info(
            f"{spec.host} done: {len(summary.open_ports)} open / "
            f"{summary.total_count} scanned in {elapsed:.2f}s"
        )
        return summary

    # ── Port-level connect ────────────────────────────────────────────────────

    async def _try_connect(self, host: str, port: int, timeout_s: float) -> bool:
        """Attempt TCP connection to host:port. True if it was accepted."""
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=timeout_s,
            )
        except (asyncio.TimeoutError, OSError, UnicodeError):
            # refused, filtered, unreachable, unresolvable: all "not open"
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True

    # ── Helpers ───────────────────────────────────────────────────────────────

    @staticmethod
    def _report(
        progress: Optional[ProgressCallback], completed: int, total: int
    ) -> None:
        if progress is None:
            return
        try:
            progress(completed, total)
        except Exception:
            log.exception("Progress callback failed")


# ── Module-level convenience ──────────────────────────────────────────────────

def scan_ports(
    spec: ScanSpec, progress: Optional[ProgressCallback] = None
) -> ScanSummary:
    """Blocking wrapper around ScanEngine.run for sync callers."""
    return asyncio.run(ScanEngine().run(spec, progress))
