"""
reporting/formatter.py
Render a ScanSummary as JSON or as a plain-text table, plus the CLI
progress line.
Layering: only imports core.models (data types). Does NOT import web.
"""

from __future__ import annotations

import json
import sys
from typing import IO, Optional

from core.models import ScanSummary
from utils.constants import PROGRESS_EVERY


# ─── JSON ────────────────────────────────────────────────────────────────────

def format_json(summary: ScanSummary, indent: Optional[int] = 2) -> str:
    return json.dumps(summary.to_dict(), indent=indent)


# ─── Table ───────────────────────────────────────────────────────────────────

def format_table(summary: ScanSummary) -> str:
    lines = [
        f"Scan Results for {summary.target}:",
        f"Scanned ports {summary.start_port}-{summary.end_port} "
        f"in {summary.elapsed_s:.2f} seconds",
        f"Found {len(summary.open_ports)} open ports out of "
        f"{summary.total_count} total ports",
        "",
    ]
    if summary.open_ports:
        lines.append("Open ports:")
        lines.append(f"{'PORT':<8} SERVICE")
        for p in summary.open_ports:
            lines.append(f"{p.port:<8} {p.service}")
    else:
        lines.append("No open ports found.")
    return "\n".join(lines)


# ─── Progress ────────────────────────────────────────────────────────────────

def format_progress(completed: int, total: int) -> str:
    pct = completed * 100 // total if total else 100
    return f"\rScanning... {completed}/{total} ports completed ({pct}%)"


class ProgressPrinter:
    """
    Progress sink for ScanEngine: redraws one terminal line every
    `every` completions and on the final one.
    """

    def __init__(self, stream: Optional[IO[str]] = None, every: int = PROGRESS_EVERY):
        self._stream = stream or sys.stderr
        self._every = max(1, every)

    def __call__(self, completed: int, total: int) -> None:
        if completed % self._every and completed != total:
            return
        self._stream.write(format_progress(completed, total))
        if completed == total:
            self._stream.write("\n")
        self._stream.flush()
