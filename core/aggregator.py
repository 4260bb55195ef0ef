"""
core/aggregator.py
Turns raw per-port outcomes into a ScanSummary.

  • Drops unreachable ports
  • Tags reachable ports with a service name (core/services.py)
  • Sorts ascending by port
  • Checks that every port of the range was reported exactly once
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List

from core.models import PortOutcome, PortRecord, ScanSpec, ScanSummary
from core.services import lookup


class OutcomeMismatchError(RuntimeError):
    """Outcomes do not cover the scanned range exactly once. Engine bug."""


def open_records(outcomes: Iterable[PortOutcome]) -> List[PortRecord]:
    """Reachable outcomes as service-tagged records, ascending by port."""
    return sorted(
        (PortRecord(port=o.port, service=lookup(o.port))
         for o in outcomes if o.reachable),
        key=lambda r: r.port,
    )


def _check_coverage(spec: ScanSpec, outcomes: List[PortOutcome]) -> None:
    if len(outcomes) != spec.total_ports:
        raise OutcomeMismatchError(
            f"Expected {spec.total_ports} outcomes for ports "
            f"{spec.start_port}-{spec.end_port}, got {len(outcomes)}"
        )
    counts = Counter(o.port for o in outcomes)
    dupes = sorted(p for p, n in counts.items() if n > 1)
    if dupes:
        raise OutcomeMismatchError(f"Duplicate outcomes for ports {dupes[:10]}")
    stray = sorted(p for p in counts if not spec.start_port <= p <= spec.end_port)
    if stray:
        raise OutcomeMismatchError(
            f"Outcomes outside {spec.start_port}-{spec.end_port}: {stray[:10]}"
        )


def aggregate(
    spec: ScanSpec,
    outcomes: Iterable[PortOutcome],
    elapsed_s: float,
) -> ScanSummary:
    """
    Build the summary for one scan.

    Raises OutcomeMismatchError if outcomes are missing, duplicated or
    outside the range.
    """
    outcomes = list(outcomes)
    _check_coverage(spec, outcomes)

    records = open_records(outcomes)
    return ScanSummary(
        target       = spec.host,
        start_port   = spec.start_port,
        end_port     = spec.end_port,
        open_ports   = tuple(records),
        closed_count = spec.total_ports - len(records),
        total_count  = spec.total_ports,
        elapsed_s    = max(0.0, elapsed_s),
    )
