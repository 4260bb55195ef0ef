"""
core/models.py
Immutable value types passed between the engine, the aggregator and callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from utils.constants import PortState


@dataclass(frozen=True)
class ScanSpec:
    """Validated scan parameters. Built by utils.validators.build_scan_spec."""

    host:           str
    start_port:     int
    end_port:       int
    max_concurrent: int
    timeout_s:      float

    @property
    def ports(self) -> range:
        return range(self.start_port, self.end_port + 1)

    @property
    def total_ports(self) -> int:
        return self.end_port - self.start_port + 1


@dataclass(frozen=True)
class PortOutcome:
    port:      int
    reachable: bool


@dataclass(frozen=True)
class PortRecord:
    port:    int
    service: str
    state:   PortState = PortState.OPEN

    def to_dict(self) -> Dict[str, Any]:
        return {"port": self.port, "service": self.service, "state": self.state.value}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ScanSummary:
    target:       str
    start_port:   int
    end_port:     int
    open_ports:   Tuple[PortRecord, ...]
    closed_count: int
    total_count:  int
    elapsed_s:    float
    timestamp:    datetime = field(default_factory=_utcnow)
    error:        Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape used by the JSON formatter and the HTTP API."""
        out: Dict[str, Any] = {
            "target":           self.target,
            "start_port":       self.start_port,
            "end_port":         self.end_port,
            "open_ports":       [p.to_dict() for p in self.open_ports],
            "closed_ports":     self.closed_count,
            "total_ports":      self.total_count,
            "duration_seconds": self.elapsed_s,
            "timestamp":        self.timestamp.isoformat(),
        }
        if self.error:
            out["error"] = self.error
        return out
