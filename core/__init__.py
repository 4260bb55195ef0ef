"""
PortSweep Core — Public API

from core import ScanEngine, scan_ports, aggregate
"""
from core.models         import ScanSpec, PortOutcome, PortRecord, ScanSummary
from core.services       import ServiceTable, lookup
from core.aggregator     import aggregate, open_records, OutcomeMismatchError
from core.scanner_engine import ScanEngine, ScanCancelled, scan_ports

__all__ = [
    "ScanSpec", "PortOutcome", "PortRecord", "ScanSummary",
    "ServiceTable", "lookup",
    "aggregate", "open_records", "OutcomeMismatchError",
    "ScanEngine", "ScanCancelled", "scan_ports",
]
