"""PortSweep Reporting — Public API

Renders scan summaries as JSON or text, plus the CLI progress line.

Usage:
    from reporting import format_json, format_table, ProgressPrinter
    print(format_table(summary))
"""
from reporting.formatter import (
    format_json, format_table, format_progress, ProgressPrinter,
)

__all__ = [
    "format_json",
    "format_table",
    "format_progress",
    "ProgressPrinter",
]
