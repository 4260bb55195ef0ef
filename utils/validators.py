"""
utils/validators.py
Scan request validation and ScanSpec construction.

The one utils module allowed to import core (core.models only); it sits on
the caller side of the core boundary and is not re-exported by utils.
"""

from __future__ import annotations

import ipaddress
import math
import re
import socket
from typing import Any, Mapping, Tuple

from core.models import ScanSpec
from utils.constants import (
    DEFAULT_MAX_CONCURRENT, DEFAULT_TIMEOUT_MS, PORT_MAX, PORT_MIN,
)

_HOSTNAME_RE = re.compile(r"^([a-zA-Z0-9]+(-[a-zA-Z0-9]+)*\.)+[a-zA-Z]{2,}$")


class ValidationError(ValueError):
    """Raised when a scan request cannot be turned into a ScanSpec."""


def validate_host(host: Any) -> Tuple[bool, str]:
    """
    Validate that host is an IP address or a resolvable hostname.

    Args:
        host: IP literal (v4/v6), "localhost" or a dotted hostname

    Returns:
        (is_valid, error_message) tuple
    """
    if not host or not isinstance(host, str):
        return (False, "host required")

    host = host.strip()

    try:
        ipaddress.ip_address(host)
        return (True, "")
    except ValueError:
        pass

    if host.lower() != "localhost" and not _HOSTNAME_RE.match(host):
        return (False, "invalid hostname or IP address")

    try:
        socket.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as e:
        return (False, f"failed to resolve hostname: {e}")

    return (True, "")


def validate_port(port: Any) -> Tuple[bool, str]:
    """
    Validate that port number is in valid range [1-65535].

    Returns:
        (is_valid, error_message) tuple
    """
    if not isinstance(port, int) or isinstance(port, bool):
        return (False, "Port must be an integer")

    if port < PORT_MIN or port > PORT_MAX:
        return (False, f"Port {port} out of valid range [{PORT_MIN}-{PORT_MAX}]")

    return (True, "")


def validate_scan_request(req: Mapping[str, Any]) -> Tuple[bool, str]:
    """Check host and port bounds of a request dict. Never raises."""
    ok, msg = validate_host(req.get("host"))
    if not ok:
        return (False, msg)

    start, end = req.get("start_port"), req.get("end_port")
    if not validate_port(start)[0]:
        return (False, f"start port must be between {PORT_MIN} and {PORT_MAX}")
    if not validate_port(end)[0]:
        return (False, f"end port must be between {PORT_MIN} and {PORT_MAX}")
    if start > end:
        return (False, "start port cannot be greater than end port")

    return (True, "")


def _positive_int(value: Any, default: int) -> int:
    """Whole part of a positive number; anything else falls back to default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    value = int(value)
    return value if value > 0 else default


def build_scan_spec(req: Mapping[str, Any]) -> ScanSpec:
    """
    Validate a request dict and build a ScanSpec.

    Keys: host, start_port, end_port, max_concurrent (optional),
    timeout_ms (optional). Unset or non-positive max_concurrent and
    timeout_ms fall back to the defaults.

    Raises ValidationError on invalid input.
    """
    ok, msg = validate_scan_request(req)
    if not ok:
        raise ValidationError(msg)

    timeout_ms = _positive_int(req.get("timeout_ms"), DEFAULT_TIMEOUT_MS)
    return ScanSpec(
        host           = req["host"].strip(),
        start_port     = req["start_port"],
        end_port       = req["end_port"],
        max_concurrent = _positive_int(req.get("max_concurrent"), DEFAULT_MAX_CONCURRENT),
        timeout_s      = timeout_ms / 1000.0,
    )


__all__ = [
    "ValidationError", "validate_host", "validate_port",
    "validate_scan_request", "build_scan_spec",
]
