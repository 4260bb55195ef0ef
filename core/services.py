"""
core/services.py
Static port → service-name lookup.
"""

from __future__ import annotations

from typing import Mapping

from utils.constants import SERVICE_TABLE, UNKNOWN_SERVICE


class ServiceTable:
    """Read-only lookup over a port → name mapping."""

    def __init__(self, table: Mapping[int, str] = SERVICE_TABLE):
        self._map = table

    def lookup(self, port: int) -> str:
        return self._map.get(port, UNKNOWN_SERVICE)

    def __contains__(self, port: int) -> bool:
        return port in self._map

    def __len__(self) -> int:
        return len(self._map)


_service_table = ServiceTable()


def lookup(port: int) -> str:
    return _service_table.lookup(port)
