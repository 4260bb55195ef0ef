"""PortSweep Web — Public API

Flask HTTP API wrapping the scan engine.

Usage:
    from web.app import create_app, run_server
"""
from web.app import create_app, run_server

__all__ = [
    "create_app",
    "run_server",
]
