#!/usr/bin/env python3
"""
PortSweep v1.0 — Async TCP Port Scanner
main.py — CLI entry point

Usage:
  python3 main.py example.com
  python3 main.py --host 192.168.1.1 --start 1 --end 1000
  python3 main.py --host 10.0.0.5 --start 20 --end 25 --json
  python3 main.py --host 10.0.0.5 --concurrent 500 --timeout 250 --quiet
  python3 main.py --web --bind 127.0.0.1 --web-port 8080
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from core.scanner_engine import scan_ports
from reporting.formatter import ProgressPrinter, format_json, format_table
from utils.config import ConfigError, load_config
from utils.constants import DEFAULT_END_PORT, DEFAULT_START_PORT
from utils.logger import get_logger, set_level
from utils.validators import ValidationError, build_scan_spec

log = get_logger("portsweep")

VERSION = "1.0.0"


# ─── Scan runner ──────────────────────────────────────────────────────────────

def run_cli_scan(args: argparse.Namespace, cfg: dict) -> int:
    """Validate, scan, print. Returns process exit status."""
    scan_cfg = cfg.get("scan", {})
    req = {
        "host":           args.host,
        "start_port":     args.start,
        "end_port":       args.end,
        "max_concurrent": args.concurrent if args.concurrent is not None
                          else scan_cfg.get("max_concurrent"),
        "timeout_ms":     args.timeout if args.timeout is not None
                          else scan_cfg.get("timeout_ms"),
    }

    try:
        spec = build_scan_spec(req)
    except ValidationError as exc:
        print(f"Validation error: {exc}")
        return 1

    show_progress = not args.json and not args.quiet
    if show_progress:
        print(f"Starting scan of {spec.total_ports} ports on {spec.host}...")

    summary = scan_ports(spec, ProgressPrinter(sys.stdout) if show_progress else None)

    if args.json:
        print(format_json(summary))
    else:
        if show_progress:
            print("Scan complete!")
        print()
        print(format_table(summary))
    return 0


# ─── CLI ─────────────────────────────────────────────────────────────────────

def build_cli() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="portsweep",
        description="PortSweep v1.0 — Async TCP Port Scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s example.com
  %(prog)s --host example.com --start 1 --end 1000
  %(prog)s --host 192.168.1.1 --start 20 --end 25 --json
  %(prog)s --web --web-port 8080

HOST is an IPv4/IPv6 literal, a hostname with at least one dot, or
localhost. Hostnames must resolve before the scan starts.
""",
    )
    g = ap.add_argument_group
    s = g("Scan")
    s.add_argument("target",       nargs="?", metavar="HOST", help="Target host (same as --host)")
    s.add_argument("--host",       metavar="HOST",
                   help="Target host to scan: an IP address, a dotted hostname, "
                        "or localhost")
    s.add_argument("--start",      type=int, default=DEFAULT_START_PORT, metavar="PORT",
                   help=f"Starting port (default: {DEFAULT_START_PORT})")
    s.add_argument("--end",        type=int, default=DEFAULT_END_PORT, metavar="PORT",
                   help=f"Ending port (default: {DEFAULT_END_PORT})")
    s.add_argument("--concurrent", type=int, metavar="N",
                   help="Maximum concurrent connections (default: 100)")
    s.add_argument("--timeout",    type=int, metavar="MS",
                   help="Connection timeout in milliseconds (default: 500)")

    o = g("Output")
    o.add_argument("--json",       action="store_true", help="Output in JSON format")
    o.add_argument("--quiet",      action="store_true", help="Suppress progress output")

    w = g("Web")
    w.add_argument("--web",        action="store_true", help="Run the HTTP API")
    w.add_argument("--bind",       metavar="ADDR", help="Listen address (default: 127.0.0.1)")
    w.add_argument("--web-port",   type=int, metavar="PORT", help="Listen port (default: 8080)")

    ap.add_argument("--config",    default="config.yaml", metavar="FILE")
    ap.add_argument("--version",   action="version", version=f"PortSweep {VERSION}")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap   = build_cli()
    args = ap.parse_args(argv)

    try:
        cfg = load_config(args.config)
        set_level(cfg.get("log_level", "INFO"))
    except (ConfigError, ValueError) as exc:
        print(f"Config error: {exc}")
        return 1

    if args.web:
        web_cfg = dict(cfg.get("web", {}))
        if args.bind:
            web_cfg["host"] = args.bind
        if args.web_port:
            web_cfg["port"] = args.web_port
        from web.app import run_server
        try:
            run_server(web_cfg)
        except KeyboardInterrupt:
            log.info("Server has been shut down")
        return 0

    if not args.host and args.target:
        args.host = args.target

    if not args.host:
        ap.print_help()
        return 1

    try:
        return run_cli_scan(args, cfg)
    except KeyboardInterrupt:
        print("\n  [!] Interrupted by user")
        return 0
    except Exception as exc:
        log.exception(f"Fatal error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
