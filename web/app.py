"""
web/app.py
Flask HTTP API exposing the scanner.

Properties:
  - debug=False enforced programmatically (cannot be overridden by env)
  - Request fields validated before the engine is called; a rejected
    request still gets 200 with a summary-shaped body carrying "error"
  - Stacktraces never exposed to client
  - /shutdown disabled unless explicitly allowed in config

Layering: web -> core, utils (never the other way round)
"""

from __future__ import annotations

import os
import signal
import threading
from typing import Callable, Optional

from flask import Flask, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from core.models import ScanSpec, ScanSummary
from core.scanner_engine import scan_ports
from utils.constants import DEFAULT_MAX_CONCURRENT, DEFAULT_TIMEOUT_MS
from utils.logger import get_logger
from utils.validators import ValidationError, build_scan_spec

VERSION = "1.0.0"

log = get_logger("portsweep.web")

Scanner = Callable[[ScanSpec], ScanSummary]


def _signal_shutdown(delay_s: float = 0.1) -> None:
    """Interrupt our own process shortly after the response is sent."""
    timer = threading.Timer(delay_s, os.kill, args=(os.getpid(), signal.SIGINT))
    timer.daemon = True
    timer.start()


def _int_or_zero(value) -> int:
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def _error_summary(req: dict, message: str) -> dict:
    """Summary-shaped body for a request rejected before scanning."""
    host = req.get("host")
    return ScanSummary(
        target       = host if isinstance(host, str) else "",
        start_port   = _int_or_zero(req.get("start_port")),
        end_port     = _int_or_zero(req.get("end_port")),
        open_ports   = (),
        closed_count = 0,
        total_count  = 0,
        elapsed_s    = 0.0,
        error        = message,
    ).to_dict()


# -- Factory ------------------------------------------------------------------

def create_app(
    cfg: Optional[dict] = None,
    scanner: Scanner = scan_ports,
    shutdown: Optional[Callable[[], None]] = None,
) -> Flask:
    """
    Application factory.

    cfg keys (the "web" section of config.yaml):
      allow_shutdown bool -- enable POST /shutdown (default False)
      host           str
      port           int

    scanner runs one validated ScanSpec to completion; shutdown is called
    by POST /shutdown.
    """
    cfg = cfg or {}
    app = Flask(__name__, template_folder="templates")

    app.config["DEBUG"]                = False   # HARD -- no env override
    app.config["PROPAGATE_EXCEPTIONS"] = False
    app.config["TRAP_HTTP_EXCEPTIONS"] = False
    app.json.sort_keys = False

    allow_shutdown = bool(cfg.get("allow_shutdown", False))
    do_shutdown    = shutdown or _signal_shutdown

    # Error handlers (no stacktrace leakage)
    @app.errorhandler(404)
    def _e404(e):
        return jsonify({"error": "not found"}), 404

    @app.errorhandler(405)
    def _e405(e):
        return jsonify({"error": "method not allowed"}), 405

    @app.errorhandler(HTTPException)
    def _http(e):
        return jsonify({"error": (e.name or "error").lower()}), e.code

    @app.errorhandler(Exception)
    def _unhandled(e):
        log.exception("Unhandled exception")
        return jsonify({"error": "internal server error"}), 500

    # Routes
    @app.route("/")
    def index():
        return render_template(
            "index.html",
            version=VERSION,
            allow_shutdown=allow_shutdown,
            max_concurrent=DEFAULT_MAX_CONCURRENT,
            timeout_ms=DEFAULT_TIMEOUT_MS,
        )

    @app.route("/api")
    def api_index():
        return jsonify({
            "service": "portsweep",
            "version": VERSION,
            "endpoints": {
                "GET /":          "browser UI",
                "POST /scan":     "scan a port range on one host; rejected requests "
                                  "return 200 with an error field",
                "GET /health":    "liveness check",
                "POST /shutdown": "stop the server (if enabled)",
            },
        })

    @app.route("/scan", methods=["POST"])
    def api_scan():
        req = request.get_json(silent=True)
        if not isinstance(req, dict):
            return jsonify({"error": "invalid request body"}), 400

        try:
            spec = build_scan_spec(req)
        except ValidationError as exc:
            log.info(f"Rejected scan request: {exc}")
            return jsonify(_error_summary(req, str(exc)))

        summary = scanner(spec)
        return jsonify(summary.to_dict())

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "version": VERSION})

    @app.route("/shutdown", methods=["POST"])
    def api_shutdown():
        if not allow_shutdown:
            return jsonify({"error": "forbidden"}), 403
        log.info("Shutdown requested over HTTP")
        do_shutdown()
        return jsonify({"status": "shutting_down"})

    return app


# -- Server runner ------------------------------------------------------------

def run_server(cfg: dict) -> None:
    app = create_app(cfg)
    host = cfg.get("host", "127.0.0.1")
    port = cfg.get("port", 8080)
    log.info(f"Server running at http://{host}:{port}")
    log.info(f"Shutdown endpoint: {'ON' if cfg.get('allow_shutdown') else 'OFF'}")
    app.run(host=host, port=port, debug=False, use_reloader=False)
