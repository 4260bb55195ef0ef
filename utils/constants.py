"""
PortSweep Constants
Port bounds, scan defaults and the well-known service table.
"""

from enum import Enum
from types import MappingProxyType


# ─── Port States ──────────────────────────────────────────────────────────────
class PortState(str, Enum):
    OPEN = "open"


# ─── Port Limits ──────────────────────────────────────────────────────────────
PORT_MIN = 1
PORT_MAX = 65535

# ─── Scan Defaults (applied when unset or non-positive) ───────────────────────
DEFAULT_MAX_CONCURRENT = 100
DEFAULT_TIMEOUT_MS     = 500
DEFAULT_START_PORT     = 1
DEFAULT_END_PORT       = 1024

# ─── Progress ─────────────────────────────────────────────────────────────────
PROGRESS_EVERY = 100      # CLI redraws every N completed attempts

# ─── Well-known services ──────────────────────────────────────────────────────
UNKNOWN_SERVICE = "unknown"

SERVICE_TABLE = MappingProxyType({
    20:   "ftp-data",
    21:   "ftp",
    22:   "ssh",
    23:   "telnet",
    25:   "smtp",
    53:   "dns",
    80:   "http",
    110:  "pop3",
    143:  "imap",
    443:  "https",
    445:  "smb",
    3306: "mysql",
    3389: "rdp",
    5432: "postgresql",
    8080: "http-alt",
    8443: "https-alt",
})

# ─── Layering Contract (hard import rules - enforced by tests) ───────────────
# core      → may import: utils (never utils.validators)
# utils     → may import: core.models from utils.validators only;
#             utils/__init__.py never imports validators
# reporting → may import: core.models, utils
# web       → may import: core, reporting, utils
# NEVER: core imports web, reporting or main
