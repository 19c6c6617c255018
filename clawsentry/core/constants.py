"""
ClawSentry Constants — Numeric Values, Limits, and Defaults
=============================================================
Non-pattern constants used across the pipeline. Payload budgets,
anomaly thresholds, scan ceilings, monitor intervals, query limits.

Import from: clawsentry.core.constants
"""

# =============================================================================
# PAYLOAD BUDGET
# =============================================================================

MIN_PAYLOAD_BYTES = 256             # Floor applied to any configured budget
DEFAULT_MAX_PAYLOAD_BYTES = 4096
PREVIEW_RESERVE_BYTES = 200         # Headroom for the truncation envelope

# =============================================================================
# ANOMALY DETECTION
# =============================================================================

MIN_LARGE_PAYLOAD_BYTES = 1000
DEFAULT_LARGE_PAYLOAD_BYTES = 20000

# =============================================================================
# SKILL SCANNING
# =============================================================================

SCAN_MAX_FILE_BYTES = 200_000       # Larger files are skipped uninspected

# =============================================================================
# MONITORING INTERVALS (seconds)
# =============================================================================

MIN_MONITOR_INTERVAL = 10
DEFAULT_MONITOR_INTERVAL = 60

# =============================================================================
# LOG STORE / QUERY
# =============================================================================

DEFAULT_WRITER_QUEUE_SIZE = 10_000
WRITER_FLUSH_TIMEOUT = 5.0
DEFAULT_QUERY_LIMIT = 200           # Log listing and exports
SESSION_QUERY_LIMIT = 400           # Session views and incident reports
INCIDENT_TOP_FINDINGS = 5

# =============================================================================
# HTTP API
# =============================================================================

DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 18790
API_SECRET_BYTES = 32               # 64 hex chars
API_MAX_BODY_BYTES = 1_000_000
