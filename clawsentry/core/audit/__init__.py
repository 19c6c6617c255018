"""
Audit — Append-only event log and its read-side reports.

Submodules:
- log_store: Per-day NDJSON partitions written by one thread per directory
- reports: JSON/CSV exports, session counts, incident report

Classes:
- LogStore: Append, flush, and filtered read-back of today's entries
- LogWriter: Single consumer draining the write queue of one directory
"""

from clawsentry.core.audit.log_store import (
    LogStore,
    LogWriter,
    acquire_writer,
    release_writer,
    utc_now_iso,
    parse_timestamp,
)

from clawsentry.core.audit.reports import (
    export_json,
    export_csv,
    session_summaries,
    incident_report,
)

__all__ = [
    # Log store
    'LogStore',
    'LogWriter',
    'acquire_writer',
    'release_writer',
    'utc_now_iso',
    'parse_timestamp',

    # Reports
    'export_json',
    'export_csv',
    'session_summaries',
    'incident_report',
]
