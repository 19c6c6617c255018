#!/usr/bin/env python3
"""
ClawSentry Core Audit — Log Store
===================================
Append-only audit trail, one newline-delimited JSON file per UTC day:

    <log_dir>/2026-10-18.jsonl

Writes go through a LogWriter: one daemon thread per log directory
draining a bounded FIFO queue, so lines from concurrent callers are never
interleaved. append() enqueues and returns at once; a full queue or a
failed write drops the entry with a warning and never raises.

Reads are point-in-time snapshots of today's partition and may miss
appends still sitting in the queue; call flush() first for
read-your-writes.

Import from: clawsentry.core.audit.log_store
"""

from __future__ import annotations

import json
import logging
import queue
import re
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from clawsentry.core.analysis.utils import to_json_text
from clawsentry.core.constants import (
    DEFAULT_WRITER_QUEUE_SIZE, WRITER_FLUSH_TIMEOUT,
)
from clawsentry.core.types import LogEntry
from clawsentry.core.version import LOG_PARTITION_SUFFIX

__all__ = [
    'LogStore', 'LogWriter', 'acquire_writer', 'release_writer',
    'utc_now_iso', 'parse_timestamp', 'today_partition',
]

logger = logging.getLogger("clawsentry.core.audit.log_store")

_PARTITION_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


# =============================================================================
# TIME HELPERS
# =============================================================================

def utc_now_iso() -> str:
    """Current time as ISO-8601 UTC with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc).isoformat(timespec='milliseconds')
    return now.replace('+00:00', 'Z')


def today_partition() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%d')


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an entry timestamp. Naive values are taken as UTC."""
    if not isinstance(value, str) or not value:
        return None
    text = value[:-1] + '+00:00' if value.endswith('Z') else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _since_datetime(since: Union[datetime, int, float, None]) -> Optional[datetime]:
    if since is None:
        return None
    if isinstance(since, datetime):
        return since if since.tzinfo else since.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(float(since), tz=timezone.utc)


# =============================================================================
# WRITER
# =============================================================================

class LogWriter:
    """Single consumer owning write access to one log directory."""

    def __init__(self, log_dir: Path, queue_size: int = DEFAULT_WRITER_QUEUE_SIZE):
        self.log_dir = Path(log_dir)
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._pending = 0
        self._idle = threading.Condition()
        self._stopped = False
        self.written = 0
        self.dropped = 0
        self._thread = threading.Thread(
            target=self._run,
            name=f"clawsentry-writer:{self.log_dir.name}",
            daemon=True,
        )
        self._thread.start()

    @property
    def alive(self) -> bool:
        return self._thread.is_alive() and not self._stopped

    def submit(self, filename: str, line: str) -> bool:
        """Queue one line for ``<log_dir>/<filename>``. Never blocks."""
        with self._idle:
            self._pending += 1
        try:
            self._queue.put_nowait((filename, line))
            return True
        except queue.Full:
            logger.warning("ClawSentry write queue full, dropping entry for %s", filename)
            self._done(dropped=True)
            return False

    def flush(self, timeout: Optional[float] = WRITER_FLUSH_TIMEOUT) -> bool:
        """Wait until every submitted line has been written or dropped."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._idle:
            while self._pending:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._idle.wait(remaining)
        return True

    def stop(self, timeout: Optional[float] = WRITER_FLUSH_TIMEOUT) -> None:
        self.flush(timeout)
        self._stopped = True
        self._queue.put(None)
        self._thread.join(timeout)

    def _done(self, dropped: bool = False) -> None:
        with self._idle:
            self._pending -= 1
            if dropped:
                self.dropped += 1
            else:
                self.written += 1
            if not self._pending:
                self._idle.notify_all()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                break
            filename, line = item
            try:
                self._write(filename, line)
            except Exception as e:
                logger.warning("ClawSentry write failed for %s: %s", filename, e)
                self._done(dropped=True)
            else:
                self._done()

    def _write(self, filename: str, line: str) -> None:
        self.log_dir.mkdir(parents=True, exist_ok=True)
        # Lone surrogates become \uXXXX escapes, which JSON reads back as-is
        with open(self.log_dir / filename, 'a', encoding='utf-8',
                  errors='backslashreplace') as f:
            f.write(line)


_writers: Dict[Path, LogWriter] = {}
_writer_refs: Dict[Path, int] = {}
_writers_lock = threading.Lock()


def acquire_writer(log_dir: Path, queue_size: int = DEFAULT_WRITER_QUEUE_SIZE) -> LogWriter:
    """Return the shared writer for ``log_dir`` and take a reference to it."""
    key = Path(log_dir).resolve()
    with _writers_lock:
        writer = _writers.get(key)
        if writer is None or not writer.alive:
            writer = LogWriter(key, queue_size)
            _writers[key] = writer
            _writer_refs[key] = 0
        _writer_refs[key] += 1
        return writer


def release_writer(writer: LogWriter) -> bool:
    """Drop one reference. The writer is stopped when the last one goes.

    Returns True if this call stopped the writer.
    """
    with _writers_lock:
        key = writer.log_dir
        if _writers.get(key) is writer:
            _writer_refs[key] -= 1
            if _writer_refs[key] > 0:
                return False
            del _writers[key]
            del _writer_refs[key]
    writer.stop()
    return True


# =============================================================================
# STORE
# =============================================================================

class LogStore:
    """Per-day NDJSON partitions with a filtered read-back query.

    Usage:
        store = LogStore(config.log_dir)
        store.append(entry)
        store.flush()
        entries = store.read_latest(200, severity="high")
    """

    def __init__(self, log_dir: Path, queue_size: int = DEFAULT_WRITER_QUEUE_SIZE):
        self.log_dir = Path(log_dir)
        self._queue_size = queue_size
        self._writer: Optional[LogWriter] = None
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create log directory %s: %s", self.log_dir, e)

    @property
    def writer(self) -> LogWriter:
        if self._writer is None or not self._writer.alive:
            self._writer = acquire_writer(self.log_dir, self._queue_size)
        return self._writer

    def partition_path(self, date: Optional[str] = None) -> Path:
        return self.log_dir / f"{date or today_partition()}{LOG_PARTITION_SUFFIX}"

    # ---- Write path ----

    def append(self, entry: Union[LogEntry, Dict[str, Any]]) -> bool:
        """Queue an entry for its day's partition. Returns False if dropped."""
        data = entry.to_dict() if isinstance(entry, LogEntry) else dict(entry)
        try:
            line = to_json_text(data) + '\n'
        except (TypeError, ValueError) as e:
            logger.warning("ClawSentry cannot serialize entry: %s", e)
            return False

        date = str(data.get('ts', ''))[:10]
        if not _PARTITION_RE.match(date):
            date = today_partition()
        return self.writer.submit(f"{date}{LOG_PARTITION_SUFFIX}", line)

    def flush(self, timeout: Optional[float] = WRITER_FLUSH_TIMEOUT) -> bool:
        return self.writer.flush(timeout)

    def close(self) -> None:
        """Flush and let go of the writer. Other stores on the directory keep it."""
        writer, self._writer = self._writer, None
        if writer is None:
            return
        writer.flush()
        release_writer(writer)

    # ---- Read path ----

    def _read_tail(self, path: Path, limit: int) -> List[str]:
        try:
            raw = path.read_text(encoding='utf-8', errors='replace').strip()
        except OSError as e:
            logger.warning("ClawSentry read failed for %s: %s", path, e)
            return []
        if not raw:
            return []
        lines = [line for line in raw.split('\n') if line.strip()]
        return lines[-limit:]

    @staticmethod
    def _parse_line(line: str) -> Dict[str, Any]:
        try:
            parsed = json.loads(line)
        except json.JSONDecodeError:
            parsed = None
        if not isinstance(parsed, dict):
            return {'ts': utc_now_iso(), 'event': 'parse_error', 'payload': {'line': line}}
        return parsed

    def read_latest(self, limit: int, severity: Optional[str] = None,
                    tool: Optional[str] = None, session_id: Optional[str] = None,
                    since: Union[datetime, int, float, None] = None) -> List[Dict[str, Any]]:
        """Latest entries of today's partition, oldest first.

        At most ``limit`` lines are taken from the end of the file, then
        filtered. ``since`` is a datetime or epoch seconds; entries
        strictly older are excluded, entries without a parseable
        timestamp are kept.
        """
        if limit <= 0:
            return []
        path = self.partition_path()
        if not path.exists():
            return []

        entries = [self._parse_line(line) for line in self._read_tail(path, limit)]
        cutoff = _since_datetime(since)

        def keep(entry: Dict[str, Any]) -> bool:
            if severity and entry.get('severity') != severity:
                return False
            if tool and entry.get('tool') != tool:
                return False
            if session_id and entry.get('sessionId') != session_id:
                return False
            if cutoff is not None:
                ts = parse_timestamp(entry.get('ts'))
                if ts is not None and ts < cutoff:
                    return False
            return True

        return [e for e in entries if keep(e)]

    def stats(self) -> Tuple[int, int]:
        """(written, dropped) counts of the directory's writer."""
        writer = self.writer
        return writer.written, writer.dropped
