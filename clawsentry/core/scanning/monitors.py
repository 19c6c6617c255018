#!/usr/bin/env python3
"""
ClawSentry Core Scanning — Host Monitors
==========================================
Periodic background scans of the host:
- ProcessMonitor: running processes (pid, name, command line)
- NetworkMonitor: inet sockets (protocol, local, remote, status)

Listings are built with psutil and run through the shared per-line
rules. A tick with at least one hit is reported to the sink as a
process_scan / network_scan event with severity high.

Import from: clawsentry.core.scanning.monitors
"""

import logging
import socket
import threading
from typing import Callable, List, Optional

import psutil

from clawsentry.core.analysis.findings import FindingExtractor
from clawsentry.core.constants import DEFAULT_MONITOR_INTERVAL, MIN_MONITOR_INTERVAL
from clawsentry.core.types import EventType, LineScan, Severity

logger = logging.getLogger("clawsentry.core.scanning.monitors")

# sink(event, findings=..., severity=..., payload=...)
MonitorSink = Callable[..., object]


class ScanMonitor:
    """Base class: a daemon thread running scan_once() every interval seconds."""

    event: EventType = None
    name = "monitor"

    def __init__(self, sink: MonitorSink, extractor: FindingExtractor = None,
                 interval: int = DEFAULT_MONITOR_INTERVAL):
        self.sink = sink
        self.extractor = extractor or FindingExtractor()
        self.interval = max(MIN_MONITOR_INTERVAL, int(interval))
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def listing(self) -> List[str]:
        raise NotImplementedError

    def scan(self, lines: List[str]) -> LineScan:
        raise NotImplementedError

    def scan_once(self) -> Optional[LineScan]:
        """Run one tick. Returns None when the listing could not be built."""
        try:
            lines = self.listing()
        except (psutil.Error, OSError) as e:
            logger.warning("ClawSentry %s skipped: %s", self.name, e)
            return None

        result = self.scan(lines)
        if result.hits:
            self.sink(
                self.event,
                findings=result.findings,
                severity=Severity.HIGH,
                payload={'matchCount': result.match_count},
            )
        return result

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"clawsentry-{self.name}", daemon=True,
        )
        self._thread.start()
        logger.info("ClawSentry %s started (every %ds)", self.name, self.interval)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.scan_once()
            if self._stop_event.wait(self.interval):
                break


class ProcessMonitor(ScanMonitor):
    event = EventType.PROCESS_SCAN
    name = "process monitor"

    def listing(self) -> List[str]:
        lines = []
        for proc in psutil.process_iter(['pid', 'name', 'cmdline']):
            info = proc.info
            cmdline = ' '.join(info.get('cmdline') or [])
            lines.append(f"{info.get('pid')} {info.get('name') or ''} {cmdline}")
        return lines

    def scan(self, lines: List[str]) -> LineScan:
        return self.extractor.scan_process_lines(lines)


def _format_addr(addr) -> str:
    if not addr:
        return '*:*'
    return f"{addr[0]}:{addr[1]}"


class NetworkMonitor(ScanMonitor):
    event = EventType.NETWORK_SCAN
    name = "network monitor"

    def listing(self) -> List[str]:
        lines = []
        for conn in psutil.net_connections(kind='inet'):
            proto = 'tcp' if conn.type == socket.SOCK_STREAM else 'udp'
            lines.append(
                f"{proto} {_format_addr(conn.laddr)} {_format_addr(conn.raddr)} {conn.status}"
            )
        return lines

    def scan(self, lines: List[str]) -> LineScan:
        return self.extractor.scan_network_lines(lines)


__all__ = ['ScanMonitor', 'ProcessMonitor', 'NetworkMonitor']
