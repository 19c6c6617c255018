#!/usr/bin/env python3
"""
ClawSentry Core Analysis — Anomaly Detector
=============================================
Behavioral signals, distinct from static pattern matching:
- First use of a tool name in this process (anomaly_new_tool)
- Payloads at or above a size threshold (anomaly_large_payload)

The seen-tools set lives in memory only and resets on restart, so every
tool is reported as new once per process lifetime.

Import from: clawsentry.core.analysis.anomaly
"""

import threading
from typing import Any, FrozenSet, List, Optional

from clawsentry.core.analysis.utils import json_byte_size
from clawsentry.core.constants import (
    DEFAULT_LARGE_PAYLOAD_BYTES, MIN_LARGE_PAYLOAD_BYTES,
)
from clawsentry.core.patterns import ANOMALY_LARGE_PAYLOAD, ANOMALY_NEW_TOOL


class AnomalyDetector:
    """Tracks tool names seen so far and flags oversized payloads."""

    def __init__(self, enabled: bool = True,
                 large_payload_bytes: int = DEFAULT_LARGE_PAYLOAD_BYTES):
        self.enabled = enabled
        self.large_payload_bytes = max(MIN_LARGE_PAYLOAD_BYTES, int(large_payload_bytes))
        self._seen_tools = set()
        self._lock = threading.Lock()

    def observe(self, tool: Optional[str], payload: Any) -> List[str]:
        """Record one event and return the anomaly tags it triggers."""
        if not self.enabled:
            return []

        findings = []
        if tool:
            with self._lock:
                is_new = tool not in self._seen_tools
                self._seen_tools.add(tool)
            if is_new:
                findings.append(ANOMALY_NEW_TOOL)

        if payload is not None and json_byte_size(payload) >= self.large_payload_bytes:
            findings.append(ANOMALY_LARGE_PAYLOAD)

        return findings

    @property
    def seen_tools(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._seen_tools)


__all__ = ['AnomalyDetector']
