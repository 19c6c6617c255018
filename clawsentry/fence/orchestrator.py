#!/usr/bin/env python3
"""
Fence Orchestrator — Component wiring and the event pipeline.

SkillFence is the top-level object: it builds every component from a
SentryConfig and runs each event through

    redact -> truncate -> pattern findings -> policy -> anomalies
           -> severity -> append

before returning the persisted entry. Monitors, the hook adapter and
the query service all write through the same SkillFence.log().
"""

import logging
from typing import Any, Iterable, List, Optional, Union

from clawsentry.core.access.policy_engine import PolicyEngine, PolicyState
from clawsentry.core.analysis.anomaly import AnomalyDetector
from clawsentry.core.analysis.findings import FindingExtractor, resolve_severity
from clawsentry.core.analysis.redactor import PayloadRedactor
from clawsentry.core.analysis.truncator import truncate_payload
from clawsentry.core.analysis.utils import unique
from clawsentry.core.audit.log_store import LogStore, utc_now_iso
from clawsentry.core.config import SentryConfig
from clawsentry.core.scanning.monitors import NetworkMonitor, ProcessMonitor, ScanMonitor
from clawsentry.core.scanning.skill_scanner import SkillScanner
from clawsentry.core.types import (
    EntryStatus, EventType, LogEntry, Policy, PolicyDecision, Severity,
)

__all__ = ['SkillFence']

logger = logging.getLogger("clawsentry.fence.orchestrator")


def _coerce(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    return enum_cls(value)


class SkillFence:
    """Security and observability fence around agent tool calls."""

    def __init__(self, config: SentryConfig = None):
        self.config = config or SentryConfig()

        self.store = LogStore(self.config.log_dir, self.config.writer_queue_size)
        self.redactor = PayloadRedactor()
        self.extractor = FindingExtractor()
        self.anomaly = AnomalyDetector(
            enabled=self.config.anomaly_enabled,
            large_payload_bytes=self.config.large_payload_bytes,
        )

        # Persisted policy wins over the configured one
        self.policy_state = PolicyState(self.config.policy_file, initial=self.config.policy)
        self.policy_state.load()
        self.policy_engine = PolicyEngine(self.policy_state)

        self.scanner = SkillScanner(self.extractor, self.config.skill_roots)

        self.monitors: List[ScanMonitor] = []
        if self.config.process_monitor_enabled:
            self.monitors.append(ProcessMonitor(
                self.log, self.extractor, self.config.process_monitor_interval))
        if self.config.network_monitor_enabled:
            self.monitors.append(NetworkMonitor(
                self.log, self.extractor, self.config.network_monitor_interval))

    # ----- Event pipeline -----

    def log(self, event: Union[EventType, str], session_id: Optional[str] = None,
            agent_id: Optional[str] = None, tool: Optional[str] = None,
            status: Union[EntryStatus, str, None] = None,
            severity: Union[Severity, str, None] = None,
            findings: Optional[Iterable[str]] = None,
            payload: Any = None) -> LogEntry:
        """Sanitize, classify and persist one event. Returns the stored entry."""
        event = _coerce(EventType, event)
        status = _coerce(EntryStatus, status)
        requested = _coerce(Severity, severity)

        sanitized = self.redactor.redact(payload) if self.config.redact else payload
        anomalies = self.anomaly.observe(tool, sanitized)
        stored = truncate_payload(sanitized, self.config.max_payload_bytes)

        pattern_findings, _ = self.extractor.extract(stored)
        policy_findings = self.policy_engine.logged_findings(tool, pattern_findings)

        merged = unique([
            *pattern_findings,
            *policy_findings,
            *anomalies,
            *(findings or ()),
        ])

        entry = LogEntry(
            ts=utc_now_iso(),
            event=event,
            session_id=session_id,
            agent_id=agent_id,
            tool=tool,
            status=status,
            severity=resolve_severity(merged, requested),
            findings=tuple(merged),
            payload=stored,
        )
        self.store.append(entry)

        if self.config.alerts_enabled and entry.severity in (Severity.HIGH, Severity.CRITICAL):
            logger.warning(
                "ClawSentry alert: %s %s severity=%s findings=%s",
                entry.event.value, entry.tool or '-', entry.severity.value,
                ','.join(entry.findings) or '-',
            )
        return entry

    def evaluate_policy(self, tool: Optional[str], payload: Any) -> PolicyDecision:
        """Pre-call policy check on a not-yet-executed tool call."""
        stored = truncate_payload(payload, self.config.max_payload_bytes)
        pattern_findings, _ = self.extractor.extract(stored)
        return self.policy_engine.evaluate(tool, pattern_findings)

    # ----- Policy -----

    def get_policy(self) -> Policy:
        return self.policy_state.get()

    def set_policy(self, policy: Any) -> Policy:
        """Replace and persist the policy. Raises PolicyValidationError."""
        updated = self.policy_state.replace(policy)
        logger.info("ClawSentry policy updated: enforce=%s", updated.enforce)
        return updated

    # ----- Lifecycle -----

    def start_monitors(self) -> None:
        for monitor in self.monitors:
            monitor.start()

    def stop_monitors(self) -> None:
        for monitor in self.monitors:
            monitor.stop()

    def flush(self) -> bool:
        return self.store.flush()

    def close(self) -> None:
        self.stop_monitors()
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
