"""
ClawSentry Core — Detection, policy, and audit primitives.

Everything here is independent of how events reach the fence: the
host hook adapter, the monitors, and the query surfaces all share the
same components.

Submodules:
- version   : Version constants (single source of truth)
- constants : Numeric limits and defaults
- types     : Shared enums, dataclasses, exceptions
- patterns  : Redaction and finding rule tables
- config    : SentryConfig and the JSON config loader
- analysis/ : Redaction, truncation, finding extraction, anomalies
- access/   : Tool policy state and evaluation
- audit/    : Append-only log store and reports
- scanning/ : Skill scanner and host monitors

Quick imports:
    from clawsentry.core import SentryConfig, LogStore, PolicyEngine
    from clawsentry.core import Severity, LogEntry, Policy
"""

from clawsentry.core.version import (
    __version__,
    POLICY_FILENAME,
    LOG_PARTITION_SUFFIX,
)

from clawsentry.core.types import (
    # Exceptions
    ClawSentryError,
    PolicyValidationError,
    # Enums
    EventType,
    EntryStatus,
    Severity,
    # Dataclasses
    LogEntry,
    Policy,
    PolicyDecision,
    BlockDecision,
    FileFindings,
    LineScan,
)

from clawsentry.core.config import (
    SentryConfig,
    load_config_from_file,
)

from clawsentry.core.analysis import (
    PayloadRedactor,
    truncate_payload,
    FindingExtractor,
    AnomalyDetector,
)

from clawsentry.core.access import (
    PolicyState,
    PolicyEngine,
)

from clawsentry.core.audit import (
    LogStore,
)

from clawsentry.core.scanning import (
    SkillScanner,
    ProcessMonitor,
    NetworkMonitor,
)

__all__ = [
    '__version__', 'POLICY_FILENAME', 'LOG_PARTITION_SUFFIX',
    'ClawSentryError', 'PolicyValidationError',
    'EventType', 'EntryStatus', 'Severity',
    'LogEntry', 'Policy', 'PolicyDecision', 'BlockDecision',
    'FileFindings', 'LineScan',
    'SentryConfig', 'load_config_from_file',
    'PayloadRedactor', 'truncate_payload', 'FindingExtractor', 'AnomalyDetector',
    'PolicyState', 'PolicyEngine',
    'LogStore',
    'SkillScanner', 'ProcessMonitor', 'NetworkMonitor',
]
