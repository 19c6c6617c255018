"""
Content Analysis — Redaction, truncation, finding extraction, anomalies.

Submodules:
- redactor: Recursive masking of emails, phones, tokens, and sensitive keys
- truncator: Byte budget for persisted payloads
- findings: Static rule evaluation for payloads, files, and listings
- anomaly: First-use and large-payload signals
- utils: Shared JSON serialization helpers
"""

from clawsentry.core.analysis.redactor import (
    PayloadRedactor,
    redact_payload,
)

from clawsentry.core.analysis.truncator import (
    truncate_payload,
)

from clawsentry.core.analysis.findings import (
    FindingExtractor,
    FindingRule,
    pattern_severity,
    resolve_severity,
)

from clawsentry.core.analysis.anomaly import (
    AnomalyDetector,
)

__all__ = [
    'PayloadRedactor',
    'redact_payload',
    'truncate_payload',
    'FindingExtractor',
    'FindingRule',
    'pattern_severity',
    'resolve_severity',
    'AnomalyDetector',
]
