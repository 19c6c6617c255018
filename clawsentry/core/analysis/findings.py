#!/usr/bin/env python3
"""
ClawSentry Core Analysis — Finding Extractor
==============================================
Static pattern matching shared by every detection path:
- Payload variant: serialized tool payloads, with a derived severity
- File-content variant: raw text of skill files
- Listing variants: process and connection listings, one rule pass per line

Rules come from clawsentry.core.patterns. The extractor keeps no state
between calls, so the same text always yields the same tags.

Import from: clawsentry.core.analysis.findings
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple, Union

from clawsentry.core.analysis.utils import to_json_text, unique
from clawsentry.core.patterns import (
    FILE_CONTENT_RULES, HIGH_CLASS_FINDINGS,
    NETWORK_LINE_RULES, PAYLOAD_RULES, POLICY_FINDINGS, PROCESS_LINE_RULES,
)
from clawsentry.core.types import LineScan, Severity


@dataclass(frozen=True)
class FindingRule:
    """A single (tag, predicate) pair."""
    tag: str
    regex: re.Pattern

    @classmethod
    def compile(cls, tag: str, pattern: str) -> 'FindingRule':
        return cls(tag=tag, regex=re.compile(pattern))

    def matches(self, text: str) -> bool:
        return self.regex.search(text) is not None


def compile_rules(table) -> List[FindingRule]:
    return [FindingRule.compile(tag, pattern) for tag, pattern in table]


def pattern_severity(findings: Iterable[str]) -> Optional[Severity]:
    """Severity of a pattern finding set: high-class wins, anything else is medium."""
    findings = list(findings)
    if any(f in HIGH_CLASS_FINDINGS for f in findings):
        return Severity.HIGH
    if findings:
        return Severity.MEDIUM
    return None


def resolve_severity(findings: Iterable[str],
                     requested: Optional[Severity] = None) -> Optional[Severity]:
    """Final severity for a log entry.

    Policy and high-class findings resolve to high, any other finding
    (anomalies included) to medium. A caller-requested severity is never
    lowered, which is how critical and monitor-assigned levels survive.
    """
    findings = list(findings)
    derived = None
    if any(f in POLICY_FINDINGS or f in HIGH_CLASS_FINDINGS for f in findings):
        derived = Severity.HIGH
    elif findings:
        derived = Severity.MEDIUM
    return Severity.worst(derived, requested)


class FindingExtractor:
    """Runs the static rule tables against payloads, files, and listings."""

    def __init__(self):
        self.payload_rules = compile_rules(PAYLOAD_RULES)
        self.file_rules = compile_rules(FILE_CONTENT_RULES)
        self.process_rules = compile_rules(PROCESS_LINE_RULES)
        self.network_rules = compile_rules(NETWORK_LINE_RULES)

    @staticmethod
    def _apply(rules: List[FindingRule], text: str) -> List[str]:
        return unique(rule.tag for rule in rules if rule.matches(text))

    def extract(self, payload: Any) -> Tuple[List[str], Optional[Severity]]:
        """Findings and derived severity for a (sanitized) tool payload."""
        if payload is None:
            return [], None
        findings = self._apply(self.payload_rules, to_json_text(payload))
        return findings, pattern_severity(findings)

    def scan_text(self, text: str) -> List[str]:
        """Findings for raw file content."""
        return self._apply(self.file_rules, text)

    def scan_process_lines(self, lines: Union[str, Iterable[str]]) -> LineScan:
        return self._scan_lines(self.process_rules, lines)

    def scan_network_lines(self, lines: Union[str, Iterable[str]]) -> LineScan:
        return self._scan_lines(self.network_rules, lines)

    @staticmethod
    def _scan_lines(rules: List[FindingRule], lines: Union[str, Iterable[str]]) -> LineScan:
        if isinstance(lines, str):
            lines = lines.split('\n')
        result = LineScan()
        for line in lines:
            lower = line.lower()
            for rule in rules:
                if rule.matches(lower):
                    result.hits.append(rule.tag)
        result.findings = unique(result.hits)
        return result


__all__ = [
    'FindingRule', 'FindingExtractor', 'compile_rules',
    'pattern_severity', 'resolve_severity',
]
