"""
ClawSentry Core Audit — Reports
=================================
Read-side renderings of log entries: JSON and CSV exports, per-session
counts, and the plain-text incident report.

All functions take entries as returned by LogStore.read_latest (wire
form dicts) and never touch the disk.

Import from: clawsentry.core.audit.reports
"""

import csv
import io
import json
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from clawsentry.core.constants import INCIDENT_TOP_FINDINGS

__all__ = [
    'CSV_COLUMNS', 'export_json', 'export_csv',
    'session_summaries', 'severity_buckets', 'top_findings', 'incident_report',
]

CSV_COLUMNS = ('ts', 'event', 'tool', 'severity', 'findings')

RECOMMENDATIONS = (
    "Review tool calls with high severity",
    "Validate sensitive file access findings",
    "Tighten policy rules if needed",
)


def export_json(entries: Iterable[Dict[str, Any]]) -> str:
    return json.dumps(list(entries), indent=2, ensure_ascii=False)


def _findings_field(entry: Dict[str, Any]) -> str:
    findings = entry.get('findings')
    if isinstance(findings, list):
        return '|'.join(str(f) for f in findings)
    return ''


def export_csv(entries: Iterable[Dict[str, Any]]) -> str:
    """Header line, then one fully quoted row per entry."""
    buf = io.StringIO()
    buf.write(','.join(CSV_COLUMNS) + '\n')
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator='\n')
    for entry in entries:
        writer.writerow([
            entry.get('ts') or '',
            entry.get('event') or '',
            entry.get('tool') or '',
            entry.get('severity') or '',
            _findings_field(entry),
        ])
    return buf.getvalue()


def session_summaries(entries: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Entry count per session id, in order of first appearance."""
    counts: Counter = Counter()
    for entry in entries:
        session_id = entry.get('sessionId')
        if session_id:
            counts[session_id] += 1
    return [{'sessionId': sid, 'count': n} for sid, n in counts.items()]


def severity_buckets(entries: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    buckets = {'high': 0, 'medium': 0, 'low': 0}
    for entry in entries:
        severity = entry.get('severity') or 'low'
        if severity in ('high', 'critical'):
            buckets['high'] += 1
        elif severity == 'medium':
            buckets['medium'] += 1
        else:
            buckets['low'] += 1
    return buckets


def top_findings(entries: Iterable[Dict[str, Any]],
                 limit: int = INCIDENT_TOP_FINDINGS) -> List[tuple]:
    """(tag, count) pairs, most frequent first; ties keep first-seen order."""
    counts: Counter = Counter()
    for entry in entries:
        findings = entry.get('findings')
        if isinstance(findings, list):
            counts.update(str(f) for f in findings)
    return counts.most_common(limit)


def incident_report(session_id: Optional[str], entries: Iterable[Dict[str, Any]]) -> str:
    entries = list(entries)
    buckets = severity_buckets(entries)
    top = top_findings(entries)

    lines = [
        "Incident Report",
        f"Session: {session_id or ''}",
        "",
        "Summary:",
        f"- High/Critical: {buckets['high']}",
        f"- Medium: {buckets['medium']}",
        f"- Low: {buckets['low']}",
        "",
        "Top findings:",
    ]
    if top:
        lines.extend(f"- {tag} ({count})" for tag, count in top)
    else:
        lines.append("- none")
    lines.append("")
    lines.append("Recommendations:")
    lines.extend(f"- {rec}" for rec in RECOMMENDATIONS)
    return '\n'.join(lines)
