"""
ClawSentry Core Types — Shared enums, dataclasses, and exceptions.

This module centralizes the type definitions used across the ClawSentry
codebase. Both layers (core, fence) import types from here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ClawSentryError(Exception):
    """Base exception for all ClawSentry errors."""
    pass


class PolicyValidationError(ClawSentryError):
    """Raised when a policy update carries a malformed body."""
    pass


# =============================================================================
# ENUMS
# =============================================================================

class EventType(Enum):
    """Kinds of entries written to the audit trail."""
    SESSION_START = "session_start"
    SESSION_END = "session_end"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    PROCESS_SCAN = "process_scan"
    NETWORK_SCAN = "network_scan"
    POLICY_BLOCK = "policy_block"


class EntryStatus(Enum):
    """Outcome of a completed tool call."""
    OK = "ok"
    ERROR = "error"


class Severity(Enum):
    """Coarse ordinal summarizing the worst finding attached to an entry."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def worst(cls, *levels: Optional['Severity']) -> Optional['Severity']:
        """Return the highest-ranked severity, ignoring unset values."""
        present = [s for s in levels if s is not None]
        if not present:
            return None
        return max(present, key=lambda s: s.rank)


_SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


# =============================================================================
# LOG ENTRY
# =============================================================================

@dataclass(frozen=True)
class LogEntry:
    """One line of the audit trail. Immutable once built."""
    ts: str
    event: EventType
    session_id: Optional[str] = None
    agent_id: Optional[str] = None
    tool: Optional[str] = None
    status: Optional[EntryStatus] = None
    severity: Optional[Severity] = None
    findings: Tuple[str, ...] = ()
    payload: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: camelCase keys, unset optional fields omitted."""
        data: Dict[str, Any] = {'ts': self.ts, 'event': self.event.value}
        if self.session_id is not None:
            data['sessionId'] = self.session_id
        if self.agent_id is not None:
            data['agentId'] = self.agent_id
        if self.tool is not None:
            data['tool'] = self.tool
        if self.status is not None:
            data['status'] = self.status.value
        if self.severity is not None:
            data['severity'] = self.severity.value
        data['findings'] = list(self.findings)
        if self.payload is not None:
            data['payload'] = self.payload
        return data


# =============================================================================
# POLICY
# =============================================================================

def _string_list(body: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    value = body.get(key)
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise PolicyValidationError(f"'{key}' must be a list of strings")
    items: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise PolicyValidationError(f"'{key}' must be a list of strings")
        if item not in items:
            items.append(item)
    return tuple(items)


@dataclass(frozen=True)
class Policy:
    """Allow/deny/enforce configuration governing tool calls.

    An empty ``allow_tools`` means every tool is allowed.
    """
    deny_tools: Tuple[str, ...] = ()
    allow_tools: Tuple[str, ...] = ()
    deny_findings: Tuple[str, ...] = ()
    enforce: bool = False

    @classmethod
    def from_dict(cls, body: Any) -> 'Policy':
        """Build a policy from its wire form, validating types.

        Raises:
            PolicyValidationError: body is not a mapping or a field has
                the wrong type.
        """
        if body is None:
            return cls()
        if not isinstance(body, Mapping):
            raise PolicyValidationError("policy must be a JSON object")

        enforce = body.get('enforce')
        if enforce is None:
            enforce = False
        elif not isinstance(enforce, bool):
            raise PolicyValidationError("'enforce' must be a boolean")

        return cls(
            deny_tools=_string_list(body, 'denyTools'),
            allow_tools=_string_list(body, 'allowTools'),
            deny_findings=_string_list(body, 'denyFindings'),
            enforce=enforce,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'denyTools': list(self.deny_tools),
            'allowTools': list(self.allow_tools),
            'denyFindings': list(self.deny_findings),
            'enforce': self.enforce,
        }


@dataclass(frozen=True)
class PolicyDecision:
    """Result of evaluating a not-yet-executed tool call."""
    reasons: Tuple[str, ...] = ()
    enforce: bool = False
    findings: Tuple[str, ...] = ()

    @property
    def blocked(self) -> bool:
        return self.enforce and bool(self.reasons)


@dataclass(frozen=True)
class BlockDecision:
    """Returned to the host when a tool call must not run."""
    block: bool
    block_reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {'block': self.block, 'blockReason': self.block_reason}


# =============================================================================
# SCANNING
# =============================================================================

@dataclass(frozen=True)
class FileFindings:
    """Findings for one file of a skill directory."""
    file: str
    findings: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {'file': self.file, 'findings': list(self.findings)}


@dataclass
class LineScan:
    """Result of running per-line rules over a process or connection listing."""
    hits: List[str] = field(default_factory=list)
    findings: List[str] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.hits)


__all__ = [
    'ClawSentryError', 'PolicyValidationError',
    'EventType', 'EntryStatus', 'Severity',
    'LogEntry', 'Policy', 'PolicyDecision', 'BlockDecision',
    'FileFindings', 'LineScan',
]
