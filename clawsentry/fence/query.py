"""
Fence Query Service — Read-side operations over a SkillFence.

Every method returns JSON-serializable values. The HTTP API and the
CLI are thin shells around this class. Reads flush the writer first so
entries logged earlier in the same process are visible.
"""

import json
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from clawsentry.core.audit import reports
from clawsentry.core.constants import DEFAULT_QUERY_LIMIT, SESSION_QUERY_LIMIT
from clawsentry.core.scanning.skill_scanner import results_to_dict
from clawsentry.core.types import PolicyValidationError
from clawsentry.fence.orchestrator import SkillFence

__all__ = ['SentryQueryService']

Since = Union[datetime, int, float, None]


class SentryQueryService:

    def __init__(self, fence: SkillFence):
        self.fence = fence

    # ----- Log entries -----

    def list_entries(self, limit: int = DEFAULT_QUERY_LIMIT, severity: Optional[str] = None,
                     tool: Optional[str] = None, session_id: Optional[str] = None,
                     since: Since = None, minutes: Optional[float] = None) -> List[Dict[str, Any]]:
        """Latest entries of today, filtered. ``minutes`` overrides ``since``."""
        if minutes is not None:
            since = time.time() - float(minutes) * 60
        self.fence.flush()
        return self.fence.store.read_latest(
            limit, severity=severity, tool=tool, session_id=session_id, since=since,
        )

    def list_sessions(self) -> List[Dict[str, Any]]:
        return reports.session_summaries(self.list_entries(SESSION_QUERY_LIMIT))

    def session_entries(self, session_id: Optional[str]) -> List[Dict[str, Any]]:
        return self.list_entries(SESSION_QUERY_LIMIT, session_id=session_id)

    def incident_report(self, session_id: Optional[str]) -> Dict[str, str]:
        entries = self.session_entries(session_id)
        return {'report': reports.incident_report(session_id, entries)}

    def export_json(self, **filters) -> str:
        return reports.export_json(self.list_entries(**filters))

    def export_csv(self, **filters) -> str:
        return reports.export_csv(self.list_entries(**filters))

    # ----- Policy -----

    def get_policy(self) -> Dict[str, Any]:
        return {'policy': self.fence.get_policy().to_dict()}

    def set_policy(self, body: Any) -> Dict[str, Any]:
        """Replace the policy from a mapping or its JSON text.

        Invalid input leaves the policy unchanged and is reported as
        ``{"ok": False, "error": ...}``.
        """
        if isinstance(body, (bytes, bytearray)):
            body = body.decode('utf-8', errors='replace')
        if isinstance(body, str):
            try:
                body = json.loads(body or '{}')
            except json.JSONDecodeError as e:
                return {'ok': False, 'error': f"invalid JSON: {e}"}

        try:
            policy = self.fence.set_policy(body)
        except PolicyValidationError as e:
            return {'ok': False, 'error': str(e)}
        return {'ok': True, 'policy': policy.to_dict()}

    # ----- Skill scanning -----

    def scan_all(self) -> Dict[str, Any]:
        return {'results': results_to_dict(self.fence.scanner.scan_all())}

    def scan_one(self, name: str) -> Dict[str, Any]:
        path, results = self.fence.scanner.scan_one(name)
        return {
            'skill': name,
            'path': str(path) if path is not None else None,
            'results': [f.to_dict() for f in results],
        }

    def get_last_scan(self) -> Dict[str, Any]:
        return {'results': results_to_dict(self.fence.scanner.last_scan)}

    # ----- Configuration -----

    def get_config(self) -> Dict[str, Any]:
        return {'config': self.fence.config.to_dict()}
