#!/usr/bin/env python3
"""
ClawSentry Core Access — Policy Engine
========================================
Allow/deny/enforce policy for tool calls.

PolicyState owns the single process-wide Policy value and its side file.
Reads never touch the disk; replace() swaps the value and rewrites the
file. A failed write is reported as a warning and the new value stays
in force.

PolicyEngine evaluates a tool name plus the findings gathered so far.
Blocking is advisory: the caller decides whether to honor the decision.

Import from: clawsentry.core.access.policy_engine
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from clawsentry.core.analysis.utils import unique
from clawsentry.core.patterns import (
    POLICY_ALLOWLIST_MISS, POLICY_DENY_FINDING, POLICY_DENY_TOOL,
)
from clawsentry.core.types import Policy, PolicyDecision, PolicyValidationError

__all__ = ['PolicyState', 'PolicyEngine']

logger = logging.getLogger("clawsentry.core.access.policy_engine")


class PolicyState:
    """Holder for the current policy and its persisted copy.

    Usage:
        state = PolicyState(Path("logs/policy.json"), initial=config.policy)
        state.load()          # once, at startup
        state.get()           # every evaluation
        state.replace({...})  # admin update; persists as a side effect
    """

    def __init__(self, policy_file: Optional[Path] = None,
                 initial: Optional[Policy] = None):
        self._policy_file = Path(policy_file) if policy_file else None
        self._policy = initial or Policy()
        self._lock = threading.Lock()

    @property
    def policy_file(self) -> Optional[Path]:
        return self._policy_file

    def load(self) -> bool:
        """Load the persisted policy, if any.

        A missing file keeps the current value. An unreadable or malformed
        file is reported as a warning and also keeps the current value.
        Returns True when a persisted policy was applied.
        """
        if self._policy_file is None or not self._policy_file.exists():
            return False

        try:
            with open(self._policy_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            policy = Policy.from_dict(data)
        except (json.JSONDecodeError, OSError, PolicyValidationError) as e:
            logger.warning("Policy load failed for %s: %s", self._policy_file, e)
            return False

        with self._lock:
            self._policy = policy
        return True

    def get(self) -> Policy:
        return self._policy

    def replace(self, policy: Union[Policy, Any]) -> Policy:
        """Swap in a new policy and persist it.

        Accepts a Policy or its wire form (a mapping with camelCase keys).

        Raises:
            PolicyValidationError: the wire form is malformed. Nothing is
                changed in that case.
        """
        if not isinstance(policy, Policy):
            policy = Policy.from_dict(policy)

        with self._lock:
            self._policy = policy
            self._save(policy)
        return policy

    def _save(self, policy: Policy) -> bool:
        if self._policy_file is None:
            return False

        tmp_path = self._policy_file.with_suffix('.tmp')
        try:
            self._policy_file.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(policy.to_dict(), f, indent=2)
                f.write('\n')
            tmp_path.replace(self._policy_file)
            return True
        except OSError as e:
            logger.warning("Policy save failed for %s: %s", self._policy_file, e)
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                pass
            return False


class PolicyEngine:
    """Decides which policy findings apply to a tool call."""

    def __init__(self, state: PolicyState):
        self.state = state

    def evaluate(self, tool: Optional[str], findings: Iterable[str] = ()) -> PolicyDecision:
        """Pre-call evaluation. Pure read of the current policy."""
        policy = self.state.get()
        findings = list(findings)
        tool = tool or ""

        reasons: List[str] = []
        if tool in policy.deny_tools:
            reasons.append(POLICY_DENY_TOOL)
        if policy.allow_tools and tool not in policy.allow_tools:
            reasons.append(POLICY_ALLOWLIST_MISS)
        if any(f in policy.deny_findings for f in findings):
            reasons.append(POLICY_DENY_FINDING)

        return PolicyDecision(
            reasons=tuple(unique(reasons)),
            enforce=policy.enforce,
            findings=tuple(findings),
        )

    def logged_findings(self, tool: Optional[str], findings: Iterable[str] = ()) -> List[str]:
        """Policy findings attached on the logging path.

        Allowlist misses are left out here: they surface through the
        pre-call decision, whose reasons are logged with the tool call.
        """
        decision = self.evaluate(tool, findings)
        return [r for r in decision.reasons if r != POLICY_ALLOWLIST_MISS]
