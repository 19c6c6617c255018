"""
Fence Hooks — Host lifecycle events mapped onto SkillFence.log().

The host agent calls these four methods from its own threads. Only
before_tool_call returns anything: a BlockDecision when the policy is
enforced and the call violates it, otherwise None.
"""

from typing import Any, Optional

from clawsentry.core.types import (
    BlockDecision, EntryStatus, EventType, LogEntry, Severity,
)
from clawsentry.fence.orchestrator import SkillFence

__all__ = ['FenceHooks', 'BLOCK_REASON_PREFIX']

BLOCK_REASON_PREFIX = "ClawSentry policy blocked tool: "


class FenceHooks:
    """Adapter from host callbacks to fence events."""

    def __init__(self, fence: SkillFence):
        self.fence = fence

    def session_start(self, session_id: str, agent_id: Optional[str] = None,
                      resumed_from: Optional[str] = None) -> LogEntry:
        return self.fence.log(
            EventType.SESSION_START,
            session_id=session_id,
            agent_id=agent_id,
            payload={'resumedFrom': resumed_from},
        )

    def session_end(self, session_id: str, agent_id: Optional[str] = None,
                    message_count: Optional[int] = None,
                    duration_ms: Optional[int] = None) -> LogEntry:
        return self.fence.log(
            EventType.SESSION_END,
            session_id=session_id,
            agent_id=agent_id,
            payload={'messageCount': message_count, 'durationMs': duration_ms},
        )

    def before_tool_call(self, tool_name: str, params: Any,
                         session_id: Optional[str] = None,
                         agent_id: Optional[str] = None) -> Optional[BlockDecision]:
        payload = {'params': params}
        decision = self.fence.evaluate_policy(tool_name, payload)
        reasons = list(decision.reasons)

        self.fence.log(
            EventType.TOOL_CALL,
            session_id=session_id,
            agent_id=agent_id,
            tool=tool_name,
            findings=reasons,
            severity=Severity.HIGH if reasons else None,
            payload=payload,
        )

        if not decision.blocked:
            return None

        self.fence.log(
            EventType.POLICY_BLOCK,
            session_id=session_id,
            agent_id=agent_id,
            tool=tool_name,
            findings=reasons,
            severity=Severity.HIGH,
            payload=payload,
        )
        return BlockDecision(block=True, block_reason=BLOCK_REASON_PREFIX + ', '.join(reasons))

    def after_tool_call(self, tool_name: str, params: Any, result: Any = None,
                        error: Any = None, duration_ms: Optional[int] = None,
                        session_id: Optional[str] = None,
                        agent_id: Optional[str] = None) -> LogEntry:
        return self.fence.log(
            EventType.TOOL_RESULT,
            session_id=session_id,
            agent_id=agent_id,
            tool=tool_name,
            status=EntryStatus.ERROR if error else EntryStatus.OK,
            payload={
                'params': params,
                'result': result,
                'error': error,
                'durationMs': duration_ms,
            },
        )
