"""
Fence — Runtime surfaces built on the core components.

Submodules:
- orchestrator: SkillFence, component wiring and the event pipeline
- hooks: Host lifecycle callbacks mapped onto fence events
- query: Read-side operations (logs, sessions, reports, policy, scans)
- api_server: Local HTTP API over the query service
"""

from clawsentry.fence.orchestrator import SkillFence
from clawsentry.fence.hooks import FenceHooks
from clawsentry.fence.query import SentryQueryService
from clawsentry.fence.api_server import SentryAPIServer

__all__ = [
    'SkillFence',
    'FenceHooks',
    'SentryQueryService',
    'SentryAPIServer',
]
