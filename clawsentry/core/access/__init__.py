"""
Access Control — Tool policy state and evaluation.

Submodules:
- policy_engine: Allow/deny/enforce policy, persisted beside the logs

Classes:
- PolicyState: Current policy value plus its side file
- PolicyEngine: Pre-call and logging-path policy evaluation
"""

from clawsentry.core.access.policy_engine import (
    PolicyState,
    PolicyEngine,
)

__all__ = [
    'PolicyState',
    'PolicyEngine',
]
