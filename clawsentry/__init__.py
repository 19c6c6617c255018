"""
ClawSentry — Security and observability fence for agent tool calls

Sits between an agent and its tools:

- core/  : Redaction, findings, policy, anomalies, log store, skill scanning
- fence/ : Orchestrator, host hook adapter, query service, local HTTP API

Version: 0.4.0
"""

__version__ = "0.4.0"
