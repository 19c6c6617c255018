"""
ClawSentry Configuration — SentryConfig
=========================================
Central configuration dataclass with defaults for every pipeline
setting, plus the loader that merges a plugin-style JSON config file
into it.

Import from: clawsentry.core.config
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from clawsentry.core.constants import (
    DEFAULT_API_HOST, DEFAULT_API_PORT,
    DEFAULT_LARGE_PAYLOAD_BYTES, DEFAULT_MAX_PAYLOAD_BYTES,
    DEFAULT_MONITOR_INTERVAL, DEFAULT_WRITER_QUEUE_SIZE,
    MIN_LARGE_PAYLOAD_BYTES, MIN_MONITOR_INTERVAL, MIN_PAYLOAD_BYTES,
)
from clawsentry.core.types import Policy, PolicyValidationError
from clawsentry.core.version import POLICY_FILENAME

logger = logging.getLogger("clawsentry.core.config")


def _default_base_dir() -> Path:
    home = os.environ.get('CLAWSENTRY_HOME')
    if home:
        return Path(home)
    return Path.home() / ".openclaw" / "clawsentry"


def default_skill_roots(workspace_dirs) -> List[Path]:
    """Well-known per-user skill directories plus <workspace>/skills."""
    roots = [
        Path.home() / ".openclaw" / "skills",
        Path.home() / "clawd" / "skills",
    ]
    for workspace in workspace_dirs:
        root = Path(workspace) / "skills"
        if root not in roots:
            roots.append(root)
    return roots


@dataclass
class SentryConfig:
    base_dir: Path = field(default_factory=_default_base_dir)
    log_dir: Path = None
    policy_file: Path = None

    redact: bool = True
    max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES
    policy: Policy = field(default_factory=Policy)

    anomaly_enabled: bool = True
    large_payload_bytes: int = DEFAULT_LARGE_PAYLOAD_BYTES
    alerts_enabled: bool = True

    process_monitor_enabled: bool = False
    process_monitor_interval: int = DEFAULT_MONITOR_INTERVAL
    network_monitor_enabled: bool = False
    network_monitor_interval: int = DEFAULT_MONITOR_INTERVAL

    workspace_dirs: List[Path] = field(default_factory=list)
    skill_roots: List[Path] = None

    api_host: str = DEFAULT_API_HOST
    api_port: int = DEFAULT_API_PORT
    writer_queue_size: int = DEFAULT_WRITER_QUEUE_SIZE

    def __post_init__(self):
        if self.log_dir is None:
            self.log_dir = self.base_dir / "logs"
        if self.policy_file is None:
            self.policy_file = self.log_dir / POLICY_FILENAME
        if self.skill_roots is None:
            self.skill_roots = default_skill_roots(self.workspace_dirs)
        self.apply_floors()

    def apply_floors(self) -> None:
        """Clamp numeric settings to their minimums."""
        self.max_payload_bytes = max(MIN_PAYLOAD_BYTES, int(self.max_payload_bytes))
        self.large_payload_bytes = max(MIN_LARGE_PAYLOAD_BYTES, int(self.large_payload_bytes))
        self.process_monitor_interval = max(MIN_MONITOR_INTERVAL, int(self.process_monitor_interval))
        self.network_monitor_interval = max(MIN_MONITOR_INTERVAL, int(self.network_monitor_interval))

    def to_dict(self) -> dict:
        """Effective settings for display. The policy is served separately."""
        return {
            'logDir': str(self.log_dir),
            'policyFile': str(self.policy_file),
            'redact': self.redact,
            'maxPayloadBytes': self.max_payload_bytes,
            'anomaly': {
                'enabled': self.anomaly_enabled,
                'largePayloadBytes': self.large_payload_bytes,
            },
            'alerts': {'enabled': self.alerts_enabled},
            'processMonitor': {
                'enabled': self.process_monitor_enabled,
                'intervalSec': self.process_monitor_interval,
            },
            'networkMonitor': {
                'enabled': self.network_monitor_enabled,
                'intervalSec': self.network_monitor_interval,
            },
            'workspaces': [str(w) for w in self.workspace_dirs],
            'skillRoots': [str(r) for r in self.skill_roots],
            'api': {'host': self.api_host, 'port': self.api_port},
        }


def _section(file_cfg: dict, key: str, config_path: Path) -> dict:
    value = file_cfg.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning("Ignoring %s in %s: expected an object", key, config_path)
        return {}
    return value


def _as_int(value, key: str, config_path: Path, current: int) -> int:
    if isinstance(value, bool):
        value = None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring %s in %s: not a number (%r)", key, config_path, value)
        return current


def load_config_from_file(config: SentryConfig, config_path: Path) -> None:
    """Merge a plugin-style JSON config file into ``config``.

    Missing keys keep their defaults. An unreadable file, a section that
    is not an object, a non-numeric size or interval, or a malformed
    policy is reported as a warning and otherwise ignored.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        return

    try:
        with open(config_path, encoding='utf-8') as f:
            file_cfg = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not read %s: %s", config_path, e)
        return
    if not isinstance(file_cfg, dict):
        logger.warning("Ignoring %s: top level must be an object", config_path)
        return

    log_dir = file_cfg.get('logDir')
    if isinstance(log_dir, str) and log_dir:
        config.log_dir = Path(log_dir)
        config.policy_file = config.log_dir / POLICY_FILENAME
    elif log_dir is not None:
        logger.warning("Ignoring logDir in %s: expected a path string", config_path)
    if 'redact' in file_cfg:
        config.redact = file_cfg['redact'] is not False
    if 'maxPayloadBytes' in file_cfg:
        config.max_payload_bytes = _as_int(
            file_cfg['maxPayloadBytes'], 'maxPayloadBytes', config_path, config.max_payload_bytes)

    if 'policy' in file_cfg:
        try:
            config.policy = Policy.from_dict(file_cfg['policy'])
        except PolicyValidationError as e:
            logger.warning("Ignoring policy in %s: %s", config_path, e)

    anomaly = _section(file_cfg, 'anomaly', config_path)
    if 'enabled' in anomaly:
        config.anomaly_enabled = anomaly['enabled'] is not False
    if 'largePayloadBytes' in anomaly:
        config.large_payload_bytes = _as_int(
            anomaly['largePayloadBytes'], 'anomaly.largePayloadBytes', config_path,
            config.large_payload_bytes)

    alerts = _section(file_cfg, 'alerts', config_path)
    if 'enabled' in alerts:
        config.alerts_enabled = alerts['enabled'] is not False

    proc = _section(file_cfg, 'processMonitor', config_path)
    if 'enabled' in proc:
        config.process_monitor_enabled = proc['enabled'] is True
    if 'intervalSec' in proc:
        config.process_monitor_interval = _as_int(
            proc['intervalSec'], 'processMonitor.intervalSec', config_path,
            config.process_monitor_interval)

    net = _section(file_cfg, 'networkMonitor', config_path)
    if 'enabled' in net:
        config.network_monitor_enabled = net['enabled'] is True
    if 'intervalSec' in net:
        config.network_monitor_interval = _as_int(
            net['intervalSec'], 'networkMonitor.intervalSec', config_path,
            config.network_monitor_interval)

    workspaces = file_cfg.get('workspaces')
    if isinstance(workspaces, list):
        config.workspace_dirs = [Path(w) for w in workspaces if isinstance(w, str) and w]
        config.skill_roots = default_skill_roots(config.workspace_dirs)
    elif workspaces is not None:
        logger.warning("Ignoring workspaces in %s: expected a list", config_path)

    api = _section(file_cfg, 'api', config_path)
    if isinstance(api.get('host'), str):
        config.api_host = api['host']
    if 'port' in api:
        config.api_port = _as_int(api['port'], 'api.port', config_path, config.api_port)

    config.apply_floors()


__all__ = ['SentryConfig', 'load_config_from_file', 'default_skill_roots']
