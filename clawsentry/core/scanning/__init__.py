"""
Scanning — Skill directory scans and host monitors.

Submodules:
- skill_scanner: Static scan of installed skill directories
- monitors: Periodic process and network listing scans (via psutil)
"""

from clawsentry.core.scanning.skill_scanner import (
    SkillScanner,
    results_to_dict,
)

from clawsentry.core.scanning.monitors import (
    ScanMonitor,
    ProcessMonitor,
    NetworkMonitor,
)

__all__ = [
    'SkillScanner',
    'results_to_dict',
    'ScanMonitor',
    'ProcessMonitor',
    'NetworkMonitor',
]
