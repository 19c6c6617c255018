"""
ClawSentry Core — Version Constants

Single source of truth for version-related values and on-disk file names.

Usage:
    from clawsentry.core.version import __version__, POLICY_FILENAME
"""

# =============================================================================
# PACKAGE VERSION
# =============================================================================

__version__ = "0.4.0"


# =============================================================================
# ON-DISK FILES
# =============================================================================

# Policy side file, stored next to the log partitions
POLICY_FILENAME = "policy.json"

# Log partitions are named <YYYY-MM-DD><LOG_PARTITION_SUFFIX>
LOG_PARTITION_SUFFIX = ".jsonl"


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    '__version__',
    'POLICY_FILENAME',
    'LOG_PARTITION_SUFFIX',
]
