"""
ClawSentry Security Patterns — Single Source of Truth
=======================================================
All regex patterns used by the pipeline: redaction, payload findings,
skill file findings, and the per-line process / network listing rules.
The event pipeline and the skill scanner both read their rules from
here, so a rule change applies to every path at once.

Rule tables are ordered lists of (tag, regex). Order is significant:
findings are reported in table order.

Import from: clawsentry.core.patterns
"""

# =============================================================================
# FINDING TAGS
# =============================================================================

# Static pattern findings
DANGEROUS_SHELL_PIPELINE = "dangerous_shell_pipeline"
BASE64_DECODE_EXEC = "base64_decode_exec"
RAW_IP_DETECTED = "raw_ip_detected"
SENSITIVE_FILE_ACCESS = "sensitive_file_access"
CUSTOM_PORT_DETECTED = "custom_port_detected"

# Process listing findings
REVERSE_SHELL_PATTERN = "reverse_shell_pattern"
CRYPTO_MINER = "crypto_miner"
PIPE_TO_SHELL = "pipe_to_shell"

# Connection listing findings
RAW_IP_CONNECTION = "raw_ip_connection"
CUSTOM_PORT_CONNECTION = "custom_port_connection"

# Behavioral findings
ANOMALY_NEW_TOOL = "anomaly_new_tool"
ANOMALY_LARGE_PAYLOAD = "anomaly_large_payload"

# Policy findings
POLICY_DENY_TOOL = "policy_deny_tool"
POLICY_ALLOWLIST_MISS = "policy_allowlist_miss"
POLICY_DENY_FINDING = "policy_deny_finding"

# Findings that alone make an entry high severity
HIGH_CLASS_FINDINGS = frozenset({
    DANGEROUS_SHELL_PIPELINE,
    BASE64_DECODE_EXEC,
    SENSITIVE_FILE_ACCESS,
})

POLICY_FINDINGS = frozenset({
    POLICY_DENY_TOOL,
    POLICY_ALLOWLIST_MISS,
    POLICY_DENY_FINDING,
})

ANOMALY_FINDINGS = frozenset({
    ANOMALY_NEW_TOOL,
    ANOMALY_LARGE_PAYLOAD,
})

# =============================================================================
# REDACTION PATTERNS
# =============================================================================

# Mapping keys whose whole value is masked, matched anywhere in the key
SENSITIVE_KEY_PATTERN = r'(?i)token|secret|password|auth|key|cookie|session'

# (regex, replacement), applied in order to every string value.
# Tokens run before phones so digit runs inside a token are not split.
REDACTION_PATTERNS = [
    (r'(?i)[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}', '[REDACTED_EMAIL]'),
    (r'sk-[A-Za-z0-9_-]{12,}|xox[baprs]-[A-Za-z0-9-]{10,}', '[REDACTED_TOKEN]'),
    (r'\+?\d[\d\s().-]{7,}\d', '[REDACTED_PHONE]'),
]

REDACTED_VALUE = '[REDACTED]'

# =============================================================================
# PAYLOAD / FILE CONTENT RULES
# =============================================================================

_DANGEROUS_SHELL = (
    r'(?i)\b(?:curl|wget)\b[^\n]*\|\s*(?:sh|bash)'
    r'|\bbash\s+-c\b'
    r'|\bpowershell\s+-enc\b'
)
_BASE64_EXEC = r'(?i)base64\s+(?:-d|--decode)|\batob\(|\bfrombase64\b'
_RAW_IP = r'\b(?:\d{1,3}\.){3}\d{1,3}\b'
# Host config, env files, SSH material, cloud credentials
_SENSITIVE_PATH = (
    r'(?i)(?<!\w)(?:\.env\b|openclaw\.json\b|\.ssh/|id_rsa\b|id_ed25519\b'
    r'|aws/credentials\b|credentials\b|config\.json\b)'
)
_CUSTOM_PORT = r':\d{4,5}'

# Applied to the serialized payload of tool events
PAYLOAD_RULES = [
    (DANGEROUS_SHELL_PIPELINE, _DANGEROUS_SHELL),
    (BASE64_DECODE_EXEC, _BASE64_EXEC),
    (RAW_IP_DETECTED, _RAW_IP),
    (SENSITIVE_FILE_ACCESS, _SENSITIVE_PATH),
    (CUSTOM_PORT_DETECTED, _CUSTOM_PORT),
]

# Applied to the raw text of each file in a skill directory
FILE_CONTENT_RULES = [
    (DANGEROUS_SHELL_PIPELINE, _DANGEROUS_SHELL),
    (BASE64_DECODE_EXEC, _BASE64_EXEC),
    (SENSITIVE_FILE_ACCESS, _SENSITIVE_PATH),
]

# =============================================================================
# LISTING RULES (evaluated per lower-cased line)
# =============================================================================

PROCESS_LINE_RULES = [
    (REVERSE_SHELL_PATTERN, r'nc -e|bash -i|powershell -enc'),
    (CRYPTO_MINER, r'xmrig|minerd|cpuminer'),
    (PIPE_TO_SHELL, r'curl .*\| .*sh|wget .*\| .*sh'),
]

NETWORK_LINE_RULES = [
    (RAW_IP_CONNECTION, r'\d+\.\d+\.\d+\.\d+:\d{4,5}'),
    (CUSTOM_PORT_CONNECTION, r':\d{4,5}\s+.*established'),
]


__all__ = [
    'DANGEROUS_SHELL_PIPELINE', 'BASE64_DECODE_EXEC', 'RAW_IP_DETECTED',
    'SENSITIVE_FILE_ACCESS', 'CUSTOM_PORT_DETECTED',
    'REVERSE_SHELL_PATTERN', 'CRYPTO_MINER', 'PIPE_TO_SHELL',
    'RAW_IP_CONNECTION', 'CUSTOM_PORT_CONNECTION',
    'ANOMALY_NEW_TOOL', 'ANOMALY_LARGE_PAYLOAD',
    'POLICY_DENY_TOOL', 'POLICY_ALLOWLIST_MISS', 'POLICY_DENY_FINDING',
    'HIGH_CLASS_FINDINGS', 'POLICY_FINDINGS', 'ANOMALY_FINDINGS',
    'SENSITIVE_KEY_PATTERN', 'REDACTION_PATTERNS', 'REDACTED_VALUE',
    'PAYLOAD_RULES', 'FILE_CONTENT_RULES',
    'PROCESS_LINE_RULES', 'NETWORK_LINE_RULES',
]
