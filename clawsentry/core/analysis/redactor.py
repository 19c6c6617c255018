#!/usr/bin/env python3
"""
ClawSentry Core Analysis — Payload Redactor
=============================================
Recursive redaction of tool payloads before they are persisted:
- Email addresses, API tokens (sk-…, Slack xox?-…), phone-shaped digit runs
- Whole-value masking for keys that look sensitive (token, secret,
  password, auth, key, cookie, session)

Import from: clawsentry.core.analysis.redactor
"""

import re
from typing import Any

from clawsentry.core.patterns import (
    REDACTED_VALUE, REDACTION_PATTERNS, SENSITIVE_KEY_PATTERN,
)


class PayloadRedactor:
    """Masks sensitive substrings and fields in JSON-like structures."""

    def __init__(self):
        self.compiled = [(re.compile(p), r) for p, r in REDACTION_PATTERNS]
        self.sensitive_key = re.compile(SENSITIVE_KEY_PATTERN)

    def redact_text(self, text: str) -> str:
        for pattern, replacement in self.compiled:
            text = pattern.sub(replacement, text)
        return text

    def is_sensitive_key(self, key: Any) -> bool:
        return bool(self.sensitive_key.search(str(key)))

    def redact(self, value: Any) -> Any:
        """Return a redacted copy of ``value``. The input is not modified."""
        if isinstance(value, str):
            return self.redact_text(value)
        if isinstance(value, (list, tuple)):
            return [self.redact(item) for item in value]
        if isinstance(value, dict):
            result = {}
            for key, item in value.items():
                if self.is_sensitive_key(key):
                    result[key] = REDACTED_VALUE
                else:
                    result[key] = self.redact(item)
            return result
        return value


_default_redactor = None


def redact_payload(value: Any) -> Any:
    """Module-level convenience wrapper around a shared PayloadRedactor."""
    global _default_redactor
    if _default_redactor is None:
        _default_redactor = PayloadRedactor()
    return _default_redactor.redact(value)


__all__ = ['PayloadRedactor', 'redact_payload']
