#!/usr/bin/env python3
"""
ClawSentry Core Analysis — Payload Truncator
==============================================
Caps the serialized size of a payload. Oversized payloads are replaced
by an envelope carrying a bounded preview and the original byte size.

Import from: clawsentry.core.analysis.truncator
"""

from typing import Any

from clawsentry.core.analysis.utils import json_byte_size, to_json_text, utf8_bytes
from clawsentry.core.constants import MIN_PAYLOAD_BYTES, PREVIEW_RESERVE_BYTES


def truncate_payload(payload: Any, max_bytes: int) -> Any:
    """Return ``payload`` unchanged if it fits ``max_bytes``, else an envelope.

    The envelope is ``{"truncated": True, "originalBytes": n, "preview": s}``
    where ``s`` starts as the first ``max_bytes - PREVIEW_RESERVE_BYTES``
    bytes of the serialized payload. Escaping can grow the preview when
    the envelope is serialized again, so it is shortened until the
    envelope itself fits.
    """
    if payload is None:
        return None

    budget = max(MIN_PAYLOAD_BYTES, int(max_bytes))
    text = to_json_text(payload)
    encoded = utf8_bytes(text)
    if len(encoded) <= budget:
        return payload

    limit = max(0, budget - PREVIEW_RESERVE_BYTES)
    preview = encoded[:limit].decode('utf-8', errors='ignore')
    envelope = {'truncated': True, 'originalBytes': len(encoded), 'preview': preview}

    size = json_byte_size(envelope)
    while size > budget and envelope['preview']:
        overflow = size - budget
        current = envelope['preview']
        envelope['preview'] = current[:max(0, len(current) - overflow)]
        size = json_byte_size(envelope)

    return envelope


__all__ = ['truncate_payload']
