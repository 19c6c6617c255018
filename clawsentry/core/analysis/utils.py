"""Shared analysis utilities used by multiple modules."""

import json
from typing import Any, Iterable, List


def to_json_text(value: Any) -> str:
    """Compact JSON form used for every size measurement and rule match.

    Non-ASCII characters are kept as-is so byte sizes reflect UTF-8
    length; objects JSON cannot encode fall back to ``str()``.
    """
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False, default=str)


def utf8_bytes(text: str) -> bytes:
    """UTF-8 bytes of ``text``; lone surrogates are kept as their 3-byte form."""
    return text.encode('utf-8', 'surrogatepass')


def json_byte_size(value: Any) -> int:
    return len(utf8_bytes(to_json_text(value)))


def unique(items: Iterable[str]) -> List[str]:
    """Drop repeats, keeping first-seen order."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


__all__ = ['to_json_text', 'utf8_bytes', 'json_byte_size', 'unique']
