"""
Canonical JSON serialization
Deterministic, sorted keys, no floats, no whitespace
"""

from dataclasses import fields, is_dataclass
from typing import Any


MAX_SAFE_INTEGER = 2**53 - 1


def escape_string(s: str) -> str:
    """Escape a string for canonical JSON."""
    result = ['"']
    for c in s:
        code = ord(c)
        if c == '"':
            result.append('\\"')
        elif c == '\\':
            result.append('\\\\')
        elif c == '\b':
            result.append('\\b')
        elif c == '\f':
            result.append('\\f')
        elif c == '\n':
            result.append('\\n')
        elif c == '\r':
            result.append('\\r')
        elif c == '\t':
            result.append('\\t')
        elif code < 0x20:
            result.append(f'\\u{code:04x}')
        else:
            result.append(c)
    result.append('"')
    return ''.join(result)


def _to_json_value(value: Any) -> Any:
    """Lower structured values (to_dict objects, dataclasses, bytes) to JSON values."""
    if isinstance(value, type):
        return value
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return value.to_dict()
    if is_dataclass(value):
        return {f.name: getattr(value, f.name) for f in fields(value)}
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, tuple):
        return list(value)
    return value


def canonicalize(value: Any) -> str:
    """
    Canonicalize a JSON-serializable value to deterministic string.

    Rules:
    - Keys sorted lexicographically
    - No whitespace
    - Integers only (no floats)
    - Proper string escaping
    - Bytes rendered as lowercase hex strings
    """
    value = _to_json_value(value)

    if value is None:
        return 'null'

    if isinstance(value, bool):
        return 'true' if value else 'false'

    if isinstance(value, int):
        if not (-MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER):
            raise ValueError("Number outside safe integer range")
        return str(value)

    if isinstance(value, float):
        raise ValueError("Floats forbidden in canonical JSON")

    if isinstance(value, str):
        return escape_string(value)

    if isinstance(value, list):
        elements = [canonicalize(v) for v in value]
        return '[' + ','.join(elements) + ']'

    if isinstance(value, dict):
        for k in value:
            if not isinstance(k, str):
                raise ValueError(f"Non-string key in canonical JSON: {k!r}")
        keys = sorted(value.keys())
        pairs = [escape_string(k) + ':' + canonicalize(value[k]) for k in keys]
        return '{' + ','.join(pairs) + '}'

    raise ValueError(f"Unsupported type in canonical JSON: {type(value)}")


def canonicalize_bytes(value: Any) -> bytes:
    """Canonicalize to UTF-8 bytes."""
    return canonicalize(value).encode('utf-8')
