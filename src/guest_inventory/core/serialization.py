from __future__ import annotations

import json
import math
from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any


def _normalize(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return obj.isoformat()
    if hasattr(obj, "value"):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): _normalize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_normalize(v) for v in obj]
    return obj


def to_json_safe_dict(obj: Any) -> dict[str, Any]:
    """
    Convert a dataclass object into a JSON safe dict.

    Tuples become lists and datetimes become ISO 8601 strings.
    """
    if not is_dataclass(obj) or isinstance(obj, type):
        raise TypeError("expected a dataclass instance")
    raw = asdict(obj)
    normalized = _normalize(raw)
    if not isinstance(normalized, dict):
        raise TypeError("expected dict after normalization")
    return normalized


def canonical_json_bytes(payload: Any) -> bytes:
    """
    Encode payload as canonical JSON bytes.

    Keys are sorted, separators are compact and NaN is rejected, so equal
    payloads always produce equal bytes.
    """
    text = json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def json_value_problem(value: Any) -> str | None:
    """
    Explain why value is not representable as a JSON value.

    Returns None when the value is fine. Used to sanitize free form metadata
    before it enters a canonical schema.
    """
    if value is None or isinstance(value, (str, bool, int)):
        return None
    if isinstance(value, float):
        if math.isfinite(value):
            return None
        return f"non finite number {value!r}"
    if isinstance(value, (list, tuple)):
        for idx, item in enumerate(value):
            problem = json_value_problem(item)
            if problem is not None:
                return f"index {idx}: {problem}"
        return None
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                return f"non string key {key!r}"
            problem = json_value_problem(item)
            if problem is not None:
                return f"key {key}: {problem}"
        return None
    return f"unsupported type {type(value).__name__}"


def to_json_value(value: Any) -> Any:
    """Copy a value that passed json_value_problem into plain lists and dicts."""
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    if isinstance(value, dict):
        return {k: to_json_value(v) for k, v in value.items()}
    return value
