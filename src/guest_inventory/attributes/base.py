"""
Attribute sink interface.

An AttributeSink stores instance attributes in a platform metadata store.
The store's wire format is not ours. We only need two writes:
publish_text for scalar fields
publish_compressed for structured fields

Sinks raise on failure. PublishError is the preferred type but the publisher
isolates any exception to the field that caused it.
"""

from __future__ import annotations

import base64
import gzip
from typing import Any, Protocol

from guest_inventory.core.serialization import canonical_json_bytes, to_json_safe_dict


class AttributeSink(Protocol):
    def publish_text(self, path: str, value: str) -> None:
        """Store value verbatim under path."""

    def publish_compressed(self, path: str, value: Any) -> None:
        """Store a compressed serialized form of value under path."""


def encode_compressed(value: Any) -> str:
    """
    Serialize value as canonical JSON, gzip it and return base64 text.

    Dataclass values are converted with to_json_safe_dict first.
    mtime is pinned so equal values give equal blobs.
    """
    if hasattr(value, "__dataclass_fields__"):
        value = to_json_safe_dict(value)
    raw = canonical_json_bytes(value)
    return base64.b64encode(gzip.compress(raw, mtime=0)).decode("ascii")


def decode_compressed(blob: str) -> bytes:
    """Return the JSON bytes inside a blob made by encode_compressed."""
    return gzip.decompress(base64.b64decode(blob))
