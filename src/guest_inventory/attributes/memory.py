"""
In memory attribute sink.

Used for tests and local runs. Compressed values are stored as the same
base64 gzip blobs a real sink would write.

failing_paths lets tests make single writes fail.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from guest_inventory.attributes.base import AttributeSink, encode_compressed
from guest_inventory.core.errors import PublishError


@dataclass
class InMemoryAttributeSink(AttributeSink):
    failing_paths: set[str] = field(default_factory=set)
    attributes: dict[str, str] = field(default_factory=dict)
    attempts: list[str] = field(default_factory=list)

    def publish_text(self, path: str, value: str) -> None:
        self._write(path, value)

    def publish_compressed(self, path: str, value: Any) -> None:
        self._write(path, encode_compressed(value))

    def _write(self, path: str, value: str) -> None:
        self.attempts.append(path)
        if path in self.failing_paths:
            raise PublishError(f"write rejected for {path}")
        self.attributes[path] = value
