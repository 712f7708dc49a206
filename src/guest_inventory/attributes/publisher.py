"""
Attribute publisher.

Writes selected snapshot fields to an AttributeSink.

The field to path mapping is an explicit table, not a walk over the snapshot
fields, so adding a snapshot field never publishes anything by accident.
Path segments keep the attribute names existing readers already consume.

Every field is written independently. A failed write is logged and recorded,
and the remaining fields are still attempted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from guest_inventory.attributes.base import AttributeSink
from guest_inventory.core.types import InstanceInventorySnapshot

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_PATH = "guestInventory"

TEXT_FIELDS: tuple[tuple[str, Callable[[InstanceInventorySnapshot], str]], ...] = (
    ("Hostname", lambda s: s.hostname),
    ("LongName", lambda s: s.long_name),
    ("ShortName", lambda s: s.short_name),
    ("Version", lambda s: s.version),
    ("Architecture", lambda s: s.architecture),
    ("KernelVersion", lambda s: s.kernel_version),
    ("KernelRelease", lambda s: s.kernel_release),
    ("OSConfigAgentVersion", lambda s: s.osconfig_agent_version),
    ("LastUpdated", lambda s: s.last_updated),
)

STRUCTURED_FIELDS: tuple[tuple[str, Callable[[InstanceInventorySnapshot], Any]], ...] = (
    ("InstalledPackages", lambda s: s.installed_packages),
    ("PackageUpdates", lambda s: s.package_updates),
)


@dataclass(frozen=True)
class PublishFailure:
    path: str
    error: str


@dataclass(frozen=True)
class PublishReport:
    """
    Result of publishing one snapshot.

    published
    Paths written successfully, in table order.

    failed
    One entry per failed write.

    skipped
    Structured paths not written because the snapshot has no value.
    """

    published: tuple[str, ...]
    failed: tuple[PublishFailure, ...]
    skipped: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return len(self.failed) == 0


def publish_snapshot(
    sink: AttributeSink,
    snapshot: InstanceInventorySnapshot,
    base_path: str = DEFAULT_BASE_PATH,
) -> PublishReport:
    """Publish the text and structured fields of snapshot under base_path."""
    base = base_path.rstrip("/")
    published: list[str] = []
    failed: list[PublishFailure] = []
    skipped: list[str] = []

    for name, getter in TEXT_FIELDS:
        path = f"{base}/{name}"
        value = getter(snapshot)
        LOGGER.debug("publish_text %s: %r", path, value)
        try:
            sink.publish_text(path, value)
        except Exception as exc:
            LOGGER.error("publish_text error for %s: %s", path, exc)
            failed.append(PublishFailure(path=path, error=str(exc)))
            continue
        published.append(path)

    for name, getter in STRUCTURED_FIELDS:
        path = f"{base}/{name}"
        value = getter(snapshot)
        if value is None:
            skipped.append(path)
            continue
        LOGGER.debug("publish_compressed %s", path)
        try:
            sink.publish_compressed(path, value)
        except Exception as exc:
            LOGGER.error("publish_compressed error for %s: %s", path, exc)
            failed.append(PublishFailure(path=path, error=str(exc)))
            continue
        published.append(path)

    return PublishReport(published=tuple(published), failed=tuple(failed), skipped=tuple(skipped))
