"""
Static snapshot provider.

Reads a local json file that contains one snapshot.
This is useful for dev, tests, and replaying a host's inventory.

Schema example
{
  "hostname": "h1",
  "short_name": "debian",
  "installed_packages": {
    "apt": [{"name": "bash", "arch": "amd64", "version": "5.2", "source": {"name": "bash"}}],
    "wua": [{"title": "KB1", "update_id": "u1", "last_deployment_change_time": "2024-01-02T00:00:00+00:00"}]
  },
  "package_updates": {"apt": []},
  "new_installed_packages": [{"name": "bash", "type": "deb", "version": "5.2"}],
  "tooling": {"yum_exists": false, "zypper_exists": false}
}

Missing keys take their empty defaults. A missing installed_packages or
package_updates object stays None.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from guest_inventory.core.types import (
    InstanceInventorySnapshot,
    InventoryItem,
    Packages,
    PkgInfo,
    QFEPackage,
    Source,
    WindowsApplication,
    WUAPackage,
    ZypperPatch,
)
from guest_inventory.normalizer.policy import HostTooling
from guest_inventory.snapshot.base import CollectedInventory, SnapshotProvider

_PKG_INFO_KEYS = ("apt", "deb", "googet", "yum", "zypper", "rpm", "cos", "pip", "gem")


def _dicts(raw: Any) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    return [x for x in raw if isinstance(x, dict)]


def _strs(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(str(x) for x in raw)


def _time(raw: Any) -> Optional[datetime]:
    if not raw:
        return None
    return datetime.fromisoformat(str(raw))


def _pkg_info_from_dict(obj: dict[str, Any]) -> PkgInfo:
    source_obj = obj.get("source", {}) or {}
    return PkgInfo(
        name=str(obj.get("name", "")),
        arch=str(obj.get("arch", "")),
        version=str(obj.get("version", "")),
        source=Source(
            name=str(source_obj.get("name", "")),
            version=str(source_obj.get("version", "")),
        ),
    )


def _wua_from_dict(obj: dict[str, Any]) -> WUAPackage:
    return WUAPackage(
        title=str(obj.get("title", "")),
        description=str(obj.get("description", "")),
        categories=_strs(obj.get("categories")),
        category_ids=_strs(obj.get("category_ids")),
        kb_article_ids=_strs(obj.get("kb_article_ids")),
        more_info_urls=_strs(obj.get("more_info_urls")),
        support_url=str(obj.get("support_url", "")),
        update_id=str(obj.get("update_id", "")),
        revision_number=int(obj.get("revision_number", 0)),
        last_deployment_change_time=_time(obj.get("last_deployment_change_time")),
    )


def _packages_from_dict(obj: Any) -> Optional[Packages]:
    if not isinstance(obj, dict):
        return None

    lists: dict[str, Any] = {
        key: tuple(_pkg_info_from_dict(x) for x in _dicts(obj.get(key))) for key in _PKG_INFO_KEYS
    }
    return Packages(
        zypper_patches=tuple(
            ZypperPatch(
                name=str(x.get("name", "")),
                category=str(x.get("category", "")),
                severity=str(x.get("severity", "")),
                summary=str(x.get("summary", "")),
            )
            for x in _dicts(obj.get("zypper_patches"))
        ),
        wua=tuple(_wua_from_dict(x) for x in _dicts(obj.get("wua"))),
        qfe=tuple(
            QFEPackage(
                caption=str(x.get("caption", "")),
                description=str(x.get("description", "")),
                hotfix_id=str(x.get("hotfix_id", "")),
                installed_on=str(x.get("installed_on", "")),
            )
            for x in _dicts(obj.get("qfe"))
        ),
        windows_application=tuple(
            WindowsApplication(
                display_name=str(x.get("display_name", "")),
                display_version=str(x.get("display_version", "")),
                publisher=str(x.get("publisher", "")),
                install_date=_time(x.get("install_date")),
                help_link=str(x.get("help_link", "")),
            )
            for x in _dicts(obj.get("windows_application"))
        ),
        **lists,
    )


def _item_from_dict(obj: dict[str, Any]) -> InventoryItem:
    metadata = obj.get("metadata", {}) or {}
    return InventoryItem(
        name=str(obj.get("name", "")),
        type=str(obj.get("type", "")),
        version=str(obj.get("version", "")),
        purl=str(obj.get("purl", "")),
        location=_strs(obj.get("location")),
        metadata=dict(metadata) if isinstance(metadata, dict) else {},
    )


def snapshot_from_dict(obj: dict[str, Any]) -> InstanceInventorySnapshot:
    """Convert a snapshot document into an InstanceInventorySnapshot."""
    return InstanceInventorySnapshot(
        hostname=str(obj.get("hostname", "")),
        long_name=str(obj.get("long_name", "")),
        short_name=str(obj.get("short_name", "")),
        version=str(obj.get("version", "")),
        architecture=str(obj.get("architecture", "")),
        kernel_version=str(obj.get("kernel_version", "")),
        kernel_release=str(obj.get("kernel_release", "")),
        osconfig_agent_version=str(obj.get("osconfig_agent_version", "")),
        last_updated=str(obj.get("last_updated", "")),
        installed_packages=_packages_from_dict(obj.get("installed_packages")),
        package_updates=_packages_from_dict(obj.get("package_updates")),
        new_installed_packages=tuple(
            _item_from_dict(x) for x in _dicts(obj.get("new_installed_packages"))
        ),
    )


@dataclass(frozen=True)
class StaticSnapshotProvider(SnapshotProvider):
    """
    Load a snapshot from a local json file.

    path points to a json file that matches the schema described in the module docstring.
    """

    path: Path

    def load(self) -> CollectedInventory:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            data = {}

        tooling_obj = data.get("tooling", {}) or {}
        tooling = HostTooling(
            yum_exists=bool(tooling_obj.get("yum_exists", False)),
            zypper_exists=bool(tooling_obj.get("zypper_exists", False)),
        )
        return CollectedInventory(snapshot=snapshot_from_dict(data), tooling=tooling)
