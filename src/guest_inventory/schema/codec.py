"""
Wire codec for the canonical schemas.

Encoding rules
Field names are snake case and mirror the collector schema.
Optional fields that are None are omitted, never sent as null.
A SoftwarePackage encodes as a single key object: {kind value: details}.
Tuples encode as lists in their original order.

canonical bytes are sorted key compact JSON in UTF-8, see
core.serialization.canonical_json_bytes. The raw fingerprint digests exactly
these bytes, so any change here changes every raw fingerprint.
"""

from __future__ import annotations

from typing import Any, Callable

from guest_inventory.core.errors import NormalizationError
from guest_inventory.core.serialization import canonical_json_bytes
from guest_inventory.schema.inventory import (
    Date,
    Inventory,
    OsInfo,
    PackageKind,
    SoftwarePackage,
    Timestamp,
    VersionedPackage,
    WindowsApplicationDetails,
    WindowsQuickFixEngineeringPackage,
    WindowsUpdatePackage,
    ZypperPatchDetails,
)
from guest_inventory.schema.vm_inventory import InventoryItem, VmInventory, VmOsInfo

SCHEMA_VERSION = "v1"


def _encode_timestamp(ts: Timestamp) -> dict[str, Any]:
    return {"seconds": ts.seconds, "nanos": ts.nanos}


def _encode_date(d: Date) -> dict[str, Any]:
    return {"year": d.year, "month": d.month, "day": d.day}


def encode_os_info(os_info: OsInfo) -> dict[str, Any]:
    return {
        "hostname": os_info.hostname,
        "long_name": os_info.long_name,
        "short_name": os_info.short_name,
        "version": os_info.version,
        "architecture": os_info.architecture,
        "kernel_version": os_info.kernel_version,
        "kernel_release": os_info.kernel_release,
        "osconfig_agent_version": os_info.osconfig_agent_version,
    }


def _encode_versioned(details: VersionedPackage) -> dict[str, Any]:
    out: dict[str, Any] = {
        "package_name": details.package_name,
        "architecture": details.architecture,
        "version": details.version,
    }
    if details.source is not None:
        out["source"] = {"name": details.source.name, "version": details.source.version}
    return out


def _encode_zypper_patch(details: ZypperPatchDetails) -> dict[str, Any]:
    return {
        "patch_name": details.patch_name,
        "category": details.category,
        "severity": details.severity,
        "summary": details.summary,
    }


def _encode_wua(details: WindowsUpdatePackage) -> dict[str, Any]:
    out: dict[str, Any] = {
        "title": details.title,
        "description": details.description,
        "categories": [{"id": c.id, "name": c.name} for c in details.categories],
        "kb_article_ids": list(details.kb_article_ids),
        "support_url": details.support_url,
        "more_info_urls": list(details.more_info_urls),
        "update_id": details.update_id,
        "revision_number": details.revision_number,
    }
    if details.last_deployment_change_time is not None:
        out["last_deployment_change_time"] = _encode_timestamp(
            details.last_deployment_change_time
        )
    return out


def _encode_qfe(details: WindowsQuickFixEngineeringPackage) -> dict[str, Any]:
    out: dict[str, Any] = {
        "caption": details.caption,
        "description": details.description,
        "hot_fix_id": details.hot_fix_id,
    }
    if details.install_time is not None:
        out["install_time"] = _encode_timestamp(details.install_time)
    return out


def _encode_windows_application(details: WindowsApplicationDetails) -> dict[str, Any]:
    return {
        "display_name": details.display_name,
        "display_version": details.display_version,
        "publisher": details.publisher,
        "install_date": _encode_date(details.install_date),
        "help_link": details.help_link,
    }


_DETAIL_ENCODERS: dict[PackageKind, Callable[[Any], dict[str, Any]]] = {
    PackageKind.apt: _encode_versioned,
    PackageKind.yum: _encode_versioned,
    PackageKind.zypper: _encode_versioned,
    PackageKind.googet: _encode_versioned,
    PackageKind.cos: _encode_versioned,
    PackageKind.zypper_patch: _encode_zypper_patch,
    PackageKind.wua: _encode_wua,
    PackageKind.qfe: _encode_qfe,
    PackageKind.windows_application: _encode_windows_application,
}


def encode_software_package(pkg: SoftwarePackage) -> dict[str, Any]:
    encoder = _DETAIL_ENCODERS.get(pkg.kind)
    if encoder is None:
        raise NormalizationError(f"no encoder for package kind {pkg.kind!r}")
    return {pkg.kind.value: encoder(pkg.details)}


def encode_inventory(inventory: Inventory) -> dict[str, Any]:
    return {
        "os_info": encode_os_info(inventory.os_info),
        "installed_packages": [encode_software_package(p) for p in inventory.installed_packages],
        "available_packages": [encode_software_package(p) for p in inventory.available_packages],
    }


def encode_vm_os_info(os_info: VmOsInfo) -> dict[str, Any]:
    return {
        "host_name": os_info.host_name,
        "long_name": os_info.long_name,
        "short_name": os_info.short_name,
        "version": os_info.version,
        "architecture": os_info.architecture,
        "kernel_version": os_info.kernel_version,
        "kernel_release": os_info.kernel_release,
        "osconfig_agent_version": os_info.osconfig_agent_version,
    }


def encode_inventory_item(item: InventoryItem) -> dict[str, Any]:
    return {
        "name": item.name,
        "type": item.type,
        "version": item.version,
        "purl": item.purl,
        "location": list(item.location),
        "metadata": dict(item.metadata),
    }


def encode_vm_inventory(inventory: VmInventory) -> dict[str, Any]:
    return {
        "os_info": encode_vm_os_info(inventory.os_info),
        "installed_packages": [encode_inventory_item(i) for i in inventory.installed_packages],
        "available_packages": [encode_inventory_item(i) for i in inventory.available_packages],
    }


def encode_inventory_bytes(inventory: Inventory) -> bytes:
    return canonical_json_bytes(encode_inventory(inventory))


def encode_vm_inventory_bytes(inventory: VmInventory) -> bytes:
    return canonical_json_bytes(encode_vm_inventory(inventory))
