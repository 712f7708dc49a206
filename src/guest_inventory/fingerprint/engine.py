"""
Fingerprint engine.

Purpose
Derive hex SHA-256 digests of a canonical inventory so the collector can tell
whether a full report is needed.

Two flavors
raw digests the exact canonical encoding. Reordering packages changes it.
stable digests the OS info encoding followed by the per package fingerprint
strings sorted byte wise. Reordering packages does not change it.

Important
This module must remain deterministic. Everything it digests comes from the
canonical codec, which sorts keys and rejects non finite numbers.
"""

from __future__ import annotations

import hashlib
from typing import Iterable

from guest_inventory.core.serialization import canonical_json_bytes
from guest_inventory.schema.codec import (
    encode_inventory_bytes,
    encode_inventory_item,
    encode_os_info,
    encode_software_package,
    encode_vm_inventory_bytes,
    encode_vm_os_info,
)
from guest_inventory.schema.inventory import Inventory, PackageKind, SoftwarePackage
from guest_inventory.schema.vm_inventory import InventoryItem, VmInventory


def fingerprint_for_package(pkg: SoftwarePackage) -> str:
    """
    Per package fingerprint string.

    Windows update packages carry category lists whose order is not stable
    between collections, so they are identified by title, update id and
    revision number only. Every other variant uses its full canonical encoding.
    """
    if pkg.kind == PackageKind.wua:
        wua = pkg.details
        return f"{wua.title}-{wua.update_id}-{wua.revision_number}"
    return canonical_json_bytes(encode_software_package(pkg)).decode("utf-8")


def fingerprint_for_item(item: InventoryItem) -> str:
    """Per item fingerprint string for the legacy schema."""
    return canonical_json_bytes(encode_inventory_item(item)).decode("utf-8")


def _stable_digest(os_info_bytes: bytes, entries: Iterable[str]) -> str:
    digest = hashlib.sha256()
    digest.update(os_info_bytes)

    encoded = sorted(entry.encode("utf-8") for entry in entries)
    for entry in encoded:
        digest.update(entry)

    return digest.hexdigest()


def fingerprint_raw(inventory: Inventory) -> str:
    return hashlib.sha256(encode_inventory_bytes(inventory)).hexdigest()


def fingerprint_stable(inventory: Inventory) -> str:
    """
    Order independent fingerprint of a current schema inventory.

    Installed and available packages feed one sorted list, so moving a package
    between positions never changes the result.
    """
    entries = [fingerprint_for_package(p) for p in inventory.installed_packages]
    entries.extend(fingerprint_for_package(p) for p in inventory.available_packages)
    return _stable_digest(canonical_json_bytes(encode_os_info(inventory.os_info)), entries)


def fingerprint_raw_vm(inventory: VmInventory) -> str:
    return hashlib.sha256(encode_vm_inventory_bytes(inventory)).hexdigest()


def fingerprint_stable_vm(inventory: VmInventory) -> str:
    """Order independent fingerprint of a legacy schema inventory."""
    entries = [fingerprint_for_item(i) for i in inventory.installed_packages]
    entries.extend(fingerprint_for_item(i) for i in inventory.available_packages)
    return _stable_digest(canonical_json_bytes(encode_vm_os_info(inventory.os_info)), entries)
