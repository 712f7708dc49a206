"""
Report payloads.

Helpers for APICaller implementations that need the request body of a report
call. A checksum only report carries the stable fingerprint. A full report
carries the fingerprint and the encoded inventory.

Schema example
{
  "api_version": "v1",
  "inventory_checksum": "9f86d0...",
  "inventory": {"os_info": {...}, "installed_packages": [...], "available_packages": [...]}
}
"""

from __future__ import annotations

from typing import Any

from guest_inventory.fingerprint.engine import fingerprint_stable, fingerprint_stable_vm
from guest_inventory.schema.codec import SCHEMA_VERSION, encode_inventory, encode_vm_inventory
from guest_inventory.schema.inventory import Inventory
from guest_inventory.schema.vm_inventory import VmInventory


def build_report_payload(inventory: Inventory, full: bool) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "api_version": SCHEMA_VERSION,
        "inventory_checksum": fingerprint_stable(inventory),
    }
    if full:
        payload["inventory"] = encode_inventory(inventory)
    return payload


def build_vm_report_payload(inventory: VmInventory, full: bool) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "api_version": SCHEMA_VERSION,
        "inventory_checksum": fingerprint_stable_vm(inventory),
    }
    if full:
        payload["inventory"] = encode_vm_inventory(inventory)
    return payload
