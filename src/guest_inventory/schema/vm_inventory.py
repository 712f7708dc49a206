"""
Legacy canonical schema.

VmInventory is the shape reported through the legacy report operation.
Every package is a flat InventoryItem. Manager specific fields that do not fit
the flat shape travel in metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class VmOsInfo:
    host_name: str = ""
    long_name: str = ""
    short_name: str = ""
    version: str = ""
    architecture: str = ""
    kernel_version: str = ""
    kernel_release: str = ""
    osconfig_agent_version: str = ""


@dataclass(frozen=True)
class InventoryItem:
    """
    Flat package record.

    type
    Package type tag such as deb, rpm, googet, cos or a manager specific tag
    like WUAPackage.

    metadata
    JSON representable values only. Normalizers drop anything else.
    """

    name: str
    type: str
    version: str = ""
    purl: str = ""
    location: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class VmInventory:
    os_info: VmOsInfo = VmOsInfo()
    installed_packages: Tuple[InventoryItem, ...] = ()
    available_packages: Tuple[InventoryItem, ...] = ()
