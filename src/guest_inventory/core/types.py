"""
Snapshot types.

This file defines the input model: one immutable snapshot of everything the
inventory collectors found on a host.

Important design choice
The snapshot mirrors what the collectors produce, not what the collector
service wants. Mapping into the wire shapes belongs to the normalizers.

Two families of package data live side by side:
legacy per manager collections in Packages
a flat list of InventoryItem records from the manager agnostic collector

Time values are timezone aware datetimes. None and ZERO_TIME both mean
"no value was collected".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def is_zero_time(value: Optional[datetime]) -> bool:
    """Return True for the zero time sentinel or a missing value."""
    if value is None:
        return True
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value == ZERO_TIME


@dataclass(frozen=True)
class Source:
    """Upstream source package of a binary package, when the manager knows it."""

    name: str = ""
    version: str = ""


@dataclass(frozen=True)
class PkgInfo:
    """
    Package record shared by apt, deb, yum, zypper, rpm, googet and cos.

    source is only meaningful for managers that track source packages.
    """

    name: str
    arch: str = ""
    version: str = ""
    source: Source = field(default_factory=Source)


@dataclass(frozen=True)
class ZypperPatch:
    name: str
    category: str = ""
    severity: str = ""
    summary: str = ""


@dataclass(frozen=True)
class WUAPackage:
    """
    Windows Update Agent record.

    categories and category_ids are parallel lists, index i of one names
    index i of the other.
    """

    title: str
    description: str = ""
    categories: Tuple[str, ...] = ()
    category_ids: Tuple[str, ...] = ()
    kb_article_ids: Tuple[str, ...] = ()
    more_info_urls: Tuple[str, ...] = ()
    support_url: str = ""
    update_id: str = ""
    revision_number: int = 0
    last_deployment_change_time: Optional[datetime] = None


@dataclass(frozen=True)
class QFEPackage:
    """
    Windows quick fix engineering record.

    installed_on is free text as reported by the OS, usually M/D/YYYY.
    """

    caption: str
    description: str = ""
    hotfix_id: str = ""
    installed_on: str = ""


@dataclass(frozen=True)
class WindowsApplication:
    display_name: str
    display_version: str = ""
    publisher: str = ""
    install_date: Optional[datetime] = None
    help_link: str = ""


@dataclass(frozen=True)
class Packages:
    """
    Legacy per manager package collections.

    An empty tuple and a missing collection mean the same thing.
    pip and gem are collected but no canonical schema reports them.
    """

    apt: Tuple[PkgInfo, ...] = ()
    deb: Tuple[PkgInfo, ...] = ()
    googet: Tuple[PkgInfo, ...] = ()
    yum: Tuple[PkgInfo, ...] = ()
    zypper: Tuple[PkgInfo, ...] = ()
    rpm: Tuple[PkgInfo, ...] = ()
    cos: Tuple[PkgInfo, ...] = ()
    zypper_patches: Tuple[ZypperPatch, ...] = ()
    wua: Tuple[WUAPackage, ...] = ()
    qfe: Tuple[QFEPackage, ...] = ()
    windows_application: Tuple[WindowsApplication, ...] = ()
    pip: Tuple[PkgInfo, ...] = ()
    gem: Tuple[PkgInfo, ...] = ()


@dataclass(frozen=True)
class InventoryItem:
    """
    Record from the manager agnostic collector.

    type is the collector's package type tag such as rpm or deb.
    purl is the package URL identifier.
    metadata is free form and may contain values that do not serialize.
    """

    name: str
    type: str = ""
    version: str = ""
    purl: str = ""
    location: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InstanceInventorySnapshot:
    """
    Everything collected about one host for one reporting cycle.

    The snapshot is never mutated after construction. Normalizers and the
    attribute publisher only read it.
    """

    hostname: str = ""
    long_name: str = ""
    short_name: str = ""
    version: str = ""
    architecture: str = ""
    kernel_version: str = ""
    kernel_release: str = ""
    osconfig_agent_version: str = ""
    last_updated: str = ""
    installed_packages: Optional[Packages] = None
    package_updates: Optional[Packages] = None
    new_installed_packages: Tuple[InventoryItem, ...] = ()
