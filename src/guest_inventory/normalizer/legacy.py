"""
Legacy schema normalizer.

Maps an InstanceInventorySnapshot to a VmInventory.

Installed packages
The manager agnostic collector list comes first and always wins for the kinds
it emits. Legacy installed records of kinds it does not cover yet (zypper
patches, wua, qfe, windows applications) are appended after it.
They are never deduplicated against it, so a host may show one double counted
entry until the collector covers that kind.

Available packages
Built from the legacy update collections only, since the manager agnostic
collector does not report updates.

Metadata from the manager agnostic collector is free form. Values that cannot
be represented as JSON are dropped key by key and reported as warnings.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from guest_inventory.core.serialization import json_value_problem, to_json_value
from guest_inventory.core.types import (
    InstanceInventorySnapshot,
    Packages,
    PkgInfo,
    is_zero_time,
)
from guest_inventory.core.types import InventoryItem as CollectedItem
from guest_inventory.normalizer.result import NormalizationResult, NormalizationWarning
from guest_inventory.schema.vm_inventory import InventoryItem, VmInventory, VmOsInfo

LOGGER = logging.getLogger(__name__)

TYPE_DEB = "deb"
TYPE_RPM = "rpm"
TYPE_GOOGET = "googet"
TYPE_COS = "cos"
TYPE_ZYPPER_PATCH = "ZypperPatch"
TYPE_WUA = "WUAPackage"
TYPE_QFE = "QFEPackage"
TYPE_WINDOWS_APPLICATION = "WindowsApplication"


def vm_os_info_from_snapshot(snapshot: InstanceInventorySnapshot) -> VmOsInfo:
    return VmOsInfo(
        host_name=snapshot.hostname,
        long_name=snapshot.long_name,
        short_name=snapshot.short_name,
        version=snapshot.version,
        architecture=snapshot.architecture,
        kernel_version=snapshot.kernel_version,
        kernel_release=snapshot.kernel_release,
        osconfig_agent_version=snapshot.osconfig_agent_version,
    )


def _time_text(value: Optional[datetime]) -> str:
    if is_zero_time(value):
        return ""
    return value.isoformat()


def sanitize_metadata(
    metadata: dict[str, Any],
    field: str,
    warnings: list[NormalizationWarning],
) -> dict[str, Any]:
    """
    Keep only metadata entries that are JSON representable.

    Each dropped key adds one warning. The remaining keys are kept.
    """
    clean: dict[str, Any] = {}
    for key, value in metadata.items():
        if not isinstance(key, str):
            warnings.append(
                NormalizationWarning(field=f"{field}.metadata", message=f"non string key {key!r}")
            )
            continue
        problem = json_value_problem(value)
        if problem is not None:
            warnings.append(NormalizationWarning(field=f"{field}.metadata.{key}", message=problem))
            continue
        clean[key] = to_json_value(value)
    return clean


def _collected_item(
    item: CollectedItem,
    field: str,
    warnings: list[NormalizationWarning],
) -> InventoryItem:
    return InventoryItem(
        name=item.name,
        type=item.type,
        version=item.version,
        purl=item.purl,
        location=tuple(item.location),
        metadata=sanitize_metadata(dict(item.metadata), field, warnings),
    )


def _deb_item(pkg: PkgInfo) -> InventoryItem:
    return InventoryItem(
        name=pkg.name,
        type=TYPE_DEB,
        version=pkg.version,
        metadata={"SourceName": pkg.source.name, "SourceVersion": pkg.source.version},
    )


def _rpm_item(pkg: PkgInfo) -> InventoryItem:
    return InventoryItem(
        name=pkg.name,
        type=TYPE_RPM,
        version=pkg.version,
        metadata={"SourceRPM": pkg.source.name},
    )


def _plain_item(pkg: PkgInfo, type_tag: str) -> InventoryItem:
    return InventoryItem(name=pkg.name, type=type_tag, version=pkg.version)


def format_uncovered_packages(
    pkgs: Optional[Packages],
    field: str,
    warnings: list[NormalizationWarning],
) -> list[InventoryItem]:
    """
    Items for legacy kinds the manager agnostic collector does not emit.

    Order is fixed: zypper patches, wua, qfe, windows applications.
    Unpaired WUA category names or ids are dropped with a warning.
    """
    if pkgs is None:
        return []

    out: list[InventoryItem] = []

    for patch in pkgs.zypper_patches:
        out.append(
            InventoryItem(
                name=patch.name,
                type=TYPE_ZYPPER_PATCH,
                metadata={
                    "Category": patch.category,
                    "Severity": patch.severity,
                    "Summary": patch.summary,
                },
            )
        )

    for idx, wua in enumerate(pkgs.wua):
        if len(wua.categories) != len(wua.category_ids):
            warnings.append(
                NormalizationWarning(
                    field=f"{field}.wua[{idx}].categories",
                    message=(
                        f"{len(wua.categories)} category names for "
                        f"{len(wua.category_ids)} category ids, unpaired entries dropped"
                    ),
                )
            )
        categories = [
            {"Id": cat_id, "Name": name} for cat_id, name in zip(wua.category_ids, wua.categories)
        ]
        out.append(
            InventoryItem(
                name=wua.title,
                type=TYPE_WUA,
                version=wua.update_id,
                purl=wua.support_url,
                metadata={
                    "Description": wua.description,
                    "Categories": categories,
                    "CategoryIds": list(wua.category_ids),
                    "KbArticleId": list(wua.kb_article_ids),
                    "MoreInfoUrls": list(wua.more_info_urls),
                    "RevisionNumber": wua.revision_number,
                    "LastDeploymentChangeTime": _time_text(wua.last_deployment_change_time),
                },
            )
        )

    for qfe in pkgs.qfe:
        out.append(
            InventoryItem(
                name=qfe.caption,
                type=TYPE_QFE,
                version=qfe.hotfix_id,
                metadata={"Description": qfe.description, "InstalledOn": qfe.installed_on},
            )
        )

    for app in pkgs.windows_application:
        out.append(
            InventoryItem(
                name=app.display_name,
                type=TYPE_WINDOWS_APPLICATION,
                version=app.display_version,
                metadata={
                    "Publisher": app.publisher,
                    "InstallDate": _time_text(app.install_date),
                    "HelpLink": app.help_link,
                },
            )
        )

    return out


def format_installed_items(
    collected: tuple[CollectedItem, ...],
    legacy: Optional[Packages],
    warnings: list[NormalizationWarning],
) -> tuple[InventoryItem, ...]:
    out = [
        _collected_item(item, f"new_installed_packages[{idx}]", warnings)
        for idx, item in enumerate(collected)
    ]
    out.extend(format_uncovered_packages(legacy, "installed_packages", warnings))
    return tuple(out)


def format_available_items(
    pkgs: Optional[Packages],
    warnings: list[NormalizationWarning],
) -> tuple[InventoryItem, ...]:
    """
    Items for legacy update collections.

    Order is fixed: apt, deb, googet, yum, zypper, rpm, cos, then the
    uncovered kinds.
    """
    if pkgs is None:
        return ()

    out: list[InventoryItem] = []
    out.extend(_deb_item(p) for p in pkgs.apt)
    out.extend(_deb_item(p) for p in pkgs.deb)
    out.extend(_plain_item(p, TYPE_GOOGET) for p in pkgs.googet)
    out.extend(_rpm_item(p) for p in pkgs.yum)
    out.extend(_rpm_item(p) for p in pkgs.zypper)
    out.extend(_rpm_item(p) for p in pkgs.rpm)
    out.extend(_plain_item(p, TYPE_COS) for p in pkgs.cos)
    out.extend(format_uncovered_packages(pkgs, "package_updates", warnings))
    return tuple(out)


def normalize_legacy(snapshot: InstanceInventorySnapshot) -> NormalizationResult[VmInventory]:
    """Build the legacy schema inventory for a snapshot."""
    warnings: list[NormalizationWarning] = []

    installed = format_installed_items(
        snapshot.new_installed_packages,
        snapshot.installed_packages,
        warnings,
    )
    available = format_available_items(snapshot.package_updates, warnings)

    for warning in warnings:
        LOGGER.warning("inventory field degraded: %s", warning)

    inventory = VmInventory(
        os_info=vm_os_info_from_snapshot(snapshot),
        installed_packages=installed,
        available_packages=available,
    )
    return NormalizationResult(inventory=inventory, warnings=tuple(warnings))
