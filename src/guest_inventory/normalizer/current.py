"""
Current schema normalizer.

Maps an InstanceInventorySnapshot to an Inventory.

Rules
Each legacy collection maps to exactly one package variant.
apt and deb are the same manager family and both become apt packages.
rpm becomes yum or zypper through RpmAliasPolicy.
pip and gem are not reported.
A missing or empty collection produces no entries.

Collection quality problems never abort normalization. The package is still
emitted with the bad field left absent, and a warning is returned.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from guest_inventory.core.types import (
    InstanceInventorySnapshot,
    Packages,
    PkgInfo,
    QFEPackage,
    WindowsApplication,
    WUAPackage,
    ZypperPatch,
    is_zero_time,
)
from guest_inventory.normalizer.policy import HostTooling, RpmAliasPolicy, RpmFlavor
from guest_inventory.normalizer.result import NormalizationResult, NormalizationWarning
from guest_inventory.schema.inventory import (
    ABSENT_DATE,
    Date,
    Inventory,
    OsInfo,
    PackageKind,
    SoftwarePackage,
    Timestamp,
    VersionedPackage,
    VersionedSource,
    WindowsApplicationDetails,
    WindowsQuickFixEngineeringPackage,
    WindowsUpdateCategory,
    WindowsUpdatePackage,
    ZypperPatchDetails,
)

LOGGER = logging.getLogger(__name__)

QFE_DATE_FORMAT = "%m/%d/%Y"


def os_info_from_snapshot(snapshot: InstanceInventorySnapshot) -> OsInfo:
    return OsInfo(
        hostname=snapshot.hostname,
        long_name=snapshot.long_name,
        short_name=snapshot.short_name,
        version=snapshot.version,
        architecture=snapshot.architecture,
        kernel_version=snapshot.kernel_version,
        kernel_release=snapshot.kernel_release,
        osconfig_agent_version=snapshot.osconfig_agent_version,
    )


def _versioned(pkg: PkgInfo, with_source: bool) -> VersionedPackage:
    source = None
    # Some managers report a source package, only keep it when it is named.
    if with_source and pkg.source.name:
        source = VersionedSource(name=pkg.source.name, version=pkg.source.version)
    return VersionedPackage(
        package_name=pkg.name,
        architecture=pkg.arch,
        version=pkg.version,
        source=source,
    )


def _zypper_patch(pkg: ZypperPatch) -> ZypperPatchDetails:
    return ZypperPatchDetails(
        patch_name=pkg.name,
        category=pkg.category,
        severity=pkg.severity,
        summary=pkg.summary,
    )


def _wua(pkg: WUAPackage, field: str, warnings: list[NormalizationWarning]) -> WindowsUpdatePackage:
    if len(pkg.categories) != len(pkg.category_ids):
        warnings.append(
            NormalizationWarning(
                field=f"{field}.categories",
                message=(
                    f"{len(pkg.categories)} category names for "
                    f"{len(pkg.category_ids)} category ids, unpaired entries dropped"
                ),
            )
        )
    categories = tuple(
        WindowsUpdateCategory(id=cat_id, name=name)
        for cat_id, name in zip(pkg.category_ids, pkg.categories)
    )

    deployed: Optional[Timestamp] = None
    if not is_zero_time(pkg.last_deployment_change_time):
        deployed = Timestamp.from_datetime(pkg.last_deployment_change_time)

    return WindowsUpdatePackage(
        title=pkg.title,
        description=pkg.description,
        categories=categories,
        kb_article_ids=tuple(pkg.kb_article_ids),
        support_url=pkg.support_url,
        more_info_urls=tuple(pkg.more_info_urls),
        update_id=pkg.update_id,
        revision_number=pkg.revision_number,
        last_deployment_change_time=deployed,
    )


def parse_qfe_installed_on(value: str) -> datetime:
    """
    Parse a QFE InstalledOn value such as 1/2/2006.

    Raises ValueError when the value does not match M/D/YYYY.
    """
    parsed = datetime.strptime(value.strip(), QFE_DATE_FORMAT)
    return parsed.replace(tzinfo=timezone.utc)


def _qfe(
    pkg: QFEPackage,
    field: str,
    warnings: list[NormalizationWarning],
) -> WindowsQuickFixEngineeringPackage:
    install_time: Optional[Timestamp] = None
    try:
        install_time = Timestamp.from_datetime(parse_qfe_installed_on(pkg.installed_on))
    except ValueError as exc:
        warnings.append(
            NormalizationWarning(
                field=f"{field}.installed_on",
                message=f"cannot parse QFE install date {pkg.installed_on!r}: {exc}",
            )
        )

    return WindowsQuickFixEngineeringPackage(
        caption=pkg.caption,
        description=pkg.description,
        hot_fix_id=pkg.hotfix_id,
        install_time=install_time,
    )


def _windows_application(pkg: WindowsApplication) -> WindowsApplicationDetails:
    # A zero install date must not leak out as 0001-01-01.
    install_date = ABSENT_DATE
    if not is_zero_time(pkg.install_date):
        install_date = Date(
            year=pkg.install_date.year,
            month=pkg.install_date.month,
            day=pkg.install_date.day,
        )
    return WindowsApplicationDetails(
        display_name=pkg.display_name,
        display_version=pkg.display_version,
        publisher=pkg.publisher,
        install_date=install_date,
        help_link=pkg.help_link,
    )


def format_packages(
    pkgs: Optional[Packages],
    rpm_flavor: RpmFlavor,
    field: str,
    warnings: list[NormalizationWarning],
) -> tuple[SoftwarePackage, ...]:
    """
    Map one legacy Packages value to current schema packages.

    Order is fixed: apt, deb, googet, yum, zypper, rpm, zypper patches, wua,
    qfe, cos, windows applications.
    """
    if pkgs is None:
        return ()

    out: list[SoftwarePackage] = []

    for pkg in pkgs.apt:
        out.append(SoftwarePackage(PackageKind.apt, _versioned(pkg, with_source=True)))
    for pkg in pkgs.deb:
        out.append(SoftwarePackage(PackageKind.apt, _versioned(pkg, with_source=True)))
    for pkg in pkgs.googet:
        out.append(SoftwarePackage(PackageKind.googet, _versioned(pkg, with_source=False)))
    for pkg in pkgs.yum:
        out.append(SoftwarePackage(PackageKind.yum, _versioned(pkg, with_source=True)))
    for pkg in pkgs.zypper:
        out.append(SoftwarePackage(PackageKind.zypper, _versioned(pkg, with_source=False)))

    for pkg in pkgs.rpm:
        if rpm_flavor == RpmFlavor.yum:
            out.append(SoftwarePackage(PackageKind.yum, _versioned(pkg, with_source=True)))
        else:
            out.append(SoftwarePackage(PackageKind.zypper, _versioned(pkg, with_source=False)))

    for patch in pkgs.zypper_patches:
        out.append(SoftwarePackage(PackageKind.zypper_patch, _zypper_patch(patch)))
    for idx, wua in enumerate(pkgs.wua):
        details = _wua(wua, f"{field}.wua[{idx}]", warnings)
        out.append(SoftwarePackage(PackageKind.wua, details))
    for idx, qfe in enumerate(pkgs.qfe):
        details = _qfe(qfe, f"{field}.qfe[{idx}]", warnings)
        out.append(SoftwarePackage(PackageKind.qfe, details))
    for pkg in pkgs.cos:
        out.append(SoftwarePackage(PackageKind.cos, _versioned(pkg, with_source=False)))
    for app in pkgs.windows_application:
        out.append(SoftwarePackage(PackageKind.windows_application, _windows_application(app)))

    return tuple(out)


def normalize_current(
    snapshot: InstanceInventorySnapshot,
    tooling: HostTooling | None = None,
    policy: RpmAliasPolicy | None = None,
) -> NormalizationResult[Inventory]:
    """
    Build the current schema inventory for a snapshot.

    tooling
    Package manager presence flags used by the rpm aliasing policy.

    policy
    Decides whether rpm packages are yum or zypper packages.
    """
    tooling = tooling or HostTooling()
    policy = policy or RpmAliasPolicy()
    rpm_flavor = policy.resolve(tooling)

    warnings: list[NormalizationWarning] = []
    installed = format_packages(
        snapshot.installed_packages, rpm_flavor, "installed_packages", warnings
    )
    available = format_packages(
        snapshot.package_updates, rpm_flavor, "package_updates", warnings
    )

    for warning in warnings:
        LOGGER.warning("inventory field degraded: %s", warning)

    inventory = Inventory(
        os_info=os_info_from_snapshot(snapshot),
        installed_packages=installed,
        available_packages=available,
    )
    return NormalizationResult(inventory=inventory, warnings=tuple(warnings))
