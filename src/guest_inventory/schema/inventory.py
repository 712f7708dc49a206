"""
Current canonical schema.

Inventory is the shape reported through the current report operation.

Important design choice
SoftwarePackage is an explicit sum type: a PackageKind tag plus exactly one
details payload whose type is fixed by the tag. Construction rejects a payload
that does not match its tag, so a package can never be silently re-tagged.

Field names mirror the collector schema and are a compatibility contract.
Do not rename them without a schema version bump in the codec.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional, Tuple, Union

from guest_inventory.core.errors import NormalizationError


class PackageKind(StrEnum):
    """
    Package variants of the current schema.

    The value is the field name the variant payload uses on the wire.
    """

    apt = "apt_package"
    yum = "yum_package"
    zypper = "zypper_package"
    googet = "googet_package"
    cos = "cos_package"
    zypper_patch = "zypper_patch"
    wua = "wua_package"
    qfe = "qfe_package"
    windows_application = "windows_application"


@dataclass(frozen=True)
class Timestamp:
    """Point in time as seconds and nanos since the unix epoch."""

    seconds: int
    nanos: int = 0

    @classmethod
    def from_datetime(cls, value: datetime) -> "Timestamp":
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        delta = value - datetime(1970, 1, 1, tzinfo=timezone.utc)
        seconds = delta.days * 86400 + delta.seconds
        return cls(seconds=seconds, nanos=delta.microseconds * 1000)


@dataclass(frozen=True)
class Date:
    """
    Calendar date.

    Date(0, 0, 0) is the explicit absent date, see ABSENT_DATE.
    """

    year: int
    month: int
    day: int


ABSENT_DATE = Date(year=0, month=0, day=0)


@dataclass(frozen=True)
class OsInfo:
    hostname: str = ""
    long_name: str = ""
    short_name: str = ""
    version: str = ""
    architecture: str = ""
    kernel_version: str = ""
    kernel_release: str = ""
    osconfig_agent_version: str = ""


@dataclass(frozen=True)
class VersionedSource:
    name: str
    version: str = ""


@dataclass(frozen=True)
class VersionedPackage:
    """
    Payload of apt, yum, zypper, googet and cos packages.

    source is None when the manager did not report a source package.
    """

    package_name: str
    architecture: str = ""
    version: str = ""
    source: Optional[VersionedSource] = None


@dataclass(frozen=True)
class ZypperPatchDetails:
    patch_name: str
    category: str = ""
    severity: str = ""
    summary: str = ""


@dataclass(frozen=True)
class WindowsUpdateCategory:
    id: str
    name: str


@dataclass(frozen=True)
class WindowsUpdatePackage:
    """
    Payload of Windows Update Agent packages.

    categories has no stable order between collections. The stable fingerprint
    identifies these packages by title, update_id and revision_number only.
    """

    title: str
    description: str = ""
    categories: Tuple[WindowsUpdateCategory, ...] = ()
    kb_article_ids: Tuple[str, ...] = ()
    support_url: str = ""
    more_info_urls: Tuple[str, ...] = ()
    update_id: str = ""
    revision_number: int = 0
    last_deployment_change_time: Optional[Timestamp] = None


@dataclass(frozen=True)
class WindowsQuickFixEngineeringPackage:
    """install_time is None when the collected date could not be parsed."""

    caption: str
    description: str = ""
    hot_fix_id: str = ""
    install_time: Optional[Timestamp] = None


@dataclass(frozen=True)
class WindowsApplicationDetails:
    display_name: str
    display_version: str = ""
    publisher: str = ""
    install_date: Date = ABSENT_DATE
    help_link: str = ""


PackageDetails = Union[
    VersionedPackage,
    ZypperPatchDetails,
    WindowsUpdatePackage,
    WindowsQuickFixEngineeringPackage,
    WindowsApplicationDetails,
]


DETAILS_TYPE_BY_KIND: dict[PackageKind, type] = {
    PackageKind.apt: VersionedPackage,
    PackageKind.yum: VersionedPackage,
    PackageKind.zypper: VersionedPackage,
    PackageKind.googet: VersionedPackage,
    PackageKind.cos: VersionedPackage,
    PackageKind.zypper_patch: ZypperPatchDetails,
    PackageKind.wua: WindowsUpdatePackage,
    PackageKind.qfe: WindowsQuickFixEngineeringPackage,
    PackageKind.windows_application: WindowsApplicationDetails,
}


@dataclass(frozen=True)
class SoftwarePackage:
    """
    One package of the current schema.

    kind
    Which manager variant this package is.

    details
    Variant payload. Its type must match DETAILS_TYPE_BY_KIND[kind].
    """

    kind: PackageKind
    details: PackageDetails

    def __post_init__(self) -> None:
        expected = DETAILS_TYPE_BY_KIND.get(self.kind)
        if expected is None:
            raise NormalizationError(f"unknown package kind {self.kind!r}")
        if not isinstance(self.details, expected):
            raise NormalizationError(
                f"{self.kind.name} package needs {expected.__name__} details, "
                f"got {type(self.details).__name__}"
            )


@dataclass(frozen=True)
class Inventory:
    """
    Current canonical inventory.

    os_info is always present, even when every field is empty.
    """

    os_info: OsInfo = OsInfo()
    installed_packages: Tuple[SoftwarePackage, ...] = ()
    available_packages: Tuple[SoftwarePackage, ...] = ()
