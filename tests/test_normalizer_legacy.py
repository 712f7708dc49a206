import logging
from datetime import datetime, timezone

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
from guest_inventory.normalizer.legacy import normalize_legacy
from guest_inventory.schema.vm_inventory import VmOsInfo


def test_empty_snapshot_keeps_os_info_block_and_has_no_packages():
    result = normalize_legacy(InstanceInventorySnapshot())

    assert result.inventory.os_info == VmOsInfo()
    assert result.inventory.installed_packages == ()
    assert result.inventory.available_packages == ()


def test_os_info_uses_legacy_field_names():
    result = normalize_legacy(InstanceInventorySnapshot(hostname="h1", architecture="x86_64"))

    assert result.inventory.os_info.host_name == "h1"
    assert result.inventory.os_info.architecture == "x86_64"


def test_installed_items_come_from_collector_then_uncovered_legacy_kinds():
    snapshot = InstanceInventorySnapshot(
        installed_packages=Packages(
            yum=(PkgInfo(name="bash", version="5.1"),),
            zypper_patches=(ZypperPatch(name="SUSE-1", category="security"),),
            qfe=(QFEPackage(caption="c", hotfix_id="KB9", installed_on="1/2/2006"),),
        ),
        new_installed_packages=(
            InventoryItem(name="bash", type="rpm", version="5.1", purl="pkg:rpm/bash@5.1"),
        ),
    )

    result = normalize_legacy(snapshot)

    items = result.inventory.installed_packages
    assert [(i.name, i.type) for i in items] == [
        ("bash", "rpm"),
        ("SUSE-1", "ZypperPatch"),
        ("c", "QFEPackage"),
    ]
    assert items[0].purl == "pkg:rpm/bash@5.1"
    assert items[2].version == "KB9"
    assert items[2].metadata == {"Description": "", "InstalledOn": "1/2/2006"}


def test_uncovered_kinds_are_not_deduplicated_against_collector():
    snapshot = InstanceInventorySnapshot(
        installed_packages=Packages(wua=(WUAPackage(title="KB1", update_id="u1"),)),
        new_installed_packages=(InventoryItem(name="KB1", type="WUAPackage", version="u1"),),
    )

    result = normalize_legacy(snapshot)

    assert [(i.name, i.type) for i in result.inventory.installed_packages] == [
        ("KB1", "WUAPackage"),
        ("KB1", "WUAPackage"),
    ]


def test_available_items_use_synthesized_type_tags_and_metadata():
    updates = Packages(
        apt=(PkgInfo(name="libc6", version="2.36", source=Source(name="glibc", version="2.36-9")),),
        googet=(PkgInfo(name="googet", version="2.18"),),
        yum=(PkgInfo(name="kernel", version="5.14", source=Source(name="kernel-5.14.src.rpm")),),
        rpm=(PkgInfo(name="openssl", version="3.0"),),
        cos=(PkgInfo(name="containerd", version="1.7"),),
    )

    result = normalize_legacy(InstanceInventorySnapshot(package_updates=updates))

    items = result.inventory.available_packages
    assert [(i.name, i.type) for i in items] == [
        ("libc6", "deb"),
        ("googet", "googet"),
        ("kernel", "rpm"),
        ("openssl", "rpm"),
        ("containerd", "cos"),
    ]
    assert items[0].metadata == {"SourceName": "glibc", "SourceVersion": "2.36-9"}
    assert items[2].metadata == {"SourceRPM": "kernel-5.14.src.rpm"}
    assert items[1].metadata == {}
    assert all(i.location == () for i in items)


def test_wua_and_windows_application_metadata():
    deployed = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    installed = Packages(
        wua=(
            WUAPackage(
                title="KB1",
                description="security fix",
                categories=("Security Updates",),
                category_ids=("id-1",),
                kb_article_ids=("5001",),
                more_info_urls=("https://example.invalid/kb",),
                support_url="https://example.invalid/support",
                update_id="u1",
                revision_number=7,
                last_deployment_change_time=deployed,
            ),
        ),
        windows_application=(WindowsApplication(display_name="App", publisher="Vendor"),),
    )

    result = normalize_legacy(InstanceInventorySnapshot(installed_packages=installed))

    wua, app = result.inventory.installed_packages
    assert wua.version == "u1"
    assert wua.purl == "https://example.invalid/support"
    assert wua.metadata["Categories"] == [{"Id": "id-1", "Name": "Security Updates"}]
    assert wua.metadata["KbArticleId"] == ["5001"]
    assert wua.metadata["RevisionNumber"] == 7
    assert wua.metadata["LastDeploymentChangeTime"] == deployed.isoformat()

    assert app.type == "WindowsApplication"
    assert app.metadata == {"Publisher": "Vendor", "InstallDate": "", "HelpLink": ""}


def test_mismatched_wua_categories_are_truncated_with_warning(caplog):
    caplog.set_level(logging.WARNING)
    wua = WUAPackage(title="KB1", categories=("a", "b"), category_ids=("id-1",))

    result = normalize_legacy(
        InstanceInventorySnapshot(
            installed_packages=Packages(wua=(wua,)),
            package_updates=Packages(wua=(wua,)),
        )
    )

    (installed,) = result.inventory.installed_packages
    assert installed.metadata["Categories"] == [{"Id": "id-1", "Name": "a"}]
    assert [w.field for w in result.warnings] == [
        "installed_packages.wua[0].categories",
        "package_updates.wua[0].categories",
    ]
    assert "2 category names for 1 category ids" in result.warnings[0].message
    assert "installed_packages.wua[0].categories" in caplog.text

def test_unserializable_metadata_drops_only_offending_keys():
    item = InventoryItem(
        name="pkg",
        type="python",
        metadata={
            "license": "MIT",
            "size": 1024,
            "handle": object(),
            "ratio": float("nan"),
            "nested": {"ok": [1, 2], "bad": {1, 2}},
        },
    )

    result = normalize_legacy(InstanceInventorySnapshot(new_installed_packages=(item,)))

    (normalized,) = result.inventory.installed_packages
    assert normalized.metadata == {"license": "MIT", "size": 1024}
    assert sorted(w.field for w in result.warnings) == [
        "new_installed_packages[0].metadata.handle",
        "new_installed_packages[0].metadata.nested",
        "new_installed_packages[0].metadata.ratio",
    ]
