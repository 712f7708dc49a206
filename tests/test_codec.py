import json

from guest_inventory.fingerprint.engine import fingerprint_stable, fingerprint_stable_vm
from guest_inventory.report.payload import build_report_payload, build_vm_report_payload
from guest_inventory.schema.codec import (
    SCHEMA_VERSION,
    encode_inventory_bytes,
    encode_software_package,
    encode_vm_inventory,
)
from guest_inventory.schema.inventory import (
    ABSENT_DATE,
    DETAILS_TYPE_BY_KIND,
    Inventory,
    OsInfo,
    PackageKind,
    SoftwarePackage,
    Timestamp,
    VersionedPackage,
    VersionedSource,
    WindowsApplicationDetails,
    WindowsQuickFixEngineeringPackage,
)
from guest_inventory.schema.vm_inventory import InventoryItem, VmInventory


def test_every_package_kind_encodes_under_its_wire_name():
    for kind in PackageKind:
        details = DETAILS_TYPE_BY_KIND[kind]("x")
        encoded = encode_software_package(SoftwarePackage(kind, details))
        assert list(encoded.keys()) == [kind.value]


def test_empty_inventory_encoding_is_pinned():
    assert encode_inventory_bytes(Inventory()) == (
        b'{"available_packages":[],"installed_packages":[],'
        b'"os_info":{"architecture":"","hostname":"","kernel_release":"",'
        b'"kernel_version":"","long_name":"","osconfig_agent_version":"",'
        b'"short_name":"","version":""}}'
    )


def test_absent_optional_fields_are_omitted():
    no_source = SoftwarePackage(PackageKind.yum, VersionedPackage(package_name="bash"))
    with_source = SoftwarePackage(
        PackageKind.yum,
        VersionedPackage(package_name="bash", source=VersionedSource(name="bash-src", version="1")),
    )
    no_time = SoftwarePackage(PackageKind.qfe, WindowsQuickFixEngineeringPackage(caption="c"))
    with_time = SoftwarePackage(
        PackageKind.qfe,
        WindowsQuickFixEngineeringPackage(caption="c", install_time=Timestamp(seconds=10)),
    )

    assert "source" not in encode_software_package(no_source)["yum_package"]
    assert encode_software_package(with_source)["yum_package"]["source"] == {
        "name": "bash-src",
        "version": "1",
    }
    assert "install_time" not in encode_software_package(no_time)["qfe_package"]
    assert encode_software_package(with_time)["qfe_package"]["install_time"] == {
        "seconds": 10,
        "nanos": 0,
    }


def test_absent_date_is_sent_as_all_zero_date():
    pkg = SoftwarePackage(
        PackageKind.windows_application,
        WindowsApplicationDetails(display_name="App", install_date=ABSENT_DATE),
    )

    encoded = encode_software_package(pkg)["windows_application"]
    assert encoded["install_date"] == {"year": 0, "month": 0, "day": 0}


def test_vm_inventory_encoding_uses_lists():
    inv = VmInventory(
        installed_packages=(InventoryItem(name="a", type="deb", location=("/var/lib/dpkg",)),),
    )

    encoded = encode_vm_inventory(inv)
    assert encoded["installed_packages"][0]["location"] == ["/var/lib/dpkg"]
    assert encoded["os_info"]["host_name"] == ""
    json.dumps(encoded)


def test_checksum_payload_omits_inventory_body():
    inv = Inventory(os_info=OsInfo(hostname="h1"))

    checksum = build_report_payload(inv, full=False)
    full = build_report_payload(inv, full=True)

    assert checksum == {"api_version": SCHEMA_VERSION, "inventory_checksum": fingerprint_stable(inv)}
    assert full["inventory"]["os_info"]["hostname"] == "h1"
    assert full["inventory_checksum"] == checksum["inventory_checksum"]


def test_vm_payload_uses_vm_fingerprint():
    inv = VmInventory()

    payload = build_vm_report_payload(inv, full=True)

    assert payload["inventory_checksum"] == fingerprint_stable_vm(inv)
    assert payload["inventory"] == encode_vm_inventory(inv)
