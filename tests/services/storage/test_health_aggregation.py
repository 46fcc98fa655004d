from storage_telemetry.models import SmartRecord, StorageDisk
from storage_telemetry.services.storage.health_aggregation import (
    aggregate_smart_records,
    normalize_device_path,
    smart_candidates,
)


def disks(*devices):
    return [StorageDisk(device=d) for d in devices]


def test_normalize_device_path():
    assert normalize_device_path("sda") == "/dev/sda"
    assert normalize_device_path("/dev/sdb") == "/dev/sdb"


def test_candidates_are_deduplicated_in_first_seen_order():
    assert smart_candidates(disks("sdb", "/dev/sda", "/dev/sdb", "sda")) == ["/dev/sdb", "/dev/sda"]


def test_only_sata_style_paths_are_candidates():
    result = smart_candidates(disks("nvme0n1", "mmcblk0", "sda1", "md0", "sdaa", "SDC"))

    assert result == ["/dev/sdaa", "/dev/SDC"]


def test_max_known_temperature_wins():
    records = [SmartRecord(temperature=40), SmartRecord(temperature=55), SmartRecord()]

    assert aggregate_smart_records(records).temperature == 55


def test_failed_dominates():
    records = [
        SmartRecord(overall_status="PASSED", healthy=True),
        SmartRecord(overall_status="FAILED", healthy=False),
    ]

    result = aggregate_smart_records(records)

    assert result.overall_status == "FAILED"
    assert result.healthy is False


def test_all_passed():
    records = [SmartRecord(overall_status="PASSED", healthy=True)] * 2

    result = aggregate_smart_records(records)

    assert result.overall_status == "PASSED"
    assert result.healthy is True


def test_all_unknown_gives_empty_record():
    assert aggregate_smart_records([SmartRecord(), SmartRecord()]).is_empty


def test_third_value_status_alone_is_unknown():
    records = [SmartRecord(overall_status="IN_PROGRESS", healthy=False)]

    result = aggregate_smart_records(records)

    assert result.overall_status is None
    assert result.healthy is None


def test_passed_with_third_value_is_passed():
    records = [
        SmartRecord(overall_status="IN_PROGRESS", healthy=False),
        SmartRecord(temperature=33, overall_status="PASSED", healthy=True),
    ]

    result = aggregate_smart_records(records)

    assert result == SmartRecord(temperature=33, overall_status="PASSED", healthy=True)
