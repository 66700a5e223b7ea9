from __future__ import annotations

from datetime import datetime, timezone

from hyperv_report_exporter.reflect import merge_prefixed, normalize_value, reflect_properties


def test_scalars_are_kept():
    assert normalize_value(None) is None
    assert normalize_value(True) is True
    assert normalize_value(42) == 42
    assert normalize_value(1.5) == 1.5
    assert normalize_value("Running") == "Running"


def test_powershell_date_becomes_iso_timestamp():
    assert normalize_value("/Date(0)/") == "1970-01-01T00:00:00+00:00"
    assert normalize_value("/Date(1700000000000+0100)/") == "2023-11-14T22:13:20+00:00"


def test_powershell_min_date_and_out_of_range_dates():
    assert normalize_value("/Date(-62135596800000)/") == "0001-01-01T00:00:00+00:00"
    assert normalize_value("/Date(999999999999999999)/") == "/Date(999999999999999999)/"


def test_datetime_is_serialized_as_utc():
    value = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert normalize_value(value) == "2024-03-01T12:00:00+00:00"


def test_scalar_list_is_joined():
    assert normalize_value(["vSwitch-LAN", "vSwitch-SAN", None]) == "vSwitch-LAN, vSwitch-SAN"
    assert normalize_value([]) == ""


def test_nested_objects_become_sorted_json():
    value = {"b": 1, "a": [{"x": True}]}
    assert normalize_value(value) == '{"a":[{"x":true}],"b":1}'


def test_reflect_tolerates_empty_and_non_mapping_objects():
    assert reflect_properties({}) == {}
    assert reflect_properties(None) == {}
    assert reflect_properties("not an object") == {}


def test_reflect_drops_cim_plumbing():
    record = reflect_properties(
        {"Caption": "Windows", "CimClass": "root/cimv2:Win32_OperatingSystem", "CimInstanceProperties": "..."}
    )
    assert record == {"Caption": "Windows"}


def test_merge_prefixed_keeps_sources_apart():
    record = merge_prefixed(
        ("OS_", {"Name": "Windows Server"}),
        ("System_", {"Name": "HV-01"}),
        ("HyperV_", {"Name": "HV-01", "NumaSpanningEnabled": False}),
    )
    assert record == {
        "OS_Name": "Windows Server",
        "System_Name": "HV-01",
        "HyperV_Name": "HV-01",
        "HyperV_NumaSpanningEnabled": False,
    }
