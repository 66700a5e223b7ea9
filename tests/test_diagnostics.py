from __future__ import annotations

from hyperv_report_exporter.diagnostics import Diagnostics
from hyperv_report_exporter.errors import PowerShellError


def test_classify_exception_by_message():
    classify = Diagnostics.classify_exception
    assert classify(PowerShellError("hv1", "Access is denied.")) == "no_permission"
    assert classify(PowerShellError("hv1", "ObjectNotFound: (hv1:String)")) == "not_found"
    assert classify(PowerShellError("hv1", "The RPC server is unavailable.")) == "unreachable"
    assert classify(PowerShellError("hv1", "Timeout tras 300s")) == "unreachable"
    assert classify(ValueError("boom")) == "other_error"
    assert classify(PermissionError("nope")) == "no_permission"


def test_examples_are_capped_at_ten():
    diagnostics = Diagnostics(["VMs"])
    for idx in range(15):
        diagnostics.add_error("VMs", f"vm-{idx}", ValueError("bad"))

    stats = diagnostics.get_entity_stats("VMs")
    assert stats.other_error_count == 15
    assert len(stats.examples) == 10


def test_skipped_host_keeps_first_reason():
    diagnostics = Diagnostics()
    diagnostics.add_skipped_host("HV-B", "Hosts: unreachable")
    diagnostics.add_skipped_host("HV-B", "VMs: unreachable")

    assert diagnostics.skipped_hosts == {"HV-B": "Hosts: unreachable"}


def test_to_dict_includes_mode_and_entities():
    diagnostics = Diagnostics(["Clusters", "Hosts", "VMs"])
    diagnostics.mode = "local"
    diagnostics.set_runtime_config({"export_format": "json"})
    diagnostics.add_attempt("Hosts")
    diagnostics.add_success("Hosts")

    payload = diagnostics.to_dict()

    assert payload["mode"] == "local"
    assert payload["runtime_config"] == {"export_format": "json"}
    assert payload["Hosts"]["success_count"] == 1
    assert payload["skipped_hosts"] == {}
