from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest

from hyperv_report_exporter.collectors import CollectorContext
from hyperv_report_exporter.diagnostics import Diagnostics
from hyperv_report_exporter.errors import PowerShellError
from hyperv_report_exporter.schemas import ENTITY_ORDER


class FakeHyperVClient:
    """HyperVClient en memoria: clusters -> nodos -> VMs."""

    def __init__(
        self,
        clusters: Optional[Dict[str, List[str]]] = None,
        vms: Optional[Dict[str, List[Any]]] = None,
        *,
        local_name: str = "HV-LOCAL",
        elevated: bool = True,
        cluster_error: Optional[str] = None,
        failing_hosts: Optional[Dict[str, str]] = None,
        failing_vm_hosts: Optional[Dict[str, str]] = None,
        failing_clusters: Optional[Dict[str, str]] = None,
    ) -> None:
        self.clusters = clusters or {}
        self.vms = vms or {}
        self.local_name = local_name
        self.elevated = elevated
        self.cluster_error = cluster_error
        self.failing_hosts = failing_hosts or {}
        self.failing_vm_hosts = failing_vm_hosts or {}
        self.failing_clusters = failing_clusters or {}
        self.calls: List[str] = []

    @property
    def entry_point(self) -> str:
        return "localhost"

    def is_elevated(self) -> bool:
        self.calls.append("is_elevated")
        return self.elevated

    def local_host_name(self) -> str:
        return self.local_name

    def list_clusters(self) -> List[Dict[str, Any]]:
        self.calls.append("list_clusters")
        if self.cluster_error:
            raise PowerShellError("localhost", self.cluster_error, 1)
        return [
            {"Name": name, "Domain": "corp.local", "QuorumType": "NodeAndFileShareMajority"}
            for name in self.clusters
        ]

    def list_nodes(self, cluster_name: str) -> List[str]:
        if cluster_name in self.failing_clusters:
            raise PowerShellError("localhost", self.failing_clusters[cluster_name], 1)
        return list(self.clusters[cluster_name])

    def list_vms(self, host: str) -> List[Any]:
        if host in self.failing_vm_hosts:
            raise PowerShellError(host, self.failing_vm_hosts[host], 1)
        return [dict(vm) if isinstance(vm, dict) else vm for vm in self.vms.get(host, [])]

    def _check(self, host: str) -> None:
        if host in self.failing_hosts:
            raise PowerShellError(host, self.failing_hosts[host], 1)

    def get_os_info(self, host: str) -> Dict[str, Any]:
        self._check(host)
        return {"Caption": "Microsoft Windows Server 2022 Datacenter", "Version": "10.0.20348", "BuildNumber": "20348"}

    def get_system_info(self, host: str) -> Dict[str, Any]:
        self._check(host)
        return {"Manufacturer": "Dell Inc.", "TotalPhysicalMemory": 274877906944, "NumberOfProcessors": 2}

    def get_host_config(self, host: str) -> Dict[str, Any]:
        self._check(host)
        return {
            "ComputerName": host,
            "VirtualMachinePath": "C:\\ClusterStorage\\Volume1",
            "VirtualHardDiskPath": "C:\\ClusterStorage\\Volume1\\VHD",
            "NumaSpanningEnabled": True,
        }


def make_vm(name: str, state: int = 2, memory: int = 4294967296) -> Dict[str, Any]:
    return {
        "Name": name,
        "State": state,
        "MemoryStartup": memory,
        "ProcessorCount": 2,
        "Generation": 2,
        "CreationTime": "/Date(1700000000000)/",
    }


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("hyperv_report.tests")


@pytest.fixture
def started_at() -> datetime:
    return datetime(2024, 5, 17, 9, 30, 15)


@pytest.fixture
def make_context(logger, started_at):
    def _make(client) -> CollectorContext:
        return CollectorContext(
            client=client,
            logger=logger,
            diagnostics=Diagnostics(ENTITY_ORDER),
            started_at=started_at,
        )

    return _make


@pytest.fixture
def local_client() -> FakeHyperVClient:
    return FakeHyperVClient(
        vms={"HV-LOCAL": [make_vm("web-01"), make_vm("db-01", state=3)]},
        cluster_error="The term 'Get-Cluster' is not recognized",
    )


@pytest.fixture
def clustered_client() -> FakeHyperVClient:
    return FakeHyperVClient(
        clusters={"CL-PROD": ["HV-A", "HV-B"], "CL-DEV": ["HV-C"]},
        vms={
            "HV-A": [make_vm("app-01"), make_vm("app-02")],
            "HV-B": [make_vm("sql-01")],
            "HV-C": [make_vm("dev-01"), make_vm("dev-02", state=3)],
        },
    )
