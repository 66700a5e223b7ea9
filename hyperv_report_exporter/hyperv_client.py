from typing import Any, Dict, List, Optional

JSON_DEPTH = 1

ADMIN_CHECK_SCRIPT = (
    "$principal = New-Object Security.Principal.WindowsPrincipal("
    "[Security.Principal.WindowsIdentity]::GetCurrent())\n"
    "ConvertTo-Json -Compress -InputObject ($principal.IsInRole("
    "[Security.Principal.WindowsBuiltInRole]::Administrator))"
)


def ps_quote(value: str) -> str:
    return "'" + str(value).replace("'", "''") + "'"


def _json_array(pipeline: str, depth: int) -> str:
    return f"ConvertTo-Json -Compress -Depth {depth} -InputObject @({pipeline})"


def _json_object(pipeline: str, depth: int) -> str:
    return f"ConvertTo-Json -Compress -Depth {depth} -InputObject ({pipeline})"


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _single(value: Any) -> Dict[str, Any]:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        return value
    return {}


class HyperVClient:
    """Consultas de solo lectura a Failover Clustering, Hyper-V y CIM.

    Cada metodo devuelve property bags (dicts) tal como los entrega
    ConvertTo-Json; la interpretacion queda en los collectors.
    """

    def __init__(self, runner) -> None:
        self.runner = runner
        self._local_name: Optional[str] = None

    @property
    def entry_point(self) -> str:
        return self.runner.host

    def is_elevated(self) -> bool:
        result = self.runner.run_json(ADMIN_CHECK_SCRIPT)
        if isinstance(result, str):
            return result.strip().lower() == "true"
        return bool(result)

    def local_host_name(self) -> str:
        result = self.runner.run_json("ConvertTo-Json -Compress -InputObject $env:COMPUTERNAME")
        self._local_name = str(result or self.runner.host)
        return self._local_name

    def _computer_arg(self, host: str) -> str:
        # el nodo local se consulta sin -ComputerName para no depender de WS-Man
        local_names = {"localhost", "."}
        if self._local_name:
            local_names.add(self._local_name.lower())
        if host.lower() in local_names:
            return ""
        return f" -ComputerName {ps_quote(host)}"

    def list_clusters(self) -> List[Dict[str, Any]]:
        script = (
            "Import-Module FailoverClusters\n"
            + _json_array("Get-Cluster | Select-Object -Property *", JSON_DEPTH)
        )
        return [item for item in _as_list(self.runner.run_json(script)) if isinstance(item, dict)]

    def list_nodes(self, cluster_name: str) -> List[str]:
        script = (
            "Import-Module FailoverClusters\n"
            + _json_array(
                f"Get-ClusterNode -Cluster {ps_quote(cluster_name)} "
                "| Select-Object -ExpandProperty Name",
                JSON_DEPTH,
            )
        )
        return [str(name) for name in _as_list(self.runner.run_json(script)) if name]

    def list_vms(self, host: str) -> List[Any]:
        script = _json_array(
            f"Get-VM{self._computer_arg(host)} | Select-Object -Property *",
            JSON_DEPTH,
        )
        return _as_list(self.runner.run_json(script))

    def get_host_config(self, host: str) -> Dict[str, Any]:
        script = _json_object(
            f"Get-VMHost{self._computer_arg(host)} | Select-Object -Property *",
            JSON_DEPTH,
        )
        return _single(self.runner.run_json(script))

    def get_os_info(self, host: str) -> Dict[str, Any]:
        return self._cim_instance(host, "Win32_OperatingSystem")

    def get_system_info(self, host: str) -> Dict[str, Any]:
        return self._cim_instance(host, "Win32_ComputerSystem")

    def _cim_instance(self, host: str, class_name: str) -> Dict[str, Any]:
        script = _json_object(
            f"Get-CimInstance -ClassName {class_name}{self._computer_arg(host)} "
            "| Select-Object -Property *",
            JSON_DEPTH,
        )
        return _single(self.runner.run_json(script))
