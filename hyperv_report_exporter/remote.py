import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Any, Optional

import winrm

from .errors import PowerShellError

logger = logging.getLogger("hyperv.remote")

LOCAL_HOST_LABEL = "localhost"

# Todas las consultas fallan como terminating errors y escriben UTF-8 en stdout
SCRIPT_PREAMBLE = (
    "$ErrorActionPreference = 'Stop'\n"
    "$ProgressPreference = 'SilentlyContinue'\n"
    "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8\n"
)


@dataclass
class RemoteCreds:
    host: str
    username: Optional[str] = None
    password: Optional[str] = None
    transport: str = "ntlm"
    use_winrm: bool = True
    insecure: bool = False


def _decode(raw: Optional[bytes]) -> str:
    if not raw:
        return ""
    return raw.decode("utf-8", errors="replace").lstrip("\ufeff")


def parse_json_output(host: str, stdout: str) -> Any:
    text = (stdout or "").strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError as exc:
        preview = text[:200]
        raise PowerShellError(host, f"Salida JSON invalida: {exc} ({preview!r})") from exc


class LocalPowerShell:
    """Ejecuta PowerShell en la maquina actual."""

    def __init__(self, executable: str = "powershell.exe", timeout: int = 300) -> None:
        self.host = LOCAL_HOST_LABEL
        self.executable = executable
        self.timeout = timeout

    def run(self, script: str) -> str:
        command = [
            self.executable,
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy",
            "Bypass",
            "-Command",
            SCRIPT_PREAMBLE + script,
        ]
        logger.debug("PowerShell local: %s", script)
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise PowerShellError(self.host, f"No se encontro {self.executable}") from exc
        except subprocess.TimeoutExpired as exc:
            raise PowerShellError(self.host, f"Timeout tras {self.timeout}s") from exc

        stdout = _decode(result.stdout)
        if result.returncode != 0:
            stderr = _decode(result.stderr).strip()
            raise PowerShellError(
                self.host,
                stderr or f"PowerShell termino con codigo {result.returncode}",
                result.returncode,
            )
        return stdout

    def run_json(self, script: str) -> Any:
        return parse_json_output(self.host, self.run(script))


class WinRMPowerShell:
    """Ejecuta PowerShell en un host remoto via WinRM (pywinrm)."""

    def __init__(self, creds: RemoteCreds) -> None:
        self.host = creds.host
        self.creds = creds
        self.session = winrm.Session(
            creds.host,
            auth=(creds.username or "", creds.password or ""),
            transport=creds.transport,
            server_cert_validation="ignore" if creds.insecure else "validate",
        )

    def run(self, script: str) -> str:
        logger.debug("PowerShell WinRM %s: %s", self.host, script)
        try:
            result = self.session.run_ps(SCRIPT_PREAMBLE + script)
        except Exception as exc:
            raise PowerShellError(self.host, f"Fallo WinRM: {exc}") from exc

        stdout = _decode(result.std_out)
        if result.status_code != 0:
            stderr = _decode(result.std_err).strip()
            raise PowerShellError(
                self.host,
                stderr or f"PowerShell termino con codigo {result.status_code}",
                result.status_code,
            )
        return stdout

    def run_json(self, script: str) -> Any:
        return parse_json_output(self.host, self.run(script))


def build_runner(remote: Optional[RemoteCreds], timeout: int = 300):
    if remote is not None and remote.use_winrm:
        return WinRMPowerShell(remote)
    return LocalPowerShell(timeout=timeout)
