import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from dotenv import dotenv_values

from .errors import ConfigError
from .remote import RemoteCreds
from .writer import normalize_format

HOST_ALIASES = ["HYPERV_HOST", "HYPERV_SERVER"]
USER_ALIASES = ["HYPERV_USER", "HYPERV_USERNAME"]
PASSWORD_ALIASES = ["HYPERV_PASS", "HYPERV_PASSWORD"]
TRANSPORT_ALIASES = ["HYPERV_TRANSPORT"]
INSECURE_ALIASES = ["HYPERV_INSECURE"]

DEFAULT_FORMAT = "json"
DEFAULT_TRANSPORT = "ntlm"
DEFAULT_TIMEOUT_SEC = 300


def _env_bool(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass
class Config:
    out_dir: str
    export_format: str
    remote: Optional[RemoteCreds]
    timeout_sec: int
    diagnostics_enabled: bool
    debug: bool
    env_file_used: Optional[str]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Hyper-V Inventory Report Exporter")
    parser.add_argument("--out-dir", dest="out_dir", help="Directorio de salida (default: cwd)")
    parser.add_argument("--format", dest="export_format", help="Formato de exportacion: json o csv")
    parser.add_argument("--host", help="Host Hyper-V a consultar via WinRM (default: local)")
    parser.add_argument("--user", help="Usuario WinRM")
    parser.add_argument("--password", help="Password WinRM")
    parser.add_argument("--transport", help="Transporte WinRM (ntlm, kerberos, basic...)")
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Deshabilita verificacion TLS de WinRM (solo si es necesario)",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout_sec",
        type=int,
        help="Timeout en segundos por consulta PowerShell local",
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Escribe <reporte>-diagnostics.json junto al reporte",
    )
    parser.add_argument("--debug", action="store_true", help="Logs en modo debug")
    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Ruta a archivo .env (si no se especifica, se usa ./.env si existe)",
    )
    return parser.parse_args(argv)


def _resolve_env_file(env_file: Optional[str], base_dir: Path) -> Optional[Path]:
    if env_file:
        candidate = Path(env_file)
        if not candidate.is_file():
            raise ConfigError(f"No se encontro .env en: {candidate}")
        return candidate

    candidate = base_dir / ".env"
    if candidate.is_file():
        return candidate
    return None


def _read_env_values(env_file: Optional[Path]) -> Dict[str, str]:
    if env_file is None:
        return {}
    values = dotenv_values(env_file)
    normalized = {}
    for key, value in values.items():
        if value is None:
            continue
        normalized[key] = str(value).strip()
    return normalized


def _resolve_alias_value(aliases: List[str], env_values: Dict[str, str]) -> Optional[str]:
    resolved = None
    for key in aliases:
        value = env_values.get(key)
        if value:
            resolved = value
            break

    for key in aliases:
        value = os.environ.get(key)
        if value:
            return value.strip()

    return resolved


def _resolve_plain_value(key: str, env_values: Dict[str, str]) -> Optional[str]:
    resolved = env_values.get(key)
    env_override = os.environ.get(key)
    if env_override:
        return env_override.strip()
    return resolved


def _resolve_timeout(cli_value: Optional[int], env_values: Dict[str, str]) -> int:
    if cli_value is not None:
        timeout = cli_value
    else:
        raw = _resolve_plain_value("HYPERV_TIMEOUT", env_values)
        if not raw:
            return DEFAULT_TIMEOUT_SEC
        try:
            timeout = int(raw)
        except ValueError as exc:
            raise ConfigError(f"HYPERV_TIMEOUT invalido: {raw!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"El timeout debe ser positivo: {timeout}")
    return timeout


def load_config(args: argparse.Namespace, base_dir: Optional[Path] = None) -> Config:
    base_dir = base_dir or Path.cwd()
    env_file = _resolve_env_file(args.env_file, base_dir)
    env_values = _read_env_values(env_file)

    export_format = normalize_format(
        args.export_format
        or _resolve_plain_value("HYPERV_REPORT_FORMAT", env_values)
        or DEFAULT_FORMAT
    )
    out_dir = (
        args.out_dir
        or _resolve_plain_value("HYPERV_REPORT_DIR", env_values)
        or str(base_dir)
    )

    host = (args.host or "").strip() or _resolve_alias_value(HOST_ALIASES, env_values)
    remote = None
    if host:
        remote = RemoteCreds(
            host=host,
            username=(args.user or "").strip() or _resolve_alias_value(USER_ALIASES, env_values),
            password=(args.password or "").strip()
            or _resolve_alias_value(PASSWORD_ALIASES, env_values),
            transport=(args.transport or "").strip()
            or _resolve_alias_value(TRANSPORT_ALIASES, env_values)
            or DEFAULT_TRANSPORT,
            use_winrm=True,
            insecure=args.insecure or _env_bool(_resolve_alias_value(INSECURE_ALIASES, env_values)),
        )

    return Config(
        out_dir=out_dir,
        export_format=export_format,
        remote=remote,
        timeout_sec=_resolve_timeout(args.timeout_sec, env_values),
        diagnostics_enabled=args.diagnostics,
        debug=args.debug,
        env_file_used=str(env_file) if env_file else None,
    )
