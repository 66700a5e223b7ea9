from typing import Optional

from .context import CollectorContext
from ..errors import PowerShellError
from ..reflect import merge_prefixed
from ..schemas import HOST_PREFIX_HYPERV, HOST_PREFIX_OS, HOST_PREFIX_SYSTEM, Record


def collect_host(context: CollectorContext, host: str) -> Optional[Record]:
    """Registro plano del host: sistema operativo, equipo y configuracion Hyper-V.

    Devuelve None si alguna de las tres consultas falla; el host queda
    registrado como omitido en diagnostics.
    """
    client = context.client
    diagnostics = context.diagnostics
    logger = context.logger

    diagnostics.add_attempt("Hosts")
    try:
        os_info = client.get_os_info(host)
        system_info = client.get_system_info(host)
        host_config = client.get_host_config(host)
    except PowerShellError as exc:
        error_type = diagnostics.add_error("Hosts", host, exc)
        diagnostics.add_skipped_host(host, f"Hosts: {error_type}")
        logger.warning("Host %s omitido (%s): %s", host, error_type, exc.message)
        return None

    diagnostics.add_success("Hosts")
    return merge_prefixed(
        (HOST_PREFIX_OS, os_info),
        (HOST_PREFIX_SYSTEM, system_info),
        (HOST_PREFIX_HYPERV, host_config),
    )
