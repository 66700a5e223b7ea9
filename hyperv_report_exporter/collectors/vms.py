from typing import List

from .context import CollectorContext
from ..errors import PowerShellError
from ..reflect import reflect_properties
from ..schemas import Record


def collect(context: CollectorContext, host: str, cluster_name: str) -> List[Record]:
    client = context.client
    diagnostics = context.diagnostics
    logger = context.logger

    try:
        vm_items = client.list_vms(host)
    except PowerShellError as exc:
        error_type = diagnostics.add_error("VMs", host, exc)
        diagnostics.add_skipped_host(host, f"VMs: {error_type}")
        logger.warning("VMs de %s omitidas (%s): %s", host, error_type, exc.message)
        return []

    rows = []
    for idx, item in enumerate(vm_items):
        diagnostics.add_attempt("VMs")
        if not isinstance(item, dict):
            diagnostics.add_error("VMs", f"{host}#{idx}", ValueError(f"Entrada no es objeto: {item!r}"))
            logger.debug("Descartada VM #%s de %s: %r", idx, host, item)
            continue

        row = reflect_properties(item)
        row["ClusterName"] = cluster_name
        row["Host"] = host
        rows.append(row)
        diagnostics.add_success("VMs")

    logger.debug("Host %s: %s VMs", host, len(rows))
    return rows
