from .context import CollectorContext, InventoryCollection
from .clusters import collect as collect_clusters
from .hosts import collect_host
from .vms import collect as collect_vms
from ..topology import discover_topology, iter_targets


def collect_inventory(context: CollectorContext) -> InventoryCollection:
    """Recorre clusters, nodos y VMs en una sola pasada secuencial."""
    client = context.client
    logger = context.logger
    diagnostics = context.diagnostics

    topology = discover_topology(client, logger)
    diagnostics.mode = topology.mode.value
    collection = InventoryCollection(started_at=context.started_at, mode=topology.mode.value)

    collection.clusters.extend(collect_clusters(context, topology.clusters))

    for cluster_name, host in iter_targets(client, topology, logger, diagnostics):
        logger.info("Recolectando host %s (cluster: %s)", host, cluster_name)
        host_row = collect_host(context, host)
        if host_row is not None:
            collection.hosts.append(host_row)
        collection.vms.extend(collect_vms(context, host, cluster_name))

    return collection


__all__ = [
    "CollectorContext",
    "InventoryCollection",
    "collect_clusters",
    "collect_host",
    "collect_inventory",
    "collect_vms",
]
