import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import PowerShellError
from .schemas import LOCAL_NODE


class DiscoveryMode(str, enum.Enum):
    CLUSTERED = "clustered"
    LOCAL = "local"


@dataclass
class Topology:
    mode: DiscoveryMode
    clusters: List[Dict[str, Any]] = field(default_factory=list)


def cluster_name(cluster: Dict[str, Any]) -> str:
    return str(cluster.get("Name") or "")


def discover_topology(client, logger: Optional[logging.Logger] = None) -> Topology:
    """Un unico intento contra Failover Clustering; sin clusters se pasa a modo local."""
    logger = logger or logging.getLogger("hyperv.topology")
    try:
        clusters = client.list_clusters()
    except PowerShellError as exc:
        logger.warning(
            "Failover Clustering no disponible (%s). Continuando en modo nodo local",
            exc.message,
        )
        return Topology(mode=DiscoveryMode.LOCAL)

    unnamed = [cluster for cluster in clusters if not cluster_name(cluster)]
    if unnamed:
        logger.warning("Se ignoran %s clusters sin Name", len(unnamed))
    clusters = [cluster for cluster in clusters if cluster_name(cluster)]
    if not clusters:
        logger.warning("No se encontraron clusters. Continuando en modo nodo local")
        return Topology(mode=DiscoveryMode.LOCAL)

    logger.info(
        "Clusters encontrados: %s",
        ", ".join(cluster_name(cluster) for cluster in clusters),
    )
    return Topology(mode=DiscoveryMode.CLUSTERED, clusters=clusters)


def iter_targets(client, topology: Topology, logger, diagnostics) -> Iterator[Tuple[str, str]]:
    """Genera pares (cluster, host) en orden de cluster y luego de nodo."""
    if topology.mode is DiscoveryMode.LOCAL:
        yield LOCAL_NODE, client.local_host_name()
        return

    for cluster in topology.clusters:
        name = cluster_name(cluster)
        diagnostics.add_attempt("Nodes")
        try:
            nodes = client.list_nodes(name)
        except PowerShellError as exc:
            error_type = diagnostics.add_error("Nodes", name, exc)
            diagnostics.add_skipped_host(f"cluster:{name}", f"Nodes: {error_type}")
            logger.warning("No se pudieron listar los nodos de %s: %s", name, exc.message)
            continue
        diagnostics.add_success("Nodes")
        logger.debug("Cluster %s: nodos %s", name, nodes)
        for node in nodes:
            yield name, node
