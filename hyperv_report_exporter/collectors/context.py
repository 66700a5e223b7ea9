from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from ..schemas import InventoryReport, Record


@dataclass
class CollectorContext:
    client: Any
    logger: Any
    diagnostics: Any
    started_at: datetime


@dataclass
class InventoryCollection:
    """Conjuntos de registros de una corrida; solo se agregan elementos."""

    started_at: datetime
    mode: Optional[str] = None
    clusters: List[Record] = field(default_factory=list)
    hosts: List[Record] = field(default_factory=list)
    vms: List[Record] = field(default_factory=list)

    def to_report(self) -> InventoryReport:
        return InventoryReport(Clusters=self.clusters, Hosts=self.hosts, VMs=self.vms)
