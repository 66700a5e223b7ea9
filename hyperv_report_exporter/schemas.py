from typing import Dict, List, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr

# Valores admitidos en un registro plano; fechas viajan como ISO-8601
PropertyValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr, None]
Record = Dict[str, PropertyValue]

ENTITY_ORDER = ["Clusters", "Hosts", "VMs"]

LOCAL_NODE = "Local Node"

HOST_PREFIX_OS = "OS_"
HOST_PREFIX_SYSTEM = "System_"
HOST_PREFIX_HYPERV = "HyperV_"


class InventoryReport(BaseModel):
    """Documento exportado: un arreglo de registros por entidad."""

    Clusters: List[Record] = Field(default_factory=list)
    Hosts: List[Record] = Field(default_factory=list)
    VMs: List[Record] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    def records_by_entity(self) -> Dict[str, List[Record]]:
        return {
            "Clusters": self.Clusters,
            "Hosts": self.Hosts,
            "VMs": self.VMs,
        }
