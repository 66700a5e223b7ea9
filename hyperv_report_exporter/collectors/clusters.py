from typing import Any, Dict, List

from .context import CollectorContext
from ..reflect import reflect_properties
from ..schemas import Record


def collect(context: CollectorContext, clusters: List[Dict[str, Any]]) -> List[Record]:
    diagnostics = context.diagnostics
    rows = []

    for cluster in clusters:
        diagnostics.add_attempt("Clusters")
        rows.append(reflect_properties(cluster))
        diagnostics.add_success("Clusters")

    return rows
