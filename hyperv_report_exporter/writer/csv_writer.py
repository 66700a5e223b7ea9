import csv
from pathlib import Path
from typing import Dict, List

from ..schemas import PropertyValue, Record


def union_headers(rows: List[Record]) -> List[str]:
    """Union de claves en orden de primera aparicion."""
    headers: Dict[str, None] = {}
    for row in rows:
        for key in row:
            headers.setdefault(key, None)
    return list(headers)


def _cell(value: PropertyValue) -> str:
    if value is None:
        return ""
    return str(value)


def write_csv(csv_dir: Path, base_name: str, data_by_entity, entity_order) -> List[Path]:
    written = []
    for entity in entity_order:
        rows = data_by_entity.get(entity, [])
        headers = union_headers(rows)
        csv_path = csv_dir / f"{base_name}-{entity}.csv"
        with csv_path.open("w", newline="", encoding="utf-8") as handle:
            if headers:
                writer = csv.writer(handle, quoting=csv.QUOTE_ALL)
                writer.writerow(headers)
                for row in rows:
                    writer.writerow([_cell(row.get(header)) for header in headers])
        written.append(csv_path)
    return written
