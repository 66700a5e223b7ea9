from pathlib import Path

from ..schemas import InventoryReport


def write_json(out_path: Path, report: InventoryReport) -> Path:
    # utf-8 sin BOM
    with out_path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(report.model_dump_json())
    return out_path
