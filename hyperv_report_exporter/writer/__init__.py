from datetime import datetime
from pathlib import Path
from typing import List

from ..errors import UnsupportedFormatError
from ..schemas import ENTITY_ORDER
from .csv_writer import write_csv
from .json_writer import write_json

SUPPORTED_FORMATS = ("json", "csv")
REPORT_PREFIX = "HyperV_Report_"


def normalize_format(export_format: str) -> str:
    value = (export_format or "").strip().lower()
    if value not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(export_format)
    return value


def report_base_name(started_at: datetime) -> str:
    return f"{REPORT_PREFIX}{started_at.strftime('%Y%m%d_%H%M%S')}"


def export_report(collection, out_dir: Path, export_format: str) -> List[Path]:
    """Escribe el reporte y devuelve las rutas generadas.

    El formato se valida antes de tocar el disco; si falla la escritura de un
    CSV los archivos ya escritos quedan en su lugar.
    """
    export_format = normalize_format(export_format)
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    base_name = report_base_name(collection.started_at)
    report = collection.to_report()

    if export_format == "json":
        return [write_json(out_dir / f"{base_name}.json", report)]
    return write_csv(out_dir, base_name, report.records_by_entity(), ENTITY_ORDER)


__all__ = [
    "REPORT_PREFIX",
    "SUPPORTED_FORMATS",
    "export_report",
    "normalize_format",
    "report_base_name",
    "write_csv",
    "write_json",
]
