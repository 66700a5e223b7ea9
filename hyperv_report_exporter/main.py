import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from .collectors import CollectorContext, collect_inventory
from .config import Config, load_config, parse_args
from .diagnostics import Diagnostics
from .errors import PowerShellError, ReportExporterError, UnsupportedFormatError
from .hyperv_client import HyperVClient
from .privilege import check_privileges
from .remote import build_runner
from .schemas import ENTITY_ORDER
from .version import EXPORTER_VERSION
from .writer import export_report, normalize_format, report_base_name


def setup_logging(debug: bool) -> logging.Logger:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    return logging.getLogger("hyperv_report")


def _mask_user(user: Optional[str]) -> str:
    if not user:
        return ""
    if "\\" in user:
        domain, name = user.split("\\", 1)
        return f"{domain}\\{name[:2]}***"
    if "@" in user:
        name, domain = user.split("@", 1)
        if not name:
            return f"***@{domain}"
        visible = name[:2] if len(name) > 1 else name[:1]
        return f"{visible}***@{domain}"
    visible = user[:2] if len(user) > 1 else user[:1]
    return f"{visible}***"


def _write_diagnostics(out_path: Path, diagnostics: Diagnostics, logger: logging.Logger) -> None:
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("w", encoding="utf-8") as handle:
            json.dump(diagnostics.to_dict(), handle, indent=2, sort_keys=True)
    except OSError as exc:
        logger.warning("No se pudo escribir %s: %s", out_path.name, exc)


def _print_summary(diagnostics: Diagnostics, logger: logging.Logger) -> None:
    for entity in diagnostics.entity_names:
        stats = diagnostics.get_entity_stats(entity)
        logger.info(
            "Resumen %s: attempted=%s success=%s no_permission=%s not_found=%s unreachable=%s other_error=%s",
            entity,
            stats.attempted_count,
            stats.success_count,
            stats.no_permission_count,
            stats.not_found_count,
            stats.unreachable_count,
            stats.other_error_count,
        )
    skipped = diagnostics.skipped_hosts
    if skipped:
        logger.warning(
            "Hosts omitidos (%s): %s",
            len(skipped),
            ", ".join(f"{host} [{reason}]" for host, reason in skipped.items()),
        )


def run(
    config: Config,
    client,
    logger: logging.Logger,
    started_at: Optional[datetime] = None,
) -> int:
    try:
        export_format = normalize_format(config.export_format)
    except UnsupportedFormatError as exc:
        logger.error(str(exc))
        return 2

    try:
        elevated = check_privileges(client)
    except PowerShellError as exc:
        logger.error("No se pudo verificar privilegios: %s", exc)
        return 1
    if not elevated:
        logger.error(
            "Se requieren privilegios de administrador. "
            "Ejecuta el exportador desde una consola elevada"
        )
        return 1

    started_at = started_at or datetime.now()
    diagnostics = Diagnostics(ENTITY_ORDER)
    diagnostics.set_runtime_config(
        {
            "exporter_version": EXPORTER_VERSION,
            "entry_point": client.entry_point,
            "export_format": export_format,
            "started_at": started_at.isoformat(),
        }
    )
    context = CollectorContext(
        client=client,
        logger=logger,
        diagnostics=diagnostics,
        started_at=started_at,
    )
    out_dir = Path(config.out_dir)
    exit_code = 1

    try:
        collection = collect_inventory(context)
        written = export_report(collection, out_dir, export_format)
        for path in written:
            print(path)
        logger.info(
            "Export completado (%s): clusters=%s hosts=%s vms=%s",
            collection.mode,
            len(collection.clusters),
            len(collection.hosts),
            len(collection.vms),
        )
        exit_code = 0
    except PowerShellError as exc:
        logger.error("Fallo la recoleccion: %s", exc)
    except OSError as exc:
        logger.error("Fallo la exportacion: %s", exc)
    finally:
        _print_summary(diagnostics, logger)
        if config.diagnostics_enabled:
            diagnostics_path = out_dir / f"{report_base_name(started_at)}-diagnostics.json"
            _write_diagnostics(diagnostics_path, diagnostics, logger)

    return exit_code


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logger = setup_logging(args.debug)

    try:
        config = load_config(args)
    except ReportExporterError as exc:
        logger.error(str(exc))
        return 2

    if config.env_file_used:
        logger.info("Configuracion cargada desde: %s", config.env_file_used)
    if config.remote is not None:
        logger.info(
            "Consultando %s via WinRM (%s, user: %s)",
            config.remote.host,
            config.remote.transport,
            _mask_user(config.remote.username),
        )

    client = HyperVClient(build_runner(config.remote, timeout=config.timeout_sec))
    return run(config, client, logger)


if __name__ == "__main__":
    sys.exit(main())
