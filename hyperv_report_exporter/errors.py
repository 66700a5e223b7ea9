from typing import Optional


class ReportExporterError(Exception):
    """Error base del exportador."""


class ConfigError(ReportExporterError):
    pass


class UnsupportedFormatError(ReportExporterError):
    def __init__(self, export_format: str) -> None:
        super().__init__(f"Formato no soportado: {export_format!r}. Usa json o csv")
        self.export_format = export_format


class PowerShellError(ReportExporterError):
    """Fallo de una consulta PowerShell, local o via WinRM."""

    def __init__(
        self,
        host: str,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(f"[{host}] {message}")
        self.host = host
        self.message = message
        self.status_code = status_code
