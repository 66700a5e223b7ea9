from dataclasses import dataclass, field
from typing import Dict, List, Optional

NO_PERMISSION_MARKERS = ("access is denied", "access denied", "unauthorized", "permission")
NOT_FOUND_MARKERS = ("not found", "cannot find", "objectnotfound", "does not exist")
UNREACHABLE_MARKERS = (
    "rpc server",
    "unreachable",
    "timeout",
    "timed out",
    "winrm",
    "connection",
    "could not connect",
)


@dataclass
class EntityDiagnostics:
    attempted_count: int = 0
    success_count: int = 0
    no_permission_count: int = 0
    not_found_count: int = 0
    unreachable_count: int = 0
    other_error_count: int = 0
    examples: List[Dict[str, str]] = field(default_factory=list)

    @property
    def total_error_count(self) -> int:
        return (
            self.no_permission_count
            + self.not_found_count
            + self.unreachable_count
            + self.other_error_count
        )


class Diagnostics:
    def __init__(self, entity_names: Optional[List[str]] = None) -> None:
        self._stats: Dict[str, EntityDiagnostics] = {}
        self._runtime_config: Dict[str, object] = {}
        self._skipped_hosts: Dict[str, str] = {}
        self.mode: Optional[str] = None
        if entity_names:
            for name in entity_names:
                self._stats[name] = EntityDiagnostics()

    def _get_stats(self, entity: str) -> EntityDiagnostics:
        if entity not in self._stats:
            self._stats[entity] = EntityDiagnostics()
        return self._stats[entity]

    def get_entity_stats(self, entity: str) -> EntityDiagnostics:
        return self._get_stats(entity)

    @property
    def entity_names(self) -> List[str]:
        return list(self._stats)

    @staticmethod
    def classify_exception(exc: Exception) -> str:
        if isinstance(exc, PermissionError):
            return "no_permission"
        if isinstance(exc, (ConnectionError, TimeoutError)):
            return "unreachable"
        message = str(exc).lower()
        if any(marker in message for marker in NO_PERMISSION_MARKERS):
            return "no_permission"
        if any(marker in message for marker in NOT_FOUND_MARKERS):
            return "not_found"
        if any(marker in message for marker in UNREACHABLE_MARKERS):
            return "unreachable"
        return "other_error"

    def add_attempt(self, entity: str) -> None:
        self._get_stats(entity).attempted_count += 1

    def add_success(self, entity: str) -> None:
        self._get_stats(entity).success_count += 1

    def add_error(self, entity: str, target: str, exc: Exception) -> str:
        error_type = self.classify_exception(exc)
        stats = self._get_stats(entity)

        if error_type == "no_permission":
            stats.no_permission_count += 1
        elif error_type == "not_found":
            stats.not_found_count += 1
        elif error_type == "unreachable":
            stats.unreachable_count += 1
        else:
            stats.other_error_count += 1

        if len(stats.examples) < 10:
            stats.examples.append(
                {
                    "target": str(target),
                    "error_type": error_type,
                    "message": str(exc),
                }
            )

        return error_type

    def add_skipped_host(self, host: str, reason: str) -> None:
        # un host puede fallar en Hosts y en VMs; se conserva el primer motivo
        self._skipped_hosts.setdefault(host, reason)

    @property
    def skipped_hosts(self) -> Dict[str, str]:
        return dict(self._skipped_hosts)

    def set_runtime_config(self, runtime_config: Dict[str, object]) -> None:
        self._runtime_config = dict(runtime_config)

    def to_dict(self) -> Dict[str, object]:
        serialized: Dict[str, Dict[str, object]] = {}
        for entity, stats in self._stats.items():
            serialized[entity] = {
                "attempted_count": stats.attempted_count,
                "success_count": stats.success_count,
                "no_permission_count": stats.no_permission_count,
                "not_found_count": stats.not_found_count,
                "unreachable_count": stats.unreachable_count,
                "other_error_count": stats.other_error_count,
                "examples": list(stats.examples),
            }
        return {
            "runtime_config": dict(self._runtime_config),
            "mode": self.mode,
            "skipped_hosts": dict(self._skipped_hosts),
            **serialized,
        }
