"""
Deployment models — service posture, config artifacts, run report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ServiceState(BaseModel):
    """Snapshot of a managed service taken right before redeployment.

    Captured once, consumed once to restore posture, then discarded.
    """

    model_config = ConfigDict(frozen=True)

    is_active: bool = False
    is_enabled: bool = False

    def describe(self) -> str:
        running = "active" if self.is_active else "inactive"
        boot = "enabled" if self.is_enabled else "disabled"
        return f"{running}/{boot}"


class ConfigArtifact(BaseModel):
    """A config file written only when nothing exists at ``path``."""

    model_config = ConfigDict(frozen=True)

    path: Path
    default_content: str


@dataclass
class InstallReport:
    """What an installation run did."""

    dry_run: bool = False
    dependencies: dict[str, str] = field(default_factory=dict)   # name → present|package|source
    artifact: str | None = None
    created_configs: list[str] = field(default_factory=list)
    service_before: ServiceState | None = None
    service_after: ServiceState | None = None

    @property
    def installed(self) -> list[str]:
        return [name for name, how in self.dependencies.items() if how != "present"]

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "dependencies": dict(self.dependencies),
            "installed": self.installed,
            "artifact": self.artifact,
            "created_configs": list(self.created_configs),
            "service_before": self.service_before.model_dump() if self.service_before else None,
            "service_after": self.service_after.model_dump() if self.service_after else None,
        }
