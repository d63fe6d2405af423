"""Domain models — the typed contracts of the installer."""

from ais_installer.core.models.action import Action, Receipt
from ais_installer.core.models.dependency import (
    BuildFromSource,
    BuildStep,
    DependencyDescriptor,
    InstallStrategy,
    PackageManagerInstall,
    ProbeOutcome,
    ProbeReport,
)
from ais_installer.core.models.deployment import ConfigArtifact, InstallReport, ServiceState

__all__ = [
    "Action",
    "BuildFromSource",
    "BuildStep",
    "ConfigArtifact",
    "DependencyDescriptor",
    "InstallReport",
    "InstallStrategy",
    "PackageManagerInstall",
    "ProbeOutcome",
    "ProbeReport",
    "Receipt",
    "ServiceState",
]
