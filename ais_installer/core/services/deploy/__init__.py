"""Dependency resolution and idempotent deployment of the AIS-catcher daemon."""

from ais_installer.core.services.deploy.builder import BuildOrchestrator
from ais_installer.core.services.deploy.detection import (
    FilesystemProbe,
    LibraryPresenceDetector,
    PackageRegistryProbe,
)
from ais_installer.core.services.deploy.orchestrator import InstallOrchestrator, working_directory
from ais_installer.core.services.deploy.resolver import DependencyResolver
from ais_installer.core.services.deploy.scaffold import ConfigScaffolder, render_service_unit
from ais_installer.core.services.deploy.service import ServiceDeploymentManager

__all__ = [
    "BuildOrchestrator",
    "ConfigScaffolder",
    "DependencyResolver",
    "FilesystemProbe",
    "InstallOrchestrator",
    "LibraryPresenceDetector",
    "PackageRegistryProbe",
    "ServiceDeploymentManager",
    "render_service_unit",
    "working_directory",
]
