"""
Installation driver — one idempotent run, start to finish.

Flow:
    working dir → base packages → dependencies → build daemon
    → scaffold config → unit + daemon-reload → redeploy service

The first fatal error ends the run. The working directory is removed on
every exit path.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ais_installer.adapters.base import Adapter
from ais_installer.adapters.system.apt import AptPackageManager
from ais_installer.adapters.system.systemd import SystemdServiceManager
from ais_installer.core.config.settings import InstallerSettings
from ais_installer.core.errors import InstallFailure, ServiceControlFailure, WorkspaceFailure
from ais_installer.core.models.deployment import InstallReport
from ais_installer.core.services.deploy.builder import BuildOrchestrator
from ais_installer.core.services.deploy.detection import LibraryPresenceDetector
from ais_installer.core.services.deploy.resolver import DependencyResolver
from ais_installer.core.services.deploy.scaffold import ConfigScaffolder
from ais_installer.core.services.deploy.service import ServiceDeploymentManager

logger = logging.getLogger(__name__)


@contextmanager
def working_directory(parent: Path | None = None, prefix: str = "ais-catcher-") -> Iterator[Path]:
    """A uniquely named scratch directory, deleted on exit.

    Raises:
        WorkspaceFailure: If the directory cannot be created.
    """
    try:
        if parent is not None:
            parent.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix=prefix, dir=parent))
    except OSError as e:
        where = parent or tempfile.gettempdir()
        raise WorkspaceFailure(f"Cannot create working directory in {where}: {e}", step="workdir") from e

    logger.debug("Working directory %s", path)
    try:
        yield path
    finally:
        shutil.rmtree(path, onexc=_log_cleanup_error)
        logger.debug("Removed working directory %s", path)


def _log_cleanup_error(function, path, exc: BaseException) -> None:
    logger.warning("Could not remove %s (%s); leftover scratch files remain", path, exc)


def build_detector(settings: InstallerSettings, shell: Adapter) -> LibraryPresenceDetector:
    return LibraryPresenceDetector.default(
        AptPackageManager(shell, timeout=settings.command_timeout),
        settings.probe.include_dirs,
        settings.probe.library_dirs,
    )


class InstallOrchestrator:
    """Sequence every installer service into one run."""

    def __init__(self, settings: InstallerSettings, shell: Adapter):
        self._settings = settings
        self._shell = shell
        self._packages = AptPackageManager(shell, timeout=settings.command_timeout)
        self._systemd = SystemdServiceManager(shell)

    @property
    def dry_run(self) -> bool:
        return self._shell.dry_run

    def run(self) -> InstallReport:
        """Perform a full installation.

        Raises:
            InstallerError: Any fatal failure, unchanged.
        """
        s = self._settings
        report = InstallReport(dry_run=self.dry_run)

        with working_directory(s.paths.work_parent) as work_dir:
            self.install_base_packages()

            detector = build_detector(s, self._shell)
            resolver = DependencyResolver(s, detector, self._shell, work_dir)
            report.dependencies = resolver.resolve_all(s.dependencies)

            artifact = BuildOrchestrator(s, self._shell, work_dir).build()
            report.artifact = str(artifact)

            scaffolder = ConfigScaffolder(s, self._shell)
            report.created_configs = [str(p) for p in scaffolder.scaffold()]

            scaffolder.write_service_unit()
            self.reload_units()

            deployer = ServiceDeploymentManager(s, self._systemd, dry_run=self.dry_run)
            before = deployer.deploy(artifact)
            report.service_before = before
            report.service_after = before if self.dry_run else deployer.snapshot()

        if report.installed:
            logger.info("Installed dependencies: %s", ", ".join(report.installed))
        logger.info("Installation complete%s", " (dry-run)" if self.dry_run else "")
        return report

    def install_base_packages(self) -> None:
        packages = list(self._settings.base_packages)
        if not packages:
            return
        r = self._packages.update()
        if r.failed:
            raise InstallFailure.from_receipt("Package index update failed", r)
        r = self._packages.install(packages, action_id="base:apt")
        if r.failed:
            raise InstallFailure.from_receipt("Base package install failed", r)

    def reload_units(self) -> None:
        r = self._systemd.daemon_reload()
        if r.failed:
            raise ServiceControlFailure.from_receipt("systemctl daemon-reload failed", r)
