"""
Dependency resolution — make every native library satisfiable.

Policy per descriptor:

- Already satisfiable → nothing to do.
- The designated radio-sampling library → always built from source.
  A failed source build is final: there is no fallback to the packaged
  version, which is the one we are avoiding in the first place.
- Anything else → ``apt-get install <name>-dev``.

Any failure raises InstallFailure and ends the run; later descriptors
are not touched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ais_installer.adapters.base import Adapter
from ais_installer.adapters.system.apt import AptPackageManager
from ais_installer.adapters.vcs.git import GitClient
from ais_installer.core.config.settings import InstallerSettings
from ais_installer.core.errors import InstallFailure
from ais_installer.core.models.dependency import (
    BuildFromSource,
    DependencyDescriptor,
    InstallStrategy,
    PackageManagerInstall,
)
from ais_installer.core.services.deploy.build_steps import default_build_vars, run_build_steps
from ais_installer.core.services.deploy.detection import LibraryPresenceDetector

logger = logging.getLogger(__name__)

# Resolution outcomes recorded in the install report
PRESENT = "present"


class DependencyResolver:
    """Choose and execute an install strategy per dependency."""

    def __init__(
        self,
        settings: InstallerSettings,
        detector: LibraryPresenceDetector,
        shell: Adapter,
        work_dir: Path,
    ):
        self._settings = settings
        self._detector = detector
        self._shell = shell
        self._work_dir = work_dir
        self._packages = AptPackageManager(shell, timeout=settings.command_timeout)
        self._git = GitClient(shell)

    def select_strategy(self, descriptor: DependencyDescriptor) -> InstallStrategy:
        if descriptor.name == self._settings.source_dependency:
            return self._settings.source_build
        return PackageManagerInstall(package=descriptor.dev_package)

    def resolve(self, descriptor: DependencyDescriptor) -> str:
        """Make ``descriptor`` satisfiable.

        Returns:
            ``"present"`` when nothing was done, otherwise the kind of
            strategy executed (``"package"`` or ``"source"``).

        Raises:
            InstallFailure: If the chosen strategy fails.
        """
        if self._detector.probe(descriptor):
            return PRESENT

        strategy = self.select_strategy(descriptor)
        logger.info("%s: installing via %s", descriptor.name, strategy.kind)

        if isinstance(strategy, BuildFromSource):
            self._build_from_source(descriptor, strategy)
        else:
            self._install_package(descriptor, strategy)
        return strategy.kind

    def resolve_all(self, descriptors: Iterable[DependencyDescriptor]) -> dict[str, str]:
        """Resolve in order; the first failure propagates immediately."""
        results: dict[str, str] = {}
        for descriptor in descriptors:
            results[descriptor.name] = self.resolve(descriptor)
        return results

    # ── Strategies ──────────────────────────────────────────────

    def _install_package(
        self, descriptor: DependencyDescriptor, strategy: PackageManagerInstall
    ) -> None:
        receipt = self._packages.install([strategy.package], action_id=f"{descriptor.name}:apt")
        if receipt.failed:
            raise InstallFailure.from_receipt(
                f"{descriptor.name}: package install of {strategy.package} failed", receipt
            )

    def _build_from_source(
        self, descriptor: DependencyDescriptor, strategy: BuildFromSource
    ) -> None:
        checkout = self._work_dir / strategy.checkout
        receipt = self._git.clone(
            strategy.repository, checkout, depth=1, action_id=f"{descriptor.name}:clone"
        )
        if receipt.failed:
            raise InstallFailure.from_receipt(
                f"{descriptor.name}: step 'clone' failed", receipt
            )

        variables = default_build_vars(checkout)
        variables["udev_rules_dir"] = str(self._settings.paths.udev_rules_dir)

        run_build_steps(
            self._shell,
            strategy.steps,
            checkout=checkout,
            variables=variables,
            prefix=descriptor.name,
            error_cls=InstallFailure,
            timeout=self._settings.command_timeout,
        )
        logger.info("%s: built and installed from source", descriptor.name)
