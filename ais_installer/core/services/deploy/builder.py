"""
Daemon build — fetch AIS-catcher and run its own build.

The build itself is opaque: we only run the configured steps and then
insist that exactly the expected executable exists.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ais_installer.adapters.base import Adapter
from ais_installer.adapters.vcs.git import GitClient
from ais_installer.core.config.settings import InstallerSettings
from ais_installer.core.errors import BuildFailure
from ais_installer.core.services.deploy.build_steps import default_build_vars, run_build_steps

logger = logging.getLogger(__name__)


class BuildOrchestrator:
    def __init__(self, settings: InstallerSettings, shell: Adapter, work_dir: Path):
        self._settings = settings
        self._shell = shell
        self._work_dir = work_dir
        self._git = GitClient(shell)

    @property
    def checkout(self) -> Path:
        return self._work_dir / self._settings.daemon_checkout

    @property
    def artifact_path(self) -> Path:
        return self.checkout / self._settings.daemon_artifact

    def build(self) -> Path:
        """Clone and build the daemon.

        Returns:
            Path of the built executable.

        Raises:
            BuildFailure: If the clone or a build step fails, or the
                executable is missing afterwards.
        """
        s = self._settings
        receipt = self._git.clone(s.repositories.daemon, self.checkout, depth=1, action_id="daemon:clone")
        if receipt.failed:
            raise BuildFailure.from_receipt("daemon: step 'clone' failed", receipt)

        run_build_steps(
            self._shell,
            s.daemon_build,
            checkout=self.checkout,
            variables=default_build_vars(self.checkout, s.daemon_build_dir),
            prefix="daemon",
            error_cls=BuildFailure,
            timeout=s.command_timeout,
        )

        artifact = self.artifact_path
        if self._shell.dry_run:
            logger.info("[dry-run] expected artifact %s", artifact)
            return artifact

        if not artifact.is_file():
            raise BuildFailure(f"daemon: build produced no executable at {artifact}", step="daemon:artifact")

        logger.info("Built %s", artifact)
        return artifact
