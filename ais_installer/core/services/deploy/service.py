"""
Service redeployment — swap the binary, keep the host's posture.

Two independent flags are captured before anything changes: is the
service running, and is it enabled at boot. After the new binary is in
place exactly those flags are restored, so a stopped/disabled service
stays stopped/disabled and a running/enabled one comes back.

Stopping is best-effort: the binary replacement must happen regardless,
so a failed stop is only a warning. Everything after that is fatal.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from ais_installer.adapters.system.systemd import SystemdServiceManager
from ais_installer.core.config.settings import InstallerSettings
from ais_installer.core.errors import DeployFailure
from ais_installer.core.models.deployment import ServiceState

logger = logging.getLogger(__name__)

BINARY_MODE = 0o755


def replace_binary(source: Path, target: Path) -> None:
    """Install ``source`` at ``target`` (copy to a sibling, then rename).

    The rename is atomic, so ``target`` is never half-written and a
    still-running old binary does not block the swap.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        shutil.copyfile(source, tmp)
        tmp.chmod(BINARY_MODE)
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


class ServiceDeploymentManager:
    def __init__(self, settings: InstallerSettings, systemd: SystemdServiceManager, dry_run: bool = False):
        self._settings = settings
        self._systemd = systemd
        self._dry_run = dry_run

    @property
    def unit(self) -> str:
        return self._settings.unit_name

    def snapshot(self) -> ServiceState:
        state = ServiceState(
            is_active=self._systemd.is_active(self.unit),
            is_enabled=self._systemd.is_enabled(self.unit),
        )
        logger.info("%s is %s before deployment", self.unit, state.describe())
        return state

    def deploy(self, artifact: Path) -> ServiceState:
        """Replace the installed binary and restore the prior posture.

        Returns:
            The posture captured before deployment (and restored after).

        Raises:
            DeployFailure: If the copy, start or enable fails.
        """
        before = self.snapshot()

        if before.is_active:
            r = self._systemd.stop(self.unit)
            if r.failed:
                logger.warning("Could not stop %s (%s) — replacing binary anyway", self.unit, r.error)

        self._install_binary(artifact)

        if before.is_active:
            r = self._systemd.start(self.unit)
            if r.failed:
                raise DeployFailure.from_receipt(f"Cannot start {self.unit}", r)

        if before.is_enabled:
            r = self._systemd.enable(self.unit)
            if r.failed:
                raise DeployFailure.from_receipt(f"Cannot enable {self.unit}", r)

        logger.info("%s redeployed, left %s", self.unit, before.describe())
        return before

    def _install_binary(self, artifact: Path) -> None:
        target = self._settings.paths.binary
        if self._dry_run:
            logger.info("[dry-run] would install %s → %s", artifact, target)
            return
        try:
            replace_binary(artifact, target)
        except OSError as e:
            raise DeployFailure(f"Cannot install {artifact} to {target}: {e}", step="binary:copy") from e
        logger.info("Installed %s", target)
