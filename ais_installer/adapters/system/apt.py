"""
APT package manager binding.

Installation is a black box: a zero exit status means success. The
registry query (``dpkg-query -W -f=${Status}``) is read-only and answers
in three states, since a host without dpkg cannot say either way.

Only ``install ok installed`` counts as present: a removed package that
left its config files behind still exits 0.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ais_installer.adapters.base import Adapter
from ais_installer.core.models.action import Receipt
from ais_installer.core.models.dependency import ProbeOutcome

logger = logging.getLogger(__name__)

# dpkg status triple of a fully installed package
INSTALLED_STATUS = "install ok installed"


class AptPackageManager:
    """``apt-get`` / ``dpkg`` through a command adapter."""

    def __init__(self, shell: Adapter, timeout: int = 1800):
        self._shell = shell
        self._timeout = timeout

    def query(self, package: str) -> ProbeOutcome:
        """Ask the package registry whether ``package`` is installed."""
        r = self._shell.run(
            ["dpkg-query", "-W", "-f=${Status}", package],
            action_id=f"dpkg-query:{package}",
            read_only=True,
            timeout=30,
        )
        if r.ok:
            if INSTALLED_STATUS in r.output:
                return ProbeOutcome.FOUND
            logger.debug("%s is known to dpkg but not installed (%s)", package, r.output)
            return ProbeOutcome.NOT_FOUND
        if r.metadata.get("missing_executable") or r.return_code is None:
            logger.debug("Package registry unavailable for %s: %s", package, r.error)
            return ProbeOutcome.INDETERMINATE
        return ProbeOutcome.NOT_FOUND

    def update(self) -> Receipt:
        return self._shell.run(
            ["apt-get", "update"],
            action_id="apt:update",
            timeout=self._timeout,
        )

    def install(self, packages: Sequence[str], *, action_id: str = "apt:install") -> Receipt:
        """Install ``packages`` non-interactively."""
        argv = ["apt-get", "install", "-y", *packages]
        logger.info("Installing packages: %s", " ".join(packages))
        return self._shell.run(argv, action_id=action_id, timeout=self._timeout)
