"""
Installer error taxonomy.

Every fatal condition of a run is one of these. They propagate out of
the services untouched; the CLI is the only place that catches them,
logs at ERROR and exits non-zero.

An ambiguous probe is deliberately *not* here: it is the
``indeterminate`` probe outcome and never aborts a run.
"""

from __future__ import annotations

from ais_installer.core.models.action import Receipt


class InstallerError(Exception):
    """Base class for fatal installer failures."""

    kind = "installer"

    def __init__(
        self,
        message: str,
        *,
        step: str | None = None,
        receipt: Receipt | None = None,
    ):
        super().__init__(message)
        self.step = step
        self.receipt = receipt

    @classmethod
    def from_receipt(cls, message: str, receipt: Receipt) -> InstallerError:
        """Build the error for a failed command, appending its error text."""
        detail = (receipt.error or "").strip().splitlines()
        if detail:
            message = f"{message}: {detail[-1]}"
        return cls(message, step=receipt.action_id, receipt=receipt)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "step": self.step, "error": str(self)}


class InstallFailure(InstallerError):
    """A dependency (package or source build) could not be installed."""

    kind = "install"


class BuildFailure(InstallerError):
    """The daemon could not be fetched or built."""

    kind = "build"


class ConfigWriteFailure(InstallerError):
    """A configuration artifact or the unit file could not be written."""

    kind = "config"


class ServiceControlFailure(InstallerError):
    """The service manager refused a fatal operation."""

    kind = "service"


class DeployFailure(ServiceControlFailure):
    """Binary replacement or posture restoration failed."""

    kind = "deploy"


class WorkspaceFailure(InstallerError):
    """The scratch working directory could not be created."""

    kind = "workdir"
