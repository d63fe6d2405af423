"""
systemd binding — service posture queries and control.

``is-active`` / ``is-enabled`` are read-only and answer by exit status
(``--quiet`` suppresses output). Control verbs return receipts; the
caller decides which failures are fatal.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ais_installer.adapters.base import Adapter
from ais_installer.core.models.action import Receipt

logger = logging.getLogger(__name__)


def detect_init_system() -> str:
    """Detect the init system (systemd, openrc, initd, or unknown)."""
    if Path("/run/systemd/system").exists():
        return "systemd"
    if shutil.which("rc-service"):
        return "openrc"
    if Path("/etc/init.d").exists():
        return "initd"
    return "unknown"


class SystemdServiceManager:
    """``systemctl`` through a command adapter."""

    def __init__(self, shell: Adapter, timeout: int = 120):
        self._shell = shell
        self._timeout = timeout

    def _query(self, verb: str, unit: str) -> bool:
        r = self._shell.run(
            ["systemctl", verb, "--quiet", unit],
            action_id=f"systemctl:{verb}:{unit}",
            read_only=True,
            timeout=self._timeout,
        )
        return r.ok

    def is_active(self, unit: str) -> bool:
        return self._query("is-active", unit)

    def is_enabled(self, unit: str) -> bool:
        return self._query("is-enabled", unit)

    def _control(self, verb: str, unit: str | None = None) -> Receipt:
        argv = ["systemctl", verb]
        if unit:
            argv.append(unit)
        action_id = f"systemctl:{verb}:{unit}" if unit else f"systemctl:{verb}"
        return self._shell.run(argv, action_id=action_id, timeout=self._timeout)

    def stop(self, unit: str) -> Receipt:
        return self._control("stop", unit)

    def start(self, unit: str) -> Receipt:
        return self._control("start", unit)

    def enable(self, unit: str) -> Receipt:
        return self._control("enable", unit)

    def daemon_reload(self) -> Receipt:
        return self._control("daemon-reload")
