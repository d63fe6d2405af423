"""
Config scaffolding — create what is missing, never touch what exists.

User configuration is existence-gated: if anything is at the path (an
edited file, an empty file) it is left alone. The systemd unit is the
exception and is rewritten on every run so it always points at the
current installation paths.
"""

from __future__ import annotations

import json
import logging
import textwrap
from pathlib import Path

from ais_installer.adapters.base import Adapter
from ais_installer.adapters.vcs.git import GitClient
from ais_installer.core.config.settings import InstallerSettings
from ais_installer.core.errors import ConfigWriteFailure
from ais_installer.core.models.deployment import ConfigArtifact

logger = logging.getLogger(__name__)


_CONFIG_CMD_TEMPLATE = """\
# AIS-catcher command line options, one or more per line.
# Lines starting with '#' are ignored. Uncomment and edit as needed.
#
# Select the first RTL-SDR dongle by serial number:
# -d 00000001
#
# Tuner gain and sample rate:
# -gr TUNER 38.6 RTLAGC off
# -s 1536K
#
# Built-in web server on port 8100:
# -N 8100
#
# Forward NMEA over UDP:
# -u 127.0.0.1 10110
"""


def default_config_json(config_id: str) -> str:
    return json.dumps({"config": config_id, "version": 1}, indent=2) + "\n"


def render_service_unit(settings: InstallerSettings) -> str:
    """systemd unit running the daemon with both config files."""
    p = settings.paths
    # $$ is systemd's escape for a literal $ handed to bash
    exec_start = (
        f"/bin/bash -c '{p.binary} -C {p.config_json_path} "
        f"$$(/bin/grep -v \"^#\" {p.config_cmd_path} | /usr/bin/tr \"\\n\" \" \")'"
    )
    return textwrap.dedent(f"""\
        [Unit]
        Description=AIS-catcher AIS receiver
        After=network-online.target
        Wants=network-online.target

        [Service]
        ExecStart={exec_start}
        Restart=always
        RestartSec=10

        [Install]
        WantedBy=multi-user.target
        """)


class ConfigScaffolder:
    def __init__(self, settings: InstallerSettings, shell: Adapter):
        self._settings = settings
        self._shell = shell
        self._git = GitClient(shell)

    @property
    def dry_run(self) -> bool:
        return self._shell.dry_run

    def artifacts(self) -> list[ConfigArtifact]:
        p = self._settings.paths
        return [
            ConfigArtifact(
                path=p.config_json_path,
                default_content=default_config_json(self._settings.config_id),
            ),
            ConfigArtifact(path=p.config_cmd_path, default_content=_CONFIG_CMD_TEMPLATE),
        ]

    def scaffold(self) -> list[Path]:
        """Ensure config dir, web assets and config files exist.

        Returns:
            Paths of the config files created by this call.

        Raises:
            ConfigWriteFailure: If a directory or file cannot be created,
                or the web assets cannot be fetched.
        """
        self._ensure_dir(self._settings.paths.config_dir)
        self._sync_webassets()

        created: list[Path] = []
        for artifact in self.artifacts():
            if self._write_if_absent(artifact):
                created.append(artifact.path)
        return created

    def write_service_unit(self) -> Path:
        """Regenerate the unit file unconditionally."""
        path = self._settings.unit_path
        content = render_service_unit(self._settings)
        if self.dry_run:
            logger.info("[dry-run] would write %s", path)
            return path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ConfigWriteFailure(f"Cannot write unit file {path}: {e}", step="unit:write") from e
        logger.info("Wrote %s", path)
        return path

    # ── Helpers ─────────────────────────────────────────────────

    def _ensure_dir(self, path: Path) -> None:
        if self.dry_run:
            if not path.is_dir():
                logger.info("[dry-run] would create %s", path)
            return
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigWriteFailure(f"Cannot create {path}: {e}", step="config:mkdir") from e

    def _sync_webassets(self) -> None:
        target = self._settings.paths.webassets_path
        if target.is_dir():
            receipt = self._git.pull(target, action_id="webassets:pull")
        else:
            receipt = self._git.clone(
                self._settings.repositories.webassets, target, depth=1, action_id="webassets:clone"
            )
        if receipt.failed:
            raise ConfigWriteFailure.from_receipt(f"Cannot fetch web assets into {target}", receipt)

    def _write_if_absent(self, artifact: ConfigArtifact) -> bool:
        path = artifact.path
        # A dangling symlink counts as present
        try:
            present = path.exists() or path.is_symlink()
        except OSError as e:
            raise ConfigWriteFailure(f"Cannot inspect {path}: {e}", step="config:write") from e
        if present:
            logger.info("Keeping existing %s", path)
            return False
        if self.dry_run:
            logger.info("[dry-run] would create %s", path)
            return True
        try:
            path.write_text(artifact.default_content, encoding="utf-8")
        except OSError as e:
            raise ConfigWriteFailure(f"Cannot write {path}: {e}", step="config:write") from e
        logger.info("Created %s", path)
        return True
