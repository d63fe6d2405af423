"""
Git binding — shallow clones and in-place updates.

Uses the git CLI through a command adapter. Only the two operations the
installer needs: fetch a fixed repository once, or refresh a checkout
that already exists.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ais_installer.adapters.base import Adapter
from ais_installer.core.models.action import Receipt

logger = logging.getLogger(__name__)


class GitClient:
    """Git version control operations."""

    def __init__(self, shell: Adapter, timeout: int = 600):
        self._shell = shell
        self._timeout = timeout

    def clone(
        self,
        url: str,
        dest: Path,
        *,
        depth: int | None = 1,
        action_id: str = "git:clone",
    ) -> Receipt:
        """Clone ``url`` into ``dest`` (shallow by default)."""
        argv = ["git", "clone"]
        if depth:
            argv += ["--depth", str(depth)]
        argv += [url, str(dest)]
        logger.info("Cloning %s → %s", url, dest)
        return self._shell.run(argv, action_id=action_id, timeout=self._timeout)

    def pull(self, repo_dir: Path, *, action_id: str = "git:pull") -> Receipt:
        """Update an existing checkout in place."""
        logger.info("Updating %s", repo_dir)
        return self._shell.run(
            ["git", "-C", str(repo_dir), "pull"],
            action_id=action_id,
            timeout=self._timeout,
        )
