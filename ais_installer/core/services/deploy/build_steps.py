"""
Source build steps — run a cloned project's build, one failure point per step.

Shared by the dependency resolver (rtl-sdr) and the daemon builder.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Sequence
from pathlib import Path

from ais_installer.adapters.base import Adapter
from ais_installer.core.errors import InstallerError
from ais_installer.core.models.dependency import BuildStep

logger = logging.getLogger(__name__)

_VAR_RE = re.compile(r"\{(\w+)\}")


def substitute_build_vars(command: Sequence[str], variables: dict[str, str]) -> list[str]:
    """Replace ``{var}`` placeholders in a command array.

    Unknown placeholders are left as-is.
    """
    def _sub(token: str) -> str:
        return _VAR_RE.sub(lambda m: variables.get(m.group(1), m.group(0)), token)

    return [_sub(token) for token in command]


def default_build_vars(checkout: Path, build_dir: str = "build") -> dict[str, str]:
    """Standard variables for a build rooted at ``checkout``."""
    return {
        "nproc": str(os.cpu_count() or 1),
        "checkout": str(checkout),
        "build_dir": build_dir,
    }


def run_build_steps(
    shell: Adapter,
    steps: Sequence[BuildStep],
    *,
    checkout: Path,
    variables: dict[str, str],
    prefix: str,
    error_cls: type[InstallerError],
    timeout: int | None = None,
) -> None:
    """Run ``steps`` in order inside ``checkout``.

    Raises:
        error_cls: On the first failing step, naming it.
    """
    for step in steps:
        argv = substitute_build_vars(step.argv, variables)
        cwd = checkout / step.cwd if step.cwd else checkout
        action_id = f"{prefix}:{step.label}"
        logger.info("%s: %s", prefix, step.label)

        receipt = shell.run(argv, action_id=action_id, cwd=str(cwd), timeout=timeout)
        if receipt.failed:
            raise error_cls.from_receipt(f"{prefix}: step '{step.label}' failed", receipt)
