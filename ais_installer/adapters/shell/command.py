"""
Shell command adapter — execute external commands.

This is the single place where ``subprocess.run`` is called. It runs
argv lists (never through a shell), captures their output for the log,
and reports success purely by exit status.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path

from ais_installer.adapters.base import Adapter, ExecutionContext
from ais_installer.core.models.action import Receipt

logger = logging.getLogger(__name__)

# Output kept on the receipt (tail), enough for an error report
_OUTPUT_TAIL = 2000


class ShellCommandAdapter(Adapter):
    """Execute commands and capture output.

    In dry-run mode only read-only actions are executed; everything
    else is logged and answered with a ``skipped`` receipt.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action

        if context.dry_run and not action.read_only:
            logger.info("[dry-run] %s", action.command_line)
            return Receipt.skip(
                adapter=self.name,
                action_id=action.id,
                reason="dry-run",
                metadata={"command": action.command_line},
            )

        cwd = context.working_dir
        if cwd and not Path(cwd).is_dir():
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Working directory does not exist: {cwd}",
                metadata={"command": action.command_line},
            )

        logger.debug("Executing: %s (cwd=%s)", action.command_line, cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                action.argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=action.timeout,
            )
        except FileNotFoundError:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Executable not found: {action.argv[0]}",
                metadata={"command": action.command_line, "missing_executable": True},
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Command timed out after {action.timeout}s",
                metadata={"command": action.command_line, "timeout": action.timeout},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=action.id,
                error=f"Command execution error: {e}",
                metadata={"command": action.command_line},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = result.stdout.strip()[-_OUTPUT_TAIL:]
        stderr = result.stderr.strip()[-_OUTPUT_TAIL:]

        if output:
            logger.debug("STDOUT %s", output)
        if stderr:
            logger.debug("STDERR %s", stderr)

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=action.id,
                output=output,
                duration_ms=elapsed_ms,
                metadata={"command": action.command_line, "stderr": stderr},
            )

        return Receipt.failure(
            adapter=self.name,
            action_id=action.id,
            error=stderr or f"Command exited with code {result.returncode}",
            return_code=result.returncode,
            output=output,
            duration_ms=elapsed_ms,
            metadata={"command": action.command_line},
        )
