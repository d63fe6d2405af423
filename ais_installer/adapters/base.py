"""
Adapter base — the protocol contract between installer services and tools.

Installer services never call ``subprocess`` themselves. Every external
command (apt, git, cmake, systemctl) goes through an adapter, which makes
the whole orchestration replayable against a scripted double in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from pydantic import BaseModel

from ais_installer.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute an action."""

    action: Action
    dry_run: bool = False

    @property
    def working_dir(self) -> str | None:
        return self.action.cwd


class Adapter(ABC):
    """Abstract base class for command adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.
    """

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this adapter's underlying tool is available.

        Should be fast and never raise.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the action and return a receipt.

        MUST never raise exceptions. All failures are captured
        in the Receipt with status='failed'.
        """

    def run(
        self,
        argv: Sequence[str],
        *,
        action_id: str,
        cwd: str | None = None,
        read_only: bool = False,
        timeout: int | None = None,
    ) -> Receipt:
        """Build an Action for ``argv`` and execute it."""
        action = Action(
            id=action_id,
            argv=[str(a) for a in argv],
            cwd=cwd,
            read_only=read_only,
        )
        if timeout is not None:
            action.timeout = timeout
        return self.execute(ExecutionContext(action=action, dry_run=self.dry_run))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r} dry_run={self.dry_run}>"
