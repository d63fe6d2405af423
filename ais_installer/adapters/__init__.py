"""Adapters — command bindings for external tools.

Public re-exports for convenient access.
"""

from ais_installer.adapters.base import Adapter, ExecutionContext
from ais_installer.adapters.mock import MockAdapter
from ais_installer.adapters.shell.command import ShellCommandAdapter

__all__ = [
    "Adapter",
    "ExecutionContext",
    "MockAdapter",
    "ShellCommandAdapter",
]
