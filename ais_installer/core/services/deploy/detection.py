"""
Library presence detection — is a native dependency already satisfiable?

Read-only probes, combined in a fixed order:

1. Package registry (``dpkg-query`` status of the descriptor's
   registry name) — an installed package settles it.
2. Filesystem scan — the probe header in one of the include dirs AND
   ``<basename>.so`` or ``<basename>.a`` in one of the library dirs.

Each strategy answers found / not_found / indeterminate; the first
``found`` wins and anything else counts as not satisfiable. Results are
computed fresh on every call and never cached.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from ais_installer.adapters.system.apt import AptPackageManager
from ais_installer.core.models.dependency import DependencyDescriptor, ProbeOutcome, ProbeReport

logger = logging.getLogger(__name__)

# Library forms accepted by the filesystem probe
LIBRARY_SUFFIXES = (".so", ".a")


class ProbeStrategy(Protocol):
    """One way of detecting a dependency."""

    name: str

    def check(self, descriptor: DependencyDescriptor) -> ProbeOutcome:
        ...


class PackageRegistryProbe:
    name = "package-registry"

    def __init__(self, packages: AptPackageManager):
        self._packages = packages

    def check(self, descriptor: DependencyDescriptor) -> ProbeOutcome:
        return self._packages.query(descriptor.registry_name)


def _first_existing(candidates: Sequence[Path]) -> Path | None:
    for path in candidates:
        try:
            if path.is_file():
                return path
        except OSError:
            # Unreadable directory counts as non-matching
            continue
    return None


class FilesystemProbe:
    """Scan fixed include/library directory lists.

    Directories that do not exist simply do not match.
    """

    name = "filesystem"

    def __init__(self, include_dirs: Sequence[Path], library_dirs: Sequence[Path]):
        self._include_dirs = tuple(include_dirs)
        self._library_dirs = tuple(library_dirs)

    def find_header(self, descriptor: DependencyDescriptor) -> Path | None:
        return _first_existing([d / descriptor.probe_header for d in self._include_dirs])

    def find_library(self, descriptor: DependencyDescriptor) -> Path | None:
        return _first_existing([
            d / f"{descriptor.probe_library}{suffix}"
            for d in self._library_dirs
            for suffix in LIBRARY_SUFFIXES
        ])

    def check(self, descriptor: DependencyDescriptor) -> ProbeOutcome:
        header = self.find_header(descriptor)
        library = self.find_library(descriptor)
        if header and library:
            logger.debug("%s: header=%s library=%s", descriptor.name, header, library)
            return ProbeOutcome.FOUND
        return ProbeOutcome.NOT_FOUND


class LibraryPresenceDetector:
    """Decide whether a dependency is satisfiable on this host."""

    def __init__(self, strategies: Sequence[ProbeStrategy]):
        self._strategies = list(strategies)

    @classmethod
    def default(
        cls,
        packages: AptPackageManager,
        include_dirs: Sequence[Path],
        library_dirs: Sequence[Path],
    ) -> LibraryPresenceDetector:
        """Registry lookup first, filesystem scan second."""
        return cls([
            PackageRegistryProbe(packages),
            FilesystemProbe(include_dirs, library_dirs),
        ])

    @property
    def strategies(self) -> list[ProbeStrategy]:
        return list(self._strategies)

    def probe(self, descriptor: DependencyDescriptor) -> bool:
        """Return True as soon as one strategy finds the dependency."""
        for strategy in self._strategies:
            outcome = strategy.check(descriptor)
            if outcome is ProbeOutcome.FOUND:
                logger.info("%s: satisfied (%s)", descriptor.name, strategy.name)
                return True
            if outcome is ProbeOutcome.INDETERMINATE:
                logger.debug("%s: %s probe indeterminate", descriptor.name, strategy.name)
        logger.info("%s: not found", descriptor.name)
        return False

    def explain(self, descriptor: DependencyDescriptor) -> ProbeReport:
        """Run every strategy, without short-circuiting."""
        report = ProbeReport(dependency=descriptor.name)
        for strategy in self._strategies:
            report.outcomes[strategy.name] = strategy.check(descriptor)
        return report
