"""
Dependency models — what a native library is and how it gets installed.

A DependencyDescriptor says how to *detect* a library; an InstallStrategy
says how to *obtain* it when detection comes back empty.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class DependencyDescriptor(BaseModel):
    """A native library the daemon links against."""

    model_config = ConfigDict(frozen=True)

    name: str                       # package-registry name, e.g. "libairspy"
    probe_header: str               # relative to an include dir, e.g. "libairspy/airspy.h"
    probe_library: str              # basename without suffix, e.g. "libairspy"
    registry_package: str | None = None   # registry lookup name when it differs from ``name``

    @property
    def registry_name(self) -> str:
        return self.registry_package or self.name

    @property
    def dev_package(self) -> str:
        """Development package installed by the package manager."""
        return f"{self.name}-dev"


class ProbeOutcome(str, Enum):
    """Tri-state answer of a single probe strategy."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    INDETERMINATE = "indeterminate"


class ProbeReport(BaseModel):
    """Every strategy's answer for one descriptor (``check`` command)."""

    dependency: str
    outcomes: dict[str, ProbeOutcome] = Field(default_factory=dict)

    @property
    def satisfiable(self) -> bool:
        return any(o is ProbeOutcome.FOUND for o in self.outcomes.values())

    def to_dict(self) -> dict:
        return {
            "dependency": self.dependency,
            "satisfiable": self.satisfiable,
            "outcomes": {k: v.value for k, v in self.outcomes.items()},
        }


class BuildStep(BaseModel):
    """One command of a source build — a distinct failure point.

    ``argv`` may contain ``{nproc}``, ``{checkout}`` and ``{build_dir}``
    placeholders. ``cwd`` is relative to the checkout.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    argv: list[str]
    cwd: str = ""


class PackageManagerInstall(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["package"] = "package"
    package: str


class BuildFromSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["source"] = "source"
    repository: str
    checkout: str                   # directory name inside the working directory
    steps: list[BuildStep] = Field(default_factory=list)


InstallStrategy = Annotated[
    PackageManagerInstall | BuildFromSource,
    Field(discriminator="kind"),
]
