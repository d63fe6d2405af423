"""
Shared test fixtures — a simulated host rooted in tmp_path.

Nothing here runs a real command: every external call goes through
MockAdapter, and every installation path points inside tmp_path.
"""

from pathlib import Path

import pytest

from ais_installer.adapters.mock import MockAdapter
from ais_installer.core.config.settings import InstallerSettings, Paths, ProbeDirs
from ais_installer.core.models.action import Action

INSTALLED = "install ok installed"


@pytest.fixture
def host_root(tmp_path: Path) -> Path:
    """Root of the simulated host filesystem."""
    root = tmp_path / "host"
    root.mkdir()
    return root


@pytest.fixture
def work_parent(tmp_path: Path) -> Path:
    """Parent directory for installer working directories."""
    return tmp_path / "work"


@pytest.fixture
def settings(host_root: Path, work_parent: Path) -> InstallerSettings:
    """Default settings with every path redirected into the simulated host."""
    return InstallerSettings(
        paths=Paths(
            config_dir=host_root / "etc" / "AIS-catcher",
            binary=host_root / "usr" / "bin" / "AIS-catcher",
            unit_dir=host_root / "etc" / "systemd" / "system",
            udev_rules_dir=host_root / "etc" / "udev" / "rules.d",
            log_file=host_root / "var" / "log" / "ais-catcher-install.log",
            work_parent=work_parent,
        ),
        probe=ProbeDirs(
            include_dirs=(host_root / "usr" / "include", host_root / "usr" / "local" / "include"),
            library_dirs=(host_root / "usr" / "lib", host_root / "usr" / "local" / "lib"),
        ),
    )


@pytest.fixture
def shell() -> MockAdapter:
    """Scripted command adapter; every command succeeds unless told otherwise.

    Every package the registry is asked about reports as installed.
    """
    shell = MockAdapter()
    shell.set_success(["dpkg-query"], output=INSTALLED)
    return shell


@pytest.fixture
def fresh_host(shell: MockAdapter) -> MockAdapter:
    """No dependency is known to the package registry."""
    shell.set_failure(["dpkg-query"], error="dpkg-query: no packages found matching")
    return shell


@pytest.fixture
def builds_artifact(shell: MockAdapter) -> MockAdapter:
    """Every ``make -C <dir>`` leaves an executable at <checkout>/build/AIS-catcher."""

    def _create(action: Action) -> None:
        artifact = Path(action.cwd) / "build" / "AIS-catcher"
        artifact.parent.mkdir(parents=True, exist_ok=True)
        artifact.write_bytes(b"\x7fELF-fake-daemon")

    shell.on(["make", "-C"], _create)
    return shell


def install_library(root_include: Path, root_lib: Path, header: str, library: str, suffix: str = ".so") -> None:
    """Drop a header and a library file onto the simulated host."""
    h = root_include / header
    h.parent.mkdir(parents=True, exist_ok=True)
    h.write_text("/* header */\n")
    root_lib.mkdir(parents=True, exist_ok=True)
    (root_lib / f"{library}{suffix}").write_bytes(b"")


@pytest.fixture
def install_lib(settings: InstallerSettings):
    """Callable placing a header/library pair in the first probe dirs."""

    def _install(header: str, library: str, suffix: str = ".so") -> None:
        install_library(
            settings.probe.include_dirs[0],
            settings.probe.library_dirs[0],
            header,
            library,
            suffix,
        )

    return _install
