"""
Installer settings — every fixed constant of an installation run.

Directory lists, repository URLs, dependency descriptors and paths live
here as one frozen model that is handed to each service at construction.
The defaults reproduce the stock AIS-catcher install on a Debian-family
host; a YAML file may override any subset (see ``loader``).
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ais_installer.core.models.dependency import BuildFromSource, BuildStep, DependencyDescriptor


class Repositories(BaseModel):
    model_config = ConfigDict(frozen=True)

    daemon: str = "https://github.com/jvde-github/AIS-catcher.git"
    webassets: str = "https://github.com/jvde-github/webassets.git"


class Paths(BaseModel):
    model_config = ConfigDict(frozen=True)

    config_dir: Path = Path("/etc/AIS-catcher")
    config_json: str = "config.json"
    config_cmd: str = "config.cmd"
    webassets_dir: str = "webassets"
    binary: Path = Path("/usr/bin/AIS-catcher")
    unit_dir: Path = Path("/etc/systemd/system")
    udev_rules_dir: Path = Path("/etc/udev/rules.d")
    log_file: Path = Path("/var/log/ais-catcher-install.log")
    work_parent: Path | None = None   # None → system temp dir

    @property
    def config_json_path(self) -> Path:
        return self.config_dir / self.config_json

    @property
    def config_cmd_path(self) -> Path:
        return self.config_dir / self.config_cmd

    @property
    def webassets_path(self) -> Path:
        return self.config_dir / self.webassets_dir


class ProbeDirs(BaseModel):
    """Ordered candidate directories for the filesystem probe."""

    model_config = ConfigDict(frozen=True)

    include_dirs: tuple[Path, ...] = (
        Path("/usr/include"),
        Path("/usr/local/include"),
        Path("/usr/include/postgresql"),
    )
    library_dirs: tuple[Path, ...] = (
        Path("/usr/lib"),
        Path("/usr/local/lib"),
        Path("/usr/lib64"),
        Path("/usr/local/lib64"),
        Path("/usr/lib/x86_64-linux-gnu"),
        Path("/usr/lib/aarch64-linux-gnu"),
        Path("/usr/lib/arm-linux-gnueabihf"),
        Path("/lib"),
    )


def _default_dependencies() -> tuple[DependencyDescriptor, ...]:
    return (
        DependencyDescriptor(name="librtlsdr", probe_header="rtl-sdr.h", probe_library="librtlsdr"),
        DependencyDescriptor(name="libairspy", probe_header="libairspy/airspy.h", probe_library="libairspy"),
        DependencyDescriptor(name="libairspyhf", probe_header="libairspyhf/airspyhf.h", probe_library="libairspyhf"),
        DependencyDescriptor(name="libhackrf", probe_header="libhackrf/hackrf.h", probe_library="libhackrf"),
        DependencyDescriptor(name="libzmq3", probe_header="zmq.h", probe_library="libzmq"),
        DependencyDescriptor(name="libsoxr", probe_header="soxr.h", probe_library="libsoxr"),
        DependencyDescriptor(name="libcurl4-openssl", probe_header="curl/curl.h", probe_library="libcurl"),
        DependencyDescriptor(name="libssl", probe_header="openssl/ssl.h", probe_library="libssl"),
        # zlib1g itself is the runtime package found on nearly every Debian
        # host; only zlib1g-dev ships zlib.h
        DependencyDescriptor(
            name="zlib1g", probe_header="zlib.h", probe_library="libz", registry_package="zlib1g-dev"
        ),
        DependencyDescriptor(name="libsqlite3", probe_header="sqlite3.h", probe_library="libsqlite3"),
        DependencyDescriptor(name="libpq", probe_header="libpq-fe.h", probe_library="libpq"),
    )


def _default_rtlsdr_build() -> BuildFromSource:
    return BuildFromSource(
        repository="https://github.com/osmocom/rtl-sdr.git",
        checkout="rtl-sdr",
        steps=[
            BuildStep(
                label="configure",
                argv=[
                    "cmake", "-S", ".", "-B", "{build_dir}",
                    "-DINSTALL_UDEV_RULES=ON", "-DDETACH_KERNEL_DRIVER=ON",
                ],
            ),
            BuildStep(label="build", argv=["make", "-C", "{build_dir}", "-j{nproc}"]),
            BuildStep(label="install", argv=["make", "-C", "{build_dir}", "install"]),
            BuildStep(label="udev-rules", argv=["cp", "rtl-sdr.rules", "{udev_rules_dir}/"]),
            BuildStep(label="udev-reload", argv=["udevadm", "control", "--reload-rules"]),
            BuildStep(label="ldconfig", argv=["ldconfig"]),
        ],
    )


def _default_daemon_build() -> list[BuildStep]:
    return [
        BuildStep(label="configure", argv=["cmake", "-S", ".", "-B", "{build_dir}"]),
        BuildStep(label="build", argv=["make", "-C", "{build_dir}", "-j{nproc}"]),
    ]


class InstallerSettings(BaseModel):
    """Immutable configuration of one installer run."""

    model_config = ConfigDict(frozen=True)

    service_name: str = "ais-catcher"
    config_id: str = "aiscatcher"
    command_timeout: int = 1800

    base_packages: tuple[str, ...] = ("git", "make", "gcc", "g++", "cmake", "pkg-config")

    repositories: Repositories = Field(default_factory=Repositories)
    paths: Paths = Field(default_factory=Paths)
    probe: ProbeDirs = Field(default_factory=ProbeDirs)

    dependencies: tuple[DependencyDescriptor, ...] = Field(default_factory=_default_dependencies)
    # The radio-sampling library: packaged versions are often stale, so
    # when missing it is always built from source.
    source_dependency: str = "librtlsdr"
    source_build: BuildFromSource = Field(default_factory=_default_rtlsdr_build)

    daemon_checkout: str = "AIS-catcher"
    daemon_build_dir: str = "build"
    daemon_artifact: str = "build/AIS-catcher"
    daemon_build: tuple[BuildStep, ...] = Field(default_factory=lambda: tuple(_default_daemon_build()))

    @field_validator("service_name")
    @classmethod
    def _strip_unit_suffix(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("service_name must not be empty")
        return v.removesuffix(".service")

    @model_validator(mode="after")
    def _unique_dependency_names(self) -> InstallerSettings:
        seen: set[str] = set()
        for dep in self.dependencies:
            if dep.name in seen:
                raise ValueError(f"Duplicate dependency name: {dep.name}")
            seen.add(dep.name)
        return self

    @property
    def unit_name(self) -> str:
        return f"{self.service_name}.service"

    @property
    def unit_path(self) -> Path:
        return self.paths.unit_dir / self.unit_name

    def get_dependency(self, name: str) -> DependencyDescriptor | None:
        """Look up a dependency descriptor by name."""
        for dep in self.dependencies:
            if dep.name == name:
                return dep
        return None
