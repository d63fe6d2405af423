"""
Tests for dependency resolution — strategy selection, idempotence, fail-fast.
"""

from pathlib import Path

import pytest

from ais_installer.core.errors import InstallFailure
from ais_installer.core.models.action import Action
from ais_installer.core.models.dependency import BuildFromSource, PackageManagerInstall
from ais_installer.core.services.deploy.orchestrator import build_detector
from ais_installer.core.services.deploy.resolver import DependencyResolver


def _resolver(settings, shell, work_dir: Path) -> DependencyResolver:
    work_dir.mkdir(parents=True, exist_ok=True)
    return DependencyResolver(settings, build_detector(settings, shell), shell, work_dir)


# ── Strategy selection ──────────────────────────────────────────────


class TestSelectStrategy:
    def test_designated_dependency_builds_from_source(self, settings, shell, tmp_path):
        resolver = _resolver(settings, shell, tmp_path / "w")
        strategy = resolver.select_strategy(settings.get_dependency("librtlsdr"))
        assert isinstance(strategy, BuildFromSource)
        assert strategy.repository.endswith("rtl-sdr.git")

    def test_others_use_dev_package(self, settings, shell, tmp_path):
        resolver = _resolver(settings, shell, tmp_path / "w")
        strategy = resolver.select_strategy(settings.get_dependency("libairspy"))
        assert strategy == PackageManagerInstall(package="libairspy-dev")


# ── Idempotence ─────────────────────────────────────────────────────


class TestAlreadySatisfied:
    def test_registry_hit_is_noop(self, settings, shell, tmp_path):
        resolver = _resolver(settings, shell, tmp_path / "w")
        results = resolver.resolve_all(settings.dependencies)
        assert set(results.values()) == {"present"}
        assert all(cmd[0] == "dpkg-query" for cmd in shell.commands)

    def test_filesystem_hit_is_noop(self, settings, fresh_host, install_lib, tmp_path):
        install_lib("rtl-sdr.h", "librtlsdr", suffix=".a")
        resolver = _resolver(settings, fresh_host, tmp_path / "w")
        assert resolver.resolve(settings.get_dependency("librtlsdr")) == "present"
        assert not fresh_host.ran(["git"])
        assert not fresh_host.ran(["apt-get"])


# ── Package installs ────────────────────────────────────────────────


class TestPackageInstall:
    def test_installs_dev_package(self, settings, fresh_host, tmp_path):
        resolver = _resolver(settings, fresh_host, tmp_path / "w")
        assert resolver.resolve(settings.get_dependency("libsoxr")) == "package"
        assert ["apt-get", "install", "-y", "libsoxr-dev"] in fresh_host.commands

    def test_failure_raises(self, settings, fresh_host, tmp_path):
        fresh_host.set_failure(["apt-get", "install"], error="E: Unable to locate package")
        resolver = _resolver(settings, fresh_host, tmp_path / "w")
        with pytest.raises(InstallFailure) as exc:
            resolver.resolve(settings.get_dependency("libhackrf"))
        assert "libhackrf-dev" in str(exc.value)
        assert "Unable to locate package" in str(exc.value)
        assert exc.value.step == "libhackrf:apt"

    def test_runtime_package_alone_is_not_enough(self, settings, fresh_host, tmp_path):
        fresh_host.set_success(["dpkg-query", "-W", "-f=${Status}", "zlib1g"], output="install ok installed")
        resolver = _resolver(settings, fresh_host, tmp_path / "w")
        assert resolver.resolve(settings.get_dependency("zlib1g")) == "package"
        assert ["apt-get", "install", "-y", "zlib1g-dev"] in fresh_host.commands

    def test_removed_dev_package_is_reinstalled(self, settings, fresh_host, tmp_path):
        fresh_host.set_success(["dpkg-query", "-W", "-f=${Status}", "libsoxr"], output="deinstall ok config-files")
        resolver = _resolver(settings, fresh_host, tmp_path / "w")
        assert resolver.resolve(settings.get_dependency("libsoxr")) == "package"

    def test_fail_fast_stops_later_dependencies(self, settings, fresh_host, tmp_path):
        fresh_host.set_failure(["apt-get", "install", "-y", "libairspyhf-dev"])
        resolver = _resolver(settings, fresh_host, tmp_path / "w")
        with pytest.raises(InstallFailure):
            resolver.resolve_all(settings.dependencies)

        probed = [cmd[-1] for cmd in fresh_host.commands if cmd[0] == "dpkg-query"]
        names = [d.name for d in settings.dependencies]
        assert probed == names[: names.index("libairspyhf") + 1]
        assert not fresh_host.ran(["apt-get", "install", "-y", "libhackrf-dev"])


# ── Source builds ───────────────────────────────────────────────────


class TestBuildFromSource:
    def test_full_protocol(self, settings, fresh_host, tmp_path):
        work = tmp_path / "w"
        resolver = _resolver(settings, fresh_host, work)
        assert resolver.resolve(settings.get_dependency("librtlsdr")) == "source"

        ids = [i for i in fresh_host.action_ids if i.startswith("librtlsdr:")]
        assert ids == [
            "librtlsdr:clone",
            "librtlsdr:configure",
            "librtlsdr:build",
            "librtlsdr:install",
            "librtlsdr:udev-rules",
            "librtlsdr:udev-reload",
            "librtlsdr:ldconfig",
        ]
        clone = fresh_host.commands[fresh_host.action_ids.index("librtlsdr:clone")]
        assert clone[:4] == ["git", "clone", "--depth", "1"]
        assert clone[-1] == str(work / "rtl-sdr")

    def test_configure_enables_udev_rules(self, settings, fresh_host, tmp_path):
        _resolver(settings, fresh_host, tmp_path / "w").resolve(settings.get_dependency("librtlsdr"))
        configure = fresh_host.call_log[fresh_host.action_ids.index("librtlsdr:configure")].action
        assert "-DINSTALL_UDEV_RULES=ON" in configure.argv
        assert "-DDETACH_KERNEL_DRIVER=ON" in configure.argv
        assert configure.cwd == str(tmp_path / "w" / "rtl-sdr")

    def test_placeholders_are_substituted(self, settings, fresh_host, tmp_path):
        _resolver(settings, fresh_host, tmp_path / "w").resolve(settings.get_dependency("librtlsdr"))
        for cmd in fresh_host.commands:
            assert not any("{" in token for token in cmd)
        rules = fresh_host.commands[fresh_host.action_ids.index("librtlsdr:udev-rules")]
        assert rules[-1] == f"{settings.paths.udev_rules_dir}/"

    @pytest.mark.parametrize(
        "prefix, step",
        [
            (["git", "clone"], "clone"),
            (["cmake"], "configure"),
            (["make", "-C", "build", "install"], "install"),
            (["ldconfig"], "ldconfig"),
        ],
    )
    def test_each_step_is_a_failure_point(self, settings, fresh_host, tmp_path, prefix, step):
        fresh_host.set_failure(prefix)
        resolver = _resolver(settings, fresh_host, tmp_path / "w")
        with pytest.raises(InstallFailure) as exc:
            resolver.resolve(settings.get_dependency("librtlsdr"))
        assert f"'{step}'" in str(exc.value)
        assert exc.value.step == f"librtlsdr:{step}"

    def test_no_package_fallback(self, settings, fresh_host, tmp_path):
        fresh_host.set_failure(["make"])
        with pytest.raises(InstallFailure):
            _resolver(settings, fresh_host, tmp_path / "w").resolve(settings.get_dependency("librtlsdr"))
        assert not fresh_host.ran(["apt-get", "install", "-y", "librtlsdr-dev"])

    def test_second_run_sees_built_library(self, settings, fresh_host, tmp_path):
        """No trace on the host → build from source → probe satisfiable afterwards."""
        include = settings.probe.include_dirs[1]
        libdir = settings.probe.library_dirs[1]

        def _make_install(action: Action) -> None:
            include.mkdir(parents=True, exist_ok=True)
            (include / "rtl-sdr.h").write_text("")
            libdir.mkdir(parents=True, exist_ok=True)
            (libdir / "librtlsdr.so").write_bytes(b"")

        fresh_host.on(["make", "-C", "build", "install"], _make_install)
        detector = build_detector(settings, fresh_host)
        rtlsdr = settings.get_dependency("librtlsdr")

        assert not detector.probe(rtlsdr)
        resolver = DependencyResolver(settings, detector, fresh_host, tmp_path)
        assert resolver.resolve(rtlsdr) == "source"
        assert fresh_host.ran(["ldconfig"])
        assert detector.probe(rtlsdr)
        assert resolver.resolve(rtlsdr) == "present"
