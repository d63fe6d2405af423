"""
Tests for the daemon build and the shared build-step runner.
"""

from pathlib import Path

import pytest

from ais_installer.adapters.mock import MockAdapter
from ais_installer.core.errors import BuildFailure
from ais_installer.core.models.dependency import BuildStep
from ais_installer.core.services.deploy.build_steps import (
    default_build_vars,
    run_build_steps,
    substitute_build_vars,
)
from ais_installer.core.services.deploy.builder import BuildOrchestrator


class TestSubstituteBuildVars:
    def test_known_placeholders(self):
        argv = substitute_build_vars(["make", "-C", "{build_dir}", "-j{nproc}"], {"build_dir": "out", "nproc": "8"})
        assert argv == ["make", "-C", "out", "-j8"]

    def test_unknown_placeholder_kept(self):
        assert substitute_build_vars(["echo", "{nope}"], {}) == ["echo", "{nope}"]

    def test_default_vars(self, tmp_path: Path):
        v = default_build_vars(tmp_path, "bld")
        assert v["checkout"] == str(tmp_path)
        assert v["build_dir"] == "bld"
        assert int(v["nproc"]) >= 1


class TestRunBuildSteps:
    def test_step_cwd_relative_to_checkout(self, tmp_path: Path):
        shell = MockAdapter()
        steps = [BuildStep(label="gen", argv=["./gen.sh"], cwd="scripts")]
        run_build_steps(shell, steps, checkout=tmp_path, variables={}, prefix="x", error_cls=BuildFailure)
        assert shell.call_log[0].action.cwd == str(tmp_path / "scripts")
        assert shell.action_ids == ["x:gen"]

    def test_stops_at_first_failure(self, tmp_path: Path):
        shell = MockAdapter()
        shell.set_failure(["b"], error="boom")
        steps = [BuildStep(label=n, argv=[n]) for n in ("a", "b", "c")]
        with pytest.raises(BuildFailure) as exc:
            run_build_steps(shell, steps, checkout=tmp_path, variables={}, prefix="p", error_cls=BuildFailure)
        assert shell.commands == [["a"], ["b"]]
        assert "boom" in str(exc.value)


class TestBuildOrchestrator:
    def test_build_returns_artifact(self, settings, builds_artifact, tmp_path: Path):
        builder = BuildOrchestrator(settings, builds_artifact, tmp_path)
        artifact = builder.build()
        assert artifact == tmp_path / "AIS-catcher" / "build" / "AIS-catcher"
        assert artifact.is_file()
        assert builds_artifact.action_ids == ["daemon:clone", "daemon:configure", "daemon:build"]

    def test_clone_is_shallow(self, settings, builds_artifact, tmp_path: Path):
        BuildOrchestrator(settings, builds_artifact, tmp_path).build()
        clone = builds_artifact.commands[0]
        assert clone == [
            "git", "clone", "--depth", "1",
            settings.repositories.daemon, str(tmp_path / "AIS-catcher"),
        ]

    def test_clone_failure(self, settings, shell, tmp_path: Path):
        shell.set_failure(["git", "clone"], error="fatal: unable to access")
        with pytest.raises(BuildFailure) as exc:
            BuildOrchestrator(settings, shell, tmp_path).build()
        assert exc.value.step == "daemon:clone"
        assert shell.call_count == 1

    def test_build_step_failure(self, settings, shell, tmp_path: Path):
        shell.set_failure(["make"], error="compilation terminated")
        with pytest.raises(BuildFailure) as exc:
            BuildOrchestrator(settings, shell, tmp_path).build()
        assert exc.value.step == "daemon:build"

    def test_missing_artifact(self, settings, shell, tmp_path: Path):
        with pytest.raises(BuildFailure, match="no executable"):
            BuildOrchestrator(settings, shell, tmp_path).build()

    def test_dry_run_skips_artifact_check(self, settings, tmp_path: Path):
        shell = MockAdapter(dry_run=True)
        artifact = BuildOrchestrator(settings, shell, tmp_path).build()
        assert artifact.name == "AIS-catcher"
        assert shell.call_count == 0
