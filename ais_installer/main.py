"""
AIS-catcher installer — CLI entrypoint.

Usage:
    ais-installer --help
    ais-installer install [--dry-run]
    ais-installer check
    ais-installer status
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click

from ais_installer import __version__
from ais_installer.core.observability.logging_config import setup_logging

logger = logging.getLogger("ais_installer")


def _is_root() -> bool:
    return os.geteuid() == 0


@click.group()
@click.version_option(version=__version__, prog_name="ais-installer")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Installer settings YAML (default: built-in settings).",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Log file (default: from settings).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    debug: bool,
    config_path: str | None,
    log_file: str | None,
) -> None:
    """AIS-catcher installer — build, configure and deploy the daemon."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["log_file"] = log_file


def _load(ctx: click.Context, *, default_level: str, to_file: bool):
    """Load settings and configure logging for a command."""
    from ais_installer.core.config.loader import ConfigError, load_settings

    if ctx.obj["debug"]:
        level = "DEBUG"
    elif ctx.obj["verbose"]:
        level = "INFO"
    else:
        level = os.environ.get("AIS_INSTALL_LOG_LEVEL", default_level)

    try:
        settings = load_settings(ctx.obj["config_path"])
    except ConfigError as e:
        setup_logging(level=level)
        logger.error("%s", e)
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    log_file = ctx.obj["log_file"] or (str(settings.paths.log_file) if to_file else None)
    setup_logging(level=level, log_file=log_file)
    return settings


@cli.command()
@click.option("--dry-run", is_flag=True, help="Log what would change without changing it.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output report as JSON.")
@click.pass_context
def install(ctx: click.Context, dry_run: bool, as_json: bool) -> None:
    """Install dependencies, build and (re)deploy AIS-catcher."""
    from ais_installer.adapters.shell.command import ShellCommandAdapter
    from ais_installer.core.errors import InstallerError
    from ais_installer.core.services.deploy.orchestrator import InstallOrchestrator

    settings = _load(ctx, default_level="INFO", to_file=True)

    if not dry_run and not _is_root():
        logger.error("This installer must be run as root (or with --dry-run)")
        sys.exit(1)

    shell = ShellCommandAdapter(dry_run=dry_run)
    try:
        report = InstallOrchestrator(settings, shell).run()
    except InstallerError as e:
        logger.error("Installation failed [%s]: %s", e.kind, e)
        if as_json:
            click.echo(json.dumps({"ok": False, **e.to_dict()}, indent=2))
        sys.exit(1)
    except Exception as e:
        logger.exception("Installation failed unexpectedly: %s", e)
        if as_json:
            click.echo(json.dumps({"ok": False, "kind": "unexpected", "step": None, "error": str(e)}, indent=2))
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"ok": True, **report.to_dict()}, indent=2))
        return

    click.secho("✅ AIS-catcher installed", fg="green", bold=True)
    if report.installed:
        click.echo(f"   Installed: {', '.join(report.installed)}")
    for path in report.created_configs:
        click.echo(f"   Created:   {path}")
    if report.service_before is not None:
        click.echo(f"   Service:   {report.service_before.describe()}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Report which native dependencies are already satisfiable."""
    from ais_installer.adapters.shell.command import ShellCommandAdapter
    from ais_installer.core.services.deploy.orchestrator import build_detector

    settings = _load(ctx, default_level="WARNING", to_file=False)
    detector = build_detector(settings, ShellCommandAdapter(dry_run=True))
    reports = [detector.explain(dep) for dep in settings.dependencies]

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in reports], indent=2))
        return

    click.secho("\n🔎 Native dependencies", fg="cyan", bold=True)
    for r in reports:
        marker = click.style("✓", fg="green") if r.satisfiable else click.style("✗", fg="red")
        detail = ", ".join(f"{k}={v.value}" for k, v in r.outcomes.items())
        source = "  (built from source)" if r.dependency == settings.source_dependency else ""
        click.echo(f"   {marker} {r.dependency:<20} {detail}{source}")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show the deployed service posture."""
    from ais_installer.adapters.shell.command import ShellCommandAdapter
    from ais_installer.adapters.system.systemd import SystemdServiceManager, detect_init_system
    from ais_installer.core.services.deploy.service import ServiceDeploymentManager

    settings = _load(ctx, default_level="WARNING", to_file=False)
    systemd = SystemdServiceManager(ShellCommandAdapter(dry_run=True))
    state = ServiceDeploymentManager(settings, systemd, dry_run=True).snapshot()

    result = {
        "service": settings.unit_name,
        "init_system": detect_init_system(),
        "active": state.is_active,
        "enabled": state.is_enabled,
        "unit_installed": settings.unit_path.is_file(),
        "binary_installed": settings.paths.binary.is_file(),
        "config_dir": str(settings.paths.config_dir),
    }

    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    click.secho(f"\n📡 {settings.unit_name}", fg="cyan", bold=True)
    click.echo(f"   Posture: {state.describe()}")
    click.echo(f"   Unit:    {'present' if result['unit_installed'] else 'missing'}")
    click.echo(f"   Binary:  {'present' if result['binary_installed'] else 'missing'}")
    click.echo()


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
