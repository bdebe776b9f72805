"""Main CLI application."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from typing_extensions import Annotated

from ..core.models import BuildReport, RunConfig
from ..core.settings import Settings
from ..environment.host import build_run_config
from ..linking.stow import (
    LinkerNotFoundError,
    LinkMode,
    TargetUnavailableError,
    link_packages,
)
from ..packages.processor import process_packages
from .parsers import parse_hostname, parse_root

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="manage",
    help=(
        "Render dotfiles packages with host-specific variables and link them "
        "with GNU Stow. If no packages are specified, all packages are processed."
    ),
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

Packages = Annotated[
    list[str] | None,
    typer.Argument(help="Packages to process (default: all).", show_default=False),
]
Hostname = Annotated[
    str | None,
    typer.Option(
        "--hostname",
        "-H",
        help="Override hostname (default: system hostname).",
        metavar="HOST",
    ),
]
Apply = Annotated[
    bool,
    typer.Option("--apply", help="Actually apply stow commands (default: dry-run)."),
]
Strict = Annotated[
    bool,
    typer.Option("--strict", help="Fail templates that use undefined variables."),
]
Root = Annotated[
    str,
    typer.Option(
        "--root",
        help="Dotfiles repository root (default: $DOTSTAGE_ROOT or cwd).",
        metavar="DIR",
    ),
]
Verbose = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose logging."),
]


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")
    logging.getLogger("dotstage").setLevel(level)


def _run_config(
    root: str, hostname: str | None, *, apply: bool = False, strict: bool = False
) -> RunConfig:
    root_path = parse_root(root)
    settings = Settings(root=root_path) if root_path is not None else Settings()
    return build_run_config(
        settings=settings,
        hostname=parse_hostname(hostname),
        dry_run=not apply,
        strict=strict,
    )


def _process(packages: list[str], config: RunConfig, target: Path) -> None:
    try:
        report = process_packages(packages, config, target)
    except TargetUnavailableError as exc:
        logger.error(f"{exc}")
        raise typer.Exit(code=1) from exc
    _report_build(report)


def _report_build(report: BuildReport) -> None:
    failed = report.failed_files
    if failed:
        logger.warning(f"{len(failed)} file(s) could not be rendered or copied")
    if report.missing:
        logger.warning(f"Skipped missing package(s): {', '.join(report.missing)}")
    if report.failed_packages:
        logger.warning(
            f"Failed package(s): {', '.join(report.failed_packages)}"
        )


def _link(packages: list[str], mode: LinkMode, config: RunConfig) -> None:
    try:
        report = link_packages(packages, mode, config)
    except (TargetUnavailableError, LinkerNotFoundError) as exc:
        logger.error(f"{exc}")
        raise typer.Exit(code=1) from exc
    if not report.ok:
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """Render dotfiles packages and manage their stow links."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)


@app.command()
def build(
    packages: Packages = None,
    hostname: Hostname = None,
    apply: Annotated[bool, typer.Option("--apply", hidden=True)] = False,
    strict: Strict = False,
    root: Root = "",
    verbose: Verbose = False,
) -> None:
    """Render templates to the ./tmp/build directory."""
    _configure_logging(verbose)
    config = _run_config(root, hostname, apply=apply, strict=strict)

    _process(packages or [], config, config.build_dir)
    logger.info(f"Build completed. Files were rendered to: {config.build_dir}")


@app.command()
def stow(
    packages: Packages = None,
    hostname: Hostname = None,
    apply: Apply = False,
    strict: Strict = False,
    root: Root = "",
    verbose: Verbose = False,
) -> None:
    """Apply changes using stow (dry-run by default)."""
    _configure_logging(verbose)
    config = _run_config(root, hostname, apply=apply, strict=strict)

    logger.info("Preparing files for stow...")
    _process(packages or [], config, config.staging_dir)

    _link(packages or [], LinkMode.STOW, config)


@app.command()
def unstow(
    packages: Packages = None,
    hostname: Hostname = None,
    apply: Apply = False,
    root: Root = "",
    verbose: Verbose = False,
) -> None:
    """Remove stow symlinks (dry-run by default)."""
    _configure_logging(verbose)
    config = _run_config(root, hostname, apply=apply)
    _link(packages or [], LinkMode.UNSTOW, config)


@app.command()
def restow(
    packages: Packages = None,
    hostname: Hostname = None,
    apply: Apply = False,
    root: Root = "",
    verbose: Verbose = False,
) -> None:
    """Remove and reapply stow symlinks (dry-run by default)."""
    _configure_logging(verbose)
    config = _run_config(root, hostname, apply=apply)
    _link(packages or [], LinkMode.RESTOW, config)


@app.command("help")
def help_command(ctx: typer.Context) -> None:
    """Show this help message."""
    parent = ctx.parent if ctx.parent is not None else ctx
    typer.echo(parent.get_help())
    raise typer.Exit(code=1)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
