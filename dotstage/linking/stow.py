"""GNU Stow invocation over the staged package tree."""

from __future__ import annotations

import enum
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Iterable, Sequence

from ..core.models import LinkReport, RunConfig
from ..packages.processor import TargetUnavailableError
from ..packages.resolver import is_valid_package_name

logger = logging.getLogger(__name__)


class LinkerNotFoundError(RuntimeError):
    """Raised when the link manager executable is not installed."""


class LinkMode(str, enum.Enum):
    STOW = "stow"
    UNSTOW = "unstow"
    RESTOW = "restow"

    @property
    def flags(self) -> list[str]:
        return {
            LinkMode.STOW: [],
            LinkMode.UNSTOW: ["-D"],
            LinkMode.RESTOW: ["-R"],
        }[self]

    @property
    def verb(self) -> str:
        return {
            LinkMode.STOW: "Stowing",
            LinkMode.UNSTOW: "Unstowing",
            LinkMode.RESTOW: "Restowing",
        }[self]

    @property
    def description(self) -> str:
        return {
            LinkMode.STOW: "Applying changes using stow",
            LinkMode.UNSTOW: "Removing stow symlinks",
            LinkMode.RESTOW: "Restowing packages",
        }[self]


def run_logged(
    cmd: Iterable[str],
    *,
    check: bool = True,
    **kwargs: object,
) -> subprocess.CompletedProcess[str]:
    """
    Run a subprocess with its output going straight to the caller's terminal.
    Returns the CompletedProcess; raises CalledProcessError when check=True.
    """
    cmd_list = list(cmd)
    logger.debug(f"Running: {cmd_list}")
    result = subprocess.run(cmd_list, text=True, **kwargs)  # type: ignore[arg-type]
    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(result.returncode, result.args)
    return result


def ensure_linker(executable: str) -> str:
    path = shutil.which(executable)
    if path is None:
        raise LinkerNotFoundError(f"missing dependency: {executable}")
    return path


def build_stow_command(
    package: str,
    mode: LinkMode,
    *,
    home: Path,
    dry_run: bool,
    executable: str = "stow",
) -> list[str]:
    """Compose the argument vector for one package."""
    cmd = [executable, "--dotfiles", "-v"]
    if dry_run:
        cmd.append("-n")
    cmd.extend(mode.flags)
    cmd.extend(["-t", str(home), package])
    return cmd


def staged_packages(staging_dir: Path) -> list[str]:
    return sorted(entry.name for entry in staging_dir.iterdir() if entry.is_dir())


def link_packages(
    names: Sequence[str], mode: LinkMode, config: RunConfig
) -> LinkReport:
    """Run the linker once per package in the staged tree.

    Args:
        names: Requested packages; empty means every staged package
        mode: Link, unlink or relink
        config: Run configuration (staging dir, home, dry-run, executable)

    Returns:
        Report of linked, missing and failed packages

    Raises:
        TargetUnavailableError: The staging directory is missing
        LinkerNotFoundError: The linker is not on PATH
    """
    staging_dir = config.staging_dir
    logger.info(mode.description)
    if not staging_dir.is_dir():
        raise TargetUnavailableError(f"Failed to change to directory: {staging_dir}")
    executable = ensure_linker(config.stow_executable)

    report = LinkReport()
    for package in names or staged_packages(staging_dir):
        if not is_valid_package_name(package) or not (staging_dir / package).is_dir():
            logger.error(f"Package not found: {package}")
            report.missing.append(package)
            continue

        logger.info(f"{mode.verb} package: {package}")
        cmd = build_stow_command(
            package,
            mode,
            home=config.home,
            dry_run=config.dry_run,
            executable=executable,
        )
        try:
            run_logged(cmd, cwd=staging_dir)
        except (subprocess.CalledProcessError, OSError) as exc:
            logger.error(f"{mode.verb} {package} failed: {exc}")
            report.failed.append(package)
            continue
        report.linked.append(package)

    if config.dry_run:
        logger.info(
            f"Dry run completed. Use --apply to actually {mode.description.lower()}."
        )
    elif report.ok:
        logger.info(f"{mode.description} completed successfully")
    else:
        logger.error(f"{mode.description} failed for: {', '.join(report.failed)}")

    return report
