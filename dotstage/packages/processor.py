"""Render and copy package contents into a target tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, Mapping, Sequence

from ..core.models import (
    BuildReport,
    PackageReport,
    ResolvedFile,
    ResolvedPackage,
    RunConfig,
)
from ..environment.variables import load_variables
from ..rendering.engine import TemplateRenderError, build_context, render_template
from ..rendering.io import atomic_copy
from .resolver import PackageNotFoundError, discover_packages, resolve_package

logger = logging.getLogger(__name__)


class TargetUnavailableError(RuntimeError):
    """Raised when a build or staging directory cannot be used."""


def iter_package_files(package_dir: Path, suffix: str) -> Iterator[ResolvedFile]:
    """Yield every regular file below a package directory.

    Args:
        package_dir: Package root
        suffix: Filename suffix that marks templates

    Yields:
        Files with their destination relative to the package target
    """
    for source in sorted(package_dir.rglob("*")):
        if not source.is_file():
            continue
        relative = source.relative_to(package_dir)
        if source.name.endswith(suffix) and source.name != suffix:
            stripped = relative.with_name(source.name[: -len(suffix)])
            yield ResolvedFile(source=source, relative=stripped, kind="template")
        else:
            yield ResolvedFile(source=source, relative=relative, kind="plain")


def render_context(config: RunConfig) -> dict[str, Any]:
    """Load the variables of a run and layer them over its environment."""
    variables = load_variables(config.defaults_path, config.host_config_path)
    logger.debug(f"Loaded {len(variables)} template variable(s)")
    return build_context(variables, config.environ)


def process_file(
    item: ResolvedFile,
    target_dir: Path,
    context: Mapping[str, Any],
    *,
    strict: bool = False,
) -> Path:
    """Render or copy one file into the package target directory."""
    destination = target_dir / item.relative
    if item.kind == "template":
        logger.info(f"Processing template: {item.source}")
        return render_template(item.source, destination, context, strict=strict)

    logger.info(f"Copying file: {item.source}")
    atomic_copy(item.source, destination)
    return destination


def process_package(
    package: ResolvedPackage,
    target_root: Path,
    context: Mapping[str, Any],
    *,
    suffix: str = ".tmpl",
    strict: bool = False,
) -> PackageReport:
    """Populate ``target_root/<package>`` from a resolved package.

    Files that fail to render or copy are logged and reported; the
    remaining files of the package are still processed.

    Raises:
        PackageNotFoundError: The package directory does not exist
    """
    if not package.path.is_dir():
        raise PackageNotFoundError(package.name, package.path)

    target_dir = target_root / package.name
    target_dir.mkdir(parents=True, exist_ok=True)
    report = PackageReport(package=package, target=target_dir)

    for item in iter_package_files(package.path, suffix):
        try:
            report.written.append(
                process_file(item, target_dir, context, strict=strict)
            )
        except (TemplateRenderError, OSError) as exc:
            logger.error(f"{exc}")
            report.failed.append(item.source)

    return report


def process_packages(
    names: Sequence[str], config: RunConfig, target_root: Path
) -> BuildReport:
    """Render a package set into a target tree.

    Args:
        names: Requested package names; empty means every package
        config: Run configuration
        target_root: Build or staging directory

    Returns:
        Report of processed, missing and failed items

    Raises:
        TargetUnavailableError: The target directory cannot be created
    """
    try:
        target_root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise TargetUnavailableError(
            f"Failed to create target directory: {target_root}"
        ) from exc

    context = render_context(config)
    layout = config.layout
    report = BuildReport(target_root=target_root)

    if names:
        packages: list[ResolvedPackage] = []
        for name in names:
            try:
                packages.append(resolve_package(name, layout))
            except PackageNotFoundError as exc:
                logger.error(f"{exc}")
                report.missing.append(name)
    else:
        packages = discover_packages(layout)

    for package in packages:
        logger.info(f"Processing {package.scope} package: {package.name}")
        try:
            report.packages.append(
                process_package(
                    package,
                    target_root,
                    context,
                    suffix=config.template_suffix,
                    strict=config.strict,
                )
            )
        except PackageNotFoundError as exc:
            logger.error(f"{exc}")
            report.missing.append(package.name)
        except OSError as exc:
            logger.error(f"Failed to process package {package.name}: {exc}")
            report.failed_packages.append(package.name)

    return report
