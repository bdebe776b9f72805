"""Package lookup with host-specific overrides."""

from __future__ import annotations

import logging
from pathlib import Path

from ..core.models import PackageLayout, ResolvedPackage

logger = logging.getLogger(__name__)


class PackageNotFoundError(LookupError):
    """Raised when neither a host-specific nor a common package exists."""

    def __init__(self, name: str, path: Path | None = None) -> None:
        detail = f"Package not found: {name}"
        if path is not None:
            detail = f"Package directory not found: {path}"
        super().__init__(detail)
        self.name = name
        self.path = path


def is_valid_package_name(name: str) -> bool:
    """Package names are single path segments."""
    if name in {"", ".", ".."}:
        return False
    return "/" not in name and "\\" not in name


def _list_packages(root: Path) -> list[str]:
    if not root.is_dir():
        return []
    return sorted(entry.name for entry in root.iterdir() if entry.is_dir())


def resolve_package(name: str, layout: PackageLayout) -> ResolvedPackage:
    """Pick the directory to render for a package name.

    Args:
        name: Package name (exact directory name)
        layout: Common and host-specific roots

    Returns:
        Host-specific package when present, else the common one

    Raises:
        PackageNotFoundError: Neither location has the package
    """
    if not is_valid_package_name(name):
        raise PackageNotFoundError(name)

    logger.debug(f"Checking for host-specific package: {name} in {layout.host_root}")
    host_dir = layout.host_root / name
    if host_dir.is_dir():
        logger.info(f"Found host-specific package: {name}")
        return ResolvedPackage(name=name, path=host_dir, scope="host")

    common_dir = layout.common_root / name
    if common_dir.is_dir():
        logger.info(f"Using common package: {name}")
        return ResolvedPackage(name=name, path=common_dir, scope="common")

    raise PackageNotFoundError(name)


def discover_packages(layout: PackageLayout) -> list[ResolvedPackage]:
    """List every package, host-specific ones shadowing common ones.

    Args:
        layout: Common and host-specific roots

    Returns:
        Host-specific packages followed by unshadowed common packages
    """
    host_names = _list_packages(layout.host_root)
    packages = [
        ResolvedPackage(name=name, path=layout.host_root / name, scope="host")
        for name in host_names
    ]

    shadowed = set(host_names)
    packages.extend(
        ResolvedPackage(name=name, path=layout.common_root / name, scope="common")
        for name in _list_packages(layout.common_root)
        if name not in shadowed
    )

    logger.debug(f"Discovered {len(packages)} package(s)")
    return packages
