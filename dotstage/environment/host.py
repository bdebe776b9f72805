"""Host identity and run configuration assembly."""

from __future__ import annotations

import logging
import os
import socket
from pathlib import Path
from typing import Mapping

from ..core.models import RunConfig
from ..core.settings import Settings

logger = logging.getLogger(__name__)


def detect_hostname() -> str:
    """Return the system hostname as reported by the kernel."""
    return socket.gethostname()


def resolve_hostname(override: str | None) -> str:
    explicit = (override or "").strip()
    if explicit != "":
        return explicit
    return detect_hostname()


def build_run_config(
    *,
    settings: Settings,
    hostname: str | None = None,
    dry_run: bool = True,
    strict: bool = False,
    environ: Mapping[str, str] | None = None,
) -> RunConfig:
    """Snapshot hostname, environment and paths into a RunConfig.

    Args:
        settings: Loaded settings (root, data home, linker, suffix)
        hostname: Hostname override; detected when empty
        dry_run: Preview link operations instead of applying them
        strict: Fail templates that reference unknown variables
        environ: Environment to snapshot (default: os.environ)

    Returns:
        Frozen configuration passed to every component
    """
    env = dict(os.environ if environ is None else environ)
    home = Path(env["HOME"]) if env.get("HOME") else Path.home()

    config = RunConfig(
        hostname=resolve_hostname(hostname),
        root=settings.root.resolve(),
        build_dir=settings.build_dir.resolve(),
        staging_dir=settings.staging_dir.expanduser(),
        home=home,
        environ=env,
        template_suffix=settings.template_suffix,
        stow_executable=settings.stow_executable,
        dry_run=dry_run,
        strict=strict,
    )

    logger.info(f"Using hostname: {config.hostname}")
    logger.info(f"Host config: {config.host_config_path}")
    logger.info(f"Common packages directory: {config.layout.common_root}")
    logger.info(f"Host packages directory: {config.layout.host_root}")

    return config
