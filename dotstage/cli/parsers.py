"""CLI argument parsers and validators."""

from __future__ import annotations

from pathlib import Path

import typer


def parse_hostname(value: str | None) -> str | None:
    """Validate a hostname override; it names a config file and a directory."""
    if value is None:
        return None
    host = value.strip()
    if host == "":
        raise typer.BadParameter("Hostname must not be empty")
    if "/" in host or "\\" in host or host in {".", ".."}:
        raise typer.BadParameter(f"Invalid hostname: {value!r}")
    return host


def parse_root(value: str) -> Path | None:
    """Parse the dotfiles root option; empty means the configured default."""
    if value == "":
        return None
    root = Path(value).expanduser()
    if not root.is_dir():
        raise typer.BadParameter(f"Not a directory: {value}")
    return root
