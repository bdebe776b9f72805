"""Template variable sources."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def read_vars(path: Path) -> list[tuple[str, str]]:
    """Read ``key=value`` records from a variables file.

    The value is everything after the first ``=`` and is kept verbatim.
    A line without ``=`` defines its text as a key with an empty value.
    Blank keys and ``#`` comment lines are skipped.

    Args:
        path: Variables file; a missing file contributes nothing

    Returns:
        Records in file order
    """
    if not path.is_file():
        logger.debug(f"No variables file at {path}")
        return []

    pairs: list[tuple[str, str]] = []
    with path.open(encoding="utf-8") as handle:
        for raw in handle:
            line = raw.rstrip("\r\n")
            if line.lstrip().startswith("#"):
                continue
            key, _, value = line.partition("=")
            if key == "":
                continue
            pairs.append((key, value))

    logger.debug(f"Read {len(pairs)} variable(s) from {path}")
    return pairs


def load_variables(
    defaults_path: Path | None, host_path: Path | None = None
) -> dict[str, str]:
    """Merge default and host-specific variables, host values winning.

    Args:
        defaults_path: Default variables file, or None
        host_path: Host override file, or None

    Returns:
        Ordered mapping of variable name to value
    """
    variables: dict[str, str] = {}
    for source in (defaults_path, host_path):
        if source is None:
            continue
        for key, value in read_vars(source):
            variables[key] = value
    return variables
