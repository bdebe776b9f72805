"""File I/O operations for rendering and copying."""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator


def ensure_parent(path: Path) -> None:
    """Ensure parent directories exist for the given path.

    Args:
        path: Path whose parent directories should be created
    """
    path.parent.mkdir(parents=True, exist_ok=True)


def file_mode(path: Path) -> int:
    """Return the permission bits of an existing file."""
    return stat.S_IMODE(path.stat().st_mode)


@contextmanager
def _atomic_handle(path: Path, binary: bool) -> Iterator[IO]:
    ensure_parent(path)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        if binary:
            handle = os.fdopen(fd, "wb")
        else:
            handle = os.fdopen(fd, "w", encoding="utf-8", newline="")
        with handle as tmp:
            yield tmp
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def atomic_write_text(path: Path, text: str, mode: int = 0o644) -> None:
    """Write text to a file atomically using a temporary file.

    Args:
        path: Destination file path
        text: Text content to write
        mode: File permissions (octal)
    """
    with _atomic_handle(path, binary=False) as tmp:
        tmp.write(text)
    os.chmod(path, mode)


def atomic_copy(src: Path, dest: Path) -> None:
    """Copy a file byte for byte, keeping its permission bits.

    Args:
        src: Source file
        dest: Destination file (replaced if present)
    """
    with src.open("rb") as source, _atomic_handle(dest, binary=True) as tmp:
        shutil.copyfileobj(source, tmp)
    os.chmod(dest, file_mode(src))
