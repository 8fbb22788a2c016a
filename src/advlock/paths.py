"""
Where a lock actually lives.

Self locks use the file itself. External locks use a sidecar
`<file>.lock` next to it, or, when that directory is not writable,
`<tmp>/<sha1(dir)>_<file>.lock` so that every process resolving the same
directory lands on the same sidecar.
"""

from __future__ import annotations

import hashlib
import os
import tempfile
from pathlib import Path

from .errors import InvalidPathError

LOCK_SUFFIX = ".lock"


def resolve_directory(path: str | os.PathLike) -> tuple[Path, str]:
    """Return (absolute parent dir, basename) for `path`."""
    raw = Path(path)
    name = raw.name
    if not name:
        raise InvalidPathError(f"File path not valid: {path!s}")
    try:
        directory = raw.parent.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise InvalidPathError(f"File path not valid: {path!s}") from e
    if not directory.is_dir():
        raise InvalidPathError(f"File path not valid: {path!s}")
    return directory, name


def temp_lock_name(directory: Path, name: str) -> str:
    digest = hashlib.sha1(str(directory).encode("utf-8")).hexdigest()
    return f"{digest}_{name}{LOCK_SUFFIX}"


def resolve_lock_path(path: str | os.PathLike, external: bool,
                      temp_dir: str | os.PathLike | None = None) -> Path:
    """
    Compute the file a lock will open.

    Raises InvalidPathError when the parent directory of `path` does not
    exist.
    """
    directory, name = resolve_directory(path)
    if not external:
        return directory / name

    if os.access(directory, os.W_OK):
        return directory / f"{name}{LOCK_SUFFIX}"

    base = Path(temp_dir) if temp_dir is not None else Path(tempfile.gettempdir())
    return base / temp_lock_name(directory, name)
