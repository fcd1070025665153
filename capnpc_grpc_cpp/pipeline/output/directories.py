"""
Directory materialization.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import FilesystemError

logger = logging.getLogger(__name__)


def ensure_directory(path: str | Path) -> None:
    """
    Create a directory and every missing ancestor, outermost first.

    Relative paths are walked from the working directory, absolute ones from
    the filesystem root. Directories that already exist are skipped, so a
    second call with the same path does nothing.

    Args:
        path: The directory to materialize

    Raises:
        FilesystemError: If a directory cannot be created (permission denied,
            a file in the way, disk full, ...)
    """
    path = Path(path)
    for directory in [*reversed(path.parents), path]:
        if directory.is_dir():
            continue
        try:
            directory.mkdir()
        except FileExistsError:
            # Created by someone else between the check and mkdir
            if directory.is_dir():
                continue
            raise FilesystemError(str(directory), "Path exists and is not a directory") from None
        except OSError as e:
            raise FilesystemError(str(directory), f"Cannot create directory ({e.strerror or e})") from e
        logger.debug("Created directory %s", directory)


def ensure_parent_directory(file_path: str | Path) -> None:
    """Materialize the directory a file will be written into."""
    parent = Path(file_path).parent
    if parent != Path("."):
        ensure_directory(parent)
