"""
File writer for generated code.

Writes a text tree in place: the target is created or truncated, every
segment is written in order and the file is closed before returning.
There is no temporary file, so a failed write may leave a truncated file
behind.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import FilesystemError
from ..text_tree import TextTree

logger = logging.getLogger(__name__)


class FileWriter:
    """Writes generated text trees to disk and remembers what it wrote."""

    def __init__(self):
        self.written: list[str] = []

    def write(self, path: str | Path, tree: TextTree) -> None:
        """Write a text tree to a file.

        The parent directory must already exist.

        Args:
            path: Target file path
            tree: Content to write

        Raises:
            FilesystemError: If the file cannot be opened or written
        """
        try:
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                for segment in tree.segments():
                    f.write(segment)
        except OSError as e:
            raise FilesystemError(str(path), f"Cannot write file ({e.strerror or e})") from e

        self.written.append(str(path))
        logger.debug("Wrote %s", path)
