"""
Output module.

Path resolution, directory materialization and file writing.
"""

from __future__ import annotations

from .directories import ensure_directory, ensure_parent_directory
from .file_writer import FileWriter
from .paths import OutputPaths, output_path, resolve_output_paths

__all__ = [
    "ensure_directory",
    "ensure_parent_directory",
    "FileWriter",
    "OutputPaths",
    "output_path",
    "resolve_output_paths",
]
