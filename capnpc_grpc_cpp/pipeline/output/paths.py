"""
Output path resolution.

Output paths are the schema's display name with a suffix appended. Two
files with the same display name map to the same path and the later one
wins.
"""

from __future__ import annotations

import os
from typing import NamedTuple

from ..config import PluginConfig


class OutputPaths(NamedTuple):
    """Paths of the two artifacts generated for one requested file."""

    header: str
    source: str


def output_path(display_name: str, suffix: str, output_dir: str = "") -> str:
    """
    Build the output path for one artifact.

    Args:
        display_name: Fully qualified display name, e.g. "foo/bar.capnp"
        suffix: Artifact suffix, e.g. ".h"
        output_dir: Optional directory in front of relative display names

    Returns:
        The path as a string
    """
    path = f"{display_name}{suffix}"
    if output_dir and not os.path.isabs(path):
        path = os.path.join(output_dir, path)
    return path


def resolve_output_paths(display_name: str, config: PluginConfig) -> OutputPaths:
    return OutputPaths(
        header=output_path(display_name, config.header_suffix, config.output_dir),
        source=output_path(display_name, config.source_suffix, config.output_dir),
    )
