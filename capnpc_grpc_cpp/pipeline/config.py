"""
Configuration for the plugin pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PluginConfig:
    """Configuration options for the plugin."""

    # Suffix appended to the display name for the declarations file
    header_suffix: str = ".h"

    # Suffix appended to the display name for the definitions file
    source_suffix: str = ".c++"

    # Directory prepended to relative output paths (empty = working directory)
    output_dir: str = ""

    # Add generation comment at top of each file
    add_generation_comment: bool = True

    # Header providing the gRPC server types
    grpc_include: str = "grpcpp/grpcpp.h"

    # Request encoding on the input channel: "binary" (from the compiler) or "json"
    input_format: str = "binary"

    # Location of schema.capnp for binary input (empty = search the usual places)
    schema_path: str = ""

    @staticmethod
    def from_dict(d: dict) -> PluginConfig:
        """Create a config from a dictionary."""
        config = PluginConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "header_suffix": self.header_suffix,
            "source_suffix": self.source_suffix,
            "output_dir": self.output_dir,
            "add_generation_comment": self.add_generation_comment,
            "grpc_include": self.grpc_include,
            "input_format": self.input_format,
            "schema_path": self.schema_path,
        }
