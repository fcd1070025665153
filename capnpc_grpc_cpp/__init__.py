"""Cap'n Proto gRPC C++ compiler plugin

A Cap'n Proto compiler plugin that reads a code generator request from
standard input, rebuilds the schema graph and writes a header and a source
file for every requested schema file.
"""

__version__ = "1.0.0"

from .pipeline import (
    FileText,
    FilesystemError,
    GrpcCppRenderer,
    MalformedRequestError,
    PluginConfig,
    PluginError,
    PluginGenerator,
    RenderError,
    TextTree,
    UnresolvedReferenceError,
)

__all__ = [
    "PluginGenerator",
    "PluginConfig",
    "GrpcCppRenderer",
    "FileText",
    "TextTree",
    "PluginError",
    "MalformedRequestError",
    "UnresolvedReferenceError",
    "FilesystemError",
    "RenderError",
]
