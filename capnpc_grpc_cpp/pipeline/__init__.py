"""
Pipeline - Cap'n Proto compiler plugin core.

Turns a code generator request into files on disk:

1. Phase 1 (Parser): Decode the request into schema nodes
2. Phase 2 (Version gate): Warn when compiler and plugin versions differ
3. Phase 3 (Loader): Build the id-keyed schema graph and freeze it
4. Phase 4 (Render): Call the render hook once per requested file
5. Phase 5 (Output): Resolve paths, create directories, write files
"""

from __future__ import annotations

from .analyzer import Schema, SchemaGraph, SchemaLoader
from .backends import GrpcCppRenderer, RenderHook, empty_render
from .config import PluginConfig
from .errors import (
    FilesystemError,
    MalformedRequestError,
    PluginError,
    RenderError,
    UnresolvedReferenceError,
)
from .generator import DriverState, PluginGenerator
from .text_tree import FileText, TextTree
from .version import PROTOCOL_VERSION, ProtocolVersionMismatch, check_protocol_version

__all__ = [
    "PluginGenerator",
    "DriverState",
    "PluginConfig",
    "Schema",
    "SchemaGraph",
    "SchemaLoader",
    "RenderHook",
    "GrpcCppRenderer",
    "empty_render",
    "FileText",
    "TextTree",
    "PROTOCOL_VERSION",
    "ProtocolVersionMismatch",
    "check_protocol_version",
    "PluginError",
    "MalformedRequestError",
    "UnresolvedReferenceError",
    "FilesystemError",
    "RenderError",
]
