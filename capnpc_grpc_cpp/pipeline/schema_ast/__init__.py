"""
Request AST module.

Contains the node definitions and the binary and JSON decoders for code
generator requests.
"""

from __future__ import annotations

from .nodes import (
    CodeGeneratorRequest,
    Enumerant,
    Field,
    Import,
    Method,
    NestedNode,
    NodeKind,
    ProtocolVersion,
    RequestedFile,
    SchemaNode,
    TypeKind,
    TypeRef,
)
from .capnp_reader import BinaryRequestDecoder, find_schema_file, load_request_schema
from .parser import RequestParser

__all__ = [
    "CodeGeneratorRequest",
    "Enumerant",
    "Field",
    "Import",
    "Method",
    "NestedNode",
    "NodeKind",
    "ProtocolVersion",
    "RequestedFile",
    "SchemaNode",
    "TypeKind",
    "TypeRef",
    "RequestParser",
    "BinaryRequestDecoder",
    "find_schema_file",
    "load_request_schema",
]
