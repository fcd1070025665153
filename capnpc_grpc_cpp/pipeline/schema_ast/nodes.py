"""
Node definitions for a decoded code generator request.

These mirror the compiler's schema nodes. Nodes never embed each other:
every cross-node reference (parent scope, field type, method parameter
type) is a numeric id that is looked up in the schema graph on access.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple


class ProtocolVersion(NamedTuple):
    """A (major, minor, micro) protocol version."""

    major: int
    minor: int
    micro: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.micro}"


class NodeKind(Enum):
    """Kind of schema node."""

    FILE = "file"
    STRUCT = "struct"
    ENUM = "enum"
    INTERFACE = "interface"
    CONST = "const"
    ANNOTATION = "annotation"


class TypeKind(Enum):
    """Kind of a type reference."""

    VOID = "void"
    BOOL = "bool"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    TEXT = "text"
    DATA = "data"
    LIST = "list"
    ENUM = "enum"
    STRUCT = "struct"
    INTERFACE = "interface"
    ANY_POINTER = "anyPointer"


# Type kinds whose payload is a reference into the graph
REFERENCE_TYPE_KINDS = frozenset({TypeKind.ENUM, TypeKind.STRUCT, TypeKind.INTERFACE})


@dataclass(frozen=True)
class TypeRef:
    """A type as used by a field, constant or annotation."""

    kind: TypeKind = TypeKind.VOID

    # For enum/struct/interface types
    type_id: int | None = None

    # For list types
    element_type: TypeRef | None = None

    @property
    def is_reference(self) -> bool:
        return self.kind in REFERENCE_TYPE_KINDS


@dataclass(frozen=True)
class NestedNode:
    """A named child declared inside a node's scope."""

    name: str = ""
    id: int = 0


@dataclass(frozen=True)
class Field:
    """A struct field. Either a slot with a type or a group pointing at another node."""

    name: str = ""
    code_order: int = 0
    type: TypeRef | None = None
    group_id: int | None = None


@dataclass(frozen=True)
class Enumerant:
    name: str = ""
    code_order: int = 0


@dataclass(frozen=True)
class Method:
    """An interface method. Parameter and result lists are struct nodes referenced by id."""

    name: str = ""
    code_order: int = 0
    param_struct_type: int = 0
    result_struct_type: int = 0


@dataclass(frozen=True)
class SchemaNode:
    """One node of the schema graph."""

    id: int = 0
    kind: NodeKind = NodeKind.FILE
    display_name: str = ""
    display_name_prefix_length: int = 0

    # Id of the enclosing scope; 0 for files
    scope_id: int = 0

    nested_nodes: tuple[NestedNode, ...] = ()

    # Struct payload
    fields: tuple[Field, ...] = ()
    is_group: bool = False
    data_word_count: int = 0
    pointer_count: int = 0

    # Enum payload
    enumerants: tuple[Enumerant, ...] = ()

    # Interface payload
    methods: tuple[Method, ...] = ()
    superclasses: tuple[int, ...] = ()

    # Const and annotation payload
    type: TypeRef | None = None
    value: Any = None

    @property
    def short_name(self) -> str:
        """Display name without the enclosing scope prefix."""
        return self.display_name[self.display_name_prefix_length :]


@dataclass(frozen=True)
class Import:
    id: int = 0
    name: str = ""


@dataclass(frozen=True)
class RequestedFile:
    """A file the compiler wants output for."""

    id: int = 0
    filename: str = ""
    imports: tuple[Import, ...] = ()


@dataclass
class CodeGeneratorRequest:
    """The complete decoded request."""

    # None when the compiler did not report its version (pre-0.6)
    compiler_version: ProtocolVersion | None = None

    nodes: list[SchemaNode] = field(default_factory=list)

    requested_files: list[RequestedFile] = field(default_factory=list)
