"""
Binary code generator request decoder.

The compiler writes the request to the plugin's stdin as a framed Cap'n Proto
message. It is read with pycapnp against the compiler's own schema.capnp and
converted to the mapping RequestParser understands, so both input formats go
through the same shape checks.
"""

from __future__ import annotations

import functools
import logging
import sys
from pathlib import Path
from typing import Any

import capnp

from ..errors import MalformedRequestError, PluginError
from .nodes import CodeGeneratorRequest, NodeKind, TypeKind
from .parser import RequestParser

logger = logging.getLogger(__name__)

# The compiler is trusted; don't limit traversal
TRAVERSAL_LIMIT_IN_WORDS = 1 << 62

NODE_KINDS = tuple(kind.value for kind in NodeKind)
TYPE_KINDS = tuple(kind.value for kind in TypeKind)
VALUE_MEMBERS = TYPE_KINDS
POINTER_VALUE_MEMBERS = frozenset({"list", "struct", "interface", "anyPointer"})


def schema_candidates() -> list[Path]:
    """Places schema.capnp is installed, by pycapnp or by the capnp tool."""
    package_dir = Path(capnp.__file__).parent
    return [
        package_dir / "schema.capnp",
        package_dir / "include" / "capnp" / "schema.capnp",
        Path(sys.prefix) / "include" / "capnp" / "schema.capnp",
        Path("/usr/local/include/capnp/schema.capnp"),
        Path("/usr/include/capnp/schema.capnp"),
    ]


def find_schema_file(schema_path: str = "") -> Path:
    """
    Locate schema.capnp.

    Args:
        schema_path: Explicit location; searched alone when given

    Returns:
        Path of the schema file

    Raises:
        PluginError: If no candidate exists
    """
    candidates = [Path(schema_path)] if schema_path else schema_candidates()
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    searched = ", ".join(str(c) for c in candidates)
    raise PluginError(f"Cannot find schema.capnp (searched {searched}); set schema_path in the config")


@functools.lru_cache(maxsize=None)
def load_request_schema(path: Path) -> Any:
    """Load schema.capnp; its "/capnp/..." imports resolve from two levels up."""
    logger.debug("Loading request schema from %s", path)
    try:
        return capnp.load(str(path), imports=[str(path.parent.parent)])
    except capnp.KjException as e:
        raise PluginError(f"Cannot load request schema {path}: {e}") from e


def _which(reader: Any, members: tuple[str, ...], what: str) -> str:
    active = reader.which()
    for member in members:
        if active == member:
            return member
    raise MalformedRequestError(f"Unsupported {what} kind '{active}'")


class BinaryRequestDecoder:
    """Decodes the framed binary CodeGeneratorRequest sent by the compiler."""

    def __init__(self, schema_path: str = ""):
        self.schema_path = schema_path

    def decode(self, raw: bytes) -> CodeGeneratorRequest:
        """
        Decode a complete serialized request.

        Raises:
            MalformedRequestError: If the bytes are not a valid request message
            PluginError: If schema.capnp cannot be found or loaded
        """
        schema = load_request_schema(find_schema_file(self.schema_path))
        try:
            with schema.CodeGeneratorRequest.from_bytes(raw, traversal_limit_in_words=TRAVERSAL_LIMIT_IN_WORDS) as request:
                data = self._request_to_dict(request)
        except MalformedRequestError:
            raise
        except (capnp.KjException, ValueError) as e:
            raise MalformedRequestError(f"Request is not a valid Cap'n Proto message: {e}") from e
        return RequestParser().parse(data)

    def _request_to_dict(self, request: Any) -> dict[str, Any]:
        data: dict[str, Any] = {
            "nodes": [self._node_to_dict(node) for node in request.nodes],
            "requestedFiles": [
                {
                    "id": requested.id,
                    "filename": requested.filename,
                    "imports": [{"id": imp.id, "name": imp.name} for imp in requested.imports],
                }
                for requested in request.requestedFiles
            ],
        }
        # Null before 0.6
        if request._has("capnpVersion"):
            version = request.capnpVersion
            data["capnpVersion"] = {"major": version.major, "minor": version.minor, "micro": version.micro}
        return data

    def _node_to_dict(self, node: Any) -> dict[str, Any]:
        kind = _which(node, NODE_KINDS, f"node 0x{node.id:016x}")
        return {
            "id": node.id,
            "displayName": node.displayName,
            "displayNamePrefixLength": node.displayNamePrefixLength,
            "scopeId": node.scopeId,
            "nestedNodes": [{"name": nested.name, "id": nested.id} for nested in node.nestedNodes],
            kind: self._node_body(kind, getattr(node, kind)),
        }

    def _node_body(self, kind: str, body: Any) -> dict[str, Any]:
        if kind == "struct":
            return {
                "dataWordCount": body.dataWordCount,
                "pointerCount": body.pointerCount,
                "isGroup": body.isGroup,
                "fields": [self._field_to_dict(field) for field in body.fields],
            }
        if kind == "enum":
            return {"enumerants": [{"name": e.name, "codeOrder": e.codeOrder} for e in body.enumerants]}
        if kind == "interface":
            return {
                "methods": [
                    {
                        "name": m.name,
                        "codeOrder": m.codeOrder,
                        "paramStructType": m.paramStructType,
                        "resultStructType": m.resultStructType,
                    }
                    for m in body.methods
                ],
                "superclasses": [{"id": s.id} for s in body.superclasses],
            }
        if kind == "const":
            return {"type": self._type_to_dict(body.type), "value": self._value_to_dict(body.value)}
        if kind == "annotation":
            return {"type": self._type_to_dict(body.type)}
        return {}

    def _field_to_dict(self, field: Any) -> dict[str, Any]:
        data: dict[str, Any] = {"name": field.name, "codeOrder": field.codeOrder}
        if _which(field, ("slot", "group"), f"field '{field.name}'") == "slot":
            data["slot"] = {"type": self._type_to_dict(field.slot.type)}
        else:
            data["group"] = {"typeId": field.group.typeId}
        return data

    def _type_to_dict(self, type_reader: Any) -> dict[str, Any]:
        kind = _which(type_reader, TYPE_KINDS, "type")
        if kind == "list":
            return {"list": {"elementType": self._type_to_dict(type_reader.list.elementType)}}
        if kind in ("enum", "struct", "interface"):
            return {kind: {"typeId": getattr(type_reader, kind).typeId}}
        return {kind: None}

    def _value_to_dict(self, value: Any) -> dict[str, Any]:
        # Pointer values are not carried over
        member = _which(value, VALUE_MEMBERS, "constant value")
        if member in POINTER_VALUE_MEMBERS:
            return {member: None}
        return {member: getattr(value, member)}
