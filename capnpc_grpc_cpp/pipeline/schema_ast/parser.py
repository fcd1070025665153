"""
Code generator request parser.

Phase 1 of the pipeline: turn the JSON form of a CodeGeneratorRequest into
request nodes without resolving any references between them. Binary input
is first converted to the same form by capnp_reader.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..errors import MalformedRequestError
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

logger = logging.getLogger(__name__)


class RequestParser:
    """Parses a JSON encoded CodeGeneratorRequest."""

    # Keys naming the active member of the node union
    NODE_KINDS = {kind.value: kind for kind in NodeKind}

    # Keys naming the active member of the type union
    TYPE_KINDS = {kind.value: kind for kind in TypeKind}

    def parse_bytes(self, raw: bytes) -> CodeGeneratorRequest:
        """
        Decode and parse a request read from the input channel.

        Args:
            raw: The complete serialized request

        Returns:
            The decoded request

        Raises:
            MalformedRequestError: If the input is not a valid request
        """
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedRequestError(f"Request is not valid JSON: {e}") from e
        return self.parse(data)

    def parse(self, data: Any) -> CodeGeneratorRequest:
        """
        Parse an already decoded JSON request.

        Args:
            data: The JSON object

        Returns:
            The decoded request
        """
        request = self._require_dict(data, "request")

        version = None
        if request.get("capnpVersion") is not None:
            version = self._parse_version(request["capnpVersion"])

        nodes = [self._parse_node(node, f"nodes[{i}]") for i, node in enumerate(self._require_list(request, "nodes", "request"))]
        requested_files = [
            self._parse_requested_file(rf, f"requestedFiles[{i}]")
            for i, rf in enumerate(self._require_list(request, "requestedFiles", "request"))
        ]

        logger.info("Decoded request with %d node(s) and %d requested file(s)", len(nodes), len(requested_files))
        return CodeGeneratorRequest(
            compiler_version=version,
            nodes=nodes,
            requested_files=requested_files,
        )

    def _parse_version(self, data: Any) -> ProtocolVersion:
        version = self._require_dict(data, "capnpVersion")
        return ProtocolVersion(
            major=self._int(version.get("major", 0), "capnpVersion.major"),
            minor=self._int(version.get("minor", 0), "capnpVersion.minor"),
            micro=self._int(version.get("micro", 0), "capnpVersion.micro"),
        )

    def _parse_node(self, data: Any, path: str) -> SchemaNode:
        node = self._require_dict(data, path)
        node_id = self._int(self._require(node, "id", path), f"{path}.id")
        display_name = self._require(node, "displayName", path)
        if not isinstance(display_name, str):
            raise MalformedRequestError(f"{path}.displayName must be a string")

        kinds = [key for key in self.NODE_KINDS if key in node]
        if len(kinds) != 1:
            raise MalformedRequestError(f"{path} must have exactly one of {sorted(self.NODE_KINDS)}, found {kinds}")
        kind = self.NODE_KINDS[kinds[0]]
        body = node[kinds[0]] or {}
        body_path = f"{path}.{kinds[0]}"
        self._require_dict(body, body_path)

        nested = tuple(
            NestedNode(name=n.get("name", ""), id=self._int(self._require(n, "id", f"{path}.nestedNodes[{i}]"), f"{path}.nestedNodes[{i}].id"))
            for i, n in enumerate(self._dict_items(node.get("nestedNodes", []), f"{path}.nestedNodes"))
        )

        payload: dict[str, Any] = {}
        if kind == NodeKind.STRUCT:
            payload = self._parse_struct(body, body_path)
        elif kind == NodeKind.ENUM:
            payload = self._parse_enum(body, body_path)
        elif kind == NodeKind.INTERFACE:
            payload = self._parse_interface(body, body_path)
        elif kind == NodeKind.CONST:
            payload = {
                "type": self._parse_type(self._require(body, "type", body_path), f"{body_path}.type"),
                "value": body.get("value"),
            }
        elif kind == NodeKind.ANNOTATION:
            payload = {"type": self._parse_type(self._require(body, "type", body_path), f"{body_path}.type")}

        return SchemaNode(
            id=node_id,
            kind=kind,
            display_name=display_name,
            display_name_prefix_length=self._int(node.get("displayNamePrefixLength", 0), f"{path}.displayNamePrefixLength"),
            scope_id=self._int(node.get("scopeId", 0), f"{path}.scopeId"),
            nested_nodes=nested,
            **payload,
        )

    def _parse_struct(self, body: dict[str, Any], path: str) -> dict[str, Any]:
        fields = []
        for i, f in enumerate(self._dict_items(body.get("fields", []), f"{path}.fields")):
            field_path = f"{path}.fields[{i}]"
            type_ref = None
            group_id = None
            if "slot" in f:
                slot = self._require_dict(f["slot"], f"{field_path}.slot")
                type_ref = self._parse_type(self._require(slot, "type", f"{field_path}.slot"), f"{field_path}.slot.type")
            elif "group" in f:
                group = self._require_dict(f["group"], f"{field_path}.group")
                group_id = self._int(self._require(group, "typeId", f"{field_path}.group"), f"{field_path}.group.typeId")
            else:
                raise MalformedRequestError(f"{field_path} must have either 'slot' or 'group'")
            fields.append(
                Field(
                    name=f.get("name", ""),
                    code_order=self._int(f.get("codeOrder", i), f"{field_path}.codeOrder"),
                    type=type_ref,
                    group_id=group_id,
                )
            )
        return {
            "fields": tuple(fields),
            "is_group": bool(body.get("isGroup", False)),
            "data_word_count": self._int(body.get("dataWordCount", 0), f"{path}.dataWordCount"),
            "pointer_count": self._int(body.get("pointerCount", 0), f"{path}.pointerCount"),
        }

    def _parse_enum(self, body: dict[str, Any], path: str) -> dict[str, Any]:
        enumerants = tuple(
            Enumerant(name=e.get("name", ""), code_order=self._int(e.get("codeOrder", i), f"{path}.enumerants[{i}].codeOrder"))
            for i, e in enumerate(self._dict_items(body.get("enumerants", []), f"{path}.enumerants"))
        )
        return {"enumerants": enumerants}

    def _parse_interface(self, body: dict[str, Any], path: str) -> dict[str, Any]:
        methods = []
        for i, m in enumerate(self._dict_items(body.get("methods", []), f"{path}.methods")):
            method_path = f"{path}.methods[{i}]"
            methods.append(
                Method(
                    name=m.get("name", ""),
                    code_order=self._int(m.get("codeOrder", i), f"{method_path}.codeOrder"),
                    param_struct_type=self._int(self._require(m, "paramStructType", method_path), f"{method_path}.paramStructType"),
                    result_struct_type=self._int(self._require(m, "resultStructType", method_path), f"{method_path}.resultStructType"),
                )
            )
        superclasses = tuple(
            self._int(self._require(s, "id", f"{path}.superclasses[{i}]"), f"{path}.superclasses[{i}].id")
            for i, s in enumerate(self._dict_items(body.get("superclasses", []), f"{path}.superclasses"))
        )
        return {"methods": tuple(methods), "superclasses": superclasses}

    def _parse_type(self, data: Any, path: str) -> TypeRef:
        type_obj = self._require_dict(data, path)
        kinds = [key for key in self.TYPE_KINDS if key in type_obj]
        if len(kinds) != 1:
            raise MalformedRequestError(f"{path} must name exactly one type, found {kinds}")
        kind = self.TYPE_KINDS[kinds[0]]
        body = type_obj[kinds[0]]

        if kind == TypeKind.LIST:
            body = self._require_dict(body, f"{path}.list")
            element = self._parse_type(self._require(body, "elementType", f"{path}.list"), f"{path}.list.elementType")
            return TypeRef(kind=kind, element_type=element)

        if kind in (TypeKind.ENUM, TypeKind.STRUCT, TypeKind.INTERFACE):
            body = self._require_dict(body, f"{path}.{kind.value}")
            type_id = self._int(self._require(body, "typeId", f"{path}.{kind.value}"), f"{path}.{kind.value}.typeId")
            return TypeRef(kind=kind, type_id=type_id)

        return TypeRef(kind=kind)

    def _parse_requested_file(self, data: Any, path: str) -> RequestedFile:
        requested = self._require_dict(data, path)
        imports = tuple(
            Import(
                id=self._int(self._require(imp, "id", f"{path}.imports[{i}]"), f"{path}.imports[{i}].id"),
                name=imp.get("name", ""),
            )
            for i, imp in enumerate(self._dict_items(requested.get("imports", []), f"{path}.imports"))
        )
        return RequestedFile(
            id=self._int(self._require(requested, "id", path), f"{path}.id"),
            filename=requested.get("filename", ""),
            imports=imports,
        )

    def _require(self, obj: dict[str, Any], key: str, path: str) -> Any:
        if key not in obj:
            raise MalformedRequestError(f"{path} is missing required field '{key}'")
        return obj[key]

    def _require_dict(self, value: Any, path: str) -> dict[str, Any]:
        if not isinstance(value, dict):
            raise MalformedRequestError(f"{path} must be an object, got {type(value).__name__}")
        return value

    def _require_list(self, obj: dict[str, Any], key: str, path: str) -> list[Any]:
        value = self._require(obj, key, path)
        if not isinstance(value, list):
            raise MalformedRequestError(f"{path}.{key} must be a list, got {type(value).__name__}")
        return value

    def _dict_items(self, value: Any, path: str) -> list[dict[str, Any]]:
        if not isinstance(value, list):
            raise MalformedRequestError(f"{path} must be a list, got {type(value).__name__}")
        return [self._require_dict(item, f"{path}[{i}]") for i, item in enumerate(value)]

    def _int(self, value: Any, path: str) -> int:
        """Read an integer; 64-bit values may arrive as decimal strings."""
        if isinstance(value, bool):
            raise MalformedRequestError(f"{path} must be an integer, got bool")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
        raise MalformedRequestError(f"{path} must be an integer, got {value!r}")
