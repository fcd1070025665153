"""
Schema loader.

Stores schema nodes by id and resolves references between them on access.
Nodes may be loaded in any order and may refer to each other cyclically:
nothing is resolved until someone asks for it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from ..errors import MalformedRequestError, PluginError, UnresolvedReferenceError
from ..schema_ast.nodes import Method, NodeKind, SchemaNode, TypeRef

logger = logging.getLogger(__name__)


class SchemaGraph(Mapping[int, SchemaNode]):
    """Read-only view over the loaded nodes, keyed by id."""

    def __init__(self, nodes: Mapping[int, SchemaNode]):
        self._nodes = MappingProxyType(nodes)

    def __getitem__(self, node_id: int) -> SchemaNode:
        return self._nodes[node_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: int, context: str = "") -> SchemaNode:  # type: ignore[override]
        """
        Look up a node by id.

        Args:
            node_id: The node id
            context: Description of the referrer, used in the error message

        Returns:
            The node

        Raises:
            UnresolvedReferenceError: If no node with that id was loaded
        """
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnresolvedReferenceError(node_id, context) from None

    def schema(self, node_id: int, context: str = "") -> Schema:
        """Look up a node and wrap it in a Schema handle."""
        return Schema(self.get(node_id, context), self)


class SchemaLoader:
    """Owns the schema graph while it is being built."""

    def __init__(self):
        self._nodes: dict[int, SchemaNode] = {}
        self._graph: SchemaGraph | None = None

    def load(self, node: SchemaNode) -> None:
        """
        Register one node under its id.

        Referenced ids do not need to be loaded yet. Loading the same node
        twice is a no-op; loading a different node under a known id is an error.
        """
        if self._graph is not None:
            raise PluginError(f"Cannot load node 0x{node.id:016x}: schema graph is frozen")

        existing = self._nodes.get(node.id)
        if existing is not None:
            if existing != node:
                raise MalformedRequestError(f"Conflicting definitions for node id 0x{node.id:016x}: '{existing.display_name}' and '{node.display_name}'")
            return

        self._nodes[node.id] = node
        logger.debug("Loaded %s node %s (0x%016x)", node.kind.value, node.display_name, node.id)

    def load_all(self, nodes: Iterable[SchemaNode]) -> None:
        for node in nodes:
            self.load(node)

    def get(self, node_id: int, context: str = "") -> SchemaNode:
        """Look up a node by id, raising UnresolvedReferenceError if absent."""
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnresolvedReferenceError(node_id, context) from None

    def freeze(self) -> SchemaGraph:
        """End the load phase and return the read-only graph."""
        if self._graph is None:
            self._graph = SchemaGraph(self._nodes)
            logger.debug("Schema graph frozen with %d node(s)", len(self._nodes))
        return self._graph

    @property
    def frozen(self) -> bool:
        return self._graph is not None

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)


class Schema:
    """A node together with the graph it lives in.

    All navigation goes through the graph by id, so following a reference
    never requires the target to have been loaded before the referrer.
    """

    __slots__ = ("proto", "graph")

    def __init__(self, proto: SchemaNode, graph: SchemaGraph):
        self.proto = proto
        self.graph = graph

    @property
    def id(self) -> int:
        return self.proto.id

    @property
    def kind(self) -> NodeKind:
        return self.proto.kind

    @property
    def display_name(self) -> str:
        return self.proto.display_name

    @property
    def short_name(self) -> str:
        return self.proto.short_name

    def scope(self) -> Schema | None:
        """The enclosing scope, or None for a file."""
        if not self.proto.scope_id:
            return None
        return self.graph.schema(self.proto.scope_id, f"scope of {self.display_name}")

    def nested(self) -> list[Schema]:
        """Nested declarations in declaration order."""
        return [self.graph.schema(n.id, f"nested node '{n.name}' of {self.display_name}") for n in self.proto.nested_nodes]

    def walk(self) -> Iterator[Schema]:
        """Depth-first over all nested declarations, excluding self."""
        for child in self.nested():
            yield child
            yield from child.walk()

    def resolve(self, type_ref: TypeRef | None) -> Schema | None:
        """Resolve a type to its node. Primitives and lists resolve to None."""
        if type_ref is None or not type_ref.is_reference or type_ref.type_id is None:
            return None
        return self.graph.schema(type_ref.type_id, f"type used in {self.display_name}")

    def param_type(self, method: Method) -> Schema:
        return self.graph.schema(method.param_struct_type, f"parameters of {self.display_name}.{method.name}")

    def result_type(self, method: Method) -> Schema:
        return self.graph.schema(method.result_struct_type, f"results of {self.display_name}.{method.name}")

    def superclasses(self) -> list[Schema]:
        return [self.graph.schema(s, f"superclass of {self.display_name}") for s in self.proto.superclasses]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Schema):
            return self.proto == other.proto
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.proto.id)

    def __repr__(self) -> str:
        return f"Schema({self.kind.value} {self.display_name!r})"
