import copy
import json
import logging
from pathlib import Path

import pytest

from capnpc_grpc_cpp.pipeline.errors import PluginError
from capnpc_grpc_cpp.pipeline.schema_ast import find_schema_file, load_request_schema
from capnpc_grpc_cpp.pipeline.schema_ast.nodes import (
    CodeGeneratorRequest,
    Method,
    NodeKind,
    ProtocolVersion,
    RequestedFile,
    SchemaNode,
)

TEST_DATA = Path(__file__).parent / "test_data"

with open(TEST_DATA / "calculator_request.json") as f:
    _CALCULATOR_REQUEST = json.load(f)


@pytest.fixture
def calculator_request() -> dict:
    """JSON form of a request for calculator.capnp."""
    return copy.deepcopy(_CALCULATOR_REQUEST)


@pytest.fixture
def chdir_tmp(tmp_path, monkeypatch) -> Path:
    """Run the test with the working directory set to tmp_path."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def file_node(node_id: int, display_name: str, nested: tuple = ()) -> SchemaNode:
    return SchemaNode(id=node_id, kind=NodeKind.FILE, display_name=display_name, nested_nodes=nested)


def interface_node(node_id: int, display_name: str, scope_id: int, methods: tuple[Method, ...] = ()) -> SchemaNode:
    prefix = display_name.rfind(":") + 1
    return SchemaNode(
        id=node_id,
        kind=NodeKind.INTERFACE,
        display_name=display_name,
        display_name_prefix_length=prefix,
        scope_id=scope_id,
        methods=methods,
    )


def simple_request(*display_names: str, version: ProtocolVersion | None = ProtocolVersion(1, 0, 0)) -> CodeGeneratorRequest:
    """A request with one empty file node per display name, all requested in order."""
    nodes = [file_node(100 + i, name) for i, name in enumerate(display_names)]
    return CodeGeneratorRequest(
        compiler_version=version,
        nodes=nodes,
        requested_files=[RequestedFile(id=node.id, filename=node.display_name) for node in nodes],
    )


@pytest.fixture(autouse=True)
def reset_package_log_level():
    """The command line sets the package log level; undo it between tests."""
    yield
    logging.getLogger("capnpc_grpc_cpp").setLevel(logging.NOTSET)


@pytest.fixture(scope="session")
def request_schema():
    """The compiler's schema.capnp loaded with pycapnp."""
    try:
        return load_request_schema(find_schema_file())
    except PluginError as e:
        pytest.skip(str(e))


def binary_request(request_schema, version: tuple[int, int, int] | None = (1, 0, 0)) -> bytes:
    """Framed binary request for svc.capnp: interface Svc with one method, call(value :Text)."""
    request = request_schema.CodeGeneratorRequest.new_message()
    if version is not None:
        request.capnpVersion.major, request.capnpVersion.minor, request.capnpVersion.micro = version

    file, svc, params, results = request.init("nodes", 4)
    file.id = 1
    file.displayName = "svc.capnp"
    file.file = None
    nested = file.init("nestedNodes", 1)[0]
    nested.name = "Svc"
    nested.id = 2

    svc.id = 2
    svc.displayName = "svc.capnp:Svc"
    svc.displayNamePrefixLength = 10
    svc.scopeId = 1
    method = svc.init("interface").init("methods", 1)[0]
    method.name = "call"
    method.paramStructType = 3
    method.resultStructType = 4

    for node, node_id, name in ((params, 3, "call$Params"), (results, 4, "call$Results")):
        node.id = node_id
        node.displayName = f"svc.capnp:Svc.{name}"
        node.displayNamePrefixLength = 14
        node.init("struct")
    value = params.struct.init("fields", 1)[0]
    value.name = "value"
    value.init("slot").type.text = None

    requested = request.init("requestedFiles", 1)[0]
    requested.id = 1
    requested.filename = "svc.capnp"
    return request.to_bytes()


# A framed message holding one segment whose root pointer is null
EMPTY_MESSAGE = b"\x00\x00\x00\x00\x01\x00\x00\x00" + b"\x00" * 8
