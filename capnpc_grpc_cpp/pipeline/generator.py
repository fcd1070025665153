"""
Plugin driver.

Runs one request through the pipeline:

1. Version gate: compare the compiler's version with ours (warning only)
2. Load: register every node in the schema graph, then freeze it
3. Emit: for each requested file, in order, resolve both output paths,
   render once, materialize the parent directories and write both files

The first error aborts the run. Files written before it stay on disk.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from .analyzer.schema_loader import SchemaGraph, SchemaLoader
from .backends.base import RenderHook
from .backends.grpc_cpp_backend import GrpcCppRenderer
from .config import PluginConfig
from .errors import PluginError
from .output.directories import ensure_parent_directory
from .output.file_writer import FileWriter
from .output.paths import resolve_output_paths
from .schema_ast.nodes import CodeGeneratorRequest, RequestedFile
from .schema_ast.capnp_reader import BinaryRequestDecoder
from .schema_ast.parser import RequestParser
from .version import PROTOCOL_VERSION, ProtocolVersionMismatch, check_protocol_version

logger = logging.getLogger(__name__)


class DriverState(str, Enum):
    """Lifecycle of a PluginGenerator."""

    AWAITING_REQUEST = "awaiting_request"
    LOADING_GRAPH = "loading_graph"
    EMITTING_FILES = "emitting_files"
    DONE = "done"
    FAILED = "failed"


class PluginGenerator:
    """Drives a single code generator request from bytes to files."""

    def __init__(
        self,
        render: RenderHook | None = None,
        config: PluginConfig | None = None,
        writer: FileWriter | None = None,
        materialize: Callable[[str | Path], None] = ensure_parent_directory,
    ):
        """
        Initialize the driver.

        Args:
            render: Render hook; defaults to the gRPC C++ renderer
            config: Plugin configuration
            writer: File writer; a fresh one is created if omitted
            materialize: Creates the parent directories of an output file
        """
        self.config = config or PluginConfig()
        self.render = render if render is not None else GrpcCppRenderer(self.config)
        self.writer = writer or FileWriter()
        self.materialize = materialize
        self.loader = SchemaLoader()
        self.graph: SchemaGraph | None = None
        self.version_mismatch: ProtocolVersionMismatch | None = None
        self.state = DriverState.AWAITING_REQUEST

    def run_bytes(self, raw: bytes) -> list[str]:
        """Decode a serialized request and run it."""
        self._require_state(DriverState.AWAITING_REQUEST)
        try:
            request = self._decode(raw)
        except Exception:
            self.state = DriverState.FAILED
            raise
        return self.run(request)

    def run(self, request: CodeGeneratorRequest) -> list[str]:
        """
        Generate every requested file.

        Args:
            request: The decoded request

        Returns:
            Paths written, in write order

        Raises:
            PluginError: On a malformed request, an unresolved id or a filesystem error
            Exception: Whatever the render hook raises, unchanged
        """
        self._require_state(DriverState.AWAITING_REQUEST)
        try:
            self.version_mismatch = check_protocol_version(request.compiler_version, PROTOCOL_VERSION)

            self.state = DriverState.LOADING_GRAPH
            self.loader.load_all(request.nodes)
            self.graph = self.loader.freeze()

            self.state = DriverState.EMITTING_FILES
            for requested_file in request.requested_files:
                self._emit_file(requested_file)
        except Exception:
            self.state = DriverState.FAILED
            raise

        self.state = DriverState.DONE
        logger.info("Generated %d file(s) for %d requested file(s)", len(self.writer.written), len(request.requested_files))
        return list(self.writer.written)

    def _decode(self, raw: bytes) -> CodeGeneratorRequest:
        if self.config.input_format == "binary":
            return BinaryRequestDecoder(self.config.schema_path).decode(raw)
        if self.config.input_format == "json":
            return RequestParser().parse_bytes(raw)
        raise PluginError(f"Unknown input format '{self.config.input_format}'")

    def _emit_file(self, requested_file: RequestedFile) -> None:
        schema = self.graph.schema(requested_file.id, f"requested file '{requested_file.filename}'")
        paths = resolve_output_paths(schema.display_name, self.config)

        file_text = self.render(schema, requested_file)

        self.materialize(paths.header)
        self.writer.write(paths.header, file_text.header)
        self.materialize(paths.source)
        self.writer.write(paths.source, file_text.source)

    def _require_state(self, expected: DriverState) -> None:
        if self.state != expected:
            raise PluginError(f"Generator is in state '{self.state.value}', expected '{expected.value}'")
