"""
gRPC C++ render hook.

Renders one service skeleton per interface declared in a schema file:
a header with the service class and a source file with method stubs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

from ... import __version__
from ...utils import cpp_identifier, include_guard
from ..analyzer.schema_loader import Schema
from ..config import PluginConfig
from ..output.paths import output_path
from ..schema_ast.nodes import NodeKind, RequestedFile
from ..text_tree import FileText, TextTree


class GrpcCppRenderer:
    """Render hook generating gRPC service skeletons for C++."""

    TEMPLATE_LANG = "grpc_cpp"

    def __init__(self, config: PluginConfig | None = None):
        """
        Initialize the renderer.

        Args:
            config: Plugin configuration
        """
        self.config = config or PluginConfig()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
        )
        self.jinja_env.filters["cpp_identifier"] = cpp_identifier
        self.jinja_env.filters["include_guard"] = include_guard

        self.header_template = self.jinja_env.get_template("header.h.jinja2")
        self.source_template = self.jinja_env.get_template("source.c++.jinja2")

    def __call__(self, schema: Schema, requested_file: RequestedFile) -> FileText:
        context = self._prepare_file_context(schema, requested_file)
        return FileText(
            header=TextTree(self.header_template.generate(context)),
            source=TextTree(self.source_template.generate(context)),
        )

    def _prepare_file_context(self, schema: Schema, requested_file: RequestedFile) -> dict[str, Any]:
        """
        Prepare the template context for a file.

        Args:
            schema: The file node
            requested_file: The compiler's request entry for the file

        Returns:
            Dictionary of template variables
        """
        header_name = output_path(schema.display_name, self.config.header_suffix)
        services = [self._prepare_service_context(node) for node in schema.walk() if node.kind == NodeKind.INTERFACE]
        return {
            "GENERATION_COMMENT": self._generation_comment(requested_file),
            "HEADER_NAME": header_name,
            "HEADER_BASENAME": Path(header_name).name,
            "CAPNP_HEADER": f"{Path(schema.display_name).name}.h",
            "GRPC_INCLUDE": self.config.grpc_include,
            "IMPORTS": [imp.name for imp in requested_file.imports],
            "services": services,
        }

    def _prepare_service_context(self, interface: Schema) -> dict[str, Any]:
        qualified_name = self._qualified_name(interface)
        methods = []
        for method in sorted(interface.proto.methods, key=lambda m: m.code_order):
            methods.append(
                {
                    "NAME": method.name,
                    "PARAM_TYPE": self._qualified_name(interface.param_type(method), interface),
                    "RESULT_TYPE": self._qualified_name(interface.result_type(method), interface),
                }
            )
        return {
            "QUALIFIED_NAME": qualified_name,
            # Unique per file: interfaces sharing a short name differ in scope
            "CLASS_NAME": f"{qualified_name.replace('::', '_')}Service",
            "FULL_NAME": interface.display_name,
            "methods": methods,
        }

    def _qualified_name(self, schema: Schema, owner: Schema | None = None) -> str:
        """C++ name of a declaration, e.g. "Calculator::Value".

        Compiler-generated parameter and result structs have no scope of
        their own; they are named inside the interface that owns the method.
        """
        parts: list[str] = []
        node: Schema | None = schema
        while node is not None and node.kind != NodeKind.FILE:
            parts.insert(0, cpp_identifier(node.short_name))
            node = node.scope()
        if owner is not None and not schema.proto.scope_id:
            return f"{self._qualified_name(owner)}::{'::'.join(parts)}"
        return "::".join(parts)

    def _generation_comment(self, requested_file: RequestedFile) -> str:
        if not self.config.add_generation_comment:
            return ""
        return f"// Generated by capnpc-grpc-cpp {__version__} from {requested_file.filename}. DO NOT EDIT!"
