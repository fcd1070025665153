"""
Render hook interface.

A render hook turns one requested file into generated text. It is any
callable with the signature below; the driver never subclasses or inspects
it. Hooks must be pure: no filesystem access, no global state, same output
for the same graph.
"""

from __future__ import annotations

from typing import Protocol

from ..analyzer.schema_loader import Schema
from ..schema_ast.nodes import RequestedFile
from ..text_tree import FileText


class RenderHook(Protocol):
    """Callable producing the header and source text for one requested file."""

    def __call__(self, schema: Schema, requested_file: RequestedFile) -> FileText: ...


def empty_render(schema: Schema, requested_file: RequestedFile) -> FileText:
    """Render hook producing two empty files."""
    return FileText()
