"""
Errors raised by the plugin pipeline.

Every fatal condition derives from PluginError so the command line can
report it as a single message and exit non-zero.
"""

from __future__ import annotations


class PluginError(Exception):
    """Base class for fatal plugin errors."""

    pass


class MalformedRequestError(PluginError, ValueError):
    """Raised when the code generator request cannot be decoded.

    This can happen when:
    - The input is not valid JSON
    - A required field is missing or has the wrong shape
    - Two different nodes claim the same id
    """

    pass


class UnresolvedReferenceError(PluginError, LookupError):
    """Raised when a node id is looked up but was never loaded."""

    def __init__(self, node_id: int, context: str = ""):
        self.node_id = node_id
        self.context = context
        message = f"No schema node with id 0x{node_id:016x} ({node_id}) was loaded"
        if context:
            message += f" (referenced by {context})"
        super().__init__(message)


class FilesystemError(PluginError, OSError):
    """Raised when a directory cannot be created or a file cannot be written."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{message}: {path}")


class RenderError(PluginError):
    """Raised by renderers that want to report a typed generation failure."""

    pass
