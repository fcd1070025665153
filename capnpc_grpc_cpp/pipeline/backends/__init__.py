"""
Render hooks.

The driver accepts any callable matching RenderHook; GrpcCppRenderer is
the one used by the command line.
"""

from __future__ import annotations

from .base import RenderHook, empty_render
from .grpc_cpp_backend import GrpcCppRenderer

__all__ = [
    "RenderHook",
    "empty_render",
    "GrpcCppRenderer",
]
