"""
Analyzer module.

Contains the schema loader and the read-only graph it produces.
"""

from __future__ import annotations

from .schema_loader import Schema, SchemaGraph, SchemaLoader

__all__ = [
    "Schema",
    "SchemaGraph",
    "SchemaLoader",
]
