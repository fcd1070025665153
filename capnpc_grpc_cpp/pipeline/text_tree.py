"""
Lazily assembled text.

A TextTree holds strings and other trees without concatenating them, so a
renderer can hand back nested pieces (or a template's generator) and the
writer streams the segments straight to disk.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Union

TextPart = Union[str, "TextTree"]


class TextTree:
    """An ordered tree of text segments."""

    def __init__(self, parts: Iterable[TextPart] = ()):
        # Materialize once so the tree can be visited more than once
        self._parts: tuple[TextPart, ...] = tuple(parts)

    @classmethod
    def of(cls, *parts: TextPart) -> TextTree:
        return cls(parts)

    def segments(self) -> Iterator[str]:
        """Yield the string segments depth-first, in order."""
        for part in self._parts:
            if isinstance(part, TextTree):
                yield from part.segments()
            elif part:
                yield part

    def flatten(self) -> str:
        return "".join(self.segments())

    def __len__(self) -> int:
        return sum(len(segment) for segment in self.segments())

    def __bool__(self) -> bool:
        return any(True for _ in self.segments())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TextTree):
            return self.flatten() == other.flatten()
        return NotImplemented

    def __repr__(self) -> str:
        return f"TextTree({self.flatten()!r})"


@dataclass(frozen=True)
class FileText:
    """Generated text for one requested file."""

    header: TextTree = field(default_factory=TextTree)
    source: TextTree = field(default_factory=TextTree)
