"""
Protocol version gate.

The compiler reports the version it was built with; this plugin carries
its own. A mismatch is only advisory: the request format is tolerant of
version drift for the fields the plugin reads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .schema_ast.nodes import ProtocolVersion

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = ProtocolVersion(1, 0, 0)

# Compilers before 0.6 did not send a version at all
UNVERSIONED_COMPILER = "pre-0.6"


@dataclass(frozen=True)
class ProtocolVersionMismatch:
    """A difference between the compiler's and the generator's versions."""

    compiler_version: ProtocolVersion | None
    generator_version: ProtocolVersion

    @property
    def compiler_version_text(self) -> str:
        if self.compiler_version is None:
            return UNVERSIONED_COMPILER
        return str(self.compiler_version)

    def __str__(self) -> str:
        return (
            "You appear to be using different versions of 'capnp' (the compiler) and "
            "'capnpc-grpc-cpp' (the code generator). This can happen, for example, if you built "
            "a custom version of 'capnp' but then ran it with '-ogrpc-cpp', which invokes "
            "'capnpc-grpc-cpp' from your PATH (i.e. the installed version). To specify an alternate "
            "'capnpc-grpc-cpp' executable, try something like '-o/path/to/capnpc-grpc-cpp' instead. "
            f"compiler version: {self.compiler_version_text}; generator version: {self.generator_version}"
        )


def check_protocol_version(
    declared: ProtocolVersion | None,
    expected: ProtocolVersion = PROTOCOL_VERSION,
) -> ProtocolVersionMismatch | None:
    """
    Compare the compiler's declared version with the generator's.

    Args:
        declared: Version sent by the compiler, or None if it sent none
        expected: Version this generator was built for

    Returns:
        The mismatch (already logged as a warning), or None when all three fields agree
    """
    if declared is not None and tuple(declared) == tuple(expected):
        return None

    mismatch = ProtocolVersionMismatch(compiler_version=declared, generator_version=expected)
    logger.warning("%s", mismatch)
    return mismatch
