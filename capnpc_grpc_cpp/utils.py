"""
Naming helpers for generated C++ code.
"""

import re

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z][a-z]*|[0-9]+")

_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z_]")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dollars) to spaces."""
    return text.replace("_", " ").replace("-", " ").replace("$", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize the first letter of each word and join them together."""
    return "".join(word[0].upper() + word[1:] for word in words if word)


def to_pascal_case(text: str) -> str:
    """Convert a schema name to PascalCase.

    Examples:
        "add$Params" -> "AddParams"
        "first_name" -> "FirstName"
        "Calculator" -> "Calculator"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    normalized = _normalize_separators(text)
    words = _split_into_words(normalized)
    return _capitalize_and_join(words)


def cpp_identifier(name: str) -> str:
    """Turn a schema short name into a C++ type name.

    Ordinary names are kept; compiler-generated names such as "add$Params"
    become "AddParams".
    """
    if "$" in name:
        return to_pascal_case(name)
    identifier = _NON_IDENTIFIER.sub("_", name)
    if identifier and identifier[0].isdigit():
        identifier = "_" + identifier
    return identifier


def include_guard(filename: str) -> str:
    """Build an include guard macro from a generated file name.

    Examples:
        "foo/bar.capnp.h" -> "FOO_BAR_CAPNP_H_"
    """
    return _NON_IDENTIFIER.sub("_", filename).upper().strip("_") + "_"
