"""Helpers for exporting Solidity interfaces."""

from __future__ import annotations

import re
import sys
from typing import TextIO

__all__ = ["underscore_if_sol", "print_abi", "ABI_HEADER"]

ABI_HEADER = (
    "/**\n"
    " * This file was automatically generated and represents a Stylus program.\n"
    " */\n"
    "\n"
)

_UINT = re.compile(r"uint([0-9]+)")
_INT = re.compile(r"int([0-9]+)")
_BYTES = re.compile(r"bytes([0-9]+)")

_RESERVED = frozenset(
    {
        # type names
        "address", "bool", "int", "uint",
        # other words
        "is", "contract", "interface",
        # reserved keywords
        "after", "alias", "apply", "auto", "byte", "case", "copyof", "default",
        "define", "final", "implements", "in", "inline", "let", "macro", "match",
        "mutable", "null", "of", "partial", "promise", "reference", "relocatable",
        "sealed", "sizeof", "static", "supports", "switch", "typedef", "typeof", "var",
    }
)


def underscore_if_sol(name: str) -> str:
    """Prefix ``name`` with a space, and an underscore too if it is a Solidity keyword.

    The empty name stays empty.
    """
    underscored = f" _{name}"
    for pattern in (_UINT, _INT):
        match = pattern.fullmatch(name)
        if match and int(match.group(1)) % 8 == 0:
            return underscored
    match = _BYTES.fullmatch(name)
    if match and int(match.group(1)) <= 32:
        return underscored
    if name == "":
        return ""
    if name in _RESERVED:
        return underscored
    return f" {name}"


def print_abi(interface_text: str, file: TextIO | None = None) -> None:
    """Write the generated-file header followed by the interface text."""
    out = sys.stdout if file is None else file
    out.write(ABI_HEADER)
    out.write(interface_text)