"""Function selectors computed from method names and argument types."""

from __future__ import annotations

from .abi_types import AbiType, digest_to_selector
from .crypto import keccak

__all__ = ["function_selector", "selector_value"]


def function_selector(name: str, *args: AbiType) -> bytes:
    """Return the four-byte selector of ``name(args...)``."""
    signature = name + "(" + ",".join(str(arg.abi) for arg in args) + ")"
    return digest_to_selector(keccak(signature.encode("utf-8")))


def selector_value(name: str, *args: AbiType) -> int:
    """Return the selector as a big-endian 32-bit integer."""
    return int.from_bytes(function_selector(name, *args), "big")