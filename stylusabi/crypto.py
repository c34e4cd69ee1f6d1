"""Keccak-256 hashing."""

from __future__ import annotations

from Crypto.Hash import keccak as _keccak

__all__ = ["keccak"]


def keccak(data: bytes | bytearray | memoryview | str) -> bytes:
    """Return the 32-byte Keccak-256 digest of ``data``.

    Strings are hashed as their UTF-8 encoding.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    elif not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"cannot hash object of type {type(data).__name__}")
    hasher = _keccak.new(digest_bits=256)
    hasher.update(bytes(data))
    return hasher.digest()