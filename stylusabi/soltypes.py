"""Method purity and the Solidity types accepted by interface declarations."""

from __future__ import annotations

import re
from enum import Enum

__all__ = ["Purity", "solidity_type_info"]


class Purity(Enum):
    """The purity of a Solidity method, ordered from least to most capable."""

    PURE = 0
    VIEW = 1
    WRITE = 2
    PAYABLE = 3

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Purity):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Purity):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Purity):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Purity):
            return NotImplemented
        return self.value >= other.value

    @classmethod
    def parse(cls, text: str) -> Purity:
        """Parse one of ``pure``, ``view``, ``write`` or ``payable``."""
        for purity in cls:
            if str(purity) == text:
                return purity
        raise ValueError(f"unknown purity: {text!r}")

    @classmethod
    def from_mutability(cls, mutable: bool) -> Purity:
        """Purity implied by a storage reference: ``write`` if mutable, else ``view``."""
        return cls.WRITE if mutable else cls.VIEW


_SOL_DATA = "stylus_sdk::alloy_sol_types::sol_data::"
_TOKEN_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*|[0-9]+|\S")
_SIZED_RE = re.compile(r"(uint|int|bytes)([0-9]+)")


class _Cursor:
    def __init__(self, text: str) -> None:
        self._tokens = _TOKEN_RE.findall(text)
        self._pos = 0

    def peek(self) -> str | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def take(self) -> str:
        token = self.peek()
        if token is None:
            raise ValueError("unexpected end of type")
        self._pos += 1
        return token

    def expect(self, text: str) -> None:
        token = self.take()
        if token != text:
            raise ValueError(f"expected {text!r}, found {token!r}")


def _unsupported(name: str) -> ValueError:
    return ValueError(f"Solidity type {name} is not yet implemented in sol_interface!")


def _elementary(name: str) -> tuple[str, str]:
    simple = {"bool": "Bool", "address": "Address", "string": "String", "bytes": "Bytes"}
    if name in simple:
        return _SOL_DATA + simple[name], name
    if name in ("uint", "int"):
        name += "256"
    match = _SIZED_RE.fullmatch(name)
    if match is None:
        raise _unsupported(name)
    kind, size = match.group(1), int(match.group(2))
    if kind == "bytes":
        if not 1 <= size <= 32:
            raise _unsupported(name)
        return f"stylus_sdk::abi::FixedBytesSolType<{size}>", f"bytes[{size}]"
    if not (8 <= size <= 256 and size % 8 == 0):
        raise _unsupported(name)
    rust = "Uint" if kind == "uint" else "Int"
    return f"{_SOL_DATA}{rust}<{size}>", f"{kind}{size}"


def _tuple(items: list[tuple[str, str]]) -> tuple[str, str]:
    if not items:
        return "()", "()"
    if len(items) == 1:
        return items[0]
    path = "(" + ", ".join(p for p, _ in items) + ")"
    abi = "(" + ",".join(a for _, a in items) + ")"
    return path, abi


def _parse(cursor: _Cursor) -> tuple[str, str]:
    token = cursor.take()
    if token == "(":
        items: list[tuple[str, str]] = []
        if cursor.peek() != ")":
            while True:
                items.append(_parse(cursor))
                if cursor.peek() == ",":
                    cursor.take()
                    continue
                break
        cursor.expect(")")
        info = _tuple(items)
    elif re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", token):
        if token == "address" and cursor.peek() == "payable":
            cursor.take()
        info = _elementary(token)
    else:
        raise ValueError(f"unexpected token {token!r}")

    while cursor.peek() == "[":
        cursor.take()
        size = None
        if cursor.peek() is not None and cursor.peek().isdigit():
            size = cursor.take()
        cursor.expect("]")
        path, abi = info
        if size is None:
            info = (f"{_SOL_DATA}Array<{path}>", f"{abi}[]")
        else:
            info = (f"{_SOL_DATA}FixedArray<{path}, {size}>", f"{abi}[{size}]")
    return info


def solidity_type_info(ty: str) -> tuple[str, str]:
    """Return the Rust type path and the ABI name of a Solidity type."""
    if not isinstance(ty, str):
        raise TypeError("type must be given as text")
    cursor = _Cursor(ty)
    info = _parse(cursor)
    leftover = cursor.peek()
    if leftover is not None:
        raise ValueError(f"unexpected token {leftover!r} in type {ty!r}")
    return info