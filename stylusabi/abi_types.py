"""Solidity ABI descriptions of value types."""

from __future__ import annotations

import operator
from dataclasses import dataclass

__all__ = [
    "MAX_CONST_STRING_LENGTH",
    "MAX_TUPLE_LENGTH",
    "ConstString",
    "AbiType",
    "unsigned",
    "signed",
    "boolean",
    "address",
    "string",
    "bytes_",
    "fixed_bytes",
    "vec",
    "fixed_array",
    "tuple_of",
    "digest_to_selector",
    "write_solidity_returns",
]

MAX_CONST_STRING_LENGTH = 1024
"""Maximum length of a :class:`ConstString` in bytes."""

MAX_TUPLE_LENGTH = 24


@dataclass(frozen=True)
class ConstString:
    """A string whose UTF-8 encoding is bounded by ``MAX_CONST_STRING_LENGTH`` bytes."""

    text: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise TypeError("ConstString holds text")
        if len(self.text.encode("utf-8")) > MAX_CONST_STRING_LENGTH:
            raise ValueError("string exceeds the maximum constant string length")

    @classmethod
    def from_decimal_number(cls, number: int) -> ConstString:
        """Render a non-negative integer in decimal, e.g. 42 becomes "42"."""
        number = operator.index(number)
        if number < 0:
            raise ValueError("number must not be negative")
        return cls(str(number))

    @classmethod
    def select(cls, cond: bool, true_value: str, false_value: str) -> ConstString:
        """Choose between two strings depending on ``cond``."""
        return cls(true_value if cond else false_value)

    def concat(self, other: ConstString | str) -> ConstString:
        """Return this string followed by ``other``."""
        tail = other.text if isinstance(other, ConstString) else other
        return ConstString(self.text + tail)

    def __str__(self) -> str:
        return self.text

    def __bytes__(self) -> bytes:
        return self.text.encode("utf-8")

    def __len__(self) -> int:
        return len(self.text.encode("utf-8"))


@dataclass(frozen=True)
class AbiType:
    """How a value type appears in signatures and exported interfaces."""

    abi: ConstString
    export_abi_arg: ConstString | None = None
    export_abi_ret: ConstString | None = None
    can_be_calldata: bool = True

    def __post_init__(self) -> None:
        if self.export_abi_arg is None:
            object.__setattr__(self, "export_abi_arg", self.abi)
        if self.export_abi_ret is None:
            object.__setattr__(self, "export_abi_ret", self.abi)


def _check_int_bits(bits: int) -> int:
    bits = operator.index(bits)
    if not 8 <= bits <= 256 or bits % 8:
        raise ValueError(f"unsupported integer width: {bits}")
    return bits


def unsigned(bits: int) -> AbiType:
    """An unsigned integer of ``bits`` bits."""
    bits = _check_int_bits(bits)
    return AbiType(ConstString("uint").concat(ConstString.from_decimal_number(bits)))


def signed(bits: int) -> AbiType:
    """A signed integer of ``bits`` bits."""
    bits = _check_int_bits(bits)
    return AbiType(ConstString("int").concat(ConstString.from_decimal_number(bits)))


def boolean() -> AbiType:
    return AbiType(ConstString("bool"))


def address() -> AbiType:
    return AbiType(ConstString("address"))


def string() -> AbiType:
    abi = ConstString("string")
    return AbiType(abi, abi.concat(" calldata"), abi.concat(" memory"))


def bytes_() -> AbiType:
    """Dynamic Solidity ``bytes``."""
    abi = ConstString("bytes")
    return AbiType(abi, abi.concat(" calldata"), abi.concat(" memory"))


def fixed_bytes(size: int) -> AbiType:
    """Solidity ``bytesN`` for 1 <= N <= 32."""
    size = operator.index(size)
    if not 1 <= size <= 32:
        raise ValueError(f"unsupported fixed bytes size: {size}")
    return AbiType(ConstString("bytes").concat(ConstString.from_decimal_number(size)))


def vec(inner: AbiType) -> AbiType:
    """A dynamic array; never passed as calldata."""
    ret = inner.abi.concat("[] memory")
    return AbiType(inner.abi.concat("[]"), ret, ret, can_be_calldata=False)


def fixed_array(inner: AbiType, size: int) -> AbiType:
    """A fixed-length array of ``size`` elements."""
    size = operator.index(size)
    if size < 0:
        raise ValueError("array size must not be negative")
    abi = (
        inner.abi.concat("[")
        .concat(ConstString.from_decimal_number(size))
        .concat("]")
    )
    arg = abi.concat(ConstString.select(inner.can_be_calldata, " calldata", " memory"))
    return AbiType(abi, arg, abi.concat(" memory"), can_be_calldata=inner.can_be_calldata)


def tuple_of(*args: AbiType) -> AbiType:
    """A tuple of the given element types; the empty tuple is ``()``."""
    if not args:
        return AbiType(ConstString("()"))
    if len(args) > MAX_TUPLE_LENGTH:
        raise ValueError(f"tuples hold at most {MAX_TUPLE_LENGTH} elements")

    def joined(parts, sep: str) -> ConstString:
        return ConstString("(" + sep.join(str(p) for p in parts) + ")")

    return AbiType(
        joined((a.abi for a in args), ","),
        joined((a.export_abi_arg for a in args), ", "),
        joined((a.export_abi_ret for a in args), ", "),
        can_be_calldata=False,
    )


def digest_to_selector(digest: bytes) -> bytes:
    """Take the first four bytes of a 32-byte digest."""
    digest = bytes(digest)
    if len(digest) != 32:
        raise ValueError("digest must be 32 bytes long")
    return digest[:4]


def write_solidity_returns(ret: AbiType) -> str:
    """Render the ``returns`` clause of an exported function."""
    abi = str(ret.export_abi_ret)
    if abi == "()":
        return ""
    if abi.startswith("("):
        return f" returns {abi}"
    return f" returns ({abi})"