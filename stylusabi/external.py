"""Selector-based dispatch of external methods and Solidity interface export."""

from __future__ import annotations

import logging
import operator
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .abi_types import AbiType, write_solidity_returns
from .export import underscore_if_sol
from .selector import selector_value
from .soltypes import Purity

__all__ = ["ExternalError", "ExternalMethod", "Router", "camel_case", "resolve_purity"]

logger = logging.getLogger(__name__)

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")
_INT_RE = re.compile(r"(u?int)([0-9]+)")
_FIXED_BYTES_RE = re.compile(r"bytes([0-9]+)")


class ExternalError(ValueError):
    """An external method or router is declared in a way that cannot work."""


def camel_case(name: str) -> str:
    """Convert a method name such as ``balance_of`` into ``balanceOf``."""
    words = [word.lower() for word in _WORD_RE.findall(name)]
    if not words:
        return ""
    return words[0] + "".join(word[:1].upper() + word[1:] for word in words[1:])


def resolve_purity(declared: Purity | None, needed: Purity) -> Purity:
    """Combine a declared purity with the one the storage access needs."""
    purity = needed if declared is None else declared
    if purity is Purity.PURE and purity < needed:
        raise ExternalError("pure method must not access storage")
    if purity is Purity.VIEW and purity < needed:
        raise ExternalError(f"storage is &mut, but the method is {purity}")
    return purity


_Codec = tuple[Callable[[bytes], Any], Callable[[Any], bytes]]


def _word_codec(abi: str) -> _Codec | None:
    """Decoder and encoder of a static elementary type held in one 32-byte word."""
    if abi == "bool":

        def decode_bool(word: bytes) -> bool:
            number = int.from_bytes(word, "big")
            if number > 1:
                raise ValueError("invalid bool")
            return bool(number)

        def encode_bool(value: Any) -> bytes:
            return int(bool(value)).to_bytes(32, "big")

        return decode_bool, encode_bool

    if abi == "address":

        def decode_address(word: bytes) -> bytes:
            if any(word[:12]):
                raise ValueError("invalid address")
            return word[12:]

        def encode_address(value: Any) -> bytes:
            raw = bytes(value)
            if len(raw) != 20:
                raise ValueError("address must be 20 bytes")
            return bytes(12) + raw

        return decode_address, encode_address

    match = _INT_RE.fullmatch(abi)
    if match:
        bits = int(match.group(2))
        is_signed = match.group(1) == "int"
        if is_signed:
            low, high = -(1 << (bits - 1)), 1 << (bits - 1)
        else:
            low, high = 0, 1 << bits

        def decode_int(word: bytes) -> int:
            number = int.from_bytes(word, "big", signed=is_signed)
            if not low <= number < high:
                raise ValueError(f"value out of range for {abi}")
            return number

        def encode_int(value: Any) -> bytes:
            number = operator.index(value)
            if not low <= number < high:
                raise ValueError(f"value out of range for {abi}")
            return number.to_bytes(32, "big", signed=is_signed)

        return decode_int, encode_int

    match = _FIXED_BYTES_RE.fullmatch(abi)
    if match:
        size = int(match.group(1))

        def decode_fixed(word: bytes) -> bytes:
            if any(word[size:]):
                raise ValueError(f"invalid {abi}")
            return word[:size]

        def encode_fixed(value: Any) -> bytes:
            raw = bytes(value)
            if len(raw) != size:
                raise ValueError(f"{abi} must be {size} bytes")
            return raw + bytes(32 - size)

        return decode_fixed, encode_fixed

    return None


def _words_decoder(decoders: list[Callable[[bytes], Any]]) -> Callable[[bytes], tuple]:
    def decode(data: bytes) -> tuple:
        if len(data) < 32 * len(decoders):
            raise ValueError("calldata too short for arguments")
        words = (data[offset:offset + 32] for offset in range(0, 32 * len(decoders), 32))
        return tuple(decoder(word) for decoder, word in zip(decoders, words))

    return decode


def _empty(_: Any) -> bytes:
    return b""


def _identity(storage: Any) -> Any:
    return storage


@dataclass(frozen=True)
class ExternalMethod:
    """A method callable by other contracts.

    ``access`` is the storage access of the method's first parameter:
    ``PURE`` for none, ``VIEW`` for a shared and ``WRITE`` for a mutable
    reference. ``has_self`` tells whether that parameter is the router's own
    storage (borrowed from the top-level storage) or the top-level storage itself.
    ``decode`` turns argument data into a tuple and ``encode`` turns a result
    into return data; both default to codecs for static elementary types.
    """

    name: str
    func: Callable[..., Any]
    args: Sequence[tuple[str | None, AbiType]] = ()
    returns: AbiType | None = None
    access: Purity = Purity.PURE
    declared: Purity | None = None
    has_self: bool = True
    decode: Callable[[bytes], Sequence[Any]] | None = None
    encode: Callable[[Any], bytes] | None = None
    purity: Purity = field(init=False)
    sol_name: str = field(init=False)

    def __post_init__(self) -> None:
        if not _IDENT_RE.fullmatch(self.name):
            raise ExternalError(f"invalid method name: {self.name!r}")
        if self.access not in (Purity.PURE, Purity.VIEW, Purity.WRITE):
            raise ExternalError("storage access must be pure, view or write")
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "purity", resolve_purity(self.declared, self.access))
        object.__setattr__(self, "sol_name", camel_case(self.name))

        if self.decode is None:
            decoders = []
            for _, ty in self.args:
                codec = _word_codec(str(ty.abi))
                if codec is None:
                    raise ExternalError(f"no default decoding for argument type {ty.abi}")
                decoders.append(codec[0])
            object.__setattr__(self, "decode", _words_decoder(decoders))

        if self.encode is None:
            if self.returns is None or str(self.returns.abi) == "()":
                encoder = _empty
            else:
                codec = _word_codec(str(self.returns.abi))
                if codec is None:
                    raise ExternalError(
                        f"no default encoding for return type {self.returns.abi}"
                    )
                encoder = codec[1]
            object.__setattr__(self, "encode", encoder)

    def selector(self) -> int:
        """The method's four-byte selector as an integer."""
        return selector_value(self.sol_name, *(ty for _, ty in self.args))

    def _invoke(
        self, storage: Any, borrow: Callable[[Any], Any], data: bytes, value: int
    ) -> tuple[bool, bytes]:
        if self.purity is not Purity.PAYABLE and value != 0:
            logger.debug("method %s not payable", self.sol_name)
            return False, b""
        try:
            args = tuple(self.decode(data))
        except ValueError as err:
            logger.debug("failed to decode arguments: %s", err)
            return False, b""

        if self.access is Purity.PURE:
            call_args = args
        elif self.has_self:
            call_args = (borrow(storage), *args)
        else:
            call_args = (storage, *args)

        try:
            result = self.func(*call_args)
        except Exception as err:
            to_revert_data = getattr(err, "to_revert_data", None)
            if to_revert_data is None:
                raise
            return False, bytes(to_revert_data())
        return True, bytes(self.encode(result))

    def _abi_text(self) -> str:
        params = ", ".join(
            f"{ty.export_abi_arg}{underscore_if_sol(name or '')}" for name, ty in self.args
        )
        purity = "" if self.purity is Purity.WRITE else f" {self.purity}"
        returns = "" if self.returns is None else write_solidity_returns(self.returns)
        return f"\n    function {self.sol_name}({params}) external{purity}{returns};\n"


@dataclass
class Router:
    """Routes selectors to methods, then to inherited routers in order.

    ``borrow`` maps the top-level storage to the storage this router's methods use.
    """

    name: str
    methods: Sequence[ExternalMethod] = ()
    inherits: Sequence[Router] = ()
    borrow: Callable[[Any], Any] = _identity
    _by_selector: dict[int, ExternalMethod] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.methods = list(self.methods)
        self.inherits = list(self.inherits)
        names: set[str] = set()
        self._by_selector = {}
        for method in self.methods:
            if method.name in names:
                raise ExternalError(f"duplicate method `{method.name}`")
            names.add(method.name)
            self._by_selector.setdefault(method.selector(), method)

    def route(
        self, storage: Any, selector: int, data: bytes, value: int = 0
    ) -> tuple[bool, bytes] | None:
        """Run the method for ``selector``; ``None`` if neither this router nor its parents has one.

        Returns ``(success, data)``: return data on success, revert data otherwise.
        """
        method = self._by_selector.get(selector)
        if method is not None:
            return method._invoke(storage, self.borrow, bytes(data), value)
        for parent in self.inherits:
            result = parent.route(storage, selector, data, value)
            if result is not None:
                return result
        return None

    def generate_abi(self) -> str:
        """Render the Solidity interfaces of the inherited routers and of this one."""
        if not _IDENT_RE.fullmatch(self.name):
            raise ExternalError("Can't generate ABI for unnamed type")
        parts = [parent.generate_abi() + "\n" for parent in self.inherits]
        parts.append(f"interface I{self.name}")
        if self.inherits:
            parts.append(" is " + ", ".join(f"I{parent.name}" for parent in self.inherits))
        parts.append(" {")
        parts.extend(method._abi_text() for method in self.methods)
        parts.append("}\n")
        return "".join(parts)