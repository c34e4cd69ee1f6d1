"""Parsing of Solidity-style storage declarations into storage type paths."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

__all__ = [
    "StorageTypeError",
    "SolidityField",
    "SolidityStruct",
    "primitive_type",
    "primitive_key",
    "parse_type",
    "parse_structs",
]

_SDK = "stylus_sdk::storage::"
_PRIMITIVES = "stylus_sdk::alloy_primitives::"

_UINT_RE = re.compile(r"uint([0-9]+)")
_INT_RE = re.compile(r"int([0-9]+)")
_BYTES_RE = re.compile(r"bytes([0-9]+)")
_LOWER_RE = re.compile(r"[0-9a-z]+")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class StorageTypeError(ValueError):
    """A storage declaration uses a type that cannot be stored."""


@dataclass(frozen=True)
class SolidityField:
    """A field of a storage struct: its attributes, name and storage type path."""

    attrs: tuple[str, ...]
    name: str
    ty: str


@dataclass(frozen=True)
class SolidityStruct:
    """A storage struct declared with Solidity-style fields."""

    attrs: tuple[str, ...]
    vis: str
    name: str
    generics: str
    fields: tuple[SolidityField, ...] = field(default_factory=tuple)


def _convert(
    name: str,
    *,
    prefix: str,
    uint: str,
    sint: str,
    fixed: str,
    named: dict[str, str],
    verbatim: dict[str, str],
) -> str:
    if not _IDENT_RE.fullmatch(name):
        return name
    for pattern, template in ((_UINT_RE, uint), (_INT_RE, sint)):
        match = pattern.fullmatch(name)
        if match:
            bits = int(match.group(1))
            if bits > 256:
                raise StorageTypeError("Type not supported: too many bits")
            return prefix + template.format(bits, (63 + bits) // 64)
    match = _BYTES_RE.fullmatch(name)
    if match:
        size = int(match.group(1))
        if size > 32:
            raise StorageTypeError("Type not supported: too many bytes")
        return prefix + fixed.format(size)
    if name in verbatim:
        return verbatim[name]
    if name in named:
        return prefix + named[name]
    if _LOWER_RE.fullmatch(name):
        raise StorageTypeError("Type not supported")
    return name


def primitive_type(name: str) -> str:
    """Map a Solidity value type name to its storage type path.

    Names that are not plain identifiers, and capitalised identifiers, are kept.
    """
    return _convert(
        name,
        prefix=_SDK,
        uint="StorageUint<{}, {}>",
        sint="StorageSigned<{}, {}>",
        fixed="StorageFixedBytes<{}>",
        named={
            "address": "StorageAddress",
            "bool": "StorageBool",
            "bytes": "StorageBytes",
            "int": "StorageI256",
            "string": "StorageString",
            "uint": "StorageU256",
        },
        verbatim={},
    )


def primitive_key(name: str) -> str:
    """Map a Solidity type name used as a mapping key to its key type path."""
    return _convert(
        name,
        prefix=_PRIMITIVES,
        uint="Uint<{}, {}>",
        sint="Signed<{}, {}>",
        fixed="FixedBytes<{}>",
        named={"address": "Address", "bool": "U8", "int": "I256", "uint": "U256"},
        verbatim={"bytes": "Vec<u8>", "string": "String"},
    )


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<doc>///[^\n]*)
  | (?P<comment>//[^\n]*|/\*.*?\*/)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<literal>[0-9][A-Za-z0-9_.]*|"(?:[^"\\]|\\.)*")
  | (?P<punct>::|=>|\S)
    """,
    re.VERBOSE | re.DOTALL,
)
_WORDS = ("ident", "literal")


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str


def _tokenize(source: str) -> list[_Token]:
    return [
        _Token(match.lastgroup, match.group())
        for match in _TOKEN_RE.finditer(source)
        if match.lastgroup not in ("ws", "comment")
    ]


def _render(tokens: list[_Token]) -> str:
    parts: list[str] = []
    prev: _Token | None = None
    for token in tokens:
        if prev is not None and (
            (prev.kind in _WORDS and token.kind in _WORDS)
            or prev.text in (",", ":", "=", "=>")
            or token.text in ("=", "=>")
        ):
            parts.append(" ")
        parts.append(token.text)
        prev = token
    return "".join(parts)


class _Parser:
    def __init__(self, source: str) -> None:
        self._tokens = _tokenize(source)
        self._pos = 0

    def at_end(self) -> bool:
        return self._pos >= len(self._tokens)

    def _peek(self, offset: int = 0) -> _Token | None:
        index = self._pos + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _peek_text(self, offset: int = 0) -> str | None:
        token = self._peek(offset)
        return None if token is None else token.text

    def _next(self) -> _Token:
        token = self._peek()
        if token is None:
            raise StorageTypeError("unexpected end of input")
        self._pos += 1
        return token

    def _expect(self, text: str) -> None:
        token = self._next()
        if token.text != text:
            raise StorageTypeError(f"expected `{text}`, found `{token.text}`")

    def _ident(self) -> str:
        token = self._next()
        if token.kind != "ident":
            raise StorageTypeError(f"expected identifier, found `{token.text}`")
        return token.text

    def _balanced(self, open_: str, close: str) -> list[_Token]:
        self._expect(open_)
        depth = 1
        inner: list[_Token] = []
        while True:
            token = self._next()
            if token.text == open_:
                depth += 1
            elif token.text == close:
                depth -= 1
                if depth == 0:
                    return inner
            inner.append(token)

    def _attributes(self) -> tuple[str, ...]:
        attrs: list[str] = []
        while True:
            token = self._peek()
            if token is not None and token.kind == "doc":
                self._next()
                attrs.append(f'doc = "{token.text[3:]}"')
            elif token is not None and token.text == "#":
                self._next()
                attrs.append(_render(self._balanced("[", "]")))
            else:
                return tuple(attrs)

    def _visibility(self) -> str:
        if self._peek_text() != "pub":
            return ""
        self._next()
        if self._peek_text() == "(" and self._peek_text(1) in ("crate", "super", "self", "in"):
            return "pub(" + _render(self._balanced("(", ")")) + ")"
        return "pub"

    def structs(self) -> list[SolidityStruct]:
        result = []
        while not self.at_end():
            result.append(self.struct())
        return result

    def struct(self) -> SolidityStruct:
        attrs = self._attributes()
        vis = self._visibility()
        self._expect("struct")
        name = self._ident()
        generics = ""
        if self._peek_text() == "<":
            generics = "<" + _render(self._balanced("<", ">")) + ">"
        self._expect("{")
        fields: list[SolidityField] = []
        while self._peek_text() != "}":
            fields.append(self.field())
            if self._peek_text() == ";":
                self._next()
            elif self._peek_text() != "}":
                raise StorageTypeError(f"expected `;`, found `{self._peek_text()}`")
        self._expect("}")
        return SolidityStruct(attrs, vis, name, generics, tuple(fields))

    def field(self) -> SolidityField:
        attrs = self._attributes()
        ty = self.solidity_ty()
        name = self._ident()
        return SolidityField(attrs, name, ty)

    def solidity_ty(self) -> str:
        start, is_ident = self.path()
        if is_ident and start == "mapping":
            self._expect("(")
            key_text, _ = self.path()
            key = primitive_key(key_text)
            self._expect("=>")
            value = self.solidity_ty()
            self._expect(")")
            path = f"{_SDK}StorageMap<{key}, {value}>"
        else:
            path = primitive_type(start)

        while self._peek_text() == "[":
            self._next()
            if self._peek_text() == "]":
                self._next()
                path = f"{_SDK}StorageVec<{path}>"
                continue
            token = self._next()
            if token.kind != "literal":
                raise StorageTypeError(f"expected literal, found `{token.text}`")
            self._expect("]")
            if not re.fullmatch(r"[0-9]+", token.text):
                raise StorageTypeError("Array size must be a positive integer")
            path = f"{_SDK}StorageArray<{path}, {int(token.text)}>"
        return path

    def path(self) -> tuple[str, bool]:
        """Parse a type path; also report whether it is a lone identifier."""
        leading = ""
        if self._peek_text() == "::":
            self._next()
            leading = "::"
        segments: list[str] = []
        plain = not leading
        while True:
            segment = self._ident()
            if self._peek_text() == "<":
                segment += "<" + self._generic_args() + ">"
                plain = False
            segments.append(segment)
            if self._peek_text() != "::":
                break
            self._next()
        plain = plain and len(segments) == 1
        return leading + "::".join(segments), plain

    def _generic_args(self) -> str:
        self._expect("<")
        args: list[str] = []
        while self._peek_text() != ">":
            token = self._peek()
            if token is not None and token.kind == "literal":
                args.append(self._next().text)
            else:
                args.append(self.path()[0])
            if self._peek_text() == ",":
                self._next()
            elif self._peek_text() != ">":
                raise StorageTypeError(f"expected `,` or `>`, found `{self._peek_text()}`")
        self._expect(">")
        return ", ".join(args)


def parse_type(text: str) -> str:
    """Parse a Solidity-style type such as ``mapping(address => uint)[]`` into a storage path."""
    parser = _Parser(text)
    path = parser.solidity_ty()
    if not parser.at_end():
        raise StorageTypeError("unexpected token after type")
    return path


def parse_structs(source: str) -> list[SolidityStruct]:
    """Parse a sequence of struct declarations with Solidity-style fields."""
    return _Parser(source).structs()