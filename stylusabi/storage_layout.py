"""Storage slot layout of structs held in persistent storage."""

from __future__ import annotations

import operator
import re
from collections.abc import Iterable
from dataclasses import dataclass

from .storage_types import StorageTypeError

__all__ = [
    "StorageField",
    "check_field_type",
    "required_slots",
    "field_positions",
    "borrow_fields",
    "erase_all",
]

_SLOT = 32

_FIXED_INTS = frozenset(
    {
        "u8", "u16", "u32", "u64", "u128", "i8", "i16", "i32", "i64", "i128",
        "U8", "U16", "U32", "U64", "U128", "I8", "I16", "I32", "I64", "I128",
    }
)


@dataclass(frozen=True)
class StorageField:
    """A struct field: its name (``None`` for positional fields) and storage sizing.

    ``slot_bytes`` is how many bytes the type occupies within a word and
    ``required_slots`` how many whole words it needs (0 for packable values).
    """

    name: str | None
    type_name: str
    slot_bytes: int = _SLOT
    required_slots: int = 0
    borrow: bool = False

    def __post_init__(self) -> None:
        if not 1 <= operator.index(self.slot_bytes) <= _SLOT:
            raise ValueError("slot_bytes must be between 1 and 32")
        if operator.index(self.required_slots) < 0:
            raise ValueError("required_slots must not be negative")


def check_field_type(type_name: str) -> str:
    """Reject types that cannot live in storage; return the type's last path segment."""
    text = type_name.strip()
    if not re.match(r"(::)?[A-Za-z_]", text):
        raise StorageTypeError("Type not supported for EVM state storage")
    ident = text.split("<", 1)[0].rsplit("::", 1)[-1].strip()
    not_supported = f"Type `{ident}` not supported for EVM state storage"
    if ident in _FIXED_INTS:
        raise StorageTypeError(f"{not_supported}. Instead try `Storage{ident.upper()}`.")
    if ident in ("usize", "isize"):
        raise StorageTypeError(f"{not_supported}.")
    if ident == "bool":
        raise StorageTypeError(f"{not_supported}. Instead try `StorageBool`.")
    if ident in ("f32", "f64"):
        raise StorageTypeError(f"{not_supported}. Consider fixed-point arithmetic.")
    return ident


def _named(fields: Iterable[StorageField]) -> list[StorageField]:
    fields = list(fields)
    for f in fields:
        check_field_type(f.type_name)
    return [f for f in fields if f.name is not None]


def required_slots(fields: Iterable[StorageField]) -> int:
    """Number of storage words a struct with these fields occupies."""
    total = 0
    space = _SLOT
    for f in _named(fields):
        if f.required_slots > 0:
            total += f.required_slots
            space = _SLOT
        else:
            if space < f.slot_bytes:
                space = _SLOT
                total += 1
            space -= f.slot_bytes
    if space != _SLOT or total == 0:
        total += 1
    return total


def field_positions(fields: Iterable[StorageField]) -> dict[str, tuple[int, int]]:
    """Map each named field to its ``(slot, byte offset)`` relative to the struct's root."""
    positions: dict[str, tuple[int, int]] = {}
    space = _SLOT
    slot = 0
    for f in _named(fields):
        if space < f.slot_bytes:
            space = _SLOT
            slot += 1
        space -= f.slot_bytes
        positions[f.name] = (slot, space)
        if f.required_slots > 0:
            slot += f.required_slots
            space = _SLOT
    return positions


def borrow_fields(fields: Iterable[StorageField]) -> dict[str, str | int]:
    """Map each borrowable field type to the field name, or index for positional fields."""
    borrows: dict[str, str | int] = {}
    for index, f in enumerate(fields):
        check_field_type(f.type_name)
        if not f.borrow:
            continue
        if f.type_name in borrows:
            raise StorageTypeError(f"conflicting borrows of `{f.type_name}`")
        borrows[f.type_name] = f.name if f.name is not None else index
    return borrows


def erase_all(obj: object, field_names: Iterable[str]) -> None:
    """Erase each named field of ``obj`` in order."""
    for name in field_names:
        getattr(obj, name).erase()