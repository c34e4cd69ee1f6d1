import pytest

from stylusabi.storage_layout import (
    StorageField,
    borrow_fields,
    check_field_type,
    erase_all,
    field_positions,
    required_slots,
)
from stylusabi.storage_types import StorageTypeError


def packed(name, size):
    return StorageField(name, "StorageUint<8, 1>", slot_bytes=size)


def test_empty_struct_takes_one_slot():
    assert required_slots([]) == 1


def test_packed_fields_share_a_slot():
    assert required_slots([packed("a", 16), packed("b", 16)]) == required_slots([packed("c", 32)])


def test_overflow_needs_another_slot():
    two = required_slots([packed("a", 16), packed("b", 16)])
    three = required_slots([packed("a", 16), packed("b", 16), packed("c", 16)])
    assert three > two


def test_nested_struct_uses_its_words():
    inner = StorageField("inner", "Inner", required_slots=3)
    assert required_slots([inner]) == 3


def test_positional_fields_are_ignored():
    unnamed = StorageField(None, "Inner", required_slots=5)
    assert required_slots([unnamed]) == required_slots([])
    assert field_positions([unnamed]) == {}


def test_full_word_field_starts_at_root():
    assert field_positions([packed("a", 32)]) == {"a": (0, 0)}


def test_packed_offsets_follow_sizes():
    positions = field_positions([packed("a", 4), packed("b", 8)])
    assert positions["a"][0] == positions["b"][0]
    assert positions["a"][1] - positions["b"][1] == 8


def test_field_that_does_not_fit_moves_to_next_slot():
    positions = field_positions([packed("a", 1), packed("b", 32)])
    assert positions["b"][0] == positions["a"][0] + 1


def test_field_after_struct_skips_its_words():
    positions = field_positions(
        [StorageField("inner", "Inner", required_slots=2), packed("b", 1)]
    )
    assert positions["b"][0] == positions["inner"][0] + 2


def test_positions_keep_declaration_order():
    names = ["z", "a", "m"]
    positions = field_positions([packed(n, 8) for n in names])
    assert list(positions) == names


def test_positions_consistent_with_slot_count():
    fields = [packed("a", 20), packed("b", 20), packed("c", 20)]
    positions = field_positions(fields)
    assert max(slot for slot, _ in positions.values()) + 1 == required_slots(fields)


@pytest.mark.parametrize(
    "type_name, message",
    [
        ("u8", "StorageU8"),
        ("I128", "StorageI128"),
        ("bool", "StorageBool"),
        ("f64", "fixed-point"),
        ("usize", "not supported for EVM state storage"),
        ("&Foo", "Type not supported"),
        ("(u8, u8)", "Type not supported"),
    ],
)
def test_rejected_field_types(type_name, message):
    with pytest.raises(StorageTypeError, match=message):
        check_field_type(type_name)


def test_accepted_field_type_returns_last_segment():
    assert check_field_type("stylus_sdk::storage::StorageMap<Address, StorageU256>") == "StorageMap"
    assert check_field_type("StorageBool") == "StorageBool"


def test_layout_rejects_bad_types():
    with pytest.raises(StorageTypeError):
        required_slots([StorageField("x", "u64", slot_bytes=8)])
    with pytest.raises(StorageTypeError):
        field_positions([StorageField("x", "f32", slot_bytes=4)])


def test_borrow_fields_by_name_and_index():
    fields = [
        StorageField("erc20", "Erc20<P>", borrow=True),
        StorageField("flag", "StorageBool", slot_bytes=1),
        StorageField(None, "Inner", borrow=True),
    ]
    assert borrow_fields(fields) == {"Erc20<P>": "erc20", "Inner": 2}


def test_duplicate_borrow_is_rejected():
    fields = [StorageField("a", "Inner", borrow=True), StorageField("b", "Inner", borrow=True)]
    with pytest.raises(StorageTypeError):
        borrow_fields(fields)


def test_invalid_field_sizes():
    with pytest.raises(ValueError):
        StorageField("a", "X", slot_bytes=0)
    with pytest.raises(ValueError):
        StorageField("a", "X", required_slots=-1)


class _Erasable:
    def __init__(self, log, name):
        self._log = log
        self._name = name

    def erase(self):
        self._log.append(self._name)


class _Holder:
    def __init__(self, log):
        self.owner = _Erasable(log, "owner")
        self.hashes = _Erasable(log, "hashes")
        self.other = _Erasable(log, "other")


def test_erase_all_erases_listed_fields_in_order():
    log = []
    erase_all(_Holder(log), ["hashes", "owner"])
    assert log == ["hashes", "owner"]


def test_erase_all_missing_field_raises():
    with pytest.raises(AttributeError):
        erase_all(_Holder([]), ["missing"])