import pytest

from stylusabi.abi_types import unsigned
from stylusabi.calls import AbiDecodingFailed, Call, CallError, Revert, panic_data
from stylusabi.selector import function_selector


def test_default_call():
    call = Call()
    assert call.gas == 2**64 - 1
    assert call.value is None
    assert call.storage is None
    assert call.call_value == 0
    assert call.is_static and call.is_non_payable


def test_with_gas_returns_new_configuration():
    call = Call()
    limited = call.with_gas(1000)
    assert limited.gas == 1000
    assert call.gas == Call().gas


def test_with_value_rules_out_static_calls():
    call = Call().with_gas(500).with_value(5)
    assert call.call_value == 5
    assert call.gas == 500
    assert not call.is_static
    assert not call.is_non_payable


def test_zero_value_still_counts_as_value():
    call = Call().with_value(0)
    assert call.call_value == 0
    assert not call.is_static


def test_new_in_keeps_storage():
    storage = {"owner": "someone"}
    call = Call.new_in(storage)
    assert call.storage is storage
    assert call.with_value(3).storage is storage


@pytest.mark.parametrize("gas", [-1, 2**64])
def test_gas_out_of_range(gas):
    with pytest.raises(ValueError):
        Call(gas=gas)


def test_negative_value_rejected():
    with pytest.raises(ValueError):
        Call().with_value(-1)


def test_revert_data_round_trip():
    error = Revert(b"\x08\xc3\x79\xa0")
    assert error.to_revert_data() == b"\x08\xc3\x79\xa0"
    assert error == Revert(b"\x08\xc3\x79\xa0")


@pytest.mark.parametrize(
    "error, expected",
    [
        (Revert(b"data"), b"data"),
        (AbiDecodingFailed("bad return data"), panic_data(0)),
    ],
)
def test_call_errors_are_catchable_as_call_error(error, expected):
    with pytest.raises(CallError) as info:
        raise error
    assert info.value is error
    assert info.value.to_revert_data() == expected


def test_decoding_failure_becomes_generic_panic():
    error = AbiDecodingFailed("buffer overrun")
    assert error.to_revert_data() == panic_data(0)
    assert error == AbiDecodingFailed("buffer overrun")


def test_panic_data_layout():
    data = panic_data(0x11)
    assert len(data) == 36
    assert data[:4] == function_selector("Panic", unsigned(256))
    assert int.from_bytes(data[4:], "big") == 0x11


def test_panic_selector_value():
    assert panic_data(0)[:4] == bytes.fromhex("4e487b71")


def test_panic_code_out_of_range():
    with pytest.raises(ValueError):
        panic_data(-1)


def test_call_error_is_abstract():
    with pytest.raises(TypeError):
        CallError()