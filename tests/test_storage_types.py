import pytest

from stylusabi.storage_types import (
    SolidityStruct,
    StorageTypeError,
    parse_structs,
    parse_type,
    primitive_key,
    primitive_type,
)

SAMPLE = """
/// Erc20 implements all ERC-20 methods.
pub struct Erc20<T> {
    /// Maps users to balances
    mapping(address => uint256) balances;
    // plain comments are ignored
    mapping(address => mapping(address => uint256)) allowances;
    uint256 total_supply;
    PhantomData<T> phantom;
}

#[entrypoint]
struct Weth {
    #[borrow]
    Erc20<WethParams> erc20;
}
"""


def test_uint_width_maps_to_storage_uint():
    assert primitive_type("uint256") == "stylus_sdk::storage::StorageUint<256, 4>"


@pytest.mark.parametrize(
    "name, suffix",
    [
        ("address", "StorageAddress"),
        ("bool", "StorageBool"),
        ("bytes", "StorageBytes"),
        ("int", "StorageI256"),
        ("string", "StorageString"),
        ("uint", "StorageU256"),
    ],
)
def test_named_primitives(name, suffix):
    result = primitive_type(name)
    assert result.startswith("stylus_sdk::storage::")
    assert result.endswith("::" + suffix)


def test_sized_primitives_use_generic_types():
    assert "StorageSigned<" in primitive_type("int64")
    assert "StorageFixedBytes<32>" in primitive_type("bytes32")


@pytest.mark.parametrize(
    "name, message",
    [
        ("uint264", "too many bits"),
        ("int512", "too many bits"),
        ("bytes33", "too many bytes"),
        ("foo", "Type not supported"),
    ],
)
def test_primitive_type_errors(name, message):
    with pytest.raises(StorageTypeError, match=message):
        primitive_type(name)


def test_non_primitive_names_are_kept():
    assert primitive_type("Erc20") == "Erc20"
    assert primitive_type("a::b") == "a::b"
    assert primitive_key("MyKey") == "MyKey"


def test_key_types():
    assert primitive_key("address") == "stylus_sdk::alloy_primitives::Address"
    assert primitive_key("bytes") == "Vec<u8>"
    assert primitive_key("string") == "String"
    assert primitive_key("bool").endswith("U8")
    assert "Uint<" in primitive_key("uint8")


def test_key_errors():
    with pytest.raises(StorageTypeError, match="too many bits"):
        primitive_key("uint300")
    with pytest.raises(StorageTypeError, match="Type not supported"):
        primitive_key("mapping")


def test_parse_plain_type_matches_primitive():
    assert parse_type("uint256") == primitive_type("uint256")
    assert parse_type("address") == primitive_type("address")


def test_parse_mapping():
    key = primitive_key("address")
    value = primitive_type("uint256")
    assert parse_type("mapping(address => uint256)") == (
        f"stylus_sdk::storage::StorageMap<{key}, {value}>"
    )


def test_parse_nested_mapping():
    inner = parse_type("mapping(address => uint256)")
    key = primitive_key("address")
    assert parse_type("mapping(address => mapping(address => uint256))") == (
        f"stylus_sdk::storage::StorageMap<{key}, {inner}>"
    )


def test_parse_vec_and_array():
    inner = primitive_type("uint256")
    assert parse_type("uint256[]") == f"stylus_sdk::storage::StorageVec<{inner}>"
    fixed = parse_type("bool[5]")
    assert fixed.startswith("stylus_sdk::storage::StorageArray<")
    assert fixed.endswith(f"{primitive_type('bool')}, 5>")


def test_parse_vec_of_vec():
    once = parse_type("bool[]")
    assert parse_type("bool[][]") == f"stylus_sdk::storage::StorageVec<{once}>"


def test_parse_generic_path_is_kept():
    assert parse_type("Erc20<WethParams>") == "Erc20<WethParams>"


@pytest.mark.parametrize("text", ["uint[1.5]", "uint[\"x\"]"])
def test_array_size_must_be_integer(text):
    with pytest.raises(StorageTypeError, match="positive integer"):
        parse_type(text)


@pytest.mark.parametrize("text", ["uint[x]", "mapping(address)", "uint256 extra", "mapping(address => )"])
def test_parse_type_errors(text):
    with pytest.raises(StorageTypeError):
        parse_type(text)


def test_parse_structs_sample():
    structs = parse_structs(SAMPLE)
    assert [s.name for s in structs] == ["Erc20", "Weth"]
    erc20, weth = structs
    assert isinstance(erc20, SolidityStruct)
    assert erc20.vis == "pub"
    assert weth.vis == ""
    assert erc20.generics == "<T>"
    assert weth.generics == ""
    assert [f.name for f in erc20.fields] == ["balances", "allowances", "total_supply", "phantom"]
    assert erc20.fields[0].ty == parse_type("mapping(address => uint256)")
    assert erc20.fields[2].ty == primitive_type("uint256")
    assert erc20.fields[3].ty == "PhantomData<T>"
    assert weth.attrs == ("entrypoint",)
    assert weth.fields[0].attrs == ("borrow",)
    assert weth.fields[0].ty == "Erc20<WethParams>"


def test_doc_comments_become_attributes():
    erc20 = parse_structs(SAMPLE)[0]
    assert erc20.attrs[0].startswith("doc")
    assert "Erc20 implements all ERC-20 methods." in erc20.attrs[0]
    assert "Maps users to balances" in erc20.fields[0].attrs[0]
    assert erc20.fields[1].attrs == ()


def test_attribute_arguments_are_kept():
    (decl,) = parse_structs("#[derive(Erase)] pub(crate) struct S { bool flag }")
    assert decl.attrs == ("derive(Erase)",)
    assert decl.vis == "pub(crate)"
    assert [f.name for f in decl.fields] == ["flag"]


def test_empty_input_has_no_structs():
    assert parse_structs("  // nothing here\n") == []


@pytest.mark.parametrize(
    "source",
    [
        "struct S { bool a; ",
        "struct S { bool a bool b; }",
        "pub S { bool a; }",
        "struct S { uint512 a; }",
    ],
)
def test_parse_structs_errors(source):
    with pytest.raises(StorageTypeError):
        parse_structs(source)