# stylusabi

A library for describing contract methods and storage in Solidity terms:

- Solidity ABI names of value types, with the forms used in exported
  interfaces (`calldata` / `memory`).
- Keccak-256 hashing and four-byte function selectors.
- Parsing of struct declarations written with Solidity-style fields, and
  storage slot layout of struct fields.
- Routing of calldata to Python callables by selector, with purity
  checks, inheritance and Solidity interface export.
- Call configuration and call error values.

## Installation

```sh
pip install stylusabi
```

To run the test suite:

```sh
pip install "stylusabi[test]"
pytest
```

## Hashing and selectors

```python
from stylusabi.crypto import keccak
from stylusabi.abi_types import address, unsigned
from stylusabi.selector import function_selector, selector_value

digest = keccak(b"hello")                        # 32 bytes; str is hashed as UTF-8

selector_value("foo")                            # 0xc2985578
function_selector("foo", address())              # b"\xfd\xf8\x0b\xda"
selector_value("foo", address(), unsigned(256))  # 0xbd0d639f
```

`abi_types.digest_to_selector` takes the first four bytes of a 32-byte
digest.

## ABI type names

`stylusabi.abi_types` builds `AbiType` values with `unsigned`, `signed`,
`boolean`, `address`, `string`, `bytes_`, `fixed_bytes`, `vec`,
`fixed_array` and `tuple_of`. Each has an `abi` name and the text used
for interface arguments (`export_abi_arg`) and return values
(`export_abi_ret`), all held as `ConstString`s:

```python
from stylusabi.abi_types import boolean, bytes_, fixed_array, tuple_of, unsigned, vec

str(fixed_array(boolean(), 5).export_abi_arg)          # "bool[5] calldata"
str(vec(unsigned(256)).export_abi_arg)                 # "uint256[] memory"
str(tuple_of(unsigned(8), bytes_()).export_abi_arg)    # "(uint8, bytes calldata)"
```

`write_solidity_returns` renders the ` returns (...)` clause of an
interface function. `stylusabi.export.underscore_if_sol` prefixes an
argument name with a space, and with an underscore too when it clashes
with a Solidity keyword or type name; `export.print_abi` writes a
generated-file header followed by interface text to a stream (standard
output by default).

## Solidity types in interfaces

`stylusabi.soltypes.solidity_type_info` takes a Solidity type written as
text (`uint`, `bytes32`, `address[]`, `(bool,uint8)[3]`, ...) and returns
its Rust type path and ABI name. `Purity` orders `pure < view < write <
payable` and parses those words with `Purity.parse`.

## Storage declarations and layout

`stylusabi.storage_types.parse_structs` reads struct declarations written
with Solidity-style fields, such as

```
pub struct Erc20 {
    mapping(address => uint256) balances;
    uint256[] values;
    bytes32[4] roots;
}
```

and returns `SolidityStruct` values whose `SolidityField`s carry the
storage type path of each field. `parse_type`, `primitive_type` and
`primitive_key` convert single types; unsupported types raise
`StorageTypeError`.

`stylusabi.storage_layout` works on `StorageField`s, for which the caller
gives each field's `slot_bytes` and `required_slots`. `required_slots`
counts the words a struct occupies and `field_positions` maps each named
field to its `(slot, byte offset)`, packing small values into shared
32-byte words. `check_field_type` rejects plain Rust numeric and `bool`
types, `borrow_fields` lists fields marked for borrowing, and `erase_all`
calls `erase()` on the named attributes of an object.

## Routing methods

`stylusabi.external.ExternalMethod` describes a method: its snake-case
name (exported in camelCase, see `camel_case`), argument types, return
type, storage access and an optional declared purity, checked by
`resolve_purity`. Default argument decoding and result encoding cover
static one-word types (`bool`, `address`, `uintN`, `intN`, `bytesN`);
other types need `decode` / `encode` callables.

`Router.route` dispatches a selector and argument data to a method,
falling back to inherited routers in order, and returns
`(success, data)` or `None` when nothing matches. Non-payable methods
revert when sent a value; exceptions with a `to_revert_data` method
become revert data. `Router.generate_abi` writes the Solidity interface
text of the router and its parents.

`stylusabi.entrypoint.Entrypoint` wraps a router (with a storage
factory) or a bytes-in, bytes-out function. `user_entrypoint` returns
status `0` or `1` with the output, reverting on calldata shorter than
four bytes, unknown selectors and, unless allowed, reentrant calls.

## Calls

`stylusabi.calls.Call` is an immutable configuration of gas and value
(`new_in`, `with_gas`, `with_value`). `Revert` and `AbiDecodingFailed`
are `CallError`s; `to_revert_data` gives the revert data, a Solidity
`Panic` payload (`panic_data`) for decoding failures.

## What this package does not do

It runs no virtual machine and reaches no chain: it does not perform
calls to other contracts, deploy contracts, or read and write persistent
storage. Storage layout is computed from sizes the caller supplies, and
there is no command-line tool.