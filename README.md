# ethkit

Tools for working with Ethereum smart contracts from Python: ABI types and
encoding, a parser for human-readable ABI lines, and contract objects that
build calls, deploy bytecode and decode event logs through a client object
you supply.

## Installation

```
pip install ethkit
```

To run the tests:

```
pip install "ethkit[test]"
pytest
```

## Modules

- `ethkit.abi`: parameter types (`ParamType`, `parse_param_type`), tokens
  (`Token`), `encode_tokens` / `decode_tokens`, `Address`, `keccak256`, and
  the `Function`, `Constructor`, `Event` and `Abi` descriptions. `abi_from_json`
  loads an ABI from its JSON form. Errors raise `AbiDecodeError`.
- `ethkit.tokens`: conversion between Python values and tokens
  (`into_token`, `into_tokens`, `from_token`, `from_tokens`,
  `flatten_tokens`). Failed conversions raise `InvalidOutputType`.
- `ethkit.human_readable`: `parse_abi` and the line parsers `parse_function`,
  `parse_event`, `parse_event_arg` and `parse_param`. Errors raise
  `HumanReadableError`.
- `ethkit.base`: `BaseContract` and the helpers `encode_function_data`,
  `decode_function_data` and `decode_event`. Errors raise `AbiError`
  (`WrongSelectorError` when call data has the wrong selector).
- `ethkit.call`: `TransactionRequest`, `ContractCall`, the `Middleware`
  protocol and the `ContractError` family.
- `ethkit.event`: `Log`, `Filter`, `LogMeta`, `EventStream` and the `Event`
  filter builder.
- `ethkit.contract`: `Contract`.
- `ethkit.factory`: `ContractFactory` and `Deployer`.
- `ethkit.util`: `parse_address`, `to_snake_case`, `safe_ident` and
  `input_name`.

## Parsing an ABI

```python
from ethkit.human_readable import parse_abi

abi = parse_abi([
    "function approve(address _spender, uint256 value) external view returns (bool, bool)",
    "event Approval(address indexed owner, address indexed spender, uint256 value)",
])

approve = abi.function("approve")
print(approve.abi_signature())     # approve(address,uint256)
print(approve.selector().hex())    # 095ea7b3
```

## Python values and output kinds

Arguments are plain Python values: `int` (negative values are
sign-extended), `bool`, `str`, `bytes`, `Address`, a `tuple` for several
arguments or a struct, a `list` for an array, or a ready `Token`. `None`
means no arguments.

Decoding takes a `kind` that describes the result: `int`, `bool`, `str`,
`bytes`, `Address`, `Token`, `list[inner]`, or a tuple of kinds. A `kind`
of `None` discards the result.

## Encoding and decoding calls

`BaseContract` needs only an ABI:

```python
from ethkit.abi import Address
from ethkit.base import BaseContract
from ethkit.util import parse_address

contract = BaseContract(abi)
spender = parse_address("0x7a250d5630b4cf539739df2c5dacb4c659f2488d")

data = contract.encode("approve", (spender, 2**256 - 1))
decoded = contract.decode("approve", data, (Address, int))
```

Overloaded functions can be told apart by their 4-byte selector with
`encode_with_selector`, `decode_with_selector` and `function_by_selector`.
`decode_event(name, topics, data, kind)` turns a log's topics and data back
into the event's values, in declaration order.

## Talking to a chain

`Contract(address, abi, client)` binds an ABI to an address and a client
that satisfies the `Middleware` protocol: async `estimate_gas`, `call`,
`send_transaction`, `get_logs`, `watch` and `subscribe_logs`.

`Contract.method(name, args, kind)` and `Contract.method_hash(selector, args,
kind)` return a `ContractCall`. Its builder methods `sender`, `gas`,
`gas_price`, `value` and `at_block` return updated copies. Then `await`
one of these:

- `call()` decodes the result into `kind`.
- `send()` returns whatever the client's `send_transaction` returns.
- `estimate_gas()` returns the client's gas estimate.

Client failures raise `MiddlewareError`, and the original error is kept in
its `error` attribute. `Contract.at` and `Contract.connect` give the same
contract at another address or through another client.

`Contract.event(name, kind)` returns an `Event` filter that already matches
the contract address and the event signature. Narrow it with `from_block`,
`to_block` and `topic0` to `topic3`, then use one of these:

- `query()` returns the decoded events.
- `query_with_meta()` returns `(event, LogMeta)` pairs.
- `stream()` or `subscribe()` returns an `EventStream`, which is an async
  iterator of decoded events.

`ContractFactory(abi, bytecode, client).deploy(args)` builds a deployment
transaction. If arguments are given but the ABI has no constructor, it
raises `ConstructorError`. The returned `Deployer` waits for one
confirmation at the `"latest"` block by default; change this with
`confirmations` and `at_block`. `await deployer.send()` expects the pending
transaction returned by the client to have an async `confirmations(n)`
method that yields a receipt with a `contract_address`. It returns a
`Contract` at that address, or raises `ContractNotDeployedError`.

## What ethkit does not do

- It has no node client of its own: no HTTP or WebSocket transport, and no
  provider.
- It has no wallet or transaction signing. All requests go through the
  middleware you pass in.
- It does not batch calls.
- It does not generate binding code. `ethkit.util` only provides the
  identifier and address helpers.
- It has no command-line interface.