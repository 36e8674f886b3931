import pytest

from ethkit.abi import Address, Token
from ethkit.base import (
    AbiError,
    BaseContract,
    WrongSelectorError,
    decode_event,
    decode_function_data,
    encode_function_data,
)
from ethkit.human_readable import parse_abi

UINT_MAX = 2**256 - 1
SPENDER = Address.from_hex("7a250d5630b4cf539739df2c5dacb4c659f2488d")
OWNER = Address.from_hex("e4e60fdf9bf188fa57b7a5022230363d5bd56d08")
APPROVE_HEX = (
    "095ea7b3"
    "0000000000000000000000007a250d5630b4cf539739df2c5dacb4c659f2488d"
    "ffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffff"
)


@pytest.fixture
def approve_contract():
    return BaseContract(
        parse_abi(
            ["function approve(address _spender, uint256 value) external view returns (bool, bool)"]
        )
    )


@pytest.fixture
def approval_contract():
    return BaseContract(
        parse_abi(["event Approval(address indexed owner, address indexed spender, uint256 value)"])
    )


def _approval_topics():
    return [
        bytes.fromhex(h)
        for h in (
            "8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925",
            "000000000000000000000000e4e60fdf9bf188fa57b7a5022230363d5bd56d08",
            "0000000000000000000000007a250d5630b4cf539739df2c5dacb4c659f2488d",
        )
    ]


def test_can_parse_function_inputs(approve_contract):
    encoded = approve_contract.encode("approve", (SPENDER, UINT_MAX))
    assert encoded.hex() == APPROVE_HEX
    spender, amount = approve_contract.decode("approve", encoded, (Address, int))
    assert spender == SPENDER
    assert amount == UINT_MAX


def test_can_parse_events(approval_contract):
    data = bytes.fromhex("ff" * 32)
    owner, spender, value = approval_contract.decode_event(
        "Approval", _approval_topics(), data, (Address, Address, int)
    )
    assert value == UINT_MAX
    assert owner == OWNER
    assert spender == SPENDER


def test_methods_index_by_selector(approve_contract):
    assert approve_contract.methods == {bytes.fromhex("095ea7b3"): ("approve", 0)}


def test_encode_and_decode_with_selector(approve_contract):
    selector = bytes.fromhex("095ea7b3")
    encoded = approve_contract.encode_with_selector(selector, (SPENDER, 5))
    assert encoded[:4] == selector
    assert approve_contract.decode_with_selector(selector, encoded, (Address, int)) == (SPENDER, 5)


def test_overloads_resolved_by_selector():
    contract = BaseContract(parse_abi(["function f(uint256 a)", "function f(bool a)"]))
    bool_fn = contract.abi.functions["f"][1]
    found = contract.function_by_selector(bool_fn.selector())
    assert found.abi_signature() == "f(bool)"
    encoded = contract.encode_with_selector(bool_fn.selector(), True)
    assert contract.decode_with_selector(bool_fn.selector(), encoded, bool) is True


def test_unknown_selector_raises(approve_contract):
    with pytest.raises(AbiError, match="deadbeef"):
        approve_contract.function_by_selector(bytes.fromhex("deadbeef"))


def test_unknown_name_raises(approve_contract):
    with pytest.raises(AbiError):
        approve_contract.encode("transfer", (SPENDER, 1))


def test_wrong_selector_raises(approve_contract):
    data = bytes.fromhex("00000000" + APPROVE_HEX[8:])
    with pytest.raises(WrongSelectorError):
        approve_contract.decode("approve", data, (Address, int))


def test_short_data_raises_wrong_selector(approve_contract):
    with pytest.raises(WrongSelectorError):
        approve_contract.decode("approve", b"\x09\x5e", (Address, int))


def test_wrong_output_type_raises(approve_contract):
    encoded = bytes.fromhex(APPROVE_HEX)
    with pytest.raises(AbiError):
        approve_contract.decode("approve", encoded, (str, int))


def test_encode_mismatched_args_raises(approve_contract):
    with pytest.raises(AbiError):
        approve_contract.encode("approve", ("not an address", 1))


def test_decode_function_output(approve_contract):
    function = approve_contract.abi.function("approve")
    output = (1).to_bytes(32, "big") + (0).to_bytes(32, "big")
    assert decode_function_data(function, output, False, (bool, bool)) == (True, False)


def test_encode_function_data_roundtrip(approve_contract):
    function = approve_contract.abi.function("approve")
    encoded = encode_function_data(function, (SPENDER, 7))
    assert decode_function_data(function, encoded, True, Token) == Token.tuple_(
        [Token.address(SPENDER), Token.uint(7)]
    )


def test_decode_event_bad_signature_raises(approval_contract):
    topics = _approval_topics()
    topics[0] = bytes(32)
    event = approval_contract.abi.event("Approval")
    with pytest.raises(AbiError):
        decode_event(event, topics, bytes(32), (Address, Address, int))


def test_decode_event_unknown_name_raises(approval_contract):
    with pytest.raises(AbiError):
        approval_contract.decode_event("Transfer", _approval_topics(), bytes(32), int)