import pytest

from ethkit.abi import UINT256_MAX, AbiDecodeError, Address, Token, encode_tokens
from ethkit.base import AbiError, BaseContract
from ethkit.contract import Contract
from ethkit.human_readable import parse_abi

ABI = parse_abi(
    [
        "function approve(address _spender, uint256 value) external view returns (bool, bool)",
        "event Approval(address indexed owner, address indexed spender, uint256 value)",
    ]
)
SPENDER = Address.from_hex("7a250d5630b4cf539739df2c5dacb4c659f2488d")
OWNER = Address.from_hex("e4e60fdf9bf188fa57b7a5022230363d5bd56d08")
ADDRESS = Address.from_hex("eeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee")
APPROVE_HEX = (
    "095ea7b30000000000000000000000007a250d5630b4cf539739df2c5dacb4c659f2488d"
    "ffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffff"
)
APPROVAL_TOPIC = "8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"


class FakeClient:
    def __init__(self, output=b""):
        self.output = output
        self.calls = []

    async def call(self, tx, block):
        self.calls.append(tx)
        return self.output


def test_method_builds_transaction():
    contract = Contract(ADDRESS, ABI, FakeClient())
    call = contract.method("approve", (SPENDER, UINT256_MAX), (bool, bool))
    assert call.calldata().hex() == APPROVE_HEX
    assert call.tx.to == ADDRESS
    assert call.function.name == "approve"
    assert call.block is None


def test_method_hash_matches_method():
    contract = Contract(ADDRESS, ABI, FakeClient())
    call = contract.method_hash(bytes.fromhex("095ea7b3"), (SPENDER, UINT256_MAX))
    assert call.calldata().hex() == APPROVE_HEX


def test_unknown_method_and_selector():
    contract = Contract(ADDRESS, ABI, FakeClient())
    with pytest.raises(AbiError):
        contract.method("transfer", ())
    with pytest.raises(AbiError):
        contract.method_hash(bytes(4), ())


def test_bad_arguments_fail():
    contract = Contract(ADDRESS, ABI, FakeClient())
    with pytest.raises(AbiError):
        contract.method("approve", ("not an address", 1))


def test_event_filter():
    client = FakeClient()
    contract = Contract(ADDRESS, ABI, client)
    event = contract.event("Approval", (Address, Address, int))
    assert event.filter.topics[0] == bytes.fromhex(APPROVAL_TOPIC)
    assert event.filter.address == ADDRESS
    assert event.provider is client
    assert event.event.name == "Approval"


def test_unknown_event():
    with pytest.raises(AbiDecodeError):
        Contract(ADDRESS, ABI, FakeClient()).event("Transfer")


def test_at_and_connect_return_new_contracts():
    contract = Contract(ADDRESS, ABI, FakeClient())
    moved = contract.at(SPENDER)
    assert moved.address == SPENDER
    assert contract.address == ADDRESS
    assert moved.abi is contract.abi
    other = FakeClient()
    connected = contract.connect(other)
    assert connected.client is other
    assert connected.address == ADDRESS
    assert contract.client is not other


def test_accepts_base_contract():
    base = BaseContract(ABI)
    contract = Contract(ADDRESS, base, FakeClient())
    assert contract.base_contract is base
    assert contract.method("approve", (SPENDER, 0)).calldata()[:4] == bytes.fromhex("095ea7b3")


@pytest.mark.asyncio
async def test_method_call_through_client():
    client = FakeClient(output=encode_tokens([Token.bool_(True), Token.bool_(True)]))
    contract = Contract(ADDRESS, ABI, client)
    result = await contract.method("approve", (OWNER, 1), (bool, bool)).call()
    assert result == (True, True)
    assert client.calls[0].to == ADDRESS