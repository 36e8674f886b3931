"""A deployed contract: an ABI bound to an address and a client."""

from __future__ import annotations

from .abi import Abi, AbiDecodeError, Address, Function, keccak256
from .base import AbiError, BaseContract, encode_function_data
from .call import ContractCall, Middleware, TransactionRequest
from .event import Event, Filter


class Contract:
    """Calls functions and filters events of a contract at ``address``."""

    def __init__(self, address: Address, abi: Abi | BaseContract, client: Middleware) -> None:
        self._base = abi if isinstance(abi, BaseContract) else BaseContract(abi)
        self._address = address
        self._client = client

    @property
    def address(self) -> Address:
        return self._address

    @property
    def abi(self) -> Abi:
        return self._base.abi

    @property
    def client(self) -> Middleware:
        return self._client

    @property
    def base_contract(self) -> BaseContract:
        return self._base

    def event(self, name: str, kind: object = None) -> Event:
        """Return a filter builder for the event called ``name``."""
        abi_event = self._base.abi.event(name)
        topics = (keccak256(abi_event.abi_signature()), None, None, None)
        return Event(Filter(address=self._address, topics=topics), abi_event, self._client, kind)

    def method(self, name: str, args: object = None, kind: object = None) -> ContractCall:
        """Prepare a call to the first function called ``name``."""
        try:
            function = self._base.abi.function(name)
        except AbiDecodeError as exc:
            raise AbiError(str(exc)) from exc
        return self._prepare(function, args, kind)

    def method_hash(self, selector: bytes, args: object = None, kind: object = None) -> ContractCall:
        """Prepare a call to the function with the given 4-byte selector."""
        return self._prepare(self._base.function_by_selector(selector), args, kind)

    def _prepare(self, function: Function, args: object, kind: object) -> ContractCall:
        data = encode_function_data(function, args)
        tx = TransactionRequest(to=self._address, data=data)
        return ContractCall(tx=tx, function=function, client=self._client, kind=kind)

    def at(self, address: Address) -> "Contract":
        """The same contract at another address."""
        return Contract(address, self._base, self._client)

    def connect(self, client: Middleware) -> "Contract":
        """The same contract through another client."""
        return Contract(self._address, self._base, client)

    def __repr__(self) -> str:
        return f"Contract({self._address})"