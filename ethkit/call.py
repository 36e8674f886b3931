"""Building, estimating, calling and sending contract function transactions."""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Iterator, Optional, Protocol, Union

from .abi import Address, Function
from .base import decode_function_data

if TYPE_CHECKING:
    from .event import Filter, Log

BlockId = Union[int, str]


class ContractError(Exception):
    """Raised when interacting with a smart contract fails."""


class MiddlewareError(ContractError):
    """Raised when a request to the client fails; the cause is kept in ``error``."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(str(error))
        self.error = error

    @classmethod
    @contextlib.contextmanager
    def wrapping(cls) -> Iterator[None]:
        """Turn any exception raised inside the block into a ``MiddlewareError``."""
        try:
            yield
        except Exception as exc:
            raise cls(exc) from exc


class ConstructorError(ContractError):
    """Raised when constructor arguments are given but the ABI has no constructor."""

    def __init__(self) -> None:
        super().__init__("constructor is not defined in the ABI")


class ContractNotDeployedError(ContractError):
    """Raised when a deployment receipt carries no contract address."""

    def __init__(self) -> None:
        super().__init__("Contract was not deployed")


class Middleware(Protocol):
    """The client interface contracts talk to."""

    async def estimate_gas(self, tx: "TransactionRequest") -> int:
        ...

    async def call(self, tx: "TransactionRequest", block: Optional[BlockId]) -> bytes:
        ...

    async def send_transaction(self, tx: "TransactionRequest", block: Optional[BlockId]) -> Any:
        ...

    async def get_logs(self, filter: "Filter") -> list["Log"]:
        ...

    async def watch(self, filter: "Filter") -> Any:
        ...

    async def subscribe_logs(self, filter: "Filter") -> Any:
        ...


@dataclass(frozen=True)
class TransactionRequest:
    """A transaction to be called, estimated or sent."""

    sender: Optional[Address] = None
    to: Optional[Address] = None
    gas: Optional[int] = None
    gas_price: Optional[int] = None
    value: Optional[int] = None
    data: Optional[bytes] = None
    nonce: Optional[int] = None


@dataclass(frozen=True)
class ContractCall:
    """A prepared function call; builder methods return updated copies."""

    tx: TransactionRequest
    function: Function
    client: Middleware
    kind: object = None
    block: Optional[BlockId] = None

    def sender(self, address: Address) -> "ContractCall":
        return replace(self, tx=replace(self.tx, sender=address))

    def gas(self, gas: int) -> "ContractCall":
        return replace(self, tx=replace(self.tx, gas=gas))

    def gas_price(self, gas_price: int) -> "ContractCall":
        return replace(self, tx=replace(self.tx, gas_price=gas_price))

    def value(self, value: int) -> "ContractCall":
        return replace(self, tx=replace(self.tx, value=value))

    def at_block(self, block: BlockId) -> "ContractCall":
        return replace(self, block=block)

    def calldata(self) -> Optional[bytes]:
        """The ABI-encoded data of the underlying transaction."""
        return self.tx.data

    async def estimate_gas(self) -> int:
        """Ask the client for the gas this transaction would use."""
        with MiddlewareError.wrapping():
            return await self.client.estimate_gas(self.tx)

    async def call(self) -> object:
        """Run the call without sending a transaction and decode its output."""
        with MiddlewareError.wrapping():
            data = await self.client.call(self.tx, self.block)
        return decode_function_data(self.function, data, False, self.kind)

    async def send(self) -> Any:
        """Sign and broadcast the transaction; returns the client's pending transaction."""
        with MiddlewareError.wrapping():
            return await self.client.send_transaction(self.tx, self.block)