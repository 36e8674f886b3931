"""Deploying contracts from their ABI and bytecode."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from .abi import Abi, AbiDecodeError
from .call import (
    BlockId,
    ConstructorError,
    ContractError,
    ContractNotDeployedError,
    Middleware,
    MiddlewareError,
    TransactionRequest,
)
from .contract import Contract
from .tokens import into_tokens


@dataclass(frozen=True)
class Deployer:
    """A prepared deployment transaction; builder methods return updated copies.

    ``tx`` is exposed so that its defaults can be overridden before sending.
    """

    tx: TransactionRequest
    abi: Abi
    client: Middleware
    confs: int = 1
    block: BlockId = "latest"

    def confirmations(self, confirmations: int) -> "Deployer":
        """Set how many confirmations to wait for before returning the contract."""
        return replace(self, confs=int(confirmations))

    def at_block(self, block: BlockId) -> "Deployer":
        """Set the block used when sending the deployment transaction."""
        return replace(self, block=block)

    async def send(self) -> Contract:
        """Broadcast the deployment, wait for confirmations and return the contract.

        The client's ``send_transaction`` must return a pending transaction whose
        ``confirmations(n)`` coroutine resolves to a receipt with a
        ``contract_address`` attribute.
        """
        with MiddlewareError.wrapping():
            pending: Any = await self.client.send_transaction(self.tx, self.block)

        try:
            receipt = await pending.confirmations(self.confs)
        except Exception as exc:
            raise ContractNotDeployedError() from exc

        address = getattr(receipt, "contract_address", None)
        if address is None:
            raise ContractNotDeployedError()
        return Contract(address, self.abi, self.client)


class ContractFactory:
    """Creates deployment transactions for a contract's bytecode and constructor."""

    def __init__(self, abi: Abi, bytecode: bytes, client: Middleware) -> None:
        self.abi = abi
        self.bytecode = bytes(bytecode)
        self.client = client

    def deploy(self, constructor_args: object = None) -> Deployer:
        """Build the deployment transaction; ``None`` or ``()`` means no arguments.

        The returned deployer waits for one confirmation at the latest block
        unless told otherwise.
        """
        params = into_tokens(constructor_args)
        constructor = self.abi.constructor
        if constructor is None:
            if params:
                raise ConstructorError()
            data = self.bytecode
        else:
            try:
                data = constructor.encode_input(self.bytecode, params)
            except AbiDecodeError as exc:
                raise ContractError(str(exc)) from exc

        tx = TransactionRequest(to=None, data=data)
        return Deployer(tx=tx, abi=self.abi, client=self.client)

    def __repr__(self) -> str:
        return f"ContractFactory(bytecode={len(self.bytecode)} bytes)"