"""A contract ABI wrapper that encodes calls and decodes results and logs."""

from __future__ import annotations

from typing import Iterable

from .abi import Abi, AbiDecodeError, Event, Function
from .tokens import InvalidOutputType, from_tokens, into_tokens


class AbiError(Exception):
    """Raised when ABI encoding, decoding or lookup fails."""


class WrongSelectorError(AbiError):
    """Raised when call data does not start with the function's selector."""

    def __init__(self) -> None:
        super().__init__("missing or wrong function selector")


class BaseContract:
    """An ABI with a selector index, producing and reading call data."""

    def __init__(self, abi: Abi) -> None:
        self.abi = abi
        self.methods: dict[bytes, tuple[str, int]] = {
            function.selector(): (name, index)
            for name, group in abi.functions.items()
            for index, function in enumerate(group)
        }

    def _function(self, name: str) -> Function:
        try:
            return self.abi.function(name)
        except AbiDecodeError as exc:
            raise AbiError(str(exc)) from exc

    def function_by_selector(self, selector: bytes) -> Function:
        """Return the function whose 4-byte selector is ``selector``."""
        selector = bytes(selector)
        try:
            name, index = self.methods[selector]
        except KeyError:
            raise AbiError(f"invalid name: {selector.hex()}") from None
        return self.abi.functions[name][index]

    def encode(self, name: str, args: object) -> bytes:
        """Encode a call to the first function called ``name``."""
        return encode_function_data(self._function(name), args)

    def encode_with_selector(self, selector: bytes, args: object) -> bytes:
        """Encode a call to the function with the given selector."""
        return encode_function_data(self.function_by_selector(selector), args)

    def decode(self, name: str, data: bytes, kind: object) -> object:
        """Decode call data for the first function called ``name``."""
        return decode_function_data(self._function(name), data, True, kind)

    def decode_event(
        self, name: str, topics: Iterable[bytes], data: bytes, kind: object
    ) -> object:
        """Decode a log's topics and data for the event called ``name``."""
        try:
            event = self.abi.event(name)
        except AbiDecodeError as exc:
            raise AbiError(str(exc)) from exc
        return decode_event(event, topics, data, kind)

    def decode_with_selector(self, selector: bytes, data: bytes, kind: object) -> object:
        """Decode call data for the function with the given selector."""
        return decode_function_data(self.function_by_selector(selector), data, True, kind)


def encode_function_data(function: Function, args: object) -> bytes:
    """ABI-encode ``args`` as call data for ``function``."""
    try:
        return function.encode_input(into_tokens(args))
    except AbiDecodeError as exc:
        raise AbiError(str(exc)) from exc


def decode_function_data(function: Function, data: bytes, is_input: bool, kind: object) -> object:
    """Decode call data (``is_input``) or return data of ``function`` into ``kind``."""
    data = bytes(data)
    try:
        if is_input:
            if len(data) < 4 or data[:4] != function.selector():
                raise WrongSelectorError()
            tokens = function.decode_input(data[4:])
        else:
            tokens = function.decode_output(data)
        return from_tokens(tokens, kind)
    except (AbiDecodeError, InvalidOutputType) as exc:
        raise AbiError(str(exc)) from exc


def decode_event(event: Event, topics: Iterable[bytes], data: bytes, kind: object) -> object:
    """Decode a log of ``event`` into ``kind``, parameters in declaration order."""
    try:
        tokens = [token for _, token in event.parse_log(topics, bytes(data))]
        return from_tokens(tokens, kind)
    except (AbiDecodeError, InvalidOutputType) as exc:
        raise AbiError(str(exc)) from exc