"""Parsing of the human-readable ABI format (one signature per line)."""

from __future__ import annotations

from typing import Iterable

from .abi import (
    Abi,
    AbiDecodeError,
    Event,
    EventParam,
    Function,
    Param,
    ParamType,
    parse_param_type,
)


class HumanReadableError(ValueError):
    """Raised when a human-readable signature cannot be parsed."""


def _read_type(text: str) -> ParamType:
    try:
        return parse_param_type(text)
    except AbiDecodeError as exc:
        raise HumanReadableError(str(exc)) from exc


def parse_abi(lines: Iterable[str]) -> Abi:
    """Build an ``Abi`` from function and event signature lines."""
    abi = Abi()
    for line in lines:
        if "function" in line:
            function = parse_function(line)
            abi.functions.setdefault(function.name, []).append(function)
        elif "event" in line:
            event = parse_event(line)
            abi.events.setdefault(event.name, []).append(event)
        elif line.startswith("struct"):
            raise HumanReadableError(f"struct definitions are not supported: {line!r}")
        else:
            raise HumanReadableError(f"unknown signature: {line!r}")
    return abi


def parse_event(text: str) -> Event:
    """Parse a line such as ``event Foo(address indexed x, uint y)``."""
    try:
        after_keyword = text.split("event ")[1]
        head = after_keyword.split("(")
        name = head[0].rstrip()
        rest = head[1]
    except IndexError:
        raise HumanReadableError(f"malformed event signature: {text!r}") from None

    args = rest.replace(")", "")
    anonymous = "anonymous" in rest
    inputs = [parse_event_arg(arg) for arg in args.split(", ")] if "," in args else []
    return Event(name=name, inputs=inputs, anonymous=anonymous)


def parse_event_arg(param: str) -> EventParam:
    """Parse one event argument, noting whether it is indexed."""
    parts = param.split(" ")
    kind = _read_type(parts[0])
    try:
        if len(parts) == 2:
            name, indexed = parts[1], False
        else:
            name, indexed = parts[2], True
    except IndexError:
        raise HumanReadableError(f"malformed event argument: {param!r}") from None
    return EventParam(name=name, kind=kind, indexed=indexed)


def parse_function(text: str) -> Function:
    """Parse a line such as ``function f(uint256 x) returns (bool)``."""
    delim = "function " if text.startswith("function ") else " "
    try:
        head = text.split(delim)[1].split("(")
        name = head[0]
        raw_args = head[1].split(")")[0].split(", ")
    except IndexError:
        raise HumanReadableError(f"malformed function signature: {text!r}") from None

    inputs = [parse_param(arg) for arg in raw_args if arg and "returns" not in arg]

    outputs: list[Param] = []
    if len(head) > 2:
        returned = head[2]
        if not returned.endswith(")"):
            raise HumanReadableError(f"no right paren in return list: {text!r}")
        outputs = [parse_param(r) for r in returned[:-1].split(", ") if r]

    return Function(name=name, inputs=inputs, outputs=outputs, state_mutability="nonpayable")


def parse_param(param: str) -> Param:
    """Parse ``type [memory|calldata] [name]`` into a ``Param``."""
    parts = iter(param.split(" "))
    kind_text = next(parts, None)
    if kind_text is None:
        raise HumanReadableError("expected data type")
    kind = _read_type(kind_text)
    name = next(parts, "")
    if name in ("memory", "calldata"):
        name = next(parts, "")
    return Param(name=name, kind=kind)