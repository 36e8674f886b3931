"""Identifier and address helpers used when generating bindings."""

from __future__ import annotations

import keyword
import re

from .abi import Address

_RUST_KEYWORDS = frozenset(
    """
    as break const continue crate else enum extern false fn for if impl in let loop
    match mod move mut pub ref return self Self static struct super trait true type
    unsafe use where while async await dyn abstract become box do final macro
    override priv typeof unsized virtual yield try _
    """.split()
)

_RESERVED = _RUST_KEYWORDS | frozenset(keyword.kwlist)

_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def parse_address(text: str) -> Address:
    """Parse a ``0x``-prefixed hex address."""
    if not text.startswith("0x"):
        raise ValueError("address must start with '0x'")
    body = text[2:]
    if len(body) != 40:
        raise ValueError(f"invalid address length: {text!r}")
    try:
        return Address(bytes.fromhex(body))
    except ValueError as exc:
        raise ValueError(f"invalid address: {text!r}") from exc


def to_snake_case(name: str) -> str:
    """Convert ``CamelCase1`` style names to ``camel_case_1``."""
    return "_".join(word.lower() for word in _WORD.findall(name))


def safe_ident(name: str) -> str:
    """Return ``name``, with ``_`` appended if it is a reserved keyword."""
    if name in _RESERVED or not name.isidentifier():
        return f"{name}_"
    return name


def input_name(index: int, name: str) -> str:
    """Identifier for a positional parameter that may be unnamed."""
    raw = f"p{index}" if name == "" else to_snake_case(name)
    return safe_ident(raw)