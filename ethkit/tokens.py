"""Conversion between Python values and ABI tokens."""

from __future__ import annotations

import typing

from .abi import Address, Token, TokenKind, UINT256_MAX


class InvalidOutputType(Exception):
    """Raised when tokens cannot be turned into the requested type."""


def into_token(value: object) -> Token:
    """Convert a Python value into a token; negative ints are sign-extended."""
    if isinstance(value, Token):
        return value
    if isinstance(value, bool):
        return Token.bool_(value)
    if isinstance(value, int):
        if value < 0:
            if value < -(2**255):
                raise ValueError(f"integer out of range: {value}")
            return Token.int_(value & UINT256_MAX)
        if value > UINT256_MAX:
            raise ValueError(f"integer out of range: {value}")
        return Token.uint(value)
    if isinstance(value, str):
        return Token.string(value)
    if isinstance(value, (bytes, bytearray)):
        return Token.bytes_(bytes(value))
    if isinstance(value, Address):
        return Token.address(value)
    if isinstance(value, tuple):
        return Token.tuple_(into_token(v) for v in value)
    if isinstance(value, list):
        return Token.array(into_token(v) for v in value)
    raise TypeError(f"cannot convert {type(value).__name__} into a token")


def flatten_tokens(tokens: list[Token]) -> list[Token]:
    """Unwrap a single top-level tuple into its members."""
    tokens = list(tokens)
    if len(tokens) == 1:
        only = tokens[0]
        return list(only.value) if only.kind is TokenKind.TUPLE else [only]
    return tokens


def into_tokens(args: object) -> list[Token]:
    """Convert call arguments into a flat token list; ``None`` means no arguments."""
    if args is None:
        return []
    return flatten_tokens([into_token(args)])


def _fail(expected: str, token: Token) -> InvalidOutputType:
    return InvalidOutputType(f"Expected `{expected}`, got {token!r}")


def from_token(token: Token, kind: object) -> object:
    """Convert a token into a value of ``kind``.

    ``kind`` is ``Token``, ``str``, ``bytes``, ``bool``, ``int``, ``Address``,
    ``list[inner]`` or a tuple of kinds.
    """
    if isinstance(kind, tuple):
        if token.kind is not TokenKind.TUPLE:
            raise _fail("Tuple", token)
        if len(token.value) != len(kind):
            raise InvalidOutputType(f"Expected tuple of {len(kind)} items, got {len(token.value)}")
        return tuple(from_token(t, k) for t, k in zip(token.value, kind))
    if typing.get_origin(kind) is list:
        (inner,) = typing.get_args(kind)
        if token.kind not in (TokenKind.ARRAY, TokenKind.FIXED_ARRAY):
            raise _fail("Array", token)
        return [from_token(t, inner) for t in token.value]
    if kind is Token:
        return token
    if kind is str:
        if token.kind is not TokenKind.STRING:
            raise _fail("String", token)
        return token.value
    if kind is bytes:
        if token.kind not in (TokenKind.BYTES, TokenKind.FIXED_BYTES):
            raise _fail("bytes", token)
        return token.value
    if kind is bool:
        if token.kind is not TokenKind.BOOL:
            raise _fail("bool", token)
        return token.value
    if kind is int:
        if token.kind not in (TokenKind.INT, TokenKind.UINT):
            raise _fail("U256", token)
        return token.value
    if kind is Address:
        if token.kind is not TokenKind.ADDRESS:
            raise _fail("Address", token)
        return token.value
    raise TypeError(f"unsupported output kind: {kind!r}")


def from_tokens(tokens: list[Token], kind: object) -> object:
    """Convert decoded tokens into ``kind``; ``None`` discards them."""
    if kind is None:
        return None
    tokens = list(tokens)
    if not tokens:
        token = Token.tuple_(())
    elif len(tokens) == 1:
        token = tokens[0]
    else:
        token = Token.tuple_(tokens)
    return from_token(token, kind)