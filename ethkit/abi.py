"""Contract ABI model: types, tokens, encoding and decoding, JSON loading."""

from __future__ import annotations

import enum
import json
import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from Crypto.Hash import keccak

WORD = 32
UINT256_MAX = 2**256 - 1


class AbiDecodeError(Exception):
    """Raised when ABI data, types or names are invalid."""


def keccak256(data: bytes | str) -> bytes:
    """Return the Keccak-256 digest of ``data``."""
    if isinstance(data, str):
        data = data.encode()
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


@dataclass(frozen=True)
class Address:
    """A 20-byte account address."""

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != 20:
            raise ValueError(f"address must be 20 bytes, got {len(self.value)}")

    @classmethod
    def from_hex(cls, text: str) -> "Address":
        text = text[2:] if text.startswith(("0x", "0X")) else text
        if len(text) != 40:
            raise ValueError(f"invalid address length: {text!r}")
        return cls(bytes.fromhex(text))

    @classmethod
    def zero(cls) -> "Address":
        return cls(bytes(20))

    def __str__(self) -> str:
        return "0x" + self.value.hex()


class ParamKind(enum.Enum):
    ADDRESS = "address"
    BYTES = "bytes"
    INT = "int"
    UINT = "uint"
    BOOL = "bool"
    STRING = "string"
    ARRAY = "array"
    FIXED_BYTES = "fixed_bytes"
    FIXED_ARRAY = "fixed_array"
    TUPLE = "tuple"


@dataclass(frozen=True)
class ParamType:
    """A Solidity parameter type."""

    kind: ParamKind
    size: int = 0
    inner: Optional["ParamType"] = None
    members: tuple["ParamType", ...] = ()

    @classmethod
    def address(cls) -> "ParamType":
        return cls(ParamKind.ADDRESS)

    @classmethod
    def bytes_(cls) -> "ParamType":
        return cls(ParamKind.BYTES)

    @classmethod
    def int_(cls, bits: int = 256) -> "ParamType":
        return cls(ParamKind.INT, bits)

    @classmethod
    def uint(cls, bits: int = 256) -> "ParamType":
        return cls(ParamKind.UINT, bits)

    @classmethod
    def bool_(cls) -> "ParamType":
        return cls(ParamKind.BOOL)

    @classmethod
    def string(cls) -> "ParamType":
        return cls(ParamKind.STRING)

    @classmethod
    def array(cls, inner: "ParamType") -> "ParamType":
        return cls(ParamKind.ARRAY, inner=inner)

    @classmethod
    def fixed_bytes(cls, size: int) -> "ParamType":
        return cls(ParamKind.FIXED_BYTES, size)

    @classmethod
    def fixed_array(cls, inner: "ParamType", size: int) -> "ParamType":
        return cls(ParamKind.FIXED_ARRAY, size, inner)

    @classmethod
    def tuple_(cls, members: Iterable["ParamType"]) -> "ParamType":
        return cls(ParamKind.TUPLE, members=tuple(members))

    @property
    def is_dynamic(self) -> bool:
        if self.kind in (ParamKind.BYTES, ParamKind.STRING, ParamKind.ARRAY):
            return True
        if self.kind is ParamKind.FIXED_ARRAY:
            return self.inner.is_dynamic
        if self.kind is ParamKind.TUPLE:
            return any(m.is_dynamic for m in self.members)
        return False

    def __str__(self) -> str:
        k = self.kind
        if k in (ParamKind.INT, ParamKind.UINT):
            return f"{k.value}{self.size}"
        if k is ParamKind.FIXED_BYTES:
            return f"bytes{self.size}"
        if k is ParamKind.ARRAY:
            return f"{self.inner}[]"
        if k is ParamKind.FIXED_ARRAY:
            return f"{self.inner}[{self.size}]"
        if k is ParamKind.TUPLE:
            return "(" + ",".join(str(m) for m in self.members) + ")"
        return k.value


def _split_top_level(text: str) -> list[str]:
    parts, depth, current = [], 0, []
    for ch in text:
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        depth += {"(": 1, ")": -1}.get(ch, 0)
        current.append(ch)
    parts.append("".join(current))
    return parts


def parse_param_type(text: str) -> ParamType:
    """Parse a canonical Solidity type name such as ``uint256[]``."""
    text = text.strip()
    if text.endswith("]"):
        start = text.rfind("[")
        if start < 0:
            raise AbiDecodeError(f"invalid type {text!r}")
        inner = parse_param_type(text[:start])
        size = text[start + 1 : -1]
        if not size:
            return ParamType.array(inner)
        if not size.isdigit():
            raise AbiDecodeError(f"invalid type {text!r}")
        return ParamType.fixed_array(inner, int(size))
    if text.startswith("(") and text.endswith(")"):
        body = text[1:-1]
        if not body.strip():
            return ParamType.tuple_(())
        return ParamType.tuple_(parse_param_type(p) for p in _split_top_level(body))
    simple = {
        "address": ParamType.address(),
        "bytes": ParamType.bytes_(),
        "bool": ParamType.bool_(),
        "string": ParamType.string(),
        "int": ParamType.int_(256),
        "uint": ParamType.uint(256),
    }
    if text in simple:
        return simple[text]
    match = re.fullmatch(r"(u?int)(\d+)", text)
    if match:
        bits = int(match.group(2))
        if bits % 8 or not 8 <= bits <= 256:
            raise AbiDecodeError(f"invalid type {text!r}")
        return ParamType.uint(bits) if match.group(1) == "uint" else ParamType.int_(bits)
    match = re.fullmatch(r"bytes(\d+)", text)
    if match:
        size = int(match.group(1))
        if not 1 <= size <= 32:
            raise AbiDecodeError(f"invalid type {text!r}")
        return ParamType.fixed_bytes(size)
    raise AbiDecodeError(f"invalid type {text!r}")


class TokenKind(enum.Enum):
    ADDRESS = "Address"
    FIXED_BYTES = "FixedBytes"
    BYTES = "Bytes"
    INT = "Int"
    UINT = "Uint"
    BOOL = "Bool"
    STRING = "String"
    FIXED_ARRAY = "FixedArray"
    ARRAY = "Array"
    TUPLE = "Tuple"


_SEQUENCES = (TokenKind.FIXED_ARRAY, TokenKind.ARRAY, TokenKind.TUPLE)


@dataclass(frozen=True)
class Token:
    """A single ABI value. Sequence tokens hold a tuple of tokens."""

    kind: TokenKind
    value: object

    @classmethod
    def address(cls, value: Address) -> "Token":
        return cls(TokenKind.ADDRESS, value)

    @classmethod
    def fixed_bytes(cls, value: bytes) -> "Token":
        return cls(TokenKind.FIXED_BYTES, bytes(value))

    @classmethod
    def bytes_(cls, value: bytes) -> "Token":
        return cls(TokenKind.BYTES, bytes(value))

    @classmethod
    def int_(cls, value: int) -> "Token":
        return cls(TokenKind.INT, value)

    @classmethod
    def uint(cls, value: int) -> "Token":
        return cls(TokenKind.UINT, value)

    @classmethod
    def bool_(cls, value: bool) -> "Token":
        return cls(TokenKind.BOOL, bool(value))

    @classmethod
    def string(cls, value: str) -> "Token":
        return cls(TokenKind.STRING, value)

    @classmethod
    def fixed_array(cls, items: Iterable["Token"]) -> "Token":
        return cls(TokenKind.FIXED_ARRAY, tuple(items))

    @classmethod
    def array(cls, items: Iterable["Token"]) -> "Token":
        return cls(TokenKind.ARRAY, tuple(items))

    @classmethod
    def tuple_(cls, items: Iterable["Token"]) -> "Token":
        return cls(TokenKind.TUPLE, tuple(items))

    @property
    def is_dynamic(self) -> bool:
        if self.kind in (TokenKind.BYTES, TokenKind.STRING, TokenKind.ARRAY):
            return True
        if self.kind in _SEQUENCES:
            return any(t.is_dynamic for t in self.value)
        return False

    def matches(self, kind: ParamType) -> bool:
        """Whether this token can be encoded as ``kind``."""
        k = self.kind
        if k is TokenKind.ADDRESS:
            return kind.kind is ParamKind.ADDRESS
        if k is TokenKind.BYTES:
            return kind.kind is ParamKind.BYTES
        if k in (TokenKind.INT, TokenKind.UINT):
            return kind.kind in (ParamKind.INT, ParamKind.UINT)
        if k is TokenKind.BOOL:
            return kind.kind is ParamKind.BOOL
        if k is TokenKind.STRING:
            return kind.kind is ParamKind.STRING
        if k is TokenKind.FIXED_BYTES:
            return kind.kind is ParamKind.FIXED_BYTES and len(self.value) <= kind.size
        if k is TokenKind.ARRAY:
            return kind.kind is ParamKind.ARRAY and all(t.matches(kind.inner) for t in self.value)
        if k is TokenKind.FIXED_ARRAY:
            return (
                kind.kind is ParamKind.FIXED_ARRAY
                and kind.size == len(self.value)
                and all(t.matches(kind.inner) for t in self.value)
            )
        return (
            kind.kind is ParamKind.TUPLE
            and len(kind.members) == len(self.value)
            and all(t.matches(m) for t, m in zip(self.value, kind.members))
        )


def _pad_right(data: bytes) -> bytes:
    return data + bytes(-len(data) % WORD)


def _word(value: int) -> bytes:
    return value.to_bytes(WORD, "big")


def _encode_one(token: Token) -> bytes:
    k, v = token.kind, token.value
    if k is TokenKind.ADDRESS:
        return bytes(12) + v.value
    if k in (TokenKind.INT, TokenKind.UINT):
        if not 0 <= v <= UINT256_MAX:
            raise AbiDecodeError(f"integer out of range: {v}")
        return _word(v)
    if k is TokenKind.BOOL:
        return _word(int(v))
    if k is TokenKind.FIXED_BYTES:
        return _pad_right(v)
    if k is TokenKind.BYTES:
        return _word(len(v)) + _pad_right(v)
    if k is TokenKind.STRING:
        raw = v.encode()
        return _word(len(raw)) + _pad_right(raw)
    if k is TokenKind.ARRAY:
        return _word(len(v)) + _encode_sequence(v)
    return _encode_sequence(v)


def _encode_sequence(tokens: Iterable[Token]) -> bytes:
    tokens = list(tokens)
    encoded = [_encode_one(t) for t in tokens]
    offset = sum(WORD if t.is_dynamic else len(e) for t, e in zip(tokens, encoded))
    head, tail = [], []
    for token, enc in zip(tokens, encoded):
        if token.is_dynamic:
            head.append(_word(offset))
            tail.append(enc)
            offset += len(enc)
        else:
            head.append(enc)
    return b"".join(head) + b"".join(tail)


def encode_tokens(tokens: Iterable[Token]) -> bytes:
    """ABI-encode a sequence of tokens as a top-level tuple."""
    return _encode_sequence(tokens)


def _read_word(data: bytes, pos: int) -> int:
    if pos < 0 or pos + WORD > len(data):
        raise AbiDecodeError("invalid data: unexpected end of input")
    return int.from_bytes(data[pos : pos + WORD], "big")


def _read_bytes(data: bytes, pos: int, length: int) -> bytes:
    if length > len(data) or pos + length > len(data):
        raise AbiDecodeError("invalid data: unexpected end of input")
    return data[pos : pos + length]


def _head_size(kind: ParamType) -> int:
    if kind.is_dynamic:
        return WORD
    if kind.kind is ParamKind.FIXED_ARRAY:
        return kind.size * _head_size(kind.inner)
    if kind.kind is ParamKind.TUPLE:
        return sum(_head_size(m) for m in kind.members)
    return WORD


def _decode_at(kind: ParamType, data: bytes, start: int) -> Token:
    k = kind.kind
    if k is ParamKind.ADDRESS:
        _read_word(data, start)
        return Token.address(Address(data[start + 12 : start + WORD]))
    if k is ParamKind.UINT:
        return Token.uint(_read_word(data, start))
    if k is ParamKind.INT:
        return Token.int_(_read_word(data, start))
    if k is ParamKind.BOOL:
        value = _read_word(data, start)
        if value not in (0, 1):
            raise AbiDecodeError("invalid data: bad boolean")
        return Token.bool_(bool(value))
    if k is ParamKind.FIXED_BYTES:
        _read_word(data, start)
        return Token.fixed_bytes(data[start : start + kind.size])
    if k in (ParamKind.BYTES, ParamKind.STRING):
        length = _read_word(data, start)
        raw = _read_bytes(data, start + WORD, length)
        if k is ParamKind.BYTES:
            return Token.bytes_(raw)
        return Token.string(raw.decode("utf-8", errors="replace"))
    if k is ParamKind.ARRAY:
        length = _read_word(data, start)
        if length > len(data):
            raise AbiDecodeError("invalid data: array length too large")
        return Token.array(_decode_sequence([kind.inner] * length, data, start + WORD))
    if k is ParamKind.FIXED_ARRAY:
        return Token.fixed_array(_decode_sequence([kind.inner] * kind.size, data, start))
    return Token.tuple_(_decode_sequence(kind.members, data, start))


def _decode_sequence(kinds: Iterable[ParamType], data: bytes, base: int) -> list[Token]:
    tokens, pos = [], base
    for kind in kinds:
        if kind.is_dynamic:
            tokens.append(_decode_at(kind, data, base + _read_word(data, pos)))
        else:
            tokens.append(_decode_at(kind, data, pos))
        pos += _head_size(kind)
    return tokens


def decode_tokens(kinds: Iterable[ParamType], data: bytes) -> list[Token]:
    """Decode ABI data into tokens of the given types."""
    return _decode_sequence(list(kinds), bytes(data), 0)


@dataclass(frozen=True)
class Param:
    name: str
    kind: ParamType


@dataclass(frozen=True)
class EventParam:
    name: str
    kind: ParamType
    indexed: bool


def _encode_checked(params: list, tokens: Iterable[Token]) -> bytes:
    tokens = list(tokens)
    if len(tokens) != len(params) or not all(
        t.matches(p.kind) for t, p in zip(tokens, params)
    ):
        raise AbiDecodeError("invalid data: tokens do not match parameter types")
    return encode_tokens(tokens)


@dataclass
class Function:
    """A contract function description."""

    name: str
    inputs: list[Param] = field(default_factory=list)
    outputs: list[Param] = field(default_factory=list)
    state_mutability: str = "nonpayable"

    def abi_signature(self) -> str:
        return f"{self.name}({','.join(str(p.kind) for p in self.inputs)})"

    def selector(self) -> bytes:
        return keccak256(self.abi_signature())[:4]

    def encode_input(self, tokens: Iterable[Token]) -> bytes:
        return self.selector() + _encode_checked(self.inputs, tokens)

    def decode_input(self, data: bytes) -> list[Token]:
        return decode_tokens([p.kind for p in self.inputs], data)

    def decode_output(self, data: bytes) -> list[Token]:
        return decode_tokens([p.kind for p in self.outputs], data)


@dataclass
class Constructor:
    inputs: list[Param] = field(default_factory=list)

    def encode_input(self, bytecode: bytes, tokens: Iterable[Token]) -> bytes:
        return bytes(bytecode) + _encode_checked(self.inputs, tokens)


def _topic_kind(kind: ParamType) -> ParamType:
    if kind.is_dynamic or kind.kind in (ParamKind.FIXED_ARRAY, ParamKind.TUPLE):
        return ParamType.fixed_bytes(32)
    return kind


@dataclass
class Event:
    """A contract event description."""

    name: str
    inputs: list[EventParam] = field(default_factory=list)
    anonymous: bool = False

    def abi_signature(self) -> str:
        types = ",".join(str(p.kind) for p in self.inputs)
        return f"{self.name}({types}){' anonymous' if self.anonymous else ''}"

    def signature(self) -> bytes:
        types = ",".join(str(p.kind) for p in self.inputs)
        return keccak256(f"{self.name}({types})")

    def parse_log(self, topics: Iterable[bytes], data: bytes) -> list[tuple[str, Token]]:
        """Decode a log into ``(name, token)`` pairs in parameter order."""
        topics = [bytes(t) for t in topics]
        if not self.anonymous:
            if not topics or topics[0] != self.signature():
                raise AbiDecodeError("invalid data: event signature mismatch")
            topics = topics[1:]
        indexed = [p for p in self.inputs if p.indexed]
        plain = [p for p in self.inputs if not p.indexed]
        if len(topics) != len(indexed):
            raise AbiDecodeError("invalid data: wrong number of topics")
        indexed_tokens = iter(decode_tokens([_topic_kind(p.kind) for p in indexed], b"".join(topics)))
        plain_tokens = iter(decode_tokens([p.kind for p in plain], data))
        return [
            (p.name, next(indexed_tokens) if p.indexed else next(plain_tokens))
            for p in self.inputs
        ]


@dataclass
class Abi:
    """A whole contract interface."""

    constructor: Optional[Constructor] = None
    functions: dict[str, list[Function]] = field(default_factory=dict)
    events: dict[str, list[Event]] = field(default_factory=dict)
    receive: bool = False
    fallback: bool = False

    def function(self, name: str) -> Function:
        try:
            return self.functions[name][0]
        except (KeyError, IndexError):
            raise AbiDecodeError(f"invalid name: {name}") from None

    def event(self, name: str) -> Event:
        try:
            return self.events[name][0]
        except (KeyError, IndexError):
            raise AbiDecodeError(f"invalid name: {name}") from None

    def all_functions(self) -> Iterator[Function]:
        for group in self.functions.values():
            yield from group

    def all_events(self) -> Iterator[Event]:
        for group in self.events.values():
            yield from group


def _kind_from_json(item: dict) -> ParamType:
    type_name = item["type"]
    if not type_name.startswith("tuple"):
        return parse_param_type(type_name)
    kind = ParamType.tuple_(_kind_from_json(c) for c in item.get("components", []))
    for size in re.findall(r"\[(\d*)\]", type_name[5:]):
        kind = ParamType.fixed_array(kind, int(size)) if size else ParamType.array(kind)
    return kind


def _params(items: list) -> list[Param]:
    return [Param(i.get("name", ""), _kind_from_json(i)) for i in items]


def abi_from_json(text: str) -> Abi:
    """Load an ABI from its JSON description."""
    try:
        items = json.loads(text)
    except json.JSONDecodeError as exc:
        raise AbiDecodeError(f"invalid ABI JSON: {exc}") from exc
    if not isinstance(items, list):
        raise AbiDecodeError("invalid ABI JSON: expected a list")
    abi = Abi()
    for item in items:
        item_type = item.get("type", "function")
        if item_type == "function":
            mutability = item.get("stateMutability") or ("view" if item.get("constant") else "nonpayable")
            fn = Function(item["name"], _params(item.get("inputs", [])), _params(item.get("outputs", [])), mutability)
            abi.functions.setdefault(fn.name, []).append(fn)
        elif item_type == "event":
            inputs = [
                EventParam(i.get("name", ""), _kind_from_json(i), bool(i.get("indexed", False)))
                for i in item.get("inputs", [])
            ]
            ev = Event(item["name"], inputs, bool(item.get("anonymous", False)))
            abi.events.setdefault(ev.name, []).append(ev)
        elif item_type == "constructor":
            abi.constructor = Constructor(_params(item.get("inputs", [])))
        elif item_type == "receive":
            abi.receive = True
        elif item_type == "fallback":
            abi.fallback = True
    return abi