"""Event log filters, queries and streams."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, AsyncIterable, Callable, Optional, Sequence, Union

from .abi import Address
from .abi import Event as AbiEvent
from .base import decode_event
from .call import BlockId, MiddlewareError, Middleware

TopicValue = Union[bytes, tuple]


def _as_topic(topic: object) -> Optional[TopicValue]:
    if topic is None:
        return None
    if isinstance(topic, Address):
        return bytes(12) + topic.value
    if isinstance(topic, (list, tuple)):
        return tuple(_as_topic(t) for t in topic)
    raw = bytes(topic)
    if len(raw) != 32:
        raise ValueError(f"topic must be 32 bytes, got {len(raw)}")
    return raw


@dataclass(frozen=True)
class Log:
    """A log entry as returned by a node."""

    topics: tuple[bytes, ...]
    data: bytes
    address: Optional[Address] = None
    block_number: Optional[int] = None
    transaction_hash: Optional[bytes] = None


@dataclass(frozen=True)
class Filter:
    """A log filter: address, block range and up to four topics."""

    address: Optional[Address] = None
    from_block: Optional[BlockId] = None
    to_block: Optional[BlockId] = None
    topics: tuple[Optional[TopicValue], ...] = (None, None, None, None)


@dataclass(frozen=True)
class LogMeta:
    """Where a log was emitted."""

    block_number: int
    transaction_hash: bytes

    @classmethod
    def from_log(cls, log: Log) -> "LogMeta":
        if log.block_number is None:
            raise ValueError("should have a block number")
        if log.transaction_hash is None:
            raise ValueError("should have a tx hash")
        return cls(log.block_number, log.transaction_hash)


class EventStream:
    """Async iterator that decodes each log of an underlying stream."""

    def __init__(self, id: int, stream: AsyncIterable[Log], parse: Callable[[Log], object]) -> None:
        self.id = id
        self.stream = stream
        self.parse = parse
        self._iterator = aiter(stream)

    def __aiter__(self) -> "EventStream":
        return self

    async def __anext__(self) -> object:
        log = await self._iterator.__anext__()
        return self.parse(log)


@dataclass(frozen=True)
class Event:
    """A filter for one contract event; builder methods return updated copies."""

    filter: Filter
    event: AbiEvent
    provider: Middleware
    kind: object = None

    def from_block(self, block: BlockId) -> "Event":
        return replace(self, filter=replace(self.filter, from_block=block))

    def to_block(self, block: BlockId) -> "Event":
        return replace(self, filter=replace(self.filter, to_block=block))

    def _with_topic(self, index: int, topic: object) -> "Event":
        topics = list(self.filter.topics)
        topics[index] = _as_topic(topic)
        return replace(self, filter=replace(self.filter, topics=tuple(topics)))

    def topic0(self, topic: object) -> "Event":
        return self._with_topic(0, topic)

    def topic1(self, topic: object) -> "Event":
        return self._with_topic(1, topic)

    def topic2(self, topic: object) -> "Event":
        return self._with_topic(2, topic)

    def topic3(self, topic: object) -> "Event":
        return self._with_topic(3, topic)

    async def stream(self) -> EventStream:
        """Watch the filter and stream decoded events."""
        with MiddlewareError.wrapping():
            watcher: Any = await self.provider.watch(self.filter)
        return EventStream(watcher.id, watcher, self.parse_log)

    async def subscribe(self) -> EventStream:
        """Subscribe to matching logs and stream decoded events."""
        with MiddlewareError.wrapping():
            subscription: Any = await self.provider.subscribe_logs(self.filter)
        return EventStream(subscription.id, subscription, self.parse_log)

    async def _logs(self) -> Sequence[Log]:
        with MiddlewareError.wrapping():
            return await self.provider.get_logs(self.filter)

    async def query(self) -> list[object]:
        """Fetch and decode all logs matching the filter."""
        return [self.parse_log(log) for log in await self._logs()]

    async def query_with_meta(self) -> list[tuple[object, LogMeta]]:
        """Fetch matching logs, decoded, each with its block and transaction."""
        results = []
        for log in await self._logs():
            meta = LogMeta.from_log(log)
            results.append((self.parse_log(log), meta))
        return results

    def parse_log(self, log: Log) -> object:
        return decode_event(self.event, log.topics, log.data, self.kind)