"""
Explicit kinds for request payloads and response sinks.

A payload is Absent, RawBytes or Structured; a sink is Discard, RawSink or
Structured. The dispatcher always passes one of these. Lower-level callers
may pass plain values, which ``as_payload`` and ``as_sink`` classify:

    payload                         sink
    None       -> Absent            None         -> Discard
    bytes/IO   -> RawBytes          has write()  -> RawSink
    other      -> Structured        other        -> Structured
"""

from dataclasses import dataclass
from typing import Any, BinaryIO, Generic, Protocol, TypeVar, Union

T = TypeVar("T")

RawSource = Union[bytes, bytearray, memoryview, BinaryIO]


class SupportsWrite(Protocol):
    def write(self, data: bytes) -> Any:
        ...


@dataclass(frozen=True)
class Absent:
    """No request body."""


@dataclass(frozen=True)
class RawBytes:
    """A request body sent verbatim, without a Content-Type."""

    source: RawSource

    def read(self) -> bytes:
        if isinstance(self.source, (bytes, bytearray, memoryview)):
            return bytes(self.source)
        return self.source.read()


@dataclass(frozen=True)
class Structured(Generic[T]):
    """A value serialized to JSON on the way out, or decoded into on the way in."""

    value: T


@dataclass(frozen=True)
class Discard:
    """Drain the response body and drop it."""


@dataclass(frozen=True)
class RawSink:
    """Copy the response body verbatim into a writer."""

    writer: SupportsWrite


ABSENT = Absent()
DISCARD = Discard()

Payload = Union[Absent, RawBytes, Structured]
Sink = Union[Discard, RawSink, Structured]


def _is_raw_source(value: Any) -> bool:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return True
    return callable(getattr(value, "read", None))


def as_payload(value: Any) -> Payload:
    """Classify a plain value as a payload kind."""
    if isinstance(value, (Absent, RawBytes, Structured)):
        return value
    if value is None:
        return ABSENT
    if _is_raw_source(value):
        return RawBytes(value)
    return Structured(value)


def as_sink(value: Any) -> Sink:
    """Classify a plain value as a sink kind."""
    if isinstance(value, (Discard, RawSink, Structured)):
        return value
    if value is None:
        return DISCARD
    if callable(getattr(value, "write", None)):
        return RawSink(value)
    return Structured(value)
