"""Core DTLS wire types: content types, versions and simple content messages."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass

from .errors import FatalError, TemporaryError


class ContentType(enum.IntEnum):
    """IANA registered record content types."""

    CHANGE_CIPHER_SPEC = 20
    ALERT = 21
    HANDSHAKE = 22
    APPLICATION_DATA = 23


@dataclass(frozen=True)
class Version:
    """The major/minor protocol version carried in records and hellos."""

    major: int
    minor: int

    def __str__(self) -> str:
        return f"DLTSv{0xFF - self.major}.{0xFF - self.minor}"

    def to_json(self) -> str:
        """Encode the version as a JSON object with its name and numeric value."""
        return json.dumps(
            {"name": str(self), "version": (self.major << 8) | self.minor},
            separators=(",", ":"),
        )


VERSION_1_0 = Version(major=0xFE, minor=0xFF)
VERSION_1_2 = Version(major=0xFE, minor=0xFD)


@dataclass(frozen=True)
class ChangeCipherSpec:
    """Signals a transition in ciphering strategy; a single byte of value 1."""

    def content_type(self) -> ContentType:
        return ContentType.CHANGE_CIPHER_SPEC

    def marshal(self) -> bytes:
        return b"\x01"

    @classmethod
    def unmarshal(cls, data: bytes) -> ChangeCipherSpec:
        if bytes(data) == b"\x01":
            return cls()
        raise FatalError("cipher spec invalid")


@dataclass(frozen=True)
class ApplicationData:
    """Opaque application payload carried by the record layer."""

    data: bytes = b""

    def content_type(self) -> ContentType:
        return ContentType.APPLICATION_DATA

    def marshal(self) -> bytes:
        return bytes(self.data)

    @classmethod
    def unmarshal(cls, data: bytes) -> ApplicationData:
        return cls(bytes(data))


class CompressionMethodID(enum.IntEnum):
    """Identifier of a TLS compression method."""

    NULL = 0


@dataclass(frozen=True)
class CompressionMethod:
    """A TLS compression method."""

    id: CompressionMethodID = CompressionMethodID.NULL


def compression_methods() -> dict[CompressionMethodID, CompressionMethod]:
    """Return all supported compression methods keyed by identifier."""
    return {CompressionMethodID.NULL: CompressionMethod(CompressionMethodID.NULL)}


def decode_compression_methods(buf: bytes) -> list[CompressionMethod]:
    """Decode a length-prefixed list, keeping only supported methods."""
    if len(buf) < 1:
        raise TemporaryError("buffer is too small")
    count = buf[0]
    if len(buf) < count + 1:
        raise TemporaryError("buffer is too small")
    supported = compression_methods()
    return [supported[b] for b in buf[1 : count + 1] if b in supported]


def encode_compression_methods(methods: list[CompressionMethod]) -> bytes:
    """Encode methods as a count byte followed by their ids in reverse order."""
    return bytes([len(methods)]) + bytes(int(m.id) for m in reversed(methods))