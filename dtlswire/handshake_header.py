"""Handshake message header, hello random and cipher suite id lists."""

from __future__ import annotations

import enum
import secrets
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union

from .errors import TemporaryError

HEADER_LENGTH = 12
RANDOM_BYTES_LENGTH = 28
RANDOM_LENGTH = RANDOM_BYTES_LENGTH + 4


class HandshakeType(enum.IntEnum):
    """Identifier of each handshake message."""

    HELLO_REQUEST = 0
    CLIENT_HELLO = 1
    SERVER_HELLO = 2
    HELLO_VERIFY_REQUEST = 3
    CERTIFICATE = 11
    SERVER_KEY_EXCHANGE = 12
    CERTIFICATE_REQUEST = 13
    SERVER_HELLO_DONE = 14
    CERTIFICATE_VERIFY = 15
    CLIENT_KEY_EXCHANGE = 16
    FINISHED = 20

    def __str__(self) -> str:
        return _TYPE_NAMES[self]


_TYPE_NAMES = {
    HandshakeType.HELLO_REQUEST: "HelloRequest",
    HandshakeType.CLIENT_HELLO: "ClientHello",
    HandshakeType.SERVER_HELLO: "ServerHello",
    HandshakeType.HELLO_VERIFY_REQUEST: "HelloVerifyRequest",
    HandshakeType.CERTIFICATE: "TypeCertificate",
    HandshakeType.SERVER_KEY_EXCHANGE: "ServerKeyExchange",
    HandshakeType.CERTIFICATE_REQUEST: "CertificateRequest",
    HandshakeType.SERVER_HELLO_DONE: "ServerHelloDone",
    HandshakeType.CERTIFICATE_VERIFY: "CertificateVerify",
    HandshakeType.CLIENT_KEY_EXCHANGE: "ClientKeyExchange",
    HandshakeType.FINISHED: "Finished",
}


def _to_type(value: int) -> Union[HandshakeType, int]:
    try:
        return HandshakeType(value)
    except ValueError:
        return value


def _u24(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 3], "big")


def _pack_u24(value: int) -> bytes:
    return (value & 0xFFFFFF).to_bytes(3, "big")


@dataclass(frozen=True)
class HandshakeHeader:
    """The fixed twelve bytes in front of every handshake message."""

    type: Union[HandshakeType, int] = HandshakeType.HELLO_REQUEST
    length: int = 0
    message_sequence: int = 0
    fragment_offset: int = 0
    fragment_length: int = 0

    def marshal(self) -> bytes:
        return (
            bytes([int(self.type) & 0xFF])
            + _pack_u24(self.length)
            + (self.message_sequence & 0xFFFF).to_bytes(2, "big")
            + _pack_u24(self.fragment_offset)
            + _pack_u24(self.fragment_length)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> HandshakeHeader:
        data = bytes(data)
        if len(data) < HEADER_LENGTH:
            raise TemporaryError("buffer is too small")
        return cls(
            type=_to_type(data[0]),
            length=_u24(data, 1),
            message_sequence=int.from_bytes(data[4:6], "big"),
            fragment_offset=_u24(data, 6),
            fragment_length=_u24(data, 9),
        )


@dataclass(frozen=True)
class Random:
    """The random value of ClientHello and ServerHello."""

    gmt_unix_time: int = 0
    random_bytes: bytes = bytes(RANDOM_BYTES_LENGTH)

    def __post_init__(self) -> None:
        raw = bytes(self.random_bytes)
        if len(raw) != RANDOM_BYTES_LENGTH:
            raise ValueError(f"random bytes must be {RANDOM_BYTES_LENGTH} bytes long")
        object.__setattr__(self, "random_bytes", raw)

    def marshal_fixed(self) -> bytes:
        """Encode as four bytes of time followed by the random bytes."""
        return (self.gmt_unix_time & 0xFFFFFFFF).to_bytes(4, "big") + self.random_bytes

    @classmethod
    def unmarshal_fixed(cls, data: bytes) -> Random:
        data = bytes(data)
        if len(data) != RANDOM_LENGTH:
            raise ValueError(f"random value must be {RANDOM_LENGTH} bytes long")
        return cls(int.from_bytes(data[:4], "big"), data[4:])

    @classmethod
    def generate(cls) -> Random:
        """Create a random value stamped with the current time."""
        return cls(int(time.time()), secrets.token_bytes(RANDOM_BYTES_LENGTH))


def decode_cipher_suite_ids(buf: bytes) -> list[int]:
    """Decode a two-byte length-prefixed list of cipher suite ids."""
    buf = bytes(buf)
    if len(buf) < 2:
        raise TemporaryError("buffer is too small")
    count = int.from_bytes(buf[:2], "big") // 2
    if len(buf) < count * 2 + 2:
        raise TemporaryError("buffer is too small")
    return [int.from_bytes(buf[2 + i * 2 : 4 + i * 2], "big") for i in range(count)]


def encode_cipher_suite_ids(ids: Iterable[int]) -> bytes:
    """Encode cipher suite ids behind their two-byte total length."""
    values = list(ids)
    return ((len(values) * 2) & 0xFFFF).to_bytes(2, "big") + b"".join(
        (int(v) & 0xFFFF).to_bytes(2, "big") for v in values
    )