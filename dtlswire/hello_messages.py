"""Hello, hello-verify, hello-done and finished handshake messages."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from .errors import FatalError, TemporaryError
from .extension import Extension, marshal_extensions, unmarshal_extensions
from .handshake_header import (
    RANDOM_LENGTH,
    HandshakeType,
    Random,
    decode_cipher_suite_ids,
    encode_cipher_suite_ids,
)
from .protocol import (
    VERSION_1_2,
    CompressionMethod,
    Version,
    compression_methods,
    decode_compression_methods,
    encode_compression_methods,
)

_VARIABLE_WIDTH_START = 2 + RANDOM_LENGTH
_MAX_COOKIE_LENGTH = 255


def _too_small() -> TemporaryError:
    return TemporaryError("buffer is too small")


def _cookie_too_long() -> FatalError:
    return FatalError("cookie must not be longer then 255 bytes")


@dataclass(frozen=True)
class MessageClientHello:
    """The first message a client sends, offering its parameters."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CLIENT_HELLO

    version: Version = VERSION_1_2
    random: Random = field(default_factory=Random)
    cookie: bytes = b""
    cipher_suite_ids: Sequence[int] = ()
    compression_methods: Sequence[CompressionMethod] = ()
    extensions: Sequence[Extension] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "cookie", bytes(self.cookie))
        object.__setattr__(self, "cipher_suite_ids", tuple(self.cipher_suite_ids))
        object.__setattr__(self, "compression_methods", tuple(self.compression_methods))
        object.__setattr__(self, "extensions", tuple(self.extensions))

    def marshal(self) -> bytes:
        if len(self.cookie) > _MAX_COOKIE_LENGTH:
            raise _cookie_too_long()
        return (
            bytes([self.version.major, self.version.minor])
            + self.random.marshal_fixed()
            + b"\x00"  # session id
            + bytes([len(self.cookie)])
            + self.cookie
            + encode_cipher_suite_ids(self.cipher_suite_ids)
            + encode_compression_methods(list(self.compression_methods))
            + marshal_extensions(self.extensions)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageClientHello:
        data = bytes(data)
        if len(data) <= _VARIABLE_WIDTH_START:
            raise _too_small()
        version = Version(data[0], data[1])
        random = Random.unmarshal_fixed(data[2:_VARIABLE_WIDTH_START])

        offset = _VARIABLE_WIDTH_START + data[_VARIABLE_WIDTH_START] + 1
        offset += 1
        if len(data) <= offset:
            raise _too_small()
        cookie_length = data[offset - 1]
        if len(data) <= offset + cookie_length:
            raise _too_small()
        cookie = data[offset : offset + cookie_length]
        offset += cookie_length

        cipher_suite_ids = decode_cipher_suite_ids(data[offset:])
        if len(data) < offset + 2:
            raise _too_small()
        offset += int.from_bytes(data[offset : offset + 2], "big") + 2

        if len(data) < offset:
            raise _too_small()
        methods = decode_compression_methods(data[offset:])
        offset += data[offset] + 1

        extensions = unmarshal_extensions(data[offset:])
        return cls(version, random, cookie, cipher_suite_ids, methods, extensions)


@dataclass(frozen=True)
class MessageHelloVerifyRequest:
    """A server's request that the client repeat its hello with a cookie."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.HELLO_VERIFY_REQUEST

    version: Version = VERSION_1_2
    cookie: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "cookie", bytes(self.cookie))

    def marshal(self) -> bytes:
        if len(self.cookie) > _MAX_COOKIE_LENGTH:
            raise _cookie_too_long()
        return bytes([self.version.major, self.version.minor, len(self.cookie)]) + self.cookie

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageHelloVerifyRequest:
        data = bytes(data)
        if len(data) < 3:
            raise _too_small()
        cookie_length = data[2]
        if len(data) < cookie_length + 3:
            raise _too_small()
        return cls(Version(data[0], data[1]), data[3 : 3 + cookie_length])


@dataclass(frozen=True)
class MessageServerHello:
    """The server's answer to a ClientHello with the chosen parameters."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.SERVER_HELLO

    version: Version = VERSION_1_2
    random: Random = field(default_factory=Random)
    cipher_suite_id: Optional[int] = None
    compression_method: Optional[CompressionMethod] = None
    extensions: Sequence[Extension] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "extensions", tuple(self.extensions))

    def marshal(self) -> bytes:
        if self.cipher_suite_id is None:
            raise FatalError("server hello can not be created without a cipher suite")
        if self.compression_method is None:
            raise FatalError(
                "server hello can not be created without a compression method"
            )
        return (
            bytes([self.version.major, self.version.minor])
            + self.random.marshal_fixed()
            + b"\x00"  # session id
            + (self.cipher_suite_id & 0xFFFF).to_bytes(2, "big")
            + bytes([int(self.compression_method.id)])
            + marshal_extensions(self.extensions)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageServerHello:
        data = bytes(data)
        if len(data) <= _VARIABLE_WIDTH_START:
            raise _too_small()
        version = Version(data[0], data[1])
        random = Random.unmarshal_fixed(data[2:_VARIABLE_WIDTH_START])

        offset = _VARIABLE_WIDTH_START + data[_VARIABLE_WIDTH_START] + 1
        if len(data) < offset + 2:
            raise _too_small()
        cipher_suite_id = int.from_bytes(data[offset : offset + 2], "big")
        offset += 2

        if len(data) <= offset:
            raise _too_small()
        method = compression_methods().get(data[offset])
        if method is None:
            raise FatalError("invalid or unknown compression method")
        offset += 1

        extensions = unmarshal_extensions(data[offset:]) if len(data) > offset else []
        return cls(version, random, cipher_suite_id, method, extensions)


@dataclass(frozen=True)
class MessageServerHelloDone:
    """Marks the end of the server's hello flight."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.SERVER_HELLO_DONE

    def marshal(self) -> bytes:
        return b""

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageServerHelloDone:
        return cls()


@dataclass(frozen=True)
class MessageFinished:
    """The first message protected with the negotiated keys."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.FINISHED

    verify_data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "verify_data", bytes(self.verify_data))

    def marshal(self) -> bytes:
        return self.verify_data

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageFinished:
        return cls(bytes(data))