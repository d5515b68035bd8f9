"""The handshake content type: a header followed by one handshake message."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Union

from .errors import InternalError
from .handshake_header import HEADER_LENGTH, HandshakeHeader, HandshakeType
from .hello_messages import (
    MessageClientHello,
    MessageFinished,
    MessageHelloVerifyRequest,
    MessageServerHello,
    MessageServerHelloDone,
)
from .key_messages import (
    MessageCertificate,
    MessageCertificateRequest,
    MessageCertificateVerify,
    MessageClientKeyExchange,
    MessageServerKeyExchange,
)
from .protocol import ContentType

HandshakeMessage = Union[
    MessageClientHello,
    MessageHelloVerifyRequest,
    MessageServerHello,
    MessageServerHelloDone,
    MessageFinished,
    MessageCertificate,
    MessageCertificateRequest,
    MessageCertificateVerify,
    MessageClientKeyExchange,
    MessageServerKeyExchange,
]

_MESSAGE_CLASSES: dict[int, type] = {
    HandshakeType.CLIENT_HELLO: MessageClientHello,
    HandshakeType.HELLO_VERIFY_REQUEST: MessageHelloVerifyRequest,
    HandshakeType.SERVER_HELLO: MessageServerHello,
    HandshakeType.CERTIFICATE: MessageCertificate,
    HandshakeType.SERVER_KEY_EXCHANGE: MessageServerKeyExchange,
    HandshakeType.CERTIFICATE_REQUEST: MessageCertificateRequest,
    HandshakeType.SERVER_HELLO_DONE: MessageServerHelloDone,
    HandshakeType.CLIENT_KEY_EXCHANGE: MessageClientKeyExchange,
    HandshakeType.FINISHED: MessageFinished,
    HandshakeType.CERTIFICATE_VERIFY: MessageCertificateVerify,
}


def _length_mismatch() -> InternalError:
    return InternalError("data length and declared length do not match")


@dataclass(frozen=True)
class Handshake:
    """A handshake message together with its DTLS handshake header."""

    header: HandshakeHeader = field(default_factory=HandshakeHeader)
    message: Optional[HandshakeMessage] = None

    def content_type(self) -> ContentType:
        return ContentType.HANDSHAKE

    def marshal(self) -> bytes:
        """Encode header and message; lengths and type come from the message."""
        if self.message is None:
            raise InternalError("handshake message unset, unable to marshal")
        if self.header.fragment_offset != 0:
            raise InternalError("unable to marshal fragmented handshakes")

        body = self.message.marshal()
        header = replace(
            self.header,
            type=self.message.handshake_type,
            length=len(body),
            fragment_length=len(body),
        )
        return header.marshal() + body

    @classmethod
    def unmarshal(cls, data: bytes) -> Handshake:
        data = bytes(data)
        header = HandshakeHeader.unmarshal(data)

        reported_length = int.from_bytes(data[1:4], "big")
        if len(data) - HEADER_LENGTH != reported_length:
            raise _length_mismatch()
        if reported_length != header.fragment_length:
            raise _length_mismatch()

        message_cls = _MESSAGE_CLASSES.get(data[0])
        if message_cls is None:
            raise InternalError("feature has not been implemented yet")
        return cls(header, message_cls.unmarshal(data[HEADER_LENGTH:]))