"""The DTLS record layer: record headers, records and datagram unpacking."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Union

from .alert import Alert
from .errors import FatalError, InternalError, TemporaryError
from .handshake import Handshake
from .protocol import (
    VERSION_1_0,
    VERSION_1_2,
    ApplicationData,
    ChangeCipherSpec,
    ContentType,
    Version,
)

HEADER_SIZE = 13
MAX_SEQUENCE_NUMBER = 0x0000FFFFFFFFFFFF

RecordContent = Union[ChangeCipherSpec, Alert, Handshake, ApplicationData]

_CONTENT_CLASSES: dict[int, type] = {
    ContentType.CHANGE_CIPHER_SPEC: ChangeCipherSpec,
    ContentType.ALERT: Alert,
    ContentType.HANDSHAKE: Handshake,
    ContentType.APPLICATION_DATA: ApplicationData,
}


def _too_small() -> TemporaryError:
    return TemporaryError("buffer is too small")


def _invalid_packet_length() -> TemporaryError:
    return TemporaryError("packet length and declared length do not match")


def _to_content_type(value: int) -> Union[ContentType, int]:
    try:
        return ContentType(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class RecordHeader:
    """The thirteen byte header in front of every DTLS record."""

    content_type: Union[ContentType, int] = ContentType.CHANGE_CIPHER_SPEC
    content_len: int = 0
    version: Version = VERSION_1_2
    epoch: int = 0
    sequence_number: int = 0

    def marshal(self) -> bytes:
        if self.sequence_number > MAX_SEQUENCE_NUMBER:
            raise InternalError("sequence number overflow")
        return (
            bytes([int(self.content_type) & 0xFF, self.version.major, self.version.minor])
            + (self.epoch & 0xFFFF).to_bytes(2, "big")
            + self.sequence_number.to_bytes(6, "big")
            + (self.content_len & 0xFFFF).to_bytes(2, "big")
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> RecordHeader:
        """Decode a header; the content length field is left at zero."""
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise _too_small()
        version = Version(data[1], data[2])
        header = cls(
            content_type=_to_content_type(data[0]),
            version=version,
            epoch=int.from_bytes(data[3:5], "big"),
            sequence_number=int.from_bytes(data[5:11], "big"),
        )
        if version != VERSION_1_0 and version != VERSION_1_2:
            raise FatalError("unsupported protocol version")
        return header


@dataclass(frozen=True)
class RecordLayer:
    """A single DTLS record: a header and the content it carries."""

    header: RecordHeader = field(default_factory=RecordHeader)
    content: Optional[RecordContent] = None

    def marshal(self) -> bytes:
        """Encode the record; length and content type come from the content."""
        if self.content is None:
            raise InternalError("record content unset, unable to marshal")
        body = self.content.marshal()
        header = replace(
            self.header,
            content_len=len(body),
            content_type=self.content.content_type(),
        )
        return header.marshal() + body

    @classmethod
    def unmarshal(cls, data: bytes) -> RecordLayer:
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise _too_small()
        header = RecordHeader.unmarshal(data)
        content_cls = _CONTENT_CLASSES.get(data[0])
        if content_cls is None:
            raise TemporaryError("invalid content type")
        return cls(header, content_cls.unmarshal(data[HEADER_SIZE:]))


def unpack_datagram(buf: bytes) -> list[bytes]:
    """Split a datagram into the raw records it holds."""
    buf = bytes(buf)
    records: list[bytes] = []
    offset = 0
    while offset != len(buf):
        if len(buf) - offset <= HEADER_SIZE:
            raise _invalid_packet_length()
        packet_length = HEADER_SIZE + int.from_bytes(buf[offset + 11 : offset + 13], "big")
        if offset + packet_length > len(buf):
            raise _invalid_packet_length()
        records.append(buf[offset : offset + packet_length])
        offset += packet_length
    return records