"""The TLS alert protocol."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from .errors import TemporaryError
from .protocol import ContentType


class Level(enum.IntEnum):
    """Severity of an alert."""

    WARNING = 1
    FATAL = 2

    def __str__(self) -> str:
        return self.name.capitalize()


class Description(enum.IntEnum):
    """Reason given by an alert."""

    CLOSE_NOTIFY = 0
    UNEXPECTED_MESSAGE = 10
    BAD_RECORD_MAC = 20
    DECRYPTION_FAILED = 21
    RECORD_OVERFLOW = 22
    DECOMPRESSION_FAILURE = 30
    HANDSHAKE_FAILURE = 40
    NO_CERTIFICATE = 41
    BAD_CERTIFICATE = 42
    UNSUPPORTED_CERTIFICATE = 43
    CERTIFICATE_REVOKED = 44
    CERTIFICATE_EXPIRED = 45
    CERTIFICATE_UNKNOWN = 46
    ILLEGAL_PARAMETER = 47
    UNKNOWN_CA = 48
    ACCESS_DENIED = 49
    DECODE_ERROR = 50
    DECRYPT_ERROR = 51
    EXPORT_RESTRICTION = 60
    PROTOCOL_VERSION = 70
    INSUFFICIENT_SECURITY = 71
    INTERNAL_ERROR = 80
    USER_CANCELED = 90
    NO_RENEGOTIATION = 100
    UNSUPPORTED_EXTENSION = 110

    def __str__(self) -> str:
        if self is Description.UNKNOWN_CA:
            return "UnknownCA"
        return "".join(part.capitalize() for part in self.name.split("_"))


def _to_level(value: int) -> Union[Level, int]:
    try:
        return Level(value)
    except ValueError:
        return value


def _to_description(value: int) -> Union[Description, int]:
    try:
        return Description(value)
    except ValueError:
        return value


def _level_label(level: Union[Level, int]) -> str:
    return str(level) if isinstance(level, Level) else "Invalid alert level"


def _description_label(description: Union[Description, int]) -> str:
    if isinstance(description, Description):
        return str(description)
    return "Invalid alert description"


@dataclass(frozen=True)
class Alert:
    """An alert message: a severity level and a description."""

    level: Union[Level, int]
    description: Union[Description, int]

    def content_type(self) -> ContentType:
        return ContentType.ALERT

    def marshal(self) -> bytes:
        return bytes([int(self.level), int(self.description)])

    @classmethod
    def unmarshal(cls, data: bytes) -> Alert:
        if len(data) != 2:
            raise TemporaryError("buffer is too small")
        return cls(_to_level(data[0]), _to_description(data[1]))

    def __str__(self) -> str:
        return f"Alert {_level_label(self.level)}: {_description_label(self.description)}"