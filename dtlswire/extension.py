"""Hello extensions carried in ClientHello and ServerHello messages."""

from __future__ import annotations

import abc
import base64
import enum
import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import ClassVar, Optional

from .errors import FatalError, InternalError, TemporaryError
from .srtp import SRTPProtectionProfile


class ExtensionType(enum.IntEnum):
    """Two-byte IANA value identifying a TLS extension."""

    SERVER_NAME = 0
    STATUS_REQUEST = 5
    SUPPORTED_ELLIPTIC_CURVES = 10
    SUPPORTED_POINT_FORMATS = 11
    SUPPORTED_SIGNATURE_ALGORITHMS = 13
    USE_SRTP = 14
    USE_HEARTBEAT = 15
    USE_EXTENDED_MASTER_SECRET = 23
    SESSION_TICKET = 35
    RENEGOTIATION_INFO = 65281


class Curve(enum.IntEnum):
    """Named elliptic curves this package supports."""

    P256 = 0x0017
    P384 = 0x0018
    X25519 = 0x001D


class CurveType(enum.IntEnum):
    """How the curve parameters of a key exchange are given."""

    NAMED_CURVE = 0x03


class CurvePointFormat(enum.IntEnum):
    """Encoding of elliptic curve points."""

    UNCOMPRESSED = 0


class HashAlgorithm(enum.IntEnum):
    """Hash algorithms of the signature_algorithms registry."""

    NONE = 0
    MD5 = 1
    SHA1 = 2
    SHA224 = 3
    SHA256 = 4
    SHA384 = 5
    SHA512 = 6
    ED25519 = 8


class SignatureAlgorithm(enum.IntEnum):
    """Signature algorithms of the signature_algorithms registry."""

    ANONYMOUS = 0
    RSA = 1
    ECDSA = 3
    ED25519 = 7


@dataclass(frozen=True)
class SignatureHashAlgorithm:
    """A pairing of a hash algorithm and a signature algorithm."""

    hash: HashAlgorithm
    signature: SignatureAlgorithm


_CURVES = frozenset(Curve)
_HASHES = frozenset(HashAlgorithm)
_SIGNATURES = frozenset(SignatureAlgorithm)
_SRTP_PROFILES = frozenset(SRTPProtectionProfile)

_SERVER_NAME_TYPE_DNS_HOST_NAME = 0


def _too_small() -> TemporaryError:
    return TemporaryError("buffer is too small")


def _invalid_type() -> FatalError:
    return FatalError("invalid extension type")


def _invalid_sni() -> FatalError:
    return FatalError("invalid server name format")


def _length_mismatch() -> InternalError:
    return InternalError("data length and declared length do not match")


def _u16(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 2], "big")


def _pack_u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "big")


def _check_header(data: bytes, ext_type: ExtensionType, minimum: int) -> None:
    """Require more than ``minimum`` bytes and the expected extension type."""
    if len(data) <= minimum:
        raise _too_small()
    if _u16(data, 0) != ext_type:
        raise _invalid_type()


def _read_u16_prefixed(data: bytes, pos: int) -> Optional[tuple[bytes, int]]:
    if pos + 2 > len(data):
        return None
    length = _u16(data, pos)
    end = pos + 2 + length
    if end > len(data):
        return None
    return data[pos + 2 : end], end


def _u16_prefixed(body: bytes) -> bytes:
    if len(body) > 0xFFFF:
        raise ValueError("length-prefixed field exceeds 65535 bytes")
    return _pack_u16(len(body)) + body


class Extension(abc.ABC):
    """A single TLS hello extension."""

    type_value: ClassVar[ExtensionType]

    @abc.abstractmethod
    def marshal(self) -> bytes:
        """Encode the extension, header included."""

    @classmethod
    @abc.abstractmethod
    def unmarshal(cls, data: bytes) -> Extension:
        """Decode the extension from data starting at its header."""


@dataclass(frozen=True)
class ServerName(Extension):
    """The host name the client wishes to contact (SNI)."""

    type_value: ClassVar[ExtensionType] = ExtensionType.SERVER_NAME

    server_name: str = ""

    def marshal(self) -> bytes:
        name = self.server_name.encode("utf-8", "surrogateescape")
        entry = bytes([_SERVER_NAME_TYPE_DNS_HOST_NAME]) + _u16_prefixed(name)
        return _pack_u16(self.type_value) + _u16_prefixed(_u16_prefixed(entry))

    @classmethod
    def unmarshal(cls, data: bytes) -> ServerName:
        data = bytes(data)
        ext_type = _u16(data, 0) if len(data) >= 2 else 0
        if ext_type != cls.type_value:
            raise _invalid_type()
        read = _read_u16_prefixed(data, 2)
        ext_data = read[0] if read is not None else b""

        read = _read_u16_prefixed(ext_data, 0)
        if read is None or not read[0]:
            raise _invalid_sni()
        name_list = read[0]

        server_name = ""
        pos = 0
        while pos < len(name_list):
            name_type = name_list[pos]
            read = _read_u16_prefixed(name_list, pos + 1)
            if read is None or not read[0]:
                raise _invalid_sni()
            raw_name, pos = read
            if name_type != _SERVER_NAME_TYPE_DNS_HOST_NAME:
                continue
            if server_name:
                raise _invalid_sni()
            server_name = raw_name.decode("utf-8", "surrogateescape")
            if server_name.endswith("."):
                raise _invalid_sni()
        return cls(server_name)


@dataclass(frozen=True)
class SupportedEllipticCurves(Extension):
    """The elliptic curves a peer supports."""

    type_value: ClassVar[ExtensionType] = ExtensionType.SUPPORTED_ELLIPTIC_CURVES

    elliptic_curves: Sequence[Curve] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "elliptic_curves", tuple(self.elliptic_curves))

    def marshal(self) -> bytes:
        size = len(self.elliptic_curves) * 2
        return (
            _pack_u16(self.type_value)
            + _pack_u16(2 + size)
            + _pack_u16(size)
            + b"".join(_pack_u16(int(c)) for c in self.elliptic_curves)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> SupportedEllipticCurves:
        data = bytes(data)
        _check_header(data, cls.type_value, 6)
        count = _u16(data, 4) // 2
        if 6 + count * 2 > len(data):
            raise _length_mismatch()
        ids = (_u16(data, 6 + i * 2) for i in range(count))
        return cls(tuple(Curve(v) for v in ids if v in _CURVES))


@dataclass(frozen=True)
class SupportedPointFormats(Extension):
    """The elliptic curve point formats a peer supports."""

    type_value: ClassVar[ExtensionType] = ExtensionType.SUPPORTED_POINT_FORMATS

    point_formats: Sequence[CurvePointFormat] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "point_formats", tuple(self.point_formats))

    def marshal(self) -> bytes:
        count = len(self.point_formats)
        return (
            _pack_u16(self.type_value)
            + _pack_u16(1 + count)
            + bytes([count & 0xFF])
            + bytes(int(p) for p in self.point_formats)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> SupportedPointFormats:
        data = bytes(data)
        _check_header(data, cls.type_value, 5)
        # The count is read as two bytes starting at the one-byte count field.
        count = _u16(data, 4)
        if 6 + count > len(data):
            raise _length_mismatch()
        formats = tuple(
            CurvePointFormat(b)
            for b in data[5 : 5 + count]
            if b == CurvePointFormat.UNCOMPRESSED
        )
        return cls(formats)


@dataclass(frozen=True)
class SupportedSignatureAlgorithms(Extension):
    """The signature/hash pairs a peer supports."""

    type_value: ClassVar[ExtensionType] = ExtensionType.SUPPORTED_SIGNATURE_ALGORITHMS

    signature_hash_algorithms: Sequence[SignatureHashAlgorithm] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "signature_hash_algorithms", tuple(self.signature_hash_algorithms)
        )

    def marshal(self) -> bytes:
        size = len(self.signature_hash_algorithms) * 2
        return (
            _pack_u16(self.type_value)
            + _pack_u16(2 + size)
            + _pack_u16(size)
            + b"".join(
                bytes([int(a.hash), int(a.signature)])
                for a in self.signature_hash_algorithms
            )
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> SupportedSignatureAlgorithms:
        data = bytes(data)
        _check_header(data, cls.type_value, 6)
        count = _u16(data, 4) // 2
        if 6 + count * 2 > len(data):
            raise _length_mismatch()
        pairs = zip(data[6 : 6 + count * 2 : 2], data[7 : 7 + count * 2 : 2])
        algorithms = tuple(
            SignatureHashAlgorithm(HashAlgorithm(h), SignatureAlgorithm(s))
            for h, s in pairs
            if h in _HASHES and s in _SIGNATURES
        )
        return cls(algorithms)


@dataclass(frozen=True)
class UseSRTP(Extension):
    """The SRTP protection profiles a peer supports."""

    type_value: ClassVar[ExtensionType] = ExtensionType.USE_SRTP

    protection_profiles: Sequence[SRTPProtectionProfile] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "protection_profiles", tuple(self.protection_profiles))

    def marshal(self) -> bytes:
        size = len(self.protection_profiles) * 2
        return (
            _pack_u16(self.type_value)
            + _pack_u16(2 + size + 1)
            + _pack_u16(size)
            + b"".join(_pack_u16(int(p)) for p in self.protection_profiles)
            + b"\x00"  # MKI length
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> UseSRTP:
        data = bytes(data)
        _check_header(data, cls.type_value, 6)
        count = _u16(data, 4) // 2
        if 6 + count * 2 > len(data):
            raise _length_mismatch()
        ids = (_u16(data, 6 + i * 2) for i in range(count))
        return cls(tuple(SRTPProtectionProfile(v) for v in ids if v in _SRTP_PROFILES))


@dataclass(frozen=True)
class UseExtendedMasterSecret(Extension):
    """Binds the master secret to a log of the full handshake."""

    type_value: ClassVar[ExtensionType] = ExtensionType.USE_EXTENDED_MASTER_SECRET

    supported: bool = False

    def marshal(self) -> bytes:
        if not self.supported:
            return b""
        return _pack_u16(self.type_value) + _pack_u16(0)

    @classmethod
    def unmarshal(cls, data: bytes) -> UseExtendedMasterSecret:
        data = bytes(data)
        _check_header(data, cls.type_value, 3)
        return cls(True)


@dataclass(frozen=True)
class RenegotiationInfo(Extension):
    """Signals renegotiation support."""

    type_value: ClassVar[ExtensionType] = ExtensionType.RENEGOTIATION_INFO

    renegotiated_connection: int = 0

    def marshal(self) -> bytes:
        return (
            _pack_u16(self.type_value)
            + _pack_u16(1)
            + bytes([self.renegotiated_connection & 0xFF])
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> RenegotiationInfo:
        data = bytes(data)
        _check_header(data, cls.type_value, 4)
        return cls(data[4])


_DECODERS: dict[int, type[Extension]] = {
    ExtensionType.SERVER_NAME: ServerName,
    ExtensionType.SUPPORTED_ELLIPTIC_CURVES: SupportedEllipticCurves,
    ExtensionType.USE_SRTP: UseSRTP,
    ExtensionType.USE_EXTENDED_MASTER_SECRET: UseExtendedMasterSecret,
    ExtensionType.RENEGOTIATION_INFO: RenegotiationInfo,
}


def unmarshal_extensions(buf: bytes) -> list[Extension]:
    """Decode a length-prefixed block of extensions, skipping unknown types."""
    buf = bytes(buf)
    if not buf:
        return []
    if len(buf) < 2:
        raise _too_small()
    if len(buf) - 2 != _u16(buf, 0):
        raise _length_mismatch()

    extensions: list[Extension] = []
    offset = 2
    while offset < len(buf):
        if len(buf) < offset + 2:
            raise _too_small()
        decoder = _DECODERS.get(_u16(buf, offset))
        if decoder is not None:
            extensions.append(decoder.unmarshal(buf[offset:]))
        if len(buf) < offset + 4:
            raise _too_small()
        offset += 4 + _u16(buf, offset + 2)
    return extensions


def marshal_extensions(extensions: Iterable[Extension]) -> bytes:
    """Encode extensions as one block prefixed with its two-byte length."""
    body = b"".join(e.marshal() for e in extensions)
    return _pack_u16(len(body)) + body


def extensions_to_json(extensions: Iterable[Extension]) -> str:
    """Summarise the known extensions as a compact JSON object."""
    summary: dict[str, object] = {}
    for ext in extensions:
        if isinstance(ext, ServerName):
            summary["server_name"] = ext.server_name
        elif isinstance(ext, UseExtendedMasterSecret):
            summary["use_extended_master_secret"] = ext.supported
        elif isinstance(ext, SupportedPointFormats):
            raw = bytes(int(p) for p in ext.point_formats)
            summary["supported_point_formats"] = base64.b64encode(raw).decode("ascii")
        elif isinstance(ext, SupportedSignatureAlgorithms):
            summary["supported_signature_algorithms"] = [
                {"Hash": int(a.hash), "Signature": int(a.signature)}
                for a in ext.signature_hash_algorithms
            ]
        elif isinstance(ext, UseSRTP):
            summary["use_srtp"] = [int(p) for p in ext.protection_profiles]
        elif isinstance(ext, SupportedEllipticCurves):
            summary["supported_elliptic_curves"] = [int(c) for c in ext.elliptic_curves]
    return json.dumps(summary, sort_keys=True, separators=(",", ":"))