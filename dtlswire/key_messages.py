"""Certificate and key exchange handshake messages."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar, Optional, TypeVar

from .errors import FatalError, InternalError, TemporaryError
from .extension import (
    Curve,
    CurveType,
    HashAlgorithm,
    SignatureAlgorithm,
    SignatureHashAlgorithm,
)
from .handshake_header import HandshakeType

_CERTIFICATE_LENGTH_FIELD_SIZE = 3
_CERTIFICATE_REQUEST_MIN_LENGTH = 5
_CERTIFICATE_VERIFY_MIN_LENGTH = 4
_ENCRYPTED_PRE_MASTER_SECRET_LENGTH = 48

_E = TypeVar("_E", bound=enum.IntEnum)


class ClientCertificateType(enum.IntEnum):
    """Kinds of certificate a server may request from a client."""

    RSA_SIGN = 1
    ECDSA_SIGN = 64


def _too_small() -> TemporaryError:
    return TemporaryError("buffer is too small")


def _length_mismatch() -> InternalError:
    return InternalError("data length and declared length do not match")


def _invalid_hash() -> FatalError:
    return FatalError("invalid hash algorithm")


def _invalid_signature() -> FatalError:
    return FatalError("invalid signature algorithm")


def _enum_member(enum_cls: type[_E], value: int) -> Optional[_E]:
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _u16(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 2], "big")


def _pack_u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "big")


def _u24(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 3], "big")


def _pack_u24(value: int) -> bytes:
    return (value & 0xFFFFFF).to_bytes(3, "big")


@dataclass(frozen=True)
class MessageCertificate:
    """A chain of DER encoded certificates from client or server."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CERTIFICATE

    certificate: Sequence[bytes] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "certificate", tuple(bytes(c) for c in self.certificate)
        )

    def marshal(self) -> bytes:
        body = b"".join(_pack_u24(len(c)) + c for c in self.certificate)
        return _pack_u24(len(body)) + body

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageCertificate:
        data = bytes(data)
        if len(data) < _CERTIFICATE_LENGTH_FIELD_SIZE:
            raise _too_small()
        if _u24(data, 0) + _CERTIFICATE_LENGTH_FIELD_SIZE != len(data):
            raise _length_mismatch()

        certificates: list[bytes] = []
        offset = _CERTIFICATE_LENGTH_FIELD_SIZE
        while offset < len(data):
            if offset + _CERTIFICATE_LENGTH_FIELD_SIZE > len(data):
                raise _length_mismatch()
            length = _u24(data, offset)
            offset += _CERTIFICATE_LENGTH_FIELD_SIZE
            if offset + length > len(data):
                raise _length_mismatch()
            certificates.append(data[offset : offset + length])
            offset += length
        return cls(certificates)


@dataclass(frozen=True)
class MessageCertificateRequest:
    """A server's request for a client certificate."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CERTIFICATE_REQUEST

    certificate_types: Sequence[ClientCertificateType] = ()
    signature_hash_algorithms: Sequence[SignatureHashAlgorithm] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "certificate_types", tuple(self.certificate_types))
        object.__setattr__(
            self, "signature_hash_algorithms", tuple(self.signature_hash_algorithms)
        )

    def marshal(self) -> bytes:
        return (
            bytes([len(self.certificate_types) & 0xFF])
            + bytes(int(t) for t in self.certificate_types)
            + _pack_u16(len(self.signature_hash_algorithms) * 2)
            + b"".join(
                bytes([int(a.hash), int(a.signature)])
                for a in self.signature_hash_algorithms
            )
            + b"\x00\x00"  # distinguished names length
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageCertificateRequest:
        data = bytes(data)
        if len(data) < _CERTIFICATE_REQUEST_MIN_LENGTH:
            raise _too_small()

        types_length = data[0]
        offset = 1
        if offset + types_length > len(data):
            raise _too_small()
        certificate_types = [
            member
            for member in (
                _enum_member(ClientCertificateType, b)
                for b in data[offset : offset + types_length]
            )
            if member is not None
        ]
        offset += types_length

        if len(data) < offset + 2:
            raise _too_small()
        algorithms_length = _u16(data, offset)
        offset += 2
        if offset + algorithms_length > len(data):
            raise _too_small()

        algorithms: list[SignatureHashAlgorithm] = []
        for i in range(0, algorithms_length, 2):
            if len(data) < offset + i + 2:
                raise _too_small()
            hash_alg = _enum_member(HashAlgorithm, data[offset + i])
            sig_alg = _enum_member(SignatureAlgorithm, data[offset + i + 1])
            if hash_alg is None or sig_alg is None:
                continue
            algorithms.append(SignatureHashAlgorithm(hash_alg, sig_alg))
        return cls(certificate_types, algorithms)


@dataclass(frozen=True)
class MessageCertificateVerify:
    """Explicit verification of a client certificate."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CERTIFICATE_VERIFY

    hash_algorithm: HashAlgorithm = HashAlgorithm.NONE
    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.ANONYMOUS
    signature: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "signature", bytes(self.signature))

    def marshal(self) -> bytes:
        return (
            bytes([int(self.hash_algorithm), int(self.signature_algorithm)])
            + _pack_u16(len(self.signature))
            + self.signature
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageCertificateVerify:
        data = bytes(data)
        if len(data) < _CERTIFICATE_VERIFY_MIN_LENGTH:
            raise _too_small()
        hash_alg = _enum_member(HashAlgorithm, data[0])
        if hash_alg is None:
            raise _invalid_hash()
        sig_alg = _enum_member(SignatureAlgorithm, data[1])
        if sig_alg is None:
            raise _invalid_signature()
        if _u16(data, 2) + 4 != len(data):
            raise _too_small()
        return cls(hash_alg, sig_alg, data[4:])


@dataclass(frozen=True)
class MessageClientKeyExchange:
    """Carries the client's share of the premaster secret."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CLIENT_KEY_EXCHANGE

    identity_hint: Optional[bytes] = None
    public_key: Optional[bytes] = None
    encrypted_pre_master_secret: Optional[bytes] = None

    def marshal(self) -> bytes:
        if self.encrypted_pre_master_secret is not None:
            secret = bytes(self.encrypted_pre_master_secret)
            return _pack_u16(len(secret)) + secret
        if (self.identity_hint is None) == (self.public_key is None):
            raise FatalError(
                "unable to determine if ClientKeyExchange is a public key or PSK Identity"
            )
        if self.public_key is not None:
            key = bytes(self.public_key)
            return bytes([len(key) & 0xFF]) + key
        hint = bytes(self.identity_hint or b"")
        return _pack_u16(len(hint)) + hint

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageClientKeyExchange:
        data = bytes(data)
        if len(data) < 2:
            raise _too_small()
        if len(data) == (_u16(data, 0) + 2) & 0xFFFF:
            return cls(identity_hint=data[2:])
        if len(data) != data[0] + 1:
            raise _too_small()
        if len(data) == _ENCRYPTED_PRE_MASTER_SECRET_LENGTH:
            return cls(encrypted_pre_master_secret=data)
        return cls(public_key=data[1:])


@dataclass(frozen=True)
class MessageServerKeyExchange:
    """The server's ECDH parameters or PSK identity hint."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.SERVER_KEY_EXCHANGE

    identity_hint: Optional[bytes] = None
    elliptic_curve_type: CurveType = CurveType.NAMED_CURVE
    named_curve: Curve = Curve.X25519
    public_key: bytes = b""
    hash_algorithm: HashAlgorithm = HashAlgorithm.NONE
    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.ANONYMOUS
    signature: bytes = b""

    def __post_init__(self) -> None:
        if self.identity_hint is not None:
            object.__setattr__(self, "identity_hint", bytes(self.identity_hint))
        object.__setattr__(self, "public_key", bytes(self.public_key))
        object.__setattr__(self, "signature", bytes(self.signature))

    def marshal(self) -> bytes:
        if self.identity_hint is not None:
            return _pack_u16(len(self.identity_hint)) + self.identity_hint

        out = (
            bytes([int(self.elliptic_curve_type)])
            + _pack_u16(int(self.named_curve))
            + bytes([len(self.public_key) & 0xFF])
            + self.public_key
        )
        if (
            self.hash_algorithm == HashAlgorithm.NONE
            and self.signature_algorithm == SignatureAlgorithm.ANONYMOUS
            and not self.signature
        ):
            return out
        return (
            out
            + bytes([int(self.hash_algorithm), int(self.signature_algorithm)])
            + _pack_u16(len(self.signature))
            + self.signature
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> MessageServerKeyExchange:
        data = bytes(data)
        if len(data) < 2:
            raise _too_small()
        if len(data) == (_u16(data, 0) + 2) & 0xFFFF:
            return cls(identity_hint=data[2:])

        curve_type = _enum_member(CurveType, data[0])
        if curve_type is None:
            raise FatalError("invalid or unknown elliptic curve type")
        if len(data) < 3:
            raise _too_small()
        named_curve = _enum_member(Curve, _u16(data, 1))
        if named_curve is None:
            raise FatalError("invalid named curve")
        if len(data) < 4:
            raise _too_small()

        offset = 4 + data[3]
        if len(data) < offset:
            raise _too_small()
        public_key = data[4:offset]

        # Anonymous exchanges carry no hash, signature algorithm or signature.
        if len(data) == offset:
            return cls(
                elliptic_curve_type=curve_type,
                named_curve=named_curve,
                public_key=public_key,
            )

        hash_alg = _enum_member(HashAlgorithm, data[offset])
        if hash_alg is None:
            raise _invalid_hash()
        offset += 1
        if len(data) <= offset:
            raise _too_small()
        sig_alg = _enum_member(SignatureAlgorithm, data[offset])
        if sig_alg is None:
            raise _invalid_signature()
        offset += 1
        if len(data) < offset + 2:
            raise _too_small()
        signature_length = _u16(data, offset)
        offset += 2
        if len(data) < offset + signature_length:
            raise _too_small()
        return cls(
            elliptic_curve_type=curve_type,
            named_curve=named_curve,
            public_key=public_key,
            hash_algorithm=hash_alg,
            signature_algorithm=sig_alg,
            signature=data[offset : offset + signature_length],
        )