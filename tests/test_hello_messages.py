import pytest

from dtlswire.errors import FatalError, TemporaryError
from dtlswire.extension import Curve, SupportedEllipticCurves
from dtlswire.handshake_header import HandshakeType, Random
from dtlswire.hello_messages import (
    MessageClientHello,
    MessageFinished,
    MessageHelloVerifyRequest,
    MessageServerHello,
    MessageServerHelloDone,
)
from dtlswire.protocol import CompressionMethod, Version

RAW_CLIENT_HELLO = bytes(
    [
        0xFE, 0xFD, 0xB6, 0x2F, 0xCE, 0x5C, 0x42, 0x54, 0xFF, 0x86, 0xE1, 0x24, 0x41, 0x91, 0x42,
        0x62, 0x15, 0xAD, 0x16, 0xC9, 0x15, 0x8D, 0x95, 0x71, 0x8A, 0xBB, 0x22, 0xD7, 0x47, 0xEC,
        0xD8, 0x3D, 0xDC, 0x4B, 0x00, 0x14, 0xE6, 0x14, 0x3A, 0x1B, 0x04, 0xEA, 0x9E, 0x7A, 0x14,
        0xD6, 0x6C, 0x57, 0xD0, 0x0E, 0x32, 0x85, 0x76, 0x18, 0xDE, 0xD8, 0x00, 0x04, 0xC0, 0x2B,
        0xC0, 0x0A, 0x01, 0x00, 0x00, 0x08, 0x00, 0x0A, 0x00, 0x04, 0x00, 0x02, 0x00, 0x1D,
    ]
)

RAW_HELLO_VERIFY_REQUEST = bytes(
    [
        0xFE, 0xFF, 0x14, 0x25, 0xFB, 0xEE, 0xB3, 0x7C, 0x95, 0xCF, 0x00,
        0xEB, 0xAD, 0xE2, 0xEF, 0xC7, 0xFD, 0xBB, 0xED, 0xF7, 0x1F, 0x6C, 0xCD,
    ]
)

RAW_SERVER_HELLO = bytes(
    [
        0xFE, 0xFD, 0x21, 0x63, 0x32, 0x21, 0x81, 0x0E, 0x98, 0x6C,
        0x85, 0x3D, 0xA4, 0x39, 0xAF, 0x5F, 0xD6, 0x5C, 0xCC, 0x20,
        0x7F, 0x7C, 0x78, 0xF1, 0x5F, 0x7E, 0x1C, 0xB7, 0xA1, 0x1E,
        0xCF, 0x63, 0x84, 0x28, 0x00, 0xC0, 0x2B, 0x00, 0x00, 0x00,
    ]
)

RAW_FINISHED = bytes(
    [0x01, 0x01, 0x03, 0x04, 0x05, 0x06, 0x07, 0x08, 0x09, 0x0A, 0x0B, 0x0C, 0x0D, 0x0E, 0x0F]
)


def test_client_hello_unmarshal_and_marshal():
    expected = MessageClientHello(
        version=Version(0xFE, 0xFD),
        random=Random(
            3056586332,
            bytes(
                [
                    0x42, 0x54, 0xFF, 0x86, 0xE1, 0x24, 0x41, 0x91, 0x42, 0x62, 0x15, 0xAD,
                    0x16, 0xC9, 0x15, 0x8D, 0x95, 0x71, 0x8A, 0xBB, 0x22, 0xD7, 0x47, 0xEC,
                    0xD8, 0x3D, 0xDC, 0x4B,
                ]
            ),
        ),
        cookie=bytes(
            [
                0xE6, 0x14, 0x3A, 0x1B, 0x04, 0xEA, 0x9E, 0x7A, 0x14, 0xD6,
                0x6C, 0x57, 0xD0, 0x0E, 0x32, 0x85, 0x76, 0x18, 0xDE, 0xD8,
            ]
        ),
        cipher_suite_ids=[0xC02B, 0xC00A],
        compression_methods=[CompressionMethod()],
        extensions=[SupportedEllipticCurves([Curve.X25519])],
    )
    parsed = MessageClientHello.unmarshal(RAW_CLIENT_HELLO)
    assert parsed == expected
    assert parsed.marshal() == RAW_CLIENT_HELLO


def test_client_hello_type():
    parsed = MessageClientHello.unmarshal(RAW_CLIENT_HELLO)
    assert parsed.handshake_type == HandshakeType.CLIENT_HELLO


def test_client_hello_cookie_too_long():
    with pytest.raises(FatalError):
        MessageClientHello(cookie=bytes(256)).marshal()


def test_client_hello_too_short():
    with pytest.raises(TemporaryError):
        MessageClientHello.unmarshal(RAW_CLIENT_HELLO[:20])


def test_client_hello_truncated_cookie():
    with pytest.raises(TemporaryError):
        MessageClientHello.unmarshal(RAW_CLIENT_HELLO[:45])


def test_hello_verify_request_unmarshal_and_marshal():
    expected = MessageHelloVerifyRequest(
        version=Version(0xFE, 0xFF),
        cookie=bytes(
            [
                0x25, 0xFB, 0xEE, 0xB3, 0x7C, 0x95, 0xCF, 0x00, 0xEB, 0xAD,
                0xE2, 0xEF, 0xC7, 0xFD, 0xBB, 0xED, 0xF7, 0x1F, 0x6C, 0xCD,
            ]
        ),
    )
    parsed = MessageHelloVerifyRequest.unmarshal(RAW_HELLO_VERIFY_REQUEST)
    assert parsed == expected
    assert parsed.marshal() == RAW_HELLO_VERIFY_REQUEST


def test_hello_verify_request_errors():
    with pytest.raises(TemporaryError):
        MessageHelloVerifyRequest.unmarshal(b"\xfe\xff")
    with pytest.raises(TemporaryError):
        MessageHelloVerifyRequest.unmarshal(RAW_HELLO_VERIFY_REQUEST[:10])
    with pytest.raises(FatalError):
        MessageHelloVerifyRequest(cookie=bytes(256)).marshal()


def test_server_hello_unmarshal_and_marshal():
    expected = MessageServerHello(
        version=Version(0xFE, 0xFD),
        random=Random(560149025, RAW_SERVER_HELLO[6:34]),
        cipher_suite_id=0xC02B,
        compression_method=CompressionMethod(),
        extensions=[],
    )
    parsed = MessageServerHello.unmarshal(RAW_SERVER_HELLO)
    assert parsed == expected
    assert parsed.marshal() == RAW_SERVER_HELLO


def test_server_hello_without_extensions_block():
    parsed = MessageServerHello.unmarshal(RAW_SERVER_HELLO[:38])
    assert parsed.extensions == ()
    assert parsed.cipher_suite_id == 0xC02B


def test_server_hello_invalid_compression_method():
    raw = bytearray(RAW_SERVER_HELLO)
    raw[37] = 0x01
    with pytest.raises(FatalError):
        MessageServerHello.unmarshal(bytes(raw))


def test_server_hello_marshal_requires_fields():
    with pytest.raises(FatalError):
        MessageServerHello(compression_method=CompressionMethod()).marshal()
    with pytest.raises(FatalError):
        MessageServerHello(cipher_suite_id=0xC02B).marshal()


def test_server_hello_too_short():
    with pytest.raises(TemporaryError):
        MessageServerHello.unmarshal(RAW_SERVER_HELLO[:36])


def test_server_hello_done():
    parsed = MessageServerHelloDone.unmarshal(b"")
    assert parsed == MessageServerHelloDone()
    assert parsed.marshal() == b""


def test_finished_unmarshal_and_marshal():
    parsed = MessageFinished.unmarshal(RAW_FINISHED)
    assert parsed == MessageFinished(verify_data=RAW_FINISHED)
    assert parsed.marshal() == RAW_FINISHED
    assert parsed.handshake_type == HandshakeType.FINISHED