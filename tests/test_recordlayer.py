import pytest

from dtlswire.alert import Alert, Description, Level
from dtlswire.errors import FatalError, InternalError, TemporaryError
from dtlswire.handshake import Handshake
from dtlswire.handshake_header import HandshakeType
from dtlswire.hello_messages import MessageServerHelloDone
from dtlswire.protocol import (
    ApplicationData,
    ChangeCipherSpec,
    ContentType,
    Version,
)
from dtlswire.recordlayer import (
    MAX_SEQUENCE_NUMBER,
    RecordHeader,
    RecordLayer,
    unpack_datagram,
)

CCS_RECORD = bytes(
    [0x14, 0xFE, 0xFF, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x12, 0x00, 0x01, 0x01]
)
CCS_RECORD_2 = bytes(
    [0x14, 0xFE, 0xFF, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x13, 0x00, 0x01, 0x01]
)


def test_unpack_single_packet():
    assert unpack_datagram(CCS_RECORD) == [CCS_RECORD]


def test_unpack_multi_packet():
    assert unpack_datagram(CCS_RECORD + CCS_RECORD_2) == [CCS_RECORD, CCS_RECORD_2]


def test_unpack_empty_datagram():
    assert unpack_datagram(b"") == []


@pytest.mark.parametrize(
    "data",
    [
        bytes([0x14, 0xFE]),
        bytes(
            [0x14, 0xFE, 0xFF, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x12, 0x00, 0xFF, 0x01]
        ),
    ],
)
def test_unpack_invalid_packet_length(data):
    with pytest.raises(TemporaryError) as info:
        unpack_datagram(data)
    assert "packet length and declared length do not match" in str(info.value)


def test_record_layer_round_trip_change_cipher_spec():
    record = RecordLayer.unmarshal(CCS_RECORD)
    expected = RecordLayer(
        header=RecordHeader(
            content_type=ContentType.CHANGE_CIPHER_SPEC,
            version=Version(0xFE, 0xFF),
            epoch=0,
            sequence_number=18,
        ),
        content=ChangeCipherSpec(),
    )
    assert record == expected
    assert record.marshal() == CCS_RECORD


def test_record_layer_alert_round_trip():
    record = RecordLayer(
        header=RecordHeader(version=Version(0xFE, 0xFD), epoch=1, sequence_number=7),
        content=Alert(Level.FATAL, Description.UNEXPECTED_MESSAGE),
    )
    raw = record.marshal()
    assert raw == bytes(
        [0x15, 0xFE, 0xFD, 0x00, 0x01, 0, 0, 0, 0, 0, 7, 0x00, 0x02, 0x02, 0x0A]
    )
    decoded = RecordLayer.unmarshal(raw)
    assert decoded.content == Alert(Level.FATAL, Description.UNEXPECTED_MESSAGE)
    assert decoded.header.content_type == ContentType.ALERT
    assert decoded.header.epoch == 1
    assert decoded.header.sequence_number == 7


def test_record_layer_application_data_round_trip():
    record = RecordLayer(content=ApplicationData(b"hello"))
    raw = record.marshal()
    assert raw[0] == ContentType.APPLICATION_DATA
    assert raw[11:13] == (5).to_bytes(2, "big")
    assert RecordLayer.unmarshal(raw).content == ApplicationData(b"hello")


def test_record_layer_handshake_round_trip():
    record = RecordLayer(content=Handshake(message=MessageServerHelloDone()))
    raw = record.marshal()
    assert raw[0] == ContentType.HANDSHAKE
    assert raw[11:13] == (12).to_bytes(2, "big")
    decoded = RecordLayer.unmarshal(raw)
    assert decoded.content.message == MessageServerHelloDone()
    assert decoded.content.header.type == HandshakeType.SERVER_HELLO_DONE


def test_record_unmarshal_too_small():
    with pytest.raises(TemporaryError) as info:
        RecordLayer.unmarshal(CCS_RECORD[:5])
    assert "buffer is too small" in str(info.value)


def test_record_unmarshal_invalid_content_type():
    data = bytes([0x30]) + CCS_RECORD[1:]
    with pytest.raises(TemporaryError) as info:
        RecordLayer.unmarshal(data)
    assert "invalid content type" in str(info.value)


def test_header_unsupported_version():
    data = bytes([0x14, 0x03, 0x03]) + CCS_RECORD[3:]
    with pytest.raises(FatalError) as info:
        RecordHeader.unmarshal(data)
    assert "unsupported protocol version" in str(info.value)


def test_header_sequence_number_overflow():
    header = RecordHeader(sequence_number=MAX_SEQUENCE_NUMBER + 1)
    with pytest.raises(InternalError) as info:
        header.marshal()
    assert "sequence number overflow" in str(info.value)


def test_header_marshal_max_sequence_number():
    header = RecordHeader(
        content_type=ContentType.HANDSHAKE,
        content_len=3,
        version=Version(0xFE, 0xFD),
        epoch=2,
        sequence_number=MAX_SEQUENCE_NUMBER,
    )
    assert header.marshal() == bytes(
        [0x16, 0xFE, 0xFD, 0x00, 0x02, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0x00, 0x03]
    )


def test_header_unmarshal_fields():
    header = RecordHeader.unmarshal(CCS_RECORD_2)
    assert header.content_type == ContentType.CHANGE_CIPHER_SPEC
    assert header.version == Version(0xFE, 0xFF)
    assert header.sequence_number == 19
    assert header.content_len == 0


def test_header_unmarshal_too_small():
    with pytest.raises(TemporaryError):
        RecordHeader.unmarshal(b"\x14\xfe\xff")
    

def test_record_marshal_without_content():
    with pytest.raises(InternalError):
        RecordLayer().marshal()


def test_invalid_change_cipher_spec_payload():
    data = CCS_RECORD[:-1] + b"\x00"
    with pytest.raises(FatalError) as info:
        RecordLayer.unmarshal(data)
    assert "cipher spec invalid" in str(info.value)