# dtlswire

`dtlswire` reads and writes the DTLS wire format: record layer headers and
records, handshake headers and messages, alerts, change-cipher-spec,
application data and hello extensions. Every message is a frozen dataclass
with a `marshal()` method that returns `bytes` and a class method
`unmarshal(data)` that builds the object from `bytes`.

It has no dependencies beyond the standard library.

## Installation

```
pip install dtlswire
```

To run the test suite:

```
pip install "dtlswire[test]"
pytest
```

## Usage

### Splitting a datagram into records

One UDP datagram may carry several DTLS records. `unpack_datagram` splits
it by the length field in each record header:

```python
from dtlswire.recordlayer import RecordLayer, unpack_datagram

datagram = bytes([
    0x14, 0xfe, 0xff, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x12, 0x00, 0x01, 0x01,
])
for raw in unpack_datagram(datagram):
    record = RecordLayer.unmarshal(raw)
    print(record.header.sequence_number, record.content)  # 18 ChangeCipherSpec()
    assert record.marshal() == raw
```

`RecordHeader.unmarshal` accepts only DTLS 1.0 and 1.2 (`VERSION_1_0`,
`VERSION_1_2` in `dtlswire.protocol`). `RecordLayer.marshal` fills in the
content length and content type from the content it carries, and refuses
sequence numbers above `MAX_SEQUENCE_NUMBER` (48 bits).

### Alerts

```python
from dtlswire.alert import Alert, Description, Level

alert = Alert.unmarshal(bytes([0x02, 0x0A]))
assert alert.level is Level.FATAL
assert alert.description is Description.UNEXPECTED_MESSAGE
assert alert.marshal() == bytes([0x02, 0x0A])
print(alert)  # Alert Fatal: UnexpectedMessage
```

### Handshake messages

`Handshake` pairs a `HandshakeHeader` with one message. On `marshal()` the
header's type and lengths are taken from the message; on `unmarshal()` the
message class is chosen by the header's type:

```python
from dtlswire.handshake import Handshake
from dtlswire.hello_messages import MessageFinished

raw = Handshake(message=MessageFinished(verify_data=b"\x01\x02\x03")).marshal()
handshake = Handshake.unmarshal(raw)
assert handshake.message == MessageFinished(verify_data=b"\x01\x02\x03")
```

The message classes are in `dtlswire.hello_messages` (`MessageClientHello`,
`MessageHelloVerifyRequest`, `MessageServerHello`, `MessageServerHelloDone`,
`MessageFinished`) and `dtlswire.key_messages` (`MessageCertificate`,
`MessageCertificateRequest`, `MessageCertificateVerify`,
`MessageClientKeyExchange`, `MessageServerKeyExchange`).
`dtlswire.handshake_header` holds `HandshakeType`, `HandshakeHeader`,
`Random` (with `Random.generate()` for a fresh time-stamped value) and the
helpers `encode_cipher_suite_ids` / `decode_cipher_suite_ids`.

### Extensions

```python
from dtlswire.extension import (
    Curve, ServerName, SupportedEllipticCurves,
    extensions_to_json, marshal_extensions, unmarshal_extensions,
)

raw = marshal_extensions([
    ServerName(server_name="test.example.com"),
    SupportedEllipticCurves(elliptic_curves=[Curve.X25519]),
])
extensions = unmarshal_extensions(raw)
print(extensions_to_json(extensions))
```

`unmarshal_extensions` decodes `ServerName`, `SupportedEllipticCurves`,
`UseSRTP`, `UseExtendedMasterSecret` and `RenegotiationInfo`, and skips
extensions of other types. `SupportedPointFormats` and
`SupportedSignatureAlgorithms` can be marshalled and unmarshalled on their
own. Unsupported curves, hash/signature pairs and SRTP profiles in a list
are dropped while decoding.

### Errors

Decoding problems raise subclasses of `dtlswire.errors.DTLSError`:

- `FatalError`: the data cannot be accepted (bad version, unknown curve,
  invalid cipher spec and so on).
- `InternalError`: declared and actual lengths disagree, or the message
  type is not supported.
- `TemporaryError`: the buffer is too short or otherwise malformed.
- `ProtocolTimeoutError`: a timeout.
- `HandshakeError`: wraps another error; its `timeout()` and `temporary()`
  follow the wrapped one.

Each error has `timeout()` and `temporary()` methods.

### Cipher suites, SRTP profiles and versions

- `dtlswire.ciphersuite.cipher_suite_name(0xC02B)` returns
  `"TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256"`, or `unknown(<value>)` for an
  unregistered id; `cipher_suite_json` gives hex, name and value as JSON.
- `dtlswire.srtp.find_matching_srtp_profile(a, b)` returns the first profile
  of `a` that also appears in `b`, or `None`. `split_bytes(data, n)` cuts
  bytes into chunks of at most `n` bytes.
- `dtlswire.protocol.Version.to_json()` gives the version's name and
  numeric value as JSON.

## What this package does not do

`dtlswire` only converts between bytes and message objects. It performs no
cryptography (no key derivation, encryption, MAC or signature checks), runs
no handshake state machine, keeps no connection or session state, and opens
no sockets. Certificates are carried as raw DER bytes and are not parsed.