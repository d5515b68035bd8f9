"""Encoding and decoding of the DTLS wire format: records, handshakes, alerts and extensions."""

__version__ = "0.1.0"

__all__ = [
    "alert",
    "ciphersuite",
    "errors",
    "extension",
    "handshake",
    "handshake_header",
    "hello_messages",
    "key_messages",
    "protocol",
    "recordlayer",
    "srtp",
]