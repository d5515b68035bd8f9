"""SRTP protection profiles negotiated through the use_srtp extension."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from typing import Optional


class SRTPProtectionProfile(enum.IntEnum):
    """Parameters and options in effect for SRTP processing."""

    SRTP_AES128_CM_HMAC_SHA1_80 = 0x0001
    SRTP_AES128_CM_HMAC_SHA1_32 = 0x0002
    SRTP_AEAD_AES_128_GCM = 0x0007
    SRTP_AEAD_AES_256_GCM = 0x0008


def supported_srtp_protection_profiles() -> frozenset[SRTPProtectionProfile]:
    """Return every protection profile this package understands."""
    return frozenset(SRTPProtectionProfile)


def find_matching_srtp_profile(
    a: Iterable[int], b: Iterable[int]
) -> Optional[int]:
    """Return the first profile of ``a`` that also appears in ``b``, or None."""
    candidates = list(b)
    return next((profile for profile in a if profile in candidates), None)


def split_bytes(data: bytes, split_len: int) -> list[bytes]:
    """Split ``data`` into consecutive chunks of at most ``split_len`` bytes."""
    if split_len <= 0:
        raise ValueError("split length must be positive")
    data = bytes(data)
    return [data[i : i + split_len] for i in range(0, len(data), split_len)]