"""Error types raised while encoding and decoding DTLS messages."""

from __future__ import annotations


class DTLSError(Exception):
    """Base class of all DTLS errors; wraps an underlying cause."""

    prefix = "dtls error"

    def __init__(self, err: object) -> None:
        super().__init__(err)
        self.err = err
        if isinstance(err, BaseException):
            self.__cause__ = err

    def __str__(self) -> str:
        return f"{self.prefix}: {self.err}"

    def timeout(self) -> bool:
        """Whether the error was caused by a timeout."""
        return False

    def temporary(self) -> bool:
        """Whether the connection is still usable after this error."""
        return False


class FatalError(DTLSError):
    """The connection is no longer available, usually through misconfiguration."""

    prefix = "dtls fatal"


class InternalError(DTLSError):
    """The connection is no longer available because of an implementation fault."""

    prefix = "dtls internal"


class TemporaryError(DTLSError):
    """The request failed, but the connection is still available."""

    prefix = "dtls temporary"

    def temporary(self) -> bool:
        return True


class ProtocolTimeoutError(DTLSError):
    """The request timed out."""

    prefix = "dtls timeout"

    def timeout(self) -> bool:
        return True

    def temporary(self) -> bool:
        return True


class HandshakeError(DTLSError):
    """The handshake failed; timeout and temporary follow the wrapped error."""

    prefix = "handshake error"

    def timeout(self) -> bool:
        check = getattr(self.err, "timeout", None)
        if callable(check):
            return bool(check())
        return isinstance(self.err, TimeoutError)

    def temporary(self) -> bool:
        check = getattr(self.err, "temporary", None)
        if callable(check):
            return bool(check())
        return isinstance(self.err, TimeoutError)