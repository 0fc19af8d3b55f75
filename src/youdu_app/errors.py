"""Exception hierarchy for the Youdu app SDK.

Every failure raised by a client operation derives from :class:`YouduError`
so callers can catch the whole family, or a specific cause:

- ConfigError: bad AES key or unusable configuration
- TransportError: connection failures and timeouts
- HttpStatusError: non-2xx HTTP status
- EnvelopeError: ciphertext that cannot be opened or is bound to another app
- ProtocolError: malformed response frame (MissingFieldError, TypeMismatchError)
- ApiError: well-formed frame reporting ``errcode != 0``
- FileIOError: local file read/write failures
"""

from __future__ import annotations


class YouduError(Exception):
    """Base exception for all Youdu SDK errors."""

    pass


class ConfigError(YouduError):
    """Raised when the client configuration is invalid."""

    pass


class TransportError(YouduError):
    """Raised when the HTTP request could not be completed."""

    def __init__(self, message: str, url: str = "") -> None:
        """Initialize the exception.

        Args:
            message: Error message
            url: Target URL of the failed request
        """
        self.url = url
        super().__init__(message)


class HttpStatusError(YouduError):
    """Raised when the server answers with a non-2xx status."""

    def __init__(self, status_code: int, url: str = "", reason: str = "") -> None:
        self.status_code = status_code
        self.url = url
        self.reason = reason
        super().__init__(f"HTTP {status_code} {reason}".strip() + (f" ({url})" if url else ""))


class EnvelopeError(YouduError):
    """Raised when an encrypted envelope cannot be decoded or verified."""

    pass


class ProtocolError(YouduError):
    """Raised when a response frame does not have the expected shape."""

    pass


class MissingFieldError(ProtocolError):
    """Raised when a response frame lacks a required field."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Missing field in response: {key}")


class TypeMismatchError(ProtocolError):
    """Raised when a response field has an unexpected JSON type."""

    def __init__(self, key: str, expected: str, actual: object) -> None:
        self.key = key
        self.expected = expected
        super().__init__(
            f"Field {key!r} expected {expected}, got {type(actual).__name__}"
        )


class ApiError(YouduError):
    """Exception for Youdu API errors.

    Attributes:
        code: Youdu ``errcode``.
        msg: Youdu ``errmsg``.
    """

    def __init__(self, code: int, msg: str) -> None:
        self.code = code
        self.msg = msg
        super().__init__(f"Youdu API Error {code}: {msg}")


class FileIOError(YouduError, OSError):
    """Raised when a local file cannot be read or written."""

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(message)
