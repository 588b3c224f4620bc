"""Error taxonomy shared by the fetcher, monitors and API layer."""

from __future__ import annotations


class CryptoPulseError(Exception):
    """Base class for all CryptoPulse failures."""


class TransportError(CryptoPulseError):
    """Network failure, timeout or non-2xx status after retries."""


class DecodeError(CryptoPulseError):
    """Response body was not the JSON shape the exchange documents."""


class ValidationError(CryptoPulseError):
    """Caller supplied an invalid symbol, interval or cycle."""


class UnsupportedBackendError(CryptoPulseError):
    def __init__(self, endpoint: str) -> None:
        super().__init__(f"unsupported AI endpoint: {endpoint}")
        self.endpoint = endpoint


class NotFoundError(CryptoPulseError):
    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key
