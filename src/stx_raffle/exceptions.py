"""Exception hierarchy for the STX raffle client."""

from typing import Any


class RaffleClientError(Exception):
    """Base exception for all raffle client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NetworkError(RaffleClientError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class ValidationError(RaffleClientError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class SessionError(RaffleClientError):
    """Raised when the persisted wallet session cannot be written."""

    pass


class WalletRejectedError(RaffleClientError):
    """Raised by pairing transports when the user rejects a request."""

    def __init__(self, message: str, code: int | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.code = code
