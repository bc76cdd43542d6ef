from __future__ import annotations

from quoteboard.schemas.board import ErrorInfo

RATE_LIMIT_WAIT_SEC = 30


class FetchError(Exception):
    """Classified failure of a quote fetch. Raw transport errors never leave the fetcher."""

    kind = "fetch_error"
    default_message = "Quote fetch failed."

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.message)

    def to_info(self) -> ErrorInfo:
        return ErrorInfo(kind=self.kind, message=self.message, status_code=self.status_code)


class RateLimitedError(FetchError):
    kind = "rate_limited"
    default_message = f"Too many recent updates. Wait {RATE_LIMIT_WAIT_SEC} seconds."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, status_code=429)


class ServerError(FetchError):
    kind = "server_error"

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"Server error: {status_code}", status_code=status_code)


class NetworkError(FetchError):
    kind = "network_error"
    default_message = "Connection error. Check your internet connection."


class DecodeError(FetchError):
    kind = "decode_error"
    default_message = "Unexpected response from the quote provider."


class EmptyResultError(FetchError):
    kind = "empty_result"
    default_message = "No data found in the API response."


class InternalError(FetchError):
    """Stands in for a fetcher bug when resolving the attempt; never raised by the fetcher itself."""

    kind = "internal_error"
    default_message = "Unexpected error while loading quotes."
