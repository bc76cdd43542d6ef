from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

import requests

from quoteboard.errors import DecodeError, NetworkError, RateLimitedError, ServerError
from quoteboard.schemas.quote import CurrencyPair

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://economia.awesomeapi.com.br"


def join_pairs(pairs: Iterable[CurrencyPair]) -> str:
    seen: set[str] = set()
    codes: list[str] = []
    for pair in pairs:
        if pair.code in seen:
            continue
        seen.add(pair.code)
        codes.append(pair.code)
    if not codes:
        raise ValueError("at least one currency pair is required")
    return ",".join(codes)


class AwesomeApiClient:
    """AwesomeAPI "last quote" client. Returns the decoded keyed payload or raises a FetchError."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 5.0,
        session: Optional[Any] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def last_url(self, pairs: Iterable[CurrencyPair]) -> str:
        return f"{self.base_url}/last/{join_pairs(pairs)}"

    def get_last(self, pairs: Iterable[CurrencyPair]) -> Dict[str, Any]:
        url = self.last_url(pairs)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("[QUOTE][network_error] url=%s error=%s", url, exc)
            raise NetworkError() from exc

        status = int(response.status_code)
        if status == 429:
            logger.warning("[QUOTE][rate_limited] url=%s", url)
            raise RateLimitedError()
        if not 200 <= status < 300:
            logger.warning("[QUOTE][server_error] url=%s status=%s", url, status)
            raise ServerError(status)

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("[QUOTE][decode_error] url=%s reason=invalid_json", url)
            raise DecodeError() from exc

        if not isinstance(payload, dict):
            logger.warning("[QUOTE][decode_error] url=%s reason=unexpected_type type=%s", url, type(payload).__name__)
            raise DecodeError()
        # error envelopes such as {"status": 404, "message": ...} carry no records at all
        if payload and not any(isinstance(v, dict) for v in payload.values()):
            logger.warning("[QUOTE][decode_error] url=%s reason=no_record_objects", url)
            raise DecodeError()
        return payload
