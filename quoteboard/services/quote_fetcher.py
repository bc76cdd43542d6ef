from __future__ import annotations

import logging
from typing import Iterable

from quoteboard.errors import EmptyResultError
from quoteboard.schemas.quote import CurrencyPair, DisplayRecord
from quoteboard.services.normalizer import normalize_payload

logger = logging.getLogger(__name__)

DEFAULT_PAIR_CODES = ("USD-BRL", "EUR-BRL", "BTC-BRL", "GBP-BRL")
DEFAULT_PAIRS: tuple[CurrencyPair, ...] = tuple(CurrencyPair.parse(code) for code in DEFAULT_PAIR_CODES)


class QuoteFetcher:
    """Fetch + normalize. Returns display records or raises a classified FetchError."""

    def __init__(self, *, client, default_pairs: Iterable[CurrencyPair] | None = None) -> None:
        self.client = client
        self.default_pairs = tuple(default_pairs or DEFAULT_PAIRS)

    def fetch_quotes(self, pairs: Iterable[CurrencyPair] | None = None) -> list[DisplayRecord]:
        requested = tuple(pairs) if pairs is not None else self.default_pairs
        payload = self.client.get_last(requested)
        records = normalize_payload(payload)
        if not records:
            logger.info("[QUOTE][empty_result] raw_count=%s", len(payload))
            raise EmptyResultError()
        logger.debug(
            "[QUOTE][normalized] raw_count=%s final_count=%s", len(payload), len(records)
        )
        return records
