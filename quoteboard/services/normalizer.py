from __future__ import annotations

import math
from typing import Any, Iterator, Mapping

from quoteboard.schemas.quote import DisplayRecord, RawQuoteRecord

NAME_SEPARATOR = "/"


def _to_float(value: str | None) -> float:
    try:
        if value is None or value.strip() == "":
            return math.nan
        number = float(value)
        return number if math.isfinite(number) else math.nan
    except ValueError:
        return math.nan


def iter_raw_records(payload: Mapping[str, Any]) -> Iterator[tuple[str, RawQuoteRecord]]:
    """Yield (key, record) in payload order; non-object values are skipped."""
    for key, value in payload.items():
        if not isinstance(value, dict):
            continue
        yield str(key), RawQuoteRecord.model_validate(value)


def is_usable(raw: RawQuoteRecord) -> bool:
    if not raw.name or not raw.bid:
        return False
    return not math.isnan(_to_float(raw.bid))


def filter_records(payload: Mapping[str, Any]) -> list[tuple[str, RawQuoteRecord]]:
    return [(key, raw) for key, raw in iter_raw_records(payload) if is_usable(raw)]


def short_name(name: str) -> str:
    return name.split(NAME_SEPARATOR, 1)[0]


def to_display_record(key: str, raw: RawQuoteRecord) -> DisplayRecord:
    code = raw.code or key
    pair = f"{raw.code}/{raw.codein}" if raw.code and raw.codein else key
    return DisplayRecord(
        id=code,
        pair=pair,
        name=short_name(raw.name or ""),
        price=_to_float(raw.bid),
        variation_percent=_to_float(raw.pct_change),
        variation_absolute=_to_float(raw.var_bid),
        last_update=raw.create_date or "",
    )


def normalize_payload(payload: Mapping[str, Any]) -> list[DisplayRecord]:
    """Filter then map the keyed provider payload into display records.

    Records without a name or a numeric bid are dropped here, never reported
    individually. Output order follows payload iteration order.
    """
    return [to_display_record(key, raw) for key, raw in filter_records(payload)]
