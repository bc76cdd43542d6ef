from __future__ import annotations

import math
from datetime import datetime

from quoteboard.schemas.quote import DisplayRecord

MISSING_TIME = "--:--"


def _fixed2(value: float) -> str:
    if not math.isfinite(value):
        return "--"
    return f"{value:.2f}"


def _plain_number(value: float) -> str:
    """Shortest round-trip text, integral values without the trailing .0."""
    if not math.isfinite(value):
        return "--"
    text = repr(value)
    return text[:-2] if text.endswith(".0") else text


def format_currency(value: float) -> str:
    return f"R$ {_fixed2(value).replace('.', ',')}"


def format_time(value: str | datetime | None) -> str:
    if isinstance(value, datetime):
        return value.strftime("%H:%M")
    if not value:
        return MISSING_TIME
    try:
        return datetime.fromisoformat(value.strip()).strftime("%H:%M")
    except ValueError:
        return MISSING_TIME


def format_variation(record: DisplayRecord) -> str:
    icon = "▲" if record.is_positive else "▼"
    pct = _plain_number(record.variation_percent)
    return f"{icon} {pct}% (R$ {_fixed2(record.variation_absolute)})"
