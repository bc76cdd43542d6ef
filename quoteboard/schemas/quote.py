from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_CODE_RE = re.compile(r"^[A-Z0-9]{2,10}$")


class CurrencyPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    base: str
    counter: str

    @field_validator("base", "counter")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not _CODE_RE.match(code):
            raise ValueError(f"invalid currency code: {value!r}")
        return code

    @classmethod
    def parse(cls, raw: str) -> "CurrencyPair":
        base, sep, counter = raw.strip().partition("-")
        if not sep:
            raise ValueError(f"pair must look like BASE-COUNTER: {raw!r}")
        return cls(base=base, counter=counter)

    @property
    def code(self) -> str:
        return f"{self.base}-{self.counter}"


class RawQuoteRecord(BaseModel):
    """One untrusted record from the provider payload. Everything arrives as text."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: str | None = None
    codein: str | None = None
    name: str | None = None
    high: str | None = None
    low: str | None = None
    bid: str | None = None
    ask: str | None = None
    var_bid: str | None = Field(default=None, alias="varBid")
    pct_change: str | None = Field(default=None, alias="pctChange")
    timestamp: str | None = None
    create_date: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str):
            return value
        return None


class DisplayRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    pair: str
    name: str
    price: float
    variation_percent: float
    variation_absolute: float
    last_update: str

    @property
    def is_positive(self) -> bool:
        return self.variation_percent >= 0

    @property
    def last_update_at(self) -> datetime | None:
        try:
            return datetime.fromisoformat(self.last_update.strip())
        except ValueError:
            return None
