import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, field_validator

from quoteboard.schemas.quote import CurrencyPair
from quoteboard.services.quote_fetcher import DEFAULT_PAIR_CODES

DEFAULT_PAIRS = ",".join(DEFAULT_PAIR_CODES)


class Settings(BaseModel):
    QUOTE_API_BASE_URL: str = "https://economia.awesomeapi.com.br"
    QUOTE_PAIRS: list[CurrencyPair]
    QUOTE_HTTP_TIMEOUT_SEC: float = 5.0
    QUOTE_RETRY_DELAY_SEC: float = 0.5
    QUOTE_LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    QUOTE_LOG_JSON: bool = False

    @field_validator("QUOTE_PAIRS", mode="before")
    @classmethod
    def parse_pairs(cls, value):
        if isinstance(value, str):
            return [CurrencyPair.parse(s) for s in value.split(",") if s.strip()]
        return value

    @field_validator("QUOTE_HTTP_TIMEOUT_SEC", "QUOTE_RETRY_DELAY_SEC")
    @classmethod
    def non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must be >= 0")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        raw_pairs = os.getenv("QUOTE_PAIRS", DEFAULT_PAIRS)
        if not [s for s in raw_pairs.split(",") if s.strip()]:
            raw_pairs = DEFAULT_PAIRS

        values = {
            "QUOTE_PAIRS": raw_pairs,
            "QUOTE_LOG_LEVEL": os.getenv("QUOTE_LOG_LEVEL", "INFO").upper(),
        }
        for key in (
            "QUOTE_API_BASE_URL",
            "QUOTE_HTTP_TIMEOUT_SEC",
            "QUOTE_RETRY_DELAY_SEC",
            "QUOTE_LOG_JSON",
        ):
            raw = os.getenv(key)
            if raw is not None and raw.strip():
                values[key] = raw.strip()
        return cls.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
