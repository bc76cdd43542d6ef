from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from quoteboard.schemas.quote import DisplayRecord

ErrorKind = Literal[
    "rate_limited", "server_error", "network_error", "decode_error", "empty_result", "internal_error"
]


class ErrorInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    status_code: int | None = None


class BoardPhase(str, Enum):
    INITIAL_LOADING = "INITIAL_LOADING"
    IDLE = "IDLE"
    REFRESHING = "REFRESHING"
    ERROR_SHOWN = "ERROR_SHOWN"


class BoardView(BaseModel):
    """Read-only snapshot handed to the presentation layer."""

    records: list[DisplayRecord]
    is_initial_loading: bool
    is_refreshing: bool
    error: ErrorInfo | None = None
    last_successful_fetch_at: datetime | None = None
    phase: BoardPhase
    has_data: bool
    is_live: bool
    retry_pending: bool = False
