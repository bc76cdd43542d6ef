from __future__ import annotations

from datetime import datetime
from typing import Union

from pydantic import BaseModel, ConfigDict

from quoteboard.schemas.board import BoardPhase, ErrorInfo
from quoteboard.schemas.quote import DisplayRecord


class RefreshState(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: tuple[DisplayRecord, ...] = ()
    is_initial_loading: bool = True
    is_refreshing: bool = False
    error: ErrorInfo | None = None
    last_successful_fetch_at: datetime | None = None

    @property
    def has_data(self) -> bool:
        return len(self.records) > 0

    @property
    def is_blocking_error(self) -> bool:
        # full-screen error only when there is nothing else to show
        return (
            self.error is not None
            and not self.has_data
            and not self.is_initial_loading
            and not self.is_refreshing
        )

    @property
    def phase(self) -> BoardPhase:
        if self.is_initial_loading:
            return BoardPhase.INITIAL_LOADING
        if self.is_refreshing:
            return BoardPhase.REFRESHING
        if self.is_blocking_error:
            return BoardPhase.ERROR_SHOWN
        return BoardPhase.IDLE


class FetchStarted(BaseModel):
    model_config = ConfigDict(frozen=True)

    refreshing: bool = False


class FetchSucceeded(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: tuple[DisplayRecord, ...]
    fetched_at: datetime


class FetchFailed(BaseModel):
    model_config = ConfigDict(frozen=True)

    error: ErrorInfo


BoardEvent = Union[FetchStarted, FetchSucceeded, FetchFailed]


def apply_event(state: RefreshState, event: BoardEvent) -> RefreshState:
    """Single transition function for the board.

    A failure only ever touches the error slot and the in-progress flags; the
    record list and its timestamp survive until the next success replaces them.
    """
    if isinstance(event, FetchStarted):
        return state.model_copy(
            update={
                "error": None,
                "is_refreshing": state.is_refreshing or event.refreshing,
            }
        )
    if isinstance(event, FetchSucceeded):
        if not event.records:
            raise ValueError("a successful fetch must carry at least one record")
        return state.model_copy(
            update={
                "records": tuple(event.records),
                "last_successful_fetch_at": event.fetched_at,
                "error": None,
                "is_initial_loading": False,
                "is_refreshing": False,
            }
        )
    if isinstance(event, FetchFailed):
        return state.model_copy(
            update={
                "error": event.error,
                "is_initial_loading": False,
                "is_refreshing": False,
            }
        )
    raise TypeError(f"unsupported board event: {type(event).__name__}")
