from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from quoteboard.errors import FetchError, InternalError
from quoteboard.schemas.board import BoardView
from quoteboard.schemas.quote import CurrencyPair
from quoteboard.services.quote_fetcher import DEFAULT_PAIRS
from quoteboard.services.refresh_state import (
    BoardEvent,
    FetchFailed,
    FetchStarted,
    FetchSucceeded,
    RefreshState,
    apply_event,
)

logger = logging.getLogger(__name__)

RETRY_DELAY_SEC = 0.5


def _default_timer_factory(delay_sec: float, callback: Callable[[], Any]) -> threading.Timer:
    timer = threading.Timer(delay_sec, callback)
    timer.daemon = True
    return timer


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuoteBoard:
    """Session-scoped owner of the quote list and its refresh/error lifecycle.

    All state commits go through ``apply_event`` under one lock. Fetches run
    outside the lock; every attempt gets a generation number and only the
    latest generation may commit, so a slow older response can never
    overwrite a newer one.
    """

    def __init__(
        self,
        *,
        fetcher,
        pairs: Iterable[CurrencyPair] | None = None,
        retry_delay_sec: float = RETRY_DELAY_SEC,
        timer_factory: Callable[[float, Callable[[], Any]], Any] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.pairs = tuple(pairs or DEFAULT_PAIRS)
        self.retry_delay_sec = retry_delay_sec
        self._timer_factory = timer_factory or _default_timer_factory
        self._clock = clock or _utcnow
        self._lock = threading.Lock()
        self._state = RefreshState()
        self._generation = 0
        self._pending_retry: Any | None = None
        self._closed = False
        self._metrics: dict[str, Any] = {
            "attempts": 0,
            "successes": 0,
            "failures": 0,
            "stale_discarded": 0,
            "retries_scheduled": 0,
            "failures_by_kind": {},
        }

    def _view(self) -> BoardView:
        state = self._state
        return BoardView(
            records=list(state.records),
            is_initial_loading=state.is_initial_loading,
            is_refreshing=state.is_refreshing,
            error=state.error,
            last_successful_fetch_at=state.last_successful_fetch_at,
            phase=state.phase,
            has_data=state.has_data,
            is_live=state.error is None,
            retry_pending=self._pending_retry is not None,
        )

    @property
    def state(self) -> RefreshState:
        with self._lock:
            return self._state

    def snapshot(self) -> BoardView:
        with self._lock:
            return self._view()

    def load_initial(self) -> BoardView:
        return self._run_attempt(refreshing=False, trigger="initial_load")

    def request_manual_refresh(self) -> BoardView:
        return self._run_attempt(refreshing=True, trigger="manual_refresh")

    def request_retry(self) -> bool:
        """Schedule a re-fetch after the fixed retry delay.

        Only honoured from the blocking error state, and only once per pending
        delay. Returns whether a retry was scheduled.
        """
        with self._lock:
            if self._closed:
                return False
            if not self._state.is_blocking_error:
                logger.info("[BOARD][retry_ignored] reason=not_blocking phase=%s", self._state.phase.value)
                return False
            if self._pending_retry is not None:
                logger.info("[BOARD][retry_ignored] reason=already_pending")
                return False
            timer = self._timer_factory(self.retry_delay_sec, self._fire_retry)
            self._pending_retry = timer
            self._metrics["retries_scheduled"] += 1

        logger.info("[BOARD][retry_scheduled] delay_sec=%s", self.retry_delay_sec)
        timer.start()
        return True

    def _fire_retry(self) -> None:
        with self._lock:
            self._pending_retry = None
            if self._closed:
                return
        self._run_attempt(refreshing=True, trigger="retry")

    def _commit(self, event: BoardEvent) -> None:
        self._state = apply_event(self._state, event)

    def _run_attempt(self, *, refreshing: bool, trigger: str) -> BoardView:
        with self._lock:
            if self._closed:
                raise RuntimeError("BOARD_CLOSED")
            self._generation += 1
            generation = self._generation
            self._commit(FetchStarted(refreshing=refreshing))
            self._metrics["attempts"] += 1

        logger.info("[BOARD][fetch_start] generation=%s trigger=%s", generation, trigger)
        outcome: BoardEvent
        try:
            records = self.fetcher.fetch_quotes(self.pairs)
        except FetchError as exc:
            outcome = FetchFailed(error=exc.to_info())
        except Exception:
            logger.exception("[BOARD][fetch_crashed] generation=%s trigger=%s", generation, trigger)
            # the attempt still resolves, so the loading flags cannot stick
            with self._lock:
                if generation == self._generation:
                    self._commit(FetchFailed(error=InternalError().to_info()))
                    self._metrics["failures"] += 1
                    by_kind = self._metrics["failures_by_kind"]
                    by_kind[InternalError.kind] = by_kind.get(InternalError.kind, 0) + 1
                else:
                    self._metrics["stale_discarded"] += 1
            raise
        else:
            outcome = FetchSucceeded(records=tuple(records), fetched_at=self._clock())

        with self._lock:
            if generation != self._generation:
                self._metrics["stale_discarded"] += 1
                logger.info(
                    "[BOARD][stale_discarded] generation=%s latest=%s", generation, self._generation
                )
                return self._view()

            self._commit(outcome)
            if isinstance(outcome, FetchFailed):
                kind = outcome.error.kind
                self._metrics["failures"] += 1
                by_kind = self._metrics["failures_by_kind"]
                by_kind[kind] = by_kind.get(kind, 0) + 1
                logger.warning(
                    "[BOARD][fetch_resolved] generation=%s outcome=failure kind=%s blocking=%s records=%s",
                    generation,
                    kind,
                    self._state.is_blocking_error,
                    len(self._state.records),
                )
            else:
                self._metrics["successes"] += 1
                logger.info(
                    "[BOARD][fetch_resolved] generation=%s outcome=success records=%s",
                    generation,
                    len(self._state.records),
                )
            return self._view()

    def close(self) -> None:
        with self._lock:
            self._closed = True
            timer = self._pending_retry
            self._pending_retry = None
        if timer is not None:
            timer.cancel()
        logger.info("[BOARD][closed]")

    def metrics(self) -> dict[str, Any]:
        with self._lock:
            return {
                **{k: v for k, v in self._metrics.items() if k != "failures_by_kind"},
                "failures_by_kind": dict(self._metrics["failures_by_kind"]),
                "generation": self._generation,
                "retry_pending": self._pending_retry is not None,
                "record_count": len(self._state.records),
                "phase": self._state.phase.value,
            }
