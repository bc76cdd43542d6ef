from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI

from quoteboard.api.routes import router
from quoteboard.config.logging import init_logging
from quoteboard.config.settings import Settings, get_settings
from quoteboard.integrations.awesome_api import AwesomeApiClient
from quoteboard.services.quote_board import QuoteBoard
from quoteboard.services.quote_fetcher import QuoteFetcher

logger = logging.getLogger(__name__)


def build_board(settings: Settings) -> QuoteBoard:
    client = AwesomeApiClient(settings.QUOTE_API_BASE_URL, timeout=settings.QUOTE_HTTP_TIMEOUT_SEC)
    fetcher = QuoteFetcher(client=client, default_pairs=settings.QUOTE_PAIRS)
    return QuoteBoard(
        fetcher=fetcher,
        pairs=settings.QUOTE_PAIRS,
        retry_delay_sec=settings.QUOTE_RETRY_DELAY_SEC,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.get_settings()
    init_logging(settings.QUOTE_LOG_LEVEL, json_lines=settings.QUOTE_LOG_JSON)

    if getattr(app.state, "quote_board", None) is None:
        app.state.quote_board = app.state.board_factory(settings)
    board = app.state.quote_board

    loader = threading.Thread(target=board.load_initial, daemon=True, name="quote-initial-load")
    app.state.initial_load_thread = loader
    logger.info("[BOARD][initial_load_start] pairs=%s", ",".join(p.code for p in board.pairs))
    loader.start()

    try:
        yield
    finally:
        board.close()
        loader.join(timeout=1.0)
        app.state.quote_board = None


app = FastAPI(title="Quote Board", version="0.1.0", lifespan=lifespan)
app.include_router(router, prefix="/v1")

# NOTE: lazy so importing the app does not touch the environment or network.
app.state.get_settings = get_settings
app.state.board_factory = build_board
app.state.quote_board = None
