import math

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from quoteboard.schemas.board import BoardView
from quoteboard.services.formatting import format_currency, format_time, format_variation

router = APIRouter()

SOURCE_LABEL = "AwesomeAPI"


def _json_number(value: float) -> float | None:
    # starlette's JSONResponse rejects NaN and infinities
    return value if math.isfinite(value) else None


def _board_payload(view: BoardView) -> dict:
    body = view.model_dump(mode="json", exclude={"records"})
    body["records"] = [
        {
            **record.model_dump(
                mode="json", exclude={"price", "variation_percent", "variation_absolute"}
            ),
            "price": _json_number(record.price),
            "variation_percent": _json_number(record.variation_percent),
            "variation_absolute": _json_number(record.variation_absolute),
            "is_positive": record.is_positive,
            "price_label": format_currency(record.price),
            "variation_label": format_variation(record),
            "updated_at_label": format_time(record.last_update),
        }
        for record in view.records
    ]
    body["status_label"] = "Live" if view.is_live else "Offline"
    body["source"] = SOURCE_LABEL
    body["last_check_label"] = (
        view.last_successful_fetch_at.astimezone().strftime("%H:%M:%S")
        if view.last_successful_fetch_at
        else None
    )
    return body


def _board(request: Request):
    board = getattr(request.app.state, "quote_board", None)
    if board is None:
        raise HTTPException(status_code=503, detail="BOARD_NOT_READY")
    return board


@router.get('/board')
def get_board(request: Request):
    return _board_payload(_board(request).snapshot())


@router.post('/board/refresh')
def refresh_board(request: Request):
    return _board_payload(_board(request).request_manual_refresh())


@router.post('/board/retry')
def retry_board(request: Request):
    board = _board(request)
    if not board.request_retry():
        raise HTTPException(status_code=409, detail='RETRY_NOT_AVAILABLE')
    return JSONResponse(status_code=202, content={'scheduled': True, 'delay_sec': board.retry_delay_sec})


@router.get('/metrics/board')
def board_metrics(request: Request):
    return _board(request).metrics()
