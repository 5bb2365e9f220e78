from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_sale_recorder, get_session_lifecycle
from ..schemas.sales import SaleCreate, SaleOut, SessionCreate, SessionDetail, SessionOut, WeatherUpdate
from ..services.sale_recorder import SaleRecorder
from ..services.session_lifecycle import SessionLifecycle

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.get("", response_model=list[SessionOut])
def api_list(active: bool = False, sessions: SessionLifecycle = Depends(get_session_lifecycle)):
    if active:
        return sessions.active_sessions()
    return sessions.list_sessions()


@router.post("", response_model=SessionDetail, status_code=201)
def api_create(payload: SessionCreate, sessions: SessionLifecycle = Depends(get_session_lifecycle)):
    try:
        return sessions.create_session(
            payload.title,
            location=payload.location,
            session_date=payload.session_date,
            weather=payload.weather,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/{session_id}", response_model=SessionDetail)
def api_get(session_id: int, sessions: SessionLifecycle = Depends(get_session_lifecycle)):
    return sessions.get_session(session_id)


@router.post("/{session_id}/close", response_model=SessionDetail)
def api_close(session_id: int, sessions: SessionLifecycle = Depends(get_session_lifecycle)):
    return sessions.close_session(session_id)


@router.patch("/{session_id}/weather", response_model=SessionDetail)
def api_weather(
    session_id: int,
    payload: WeatherUpdate,
    sessions: SessionLifecycle = Depends(get_session_lifecycle),
):
    return sessions.update_weather(session_id, payload.weather)


@router.get("/{session_id}/sales", response_model=list[SaleOut])
def api_list_sales(session_id: int, sales: SaleRecorder = Depends(get_sale_recorder)):
    return sales.sales_for_session(session_id)


@router.post("/{session_id}/sales", response_model=SaleOut, status_code=201)
def api_record_sale(session_id: int, payload: SaleCreate, sales: SaleRecorder = Depends(get_sale_recorder)):
    return sales.record_sale(
        session_id,
        payload.item_id,
        payload.quantity,
        unit_price=payload.unit_price,
        note=payload.note,
        payment_method=payload.payment_method,
        cash_received=payload.cash_received,
        sold_at=payload.sold_at,
    )
