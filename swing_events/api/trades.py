"""Trade inspection and admin actions."""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from swing_events.api.deps import get_processor, require_api_token
from swing_events.database import get_session
from swing_events.engine import ledger
from swing_events.engine.errors import TradeNotFoundError
from swing_events.engine.router import EventProcessor
from swing_events.engine.store import TradeStore
from swing_events.models.trade import Trade
from swing_events.schemas.trade import (
    CloseRequest,
    LedgerEventRead,
    ResetRequest,
    StopRead,
    TradeDetail,
    TradeRead,
    TransitionRead,
)
from swing_events.services.publishers import PublishError

router = APIRouter(prefix="/api/trades", tags=["trades"], dependencies=[Depends(require_api_token)])


@router.get("", response_model=list[TradeRead])
def list_trades(
    status: str | None = None,
    symbol: str | None = None,
    limit: int = 50,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    stmt = select(Trade).order_by(Trade.updated_at.desc())
    if status is not None:
        stmt = stmt.where(Trade.status == status)
    if symbol is not None:
        stmt = stmt.where(Trade.symbol == symbol.upper())
    stmt = stmt.offset(offset).limit(limit)
    return session.exec(stmt).all()


@router.get("/{trade_id}", response_model=TradeDetail)
def get_trade(trade_id: int, session: Session = Depends(get_session)):
    trade = session.get(Trade, trade_id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")
    stops = TradeStore(session).list_stops(trade_id)
    detail = TradeDetail.model_validate(trade)
    detail.stops = [StopRead.model_validate(s) for s in stops]
    return detail


@router.get("/{trade_id}/ledger", response_model=list[LedgerEventRead])
def trade_ledger(
    trade_id: int,
    limit: int = 200,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    return ledger.history(session, trade_id, limit=limit, offset=offset)


@router.post("/{trade_id}/reset", response_model=TransitionRead)
def reset_trade(trade_id: int, body: ResetRequest, processor: EventProcessor = Depends(get_processor)):
    try:
        result = processor.reset(trade_id, body.reason)
    except TradeNotFoundError:
        raise HTTPException(status_code=404, detail="Trade not found")
    return TransitionRead(trade_id=result.trade_id, status=result.status, message=result.message)


@router.post("/{trade_id}/close", response_model=TransitionRead)
def close_trade(trade_id: int, body: CloseRequest, processor: EventProcessor = Depends(get_processor)):
    try:
        result = processor.close(trade_id, body.outcome, body.notes)
    except TradeNotFoundError:
        raise HTTPException(status_code=404, detail="Trade not found")
    except PublishError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return TransitionRead(trade_id=result.trade_id, status=result.status, message=result.message)
