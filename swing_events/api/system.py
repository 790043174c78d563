"""System API — health check and event processing log."""

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from swing_events.api.deps import require_api_token
from swing_events.database import get_session
from swing_events.models.event_log import EventLog

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.get("/logs", dependencies=[Depends(require_api_token)])
def event_logs(
    trade_id: int | None = None,
    status: str | None = None,
    event_type: str | None = None,
    limit: int = 100,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    stmt = select(EventLog).order_by(EventLog.timestamp.desc())
    if trade_id is not None:
        stmt = stmt.where(EventLog.trade_id == trade_id)
    if status is not None:
        stmt = stmt.where(EventLog.status == status)
    if event_type is not None:
        stmt = stmt.where(EventLog.event_type == event_type)
    stmt = stmt.offset(offset).limit(limit)
    return session.exec(stmt).all()
