"""Event ingress — Pub/Sub push and direct JSON delivery.

Any non-2xx reply makes the push subscription redeliver, which is how a
missing trade or a failed alert gets retried.
"""

import binascii
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from swing_events.api.deps import get_processor, require_push_token
from swing_events.engine.errors import TradeNotFoundError
from swing_events.engine.router import EventProcessor
from swing_events.schemas.event import PubSubPush, TradeEvent
from swing_events.schemas.trade import TransitionRead
from swing_events.services.publishers import PublishError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"], dependencies=[Depends(require_push_token)])


def _errors(e: ValidationError) -> list:
    return e.errors(include_url=False, include_context=False)


def _handle(event: TradeEvent, processor: EventProcessor) -> TransitionRead:
    logger.info(f"Received event: {event.model_dump_json(by_alias=True)}")
    try:
        result = processor.process(event)
    except TradeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PublishError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_errors(e))
    return TransitionRead(trade_id=result.trade_id, status=result.status, message=result.message)


@router.post("/pubsub", response_model=TransitionRead)
def receive_pubsub(body: PubSubPush, processor: EventProcessor = Depends(get_processor)):
    try:
        event = body.decode_event()
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Undecodable message data: {e}")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_errors(e))
    return _handle(event, processor)


@router.post("", response_model=TransitionRead)
def receive_event(event: TradeEvent, processor: EventProcessor = Depends(get_processor)):
    return _handle(event, processor)
