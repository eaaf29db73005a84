from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from setlone.auth import Principal, require_principal
from setlone.schemas.common import ErrorResponse, MessageResponse
from setlone.schemas.trading import (
    StartTradingRequest,
    StartTradingResponse,
    StopTradingRequest,
    StrategiesResponse,
    TradingHistoryResponse,
    TradingStatsResponse,
)
from setlone.services import trading_service

router = APIRouter(prefix="/trading", tags=["trading"])

AUTH_RESPONSES = {401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"}}


@router.get("/strategies", response_model=StrategiesResponse)
def strategies():
    return StrategiesResponse(data=trading_service.list_strategies())


@router.post("/start", response_model=StartTradingResponse, responses={**AUTH_RESPONSES, 400: {"model": ErrorResponse}})
def start(payload: StartTradingRequest, principal: Principal = Depends(require_principal)):
    session = trading_service.start_session(principal.id, payload.symbol, payload.strategy, payload.initial_balance)
    return StartTradingResponse(message="AI trading started", data=session)


@router.post("/stop", response_model=MessageResponse, responses=AUTH_RESPONSES)
def stop(payload: StopTradingRequest, principal: Principal = Depends(require_principal)):
    trading_service.stop_session(principal.id, payload.sessionId)
    return MessageResponse(message="AI trading stopped")


@router.get("/history", response_model=TradingHistoryResponse, responses=AUTH_RESPONSES)
def history(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    limit: int = Query(50, ge=1, le=500),
    principal: Principal = Depends(require_principal),
):
    return TradingHistoryResponse(data=trading_service.history(principal.id, session_id, limit))


@router.get("/stats", response_model=TradingStatsResponse, responses=AUTH_RESPONSES)
def stats(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    principal: Principal = Depends(require_principal),
):
    return TradingStatsResponse(data=trading_service.stats(principal.id, session_id), sessionId=session_id)
