from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request

from setlone.api.dependencies import get_equity_adapter, get_futures_adapter
from setlone.exchanges.base import ChartSource, QuoteSource
from setlone.schemas.common import ErrorResponse
from setlone.schemas.market import CandlesResponse, QuoteSnapshot
from setlone.utils.validators import validate_symbol

logger = logging.getLogger(__name__)
router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid symbol"},
    404: {"model": ErrorResponse, "description": "No data found"},
    500: {"model": ErrorResponse, "description": "Upstream failure"},
}


@router.get("/health", tags=["health"])
def health(request: Request):
    state = request.app.state
    request_metrics = state.observability.request_metrics()
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(state.observability.uptime_seconds(), 3),
        "environment": state.settings.environment,
        "database": {
            "connected": state.db.test_connection(),
            "pool": state.db.pool_status(),
        },
        "api_latency_ms": {
            "request_count": request_metrics.request_count,
            "error_count": request_metrics.error_count,
            "average": request_metrics.average_ms,
            "max": request_metrics.max_ms,
            "last": request_metrics.last_ms,
        },
    }


@router.get("/stock/price/{symbol}", response_model=QuoteSnapshot, responses=ERROR_RESPONSES, tags=["market"])
async def stock_price(symbol: str, adapter: QuoteSource = Depends(get_equity_adapter)):
    """Latest equity quote with change metrics."""
    validate_symbol(symbol)
    return await adapter.fetch_quote(symbol)


@router.get("/stock/chart/{symbol}", response_model=CandlesResponse, responses=ERROR_RESPONSES, tags=["market"])
async def stock_chart(
    symbol: str,
    interval: str = Query("1m"),
    range_value: str = Query("1d", alias="range"),
    adapter: ChartSource = Depends(get_equity_adapter),
):
    """Equity candles, oldest first, with zero-price rows dropped."""
    validate_symbol(symbol)
    candles = await adapter.fetch_chart(symbol, interval=interval, range_value=range_value)
    return CandlesResponse(candles=candles)


@router.get("/futures/chart/{symbol}", response_model=CandlesResponse, responses=ERROR_RESPONSES, tags=["market"])
async def futures_chart(
    symbol: str,
    interval: str = Query("1m"),
    limit: int = Query(500, ge=1, le=1500),
    adapter: ChartSource = Depends(get_futures_adapter),
):
    validate_symbol(symbol)
    candles = await adapter.fetch_chart(symbol, interval=interval, limit=limit)
    return CandlesResponse(candles=candles)
