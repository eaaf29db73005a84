"""AI auto-trading endpoints. Sessions are not persisted yet; every call is a stub."""
from __future__ import annotations

import logging
import time
from typing import Optional

from setlone.errors import ValidationError
from setlone.schemas.trading import Strategy, TradeRecord, TradingSession, TradingStats

logger = logging.getLogger(__name__)

STRATEGIES = [
    Strategy(id="momentum", name="Momentum Strategy", description="Short-term trading using price momentum"),
    Strategy(id="mean_reversion", name="Mean Reversion Strategy", description="Trading using mean price reversion"),
    Strategy(id="trend_following", name="Trend Following Strategy", description="Medium to long-term trend following"),
]
_STRATEGY_IDS = {strategy.id for strategy in STRATEGIES}


def list_strategies() -> list[Strategy]:
    return list(STRATEGIES)


def start_session(user_id: int, symbol: str, strategy: str, initial_balance: float) -> TradingSession:
    if strategy not in _STRATEGY_IDS:
        raise ValidationError(f"Unknown strategy '{strategy}'")
    session_id = f"session_{int(time.time() * 1000)}_{user_id}"
    logger.info(
        "trading_session_started",
        extra={"user_id": user_id, "session_id": session_id, "symbol": symbol, "initial_balance": initial_balance},
    )
    return TradingSession(sessionId=session_id, symbol=symbol, strategy=strategy)


def stop_session(user_id: int, session_id: str):
    logger.info("trading_session_stopped", extra={"user_id": user_id, "session_id": session_id})


def history(user_id: int, session_id: Optional[str] = None, limit: int = 50) -> list[TradeRecord]:
    # TODO: read executed trades once trading sessions are persisted
    return []


def stats(user_id: int, session_id: Optional[str] = None) -> TradingStats:
    return TradingStats()
