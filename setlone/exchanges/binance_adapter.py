from __future__ import annotations

from typing import Any

from setlone.config.settings import settings
from setlone.errors import UpstreamError
from setlone.exchanges.transport import fetch_json
from setlone.schemas.market import Candle
from setlone.utils.validators import to_native_float

CRYPTO_BASES = frozenset({"BTC", "ETH", "XRP", "BNB", "SOL", "ADA", "DOGE", "DOT"})
QUOTE_CURRENCY = "USDT"
FORWARDED_INTERVALS = frozenset({"1m", "5m", "15m", "1h"})
FALLBACK_INTERVAL = "1d"


def to_futures_symbol(symbol: str) -> str:
    if symbol in CRYPTO_BASES:
        return f"{symbol}{QUOTE_CURRENCY}"
    return symbol


def to_futures_interval(interval: str) -> str:
    return interval if interval in FORWARDED_INTERVALS else FALLBACK_INTERVAL


def kline_to_candle(kline: list[Any]) -> Candle:
    # [openTime_ms, open, high, low, close, volume, closeTime, ...]
    fields = [to_native_float(kline[idx]) if idx < len(kline) else 0.0 for idx in range(6)]
    return Candle(
        time=int(fields[0]) // 1000,
        open=fields[1],
        high=fields[2],
        low=fields[3],
        close=fields[4],
        volume=fields[5],
    )


class BinanceFuturesAdapter:
    """Perpetual futures klines from Binance USDⓈ-M. Rows come back oldest first."""

    def __init__(self, base_url: str | None = None, timeout_seconds: float | None = None):
        self.base_url = base_url or settings.futures_base_url
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds

    async def _get_json(self, params: dict[str, Any]) -> Any:
        return await fetch_json(
            self.base_url,
            params,
            headers={"Accept": "application/json"},
            timeout=self.timeout_seconds,
        )

    async def fetch_chart(self, symbol: str, interval: str = "1m", limit: int | None = None) -> list[Candle]:
        params = {
            "symbol": to_futures_symbol(symbol),
            "interval": to_futures_interval(interval),
            "limit": limit or settings.futures_default_limit,
        }
        payload = await self._get_json(params)
        if not isinstance(payload, list):
            raise UpstreamError("Unexpected futures payload", context={"symbol": params["symbol"]})
        return [kline_to_candle(kline) for kline in payload]
