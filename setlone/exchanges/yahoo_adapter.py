from __future__ import annotations

import time
from typing import Any
from urllib.parse import quote

from setlone.config.settings import settings
from setlone.errors import NoDataFound, UpstreamError
from setlone.exchanges.transport import fetch_json
from setlone.schemas.market import Candle, QuoteSnapshot
from setlone.utils.validators import change_metrics, epoch_to_iso, to_epoch_seconds, to_native_float

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

OPEN_MARKET_STATES = {"REGULAR", "PRE", "POST"}


def _value_at(values: list[Any] | None, idx: int) -> float:
    if not values or idx >= len(values):
        return 0.0
    return to_native_float(values[idx])


def extract_candles(result: dict[str, Any]) -> list[Candle]:
    """Zip Yahoo's parallel OHLCV arrays into candles, dropping rows with a non-positive price."""
    timestamps = result.get("timestamp") or []
    quotes = (result.get("indicators") or {}).get("quote") or []
    series = quotes[0] if quotes else None
    if not series or not series.get("open"):
        raise NoDataFound("No quote data found")

    candles: list[Candle] = []
    for idx, ts in enumerate(timestamps):
        open_ = _value_at(series.get("open"), idx)
        high = _value_at(series.get("high"), idx)
        low = _value_at(series.get("low"), idx)
        close = _value_at(series.get("close"), idx)
        if not (open_ > 0 and high > 0 and low > 0 and close > 0):
            continue
        candles.append(
            Candle(
                time=to_epoch_seconds(ts),
                open=open_,
                high=high,
                low=low,
                close=close,
                volume=_value_at(series.get("volume"), idx),
            )
        )
    candles.sort(key=lambda candle: candle.time)
    return candles


def extract_quote(meta: dict[str, Any]) -> QuoteSnapshot:
    price = to_native_float(meta.get("regularMarketPrice") or meta.get("currentPrice") or meta.get("previousClose"))
    previous_close = to_native_float(meta.get("previousClose") or price)
    change, change_percent = change_metrics(price, previous_close)

    market_time = meta.get("regularMarketTime")
    market_time_iso = epoch_to_iso(to_native_float(market_time)) if market_time else epoch_to_iso(int(time.time()))

    return QuoteSnapshot(
        price=price,
        price_string=f"{price:.2f}",
        previous_close=previous_close,
        change=change,
        change_percent=change_percent,
        high=to_native_float(meta.get("regularMarketDayHigh") or meta.get("dayHigh") or price),
        low=to_native_float(meta.get("regularMarketDayLow") or meta.get("dayLow") or price),
        volume=to_native_float(meta.get("regularMarketVolume") or meta.get("volume")),
        market_time=market_time_iso,
        is_market_open=meta.get("marketState") in OPEN_MARKET_STATES,
    )


class YahooEquityAdapter:
    """Equity quotes and charts from the Yahoo Finance chart endpoint."""

    def __init__(self, base_url: str | None = None, timeout_seconds: float | None = None):
        self.base_url = (base_url or settings.equity_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds

    async def _get_json(self, symbol: str, params: dict[str, Any]) -> dict[str, Any]:
        return await fetch_json(
            f"{self.base_url}/{quote(symbol, safe='')}",
            params,
            headers=BROWSER_HEADERS,
            timeout=self.timeout_seconds,
        )

    async def _fetch_chart_result(self, symbol: str, interval: str, range_value: str) -> dict[str, Any]:
        try:
            payload = await self._get_json(symbol, {"interval": interval, "range": range_value})
        except UpstreamError as exc:
            if exc.upstream_status is not None:
                raise NoDataFound(context={"symbol": symbol, "upstream_status": exc.upstream_status}) from exc
            raise

        results = ((payload or {}).get("chart") or {}).get("result") or []
        if not results:
            raise NoDataFound(context={"symbol": symbol})
        return results[0]

    async def fetch_quote(self, symbol: str) -> QuoteSnapshot:
        result = await self._fetch_chart_result(symbol, interval="1m", range_value="1d")
        meta = result.get("meta")
        if not meta:
            raise NoDataFound(context={"symbol": symbol})
        return extract_quote(meta)

    async def fetch_chart(self, symbol: str, interval: str = "1m", range_value: str = "1d") -> list[Candle]:
        result = await self._fetch_chart_result(symbol, interval=interval, range_value=range_value)
        return extract_candles(result)
