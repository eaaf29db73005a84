from __future__ import annotations

from typing import Protocol

from setlone.schemas.market import Candle, QuoteSnapshot


class ChartSource(Protocol):
    """Anything that can turn a provider's series into normalized candles."""

    async def fetch_chart(self, symbol: str, interval: str, **params) -> list[Candle]:
        ...


class QuoteSource(Protocol):
    async def fetch_quote(self, symbol: str) -> QuoteSnapshot:
        ...
