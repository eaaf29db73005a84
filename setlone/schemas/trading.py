from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Strategy(BaseModel):
    id: str
    name: str
    description: str


class StrategiesResponse(BaseModel):
    success: bool = True
    data: list[Strategy]


class StartTradingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    strategy: str
    initial_balance: float = Field(10000, alias="initialBalance", gt=0)


class TradingSession(BaseModel):
    sessionId: str
    symbol: str
    strategy: str


class StartTradingResponse(BaseModel):
    success: bool = True
    message: str
    data: TradingSession


class StopTradingRequest(BaseModel):
    sessionId: str


class TradeRecord(BaseModel):
    id: int
    symbol: str
    action: str
    price: float
    amount: float
    profit: float
    timestamp: str


class TradingHistoryResponse(BaseModel):
    success: bool = True
    data: list[TradeRecord]


class TradingStats(BaseModel):
    totalTrades: int = 0
    winRate: float = 0
    totalProfit: float = 0
    profitPercent: float = 0


class TradingStatsResponse(BaseModel):
    success: bool = True
    data: TradingStats
    sessionId: Optional[str] = None
