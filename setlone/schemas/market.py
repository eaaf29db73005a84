from pydantic import BaseModel, ConfigDict, Field


class Candle(BaseModel):
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float


class CandlesResponse(BaseModel):
    candles: list[Candle]


class QuoteSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    price: float
    price_string: str = Field(alias="priceString")
    previous_close: float = Field(alias="previousClose")
    change: float
    change_percent: float = Field(alias="changePercent")
    high: float
    low: float
    volume: float
    market_time: str = Field(alias="marketTime")
    is_market_open: bool = Field(alias="isMarketOpen")
