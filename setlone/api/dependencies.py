from fastapi import Request

from setlone.auth import PasswordHasher
from setlone.exchanges.binance_adapter import BinanceFuturesAdapter
from setlone.exchanges.yahoo_adapter import YahooEquityAdapter


def get_equity_adapter(request: Request) -> YahooEquityAdapter:
    return request.app.state.equity_adapter


def get_futures_adapter(request: Request) -> BinanceFuturesAdapter:
    return request.app.state.futures_adapter


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher
