import asyncio

import pytest

from setlone.errors import NoDataFound, UpstreamError
from setlone.exchanges import yahoo_adapter
from setlone.exchanges.yahoo_adapter import YahooEquityAdapter, extract_candles, extract_quote


def chart_payload(timestamps, open_, high, low, close, volume, meta=None):
    return {
        "chart": {
            "result": [
                {
                    "meta": meta or {},
                    "timestamp": timestamps,
                    "indicators": {
                        "quote": [{"open": open_, "high": high, "low": low, "close": close, "volume": volume}]
                    },
                }
            ]
        }
    }


def stub_upstream(monkeypatch, adapter, payload=None, error=None):
    calls = []

    async def fake_get_json(symbol, params):
        calls.append((symbol, params))
        if error is not None:
            raise error
        return payload

    monkeypatch.setattr(adapter, "_get_json", fake_get_json)
    return calls


def test_zero_price_row_is_dropped(monkeypatch):
    adapter = YahooEquityAdapter()
    stub_upstream(
        monkeypatch,
        adapter,
        chart_payload(
            [100, 200, 300],
            [10, 0, 30],
            [11, 0, 31],
            [9, 0, 29],
            [10.5, 0, 30.5],
            [1, 0, 3],
        ),
    )

    candles = asyncio.run(adapter.fetch_chart("AAPL", interval="1m", range_value="1d"))

    assert [c.time for c in candles] == [100, 300]
    assert candles[0].open == 10 and candles[0].close == 10.5 and candles[0].volume == 1
    assert candles[1].high == 31 and candles[1].low == 29


def test_candles_sorted_and_resort_is_noop():
    result = chart_payload(
        [1700000300000, 1700000000, 1700000120],
        [3, 1, 2],
        [3.1, 1.1, 2.1],
        [2.9, 0.9, 1.9],
        [3.05, 1.05, 2.05],
        [30, None, 20],
    )["chart"]["result"][0]

    candles = extract_candles(result)

    assert [c.time for c in candles] == [1700000000, 1700000120, 1700000300]
    assert candles[0].volume == 0.0
    assert sorted(candles, key=lambda c: c.time) == candles


def test_null_and_missing_prices_drop_the_row():
    result = chart_payload([1, 2, 3], [5, None, 7], [6, 6, 8], [4, 4], [5.5, 5.5, 7.5], [1, 1, 1])["chart"]["result"][0]
    assert [c.time for c in extract_candles(result)] == [1]


def test_symbol_passed_through_unchanged(monkeypatch):
    adapter = YahooEquityAdapter()
    calls = stub_upstream(monkeypatch, adapter, chart_payload([1], [1], [1], [1], [1], [1]))
    asyncio.run(adapter.fetch_chart("BTC", interval="5m", range_value="5d"))
    assert calls == [("BTC", {"interval": "5m", "range": "5d"})]


def test_non_success_status_is_no_data(monkeypatch):
    adapter = YahooEquityAdapter()
    stub_upstream(monkeypatch, adapter, error=UpstreamError("HTTP error! status: 404", upstream_status=404))
    with pytest.raises(NoDataFound) as info:
        asyncio.run(adapter.fetch_chart("NOPE"))
    assert info.value.public_message() == "No data found"


def test_transport_failure_stays_upstream_error(monkeypatch):
    adapter = YahooEquityAdapter()
    stub_upstream(monkeypatch, adapter, error=UpstreamError("connection reset"))
    with pytest.raises(UpstreamError):
        asyncio.run(adapter.fetch_quote("AAPL"))


@pytest.mark.parametrize("payload", [{}, {"chart": {}}, {"chart": {"result": None}}, {"chart": {"result": []}}])
def test_missing_result_is_no_data(monkeypatch, payload):
    adapter = YahooEquityAdapter()
    stub_upstream(monkeypatch, adapter, payload)
    with pytest.raises(NoDataFound):
        asyncio.run(adapter.fetch_chart("AAPL"))


def test_missing_quote_series_is_no_data():
    with pytest.raises(NoDataFound) as info:
        extract_candles({"timestamp": [1], "indicators": {"quote": [{}]}})
    assert info.value.message == "No quote data found"


def test_quote_change_metrics():
    snapshot = extract_quote({"regularMarketPrice": 110, "previousClose": 100, "marketState": "REGULAR"})
    assert snapshot.change == 10
    assert snapshot.change_percent == 10.0
    assert snapshot.price_string == "110.00"
    assert snapshot.is_market_open is True


def test_quote_price_priority():
    assert extract_quote({"regularMarketPrice": 5, "currentPrice": 4, "previousClose": 3}).price == 5
    assert extract_quote({"currentPrice": 4, "previousClose": 3}).price == 4
    assert extract_quote({"previousClose": 3}).price == 3
    empty = extract_quote({})
    assert empty.price == 0
    assert empty.change_percent == 0


def test_quote_without_previous_close_has_zero_change():
    snapshot = extract_quote({"regularMarketPrice": 42})
    assert snapshot.previous_close == 42
    assert snapshot.change == 0
    assert snapshot.change_percent == 0


@pytest.mark.parametrize("state,expected", [("REGULAR", True), ("PRE", True), ("POST", True), ("CLOSED", False), (None, False)])
def test_market_open_states(state, expected):
    meta = {"regularMarketPrice": 1}
    if state is not None:
        meta["marketState"] = state
    assert extract_quote(meta).is_market_open is expected


def test_quote_fallbacks_and_market_time(monkeypatch):
    adapter = YahooEquityAdapter()
    stub_upstream(
        monkeypatch,
        adapter,
        chart_payload([], [], [], [], [], [], meta={"regularMarketPrice": 20, "dayHigh": 21, "regularMarketTime": 1700000000}),
    )
    snapshot = asyncio.run(adapter.fetch_quote("MSFT"))
    assert snapshot.high == 21
    assert snapshot.low == 20
    assert snapshot.volume == 0
    assert snapshot.market_time == "2023-11-14T22:13:20Z"
    dumped = snapshot.model_dump(by_alias=True)
    assert set(dumped) == {
        "price", "priceString", "previousClose", "change", "changePercent",
        "high", "low", "volume", "marketTime", "isMarketOpen",
    }


@pytest.mark.parametrize("result", [{}, {"meta": None}, {"meta": {}}])
def test_quote_without_meta_is_no_data(monkeypatch, result):
    adapter = YahooEquityAdapter()
    stub_upstream(monkeypatch, adapter, {"chart": {"result": [result]}})
    with pytest.raises(NoDataFound) as info:
        asyncio.run(adapter.fetch_quote("AAPL"))
    assert info.value.context == {"symbol": "AAPL"}


def test_market_time_defaults_to_now_in_whole_seconds(monkeypatch):
    monkeypatch.setattr(yahoo_adapter.time, "time", lambda: 1700000000.987654)
    snapshot = extract_quote({"regularMarketPrice": 1})
    assert snapshot.market_time == "2023-11-14T22:13:20Z"
