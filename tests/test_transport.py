import asyncio
import time
from urllib.parse import parse_qs, urlparse

import pytest

from setlone.errors import UpstreamError
from setlone.exchanges import transport
from setlone.exchanges.binance_adapter import BinanceFuturesAdapter
from setlone.exchanges.yahoo_adapter import BROWSER_HEADERS, YahooEquityAdapter


def capture_blocking(monkeypatch, payload=None, error=None):
    calls = []

    def fake_blocking(url, headers, timeout):
        calls.append({"url": url, "headers": headers, "timeout": timeout})
        if error is not None:
            raise error
        return payload

    monkeypatch.setattr(transport, "_get_json_blocking", fake_blocking)
    return calls


def test_cache_buster_is_appended(monkeypatch):
    calls = capture_blocking(monkeypatch, payload={"ok": True})
    before = int(time.time() * 1000)

    payload = asyncio.run(transport.fetch_json("https://example.test/x", {"a": 1}, {}, timeout=1))

    assert payload == {"ok": True}
    query = parse_qs(urlparse(calls[0]["url"]).query)
    assert query["a"] == ["1"]
    assert int(query["_"][0]) >= before


def test_equity_adapter_sends_browser_headers(monkeypatch):
    calls = capture_blocking(monkeypatch, payload={"chart": {"result": [{"meta": {"regularMarketPrice": 1}}]}})
    asyncio.run(YahooEquityAdapter(base_url="https://example.test/chart").fetch_quote("^GSPC"))

    parsed = urlparse(calls[0]["url"])
    assert parsed.path == "/chart/%5EGSPC"
    assert parse_qs(parsed.query)["interval"] == ["1m"]
    assert calls[0]["headers"] == BROWSER_HEADERS


def test_futures_adapter_sends_no_browser_headers(monkeypatch):
    calls = capture_blocking(monkeypatch, payload=[])
    asyncio.run(BinanceFuturesAdapter(base_url="https://example.test/klines").fetch_chart("BTC"))

    assert "User-Agent" not in calls[0]["headers"]
    assert "_" in parse_qs(urlparse(calls[0]["url"]).query)


def test_futures_non_success_carries_status(monkeypatch):
    capture_blocking(monkeypatch, error=UpstreamError("HTTP error! status: 451", upstream_status=451))
    with pytest.raises(UpstreamError) as info:
        asyncio.run(BinanceFuturesAdapter().fetch_chart("BTC"))
    assert info.value.upstream_status == 451
    assert "451" in info.value.public_message()


def test_slow_upstream_times_out(monkeypatch):
    def slow(url, headers, timeout):
        time.sleep(0.3)
        return {}

    monkeypatch.setattr(transport, "_get_json_blocking", slow)
    with pytest.raises(UpstreamError) as info:
        asyncio.run(transport.fetch_json("https://example.test/slow", {}, {}, timeout=0.05))
    assert "timed out" in info.value.message
