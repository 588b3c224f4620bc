"""Shared fixtures: an in-memory Binance stand-in served through httpx.MockTransport."""

from __future__ import annotations

import dataclasses
from typing import Dict, List, Set

import httpx
import pytest

from crypto_pulse.config import settings
from crypto_pulse.ingest.binance import BinanceClient
from crypto_pulse.report.store import ReportStore
from crypto_pulse.service import CryptoPulseService


API_BASE = "https://api.test"


def kline_rows(count: int, start_ms: int = 1_700_000_000_000, step_ms: int = 900_000) -> List[list]:
    rows = []
    for i in range(count):
        open_time = start_ms + i * step_ms
        price = f"{100 + i}.00"
        rows.append(
            [open_time, price, price, price, price, "12.5", open_time + step_ms - 1, "0", 7, "0", "0", "0"]
        )
    return rows


def trade_rows(count: int) -> List[dict]:
    return [{"a": i, "p": "100.0", "q": "0.5", "T": 1_700_000_000_000 + i, "m": i % 2 == 0} for i in range(count)]


def depth_payload(levels: int = 60, last_update_id: int = 1) -> dict:
    return {
        "lastUpdateId": last_update_id,
        "bids": [[f"{1000 - i}.00", "1.0"] for i in range(levels)],
        "asks": [[f"{1001 + i}.00", "2.0"] for i in range(levels)],
    }


class FakeExchange:
    def __init__(self) -> None:
        self.klines: Dict[str, list] = {}
        self.depth = depth_payload()
        self.trades = trade_rows(80)
        self.symbols = ["BTCUSDT", "ETHUSDT", "ETHBTC"]
        self.broken: Set[str] = set()
        self.calls: List[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append(path)
        if path in self.broken:
            return httpx.Response(200, text="not json")
        if path == "/api/v3/klines":
            interval = request.url.params["interval"]
            rows = self.klines.get(interval, kline_rows(100))
            return httpx.Response(200, json=rows)
        if path == "/api/v3/depth":
            return httpx.Response(200, json=self.depth)
        if path == "/api/v3/aggTrades":
            return httpx.Response(200, json=self.trades)
        if path == "/api/v3/exchangeInfo":
            return httpx.Response(200, json={"symbols": [{"symbol": s} for s in self.symbols]})
        return httpx.Response(404, json={"code": -1, "msg": "unknown path"})

    def client(self) -> BinanceClient:
        http_client = httpx.Client(transport=httpx.MockTransport(self.handler))
        return BinanceClient(http_client=http_client, api_base=API_BASE, retry_count=0, retry_wait_s=0)

    def count(self, path: str) -> int:
        return self.calls.count(path)


@pytest.fixture
def fake_exchange() -> FakeExchange:
    return FakeExchange()


@pytest.fixture
def test_settings(tmp_path):
    return dataclasses.replace(settings, report_dir=str(tmp_path / "reports"), ai_endpoint="manual")


@pytest.fixture
def report_store(test_settings) -> ReportStore:
    return ReportStore(test_settings.report_dir)


@pytest.fixture
def service(test_settings, fake_exchange, report_store):
    svc = CryptoPulseService(test_settings, exchange=fake_exchange.client(), report_store=report_store)
    yield svc
    svc.close()
