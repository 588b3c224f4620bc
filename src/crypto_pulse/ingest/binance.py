"""Binance spot REST ingestion (klines, depth, aggregated trades)."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
import logging
import math
import time
from typing import Any, List, Optional
from urllib.parse import urlparse

import httpx

from crypto_pulse.config import Settings, settings
from crypto_pulse.data.models import Kline, OrderBook, Trade
from crypto_pulse.errors import DecodeError, TransportError


logger = logging.getLogger(__name__)


def _load_proxy(proxy_url: str) -> str | None:
    if not proxy_url:
        return None
    parsed = urlparse(proxy_url)
    if parsed.scheme not in {"http", "https", "socks5", "socks5h"} or not parsed.hostname:
        logger.error("Invalid HTTP proxy URL: %s", proxy_url)
        return None
    logger.info("Using HTTP proxy: %s", proxy_url)
    return proxy_url


def create_http_client(config: Settings = settings) -> httpx.Client:
    """Shared client for every monitor of one process."""
    logger.debug(
        "Configuring proxies: proxy_url=%s ws_proxy_url=%s",
        config.proxy_url,
        config.ws_proxy_url,
    )
    return httpx.Client(
        timeout=config.http_timeout_s,
        proxy=_load_proxy(config.proxy_url),
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_klines(payload: Any) -> List[Kline]:
    if not isinstance(payload, list):
        raise DecodeError(f"decode klines failed: expected array, got {type(payload).__name__}")
    klines: List[Kline] = []
    for index, row in enumerate(payload):
        if (
            not isinstance(row, list)
            or len(row) < 7
            or not _is_number(row[0])
            or not _is_number(row[6])
            or not all(isinstance(value, str) for value in row[1:6])
        ):
            raise DecodeError(f"decode klines failed: malformed row {index}")
        klines.append(
            Kline(
                open_time=int(row[0]),
                open=row[1],
                high=row[2],
                low=row[3],
                close=row[4],
                volume=row[5],
                close_time=int(row[6]),
            )
        )
    klines.sort(key=lambda k: k.open_time)
    return klines


def _parse_levels(rows: Any, side: str) -> dict[str, float]:
    if not isinstance(rows, list):
        raise DecodeError(f"decode depth failed: {side} is not an array")
    levels: dict[str, float] = {}
    skipped = 0
    for row in rows:
        if not isinstance(row, list) or len(row) != 2 or not all(isinstance(v, str) for v in row):
            raise DecodeError(f"decode depth failed: malformed {side} level")
        price, qty = row
        # Unparseable numbers only drop the level; the rest of the book is kept.
        try:
            if not Decimal(price).is_finite():
                raise InvalidOperation(price)
            quantity = float(qty)
            if not math.isfinite(quantity):
                raise ValueError(qty)
            levels[price] = quantity
        except (InvalidOperation, ValueError):
            skipped += 1
    if skipped:
        logger.debug("Skipped %d unparseable %s levels", skipped, side)
    return levels


def parse_depth(payload: Any) -> OrderBook:
    if not isinstance(payload, dict):
        raise DecodeError("decode depth failed: expected object")
    last_update_id = payload.get("lastUpdateId")
    if not _is_number(last_update_id):
        raise DecodeError("decode depth failed: missing lastUpdateId")
    return OrderBook(
        last_update_id=int(last_update_id),
        bids=_parse_levels(payload.get("bids"), "bids"),
        asks=_parse_levels(payload.get("asks"), "asks"),
    )


def parse_trades(payload: Any) -> List[Trade]:
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise DecodeError("decode trades failed: expected array of objects")
    return list(payload)


def parse_symbols(payload: Any, query: str = "") -> List[str]:
    if not isinstance(payload, dict) or not isinstance(payload.get("symbols"), list):
        raise DecodeError("decode exchange info failed: missing symbols")
    needle = query.strip().lower()
    symbols: List[str] = []
    for item in payload["symbols"]:
        symbol = item.get("symbol") if isinstance(item, dict) else None
        if not isinstance(symbol, str):
            raise DecodeError("decode exchange info failed: malformed symbol entry")
        if not needle or needle in symbol.lower():
            symbols.append(symbol)
    return symbols


class BinanceClient:
    """Read-only client for the public Binance spot endpoints."""

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        api_base: Optional[str] = None,
        retry_count: Optional[int] = None,
        retry_wait_s: Optional[float] = None,
        config: Settings = settings,
    ) -> None:
        self.http_client = http_client or create_http_client(config)
        self.api_base = (api_base or config.binance_api_base).rstrip("/")
        self.retry_count = config.http_retry_count if retry_count is None else retry_count
        self.retry_wait_s = config.http_retry_wait_s if retry_wait_s is None else retry_wait_s

    def fetch_klines(self, symbol: str, interval: str, limit: int = 100) -> List[Kline]:
        payload = self._get_json(
            "/api/v3/klines",
            {"symbol": symbol, "interval": interval, "limit": limit},
            what="klines",
        )
        return parse_klines(payload)

    def fetch_depth(self, symbol: str, limit: int = 1000) -> OrderBook:
        payload = self._get_json(
            "/api/v3/depth", {"symbol": symbol, "limit": limit}, what="depth"
        )
        return parse_depth(payload)

    def fetch_trades(self, symbol: str, limit: int = 500) -> List[Trade]:
        payload = self._get_json(
            "/api/v3/aggTrades", {"symbol": symbol, "limit": limit}, what="trades"
        )
        return parse_trades(payload)

    def fetch_symbols(self, query: str = "") -> List[str]:
        payload = self._get_json("/api/v3/exchangeInfo", {}, what="exchange info")
        return parse_symbols(payload, query)

    def close(self) -> None:
        self.http_client.close()

    def _get_json(self, path: str, params: dict, what: str) -> Any:
        url = self.api_base + path
        attempts = self.retry_count + 1
        for attempt in range(1, attempts + 1):
            try:
                response = self.http_client.get(url, params=params)
                break
            except httpx.TransportError as exc:
                if attempt < attempts:
                    logger.warning(
                        "Fetch %s attempt %d/%d failed: %s", what, attempt, attempts, exc
                    )
                    time.sleep(self.retry_wait_s * attempt)
                    continue
                logger.error("Fetch %s error: url=%s err=%s", what, url, exc)
                raise TransportError(f"fetch {what} failed: {exc}") from exc

        logger.debug("Fetched %s: url=%s status=%d", what, response.url, response.status_code)
        if response.is_error:
            raise TransportError(f"fetch {what} failed: HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Unmarshal %s error: %s", what, exc)
            raise DecodeError(f"decode {what} failed: {exc}") from exc
