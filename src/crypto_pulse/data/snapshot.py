"""Lock-protected market snapshot owned by a single monitor."""

from __future__ import annotations

from decimal import Decimal
import logging
import threading
from typing import Any, Dict, List, Optional

from crypto_pulse.data.models import Kline, OrderBook, PromptView, Trade


logger = logging.getLogger(__name__)

CHART_KLINE_LIMIT = 20
PROMPT_KLINE_LIMIT = 10
PROMPT_DEPTH_LIMIT = 50
PROMPT_TRADE_LIMIT = 50


def _tail(items: List[Any], limit: int) -> List[Any]:
    if limit <= 0:
        return []
    return list(items[-limit:])


def top_levels(levels: Dict[str, float], limit: int, descending: bool) -> Dict[str, float]:
    """Best `limit` price levels: highest first for bids, lowest first for asks."""
    ordered = sorted(levels.items(), key=lambda item: Decimal(item[0]), reverse=descending)
    return dict(ordered[:limit])


class SnapshotStore:
    """Latest klines, order book and trades for one symbol.

    Every mutation and every read goes through one lock, so a view never
    mixes fields from two concurrent writers. Nothing here performs I/O.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._klines: Dict[str, List[Kline]] = {}
        self._order_book = OrderBook()
        self._trades: List[Trade] = []
        self._sentiment = ""
        self._latest_chart: Dict[str, Any] = {}

    def replace_klines(self, interval: str, klines: List[Kline]) -> None:
        with self._lock:
            self._klines[interval] = list(klines)

    def replace_order_book(self, order_book: OrderBook) -> None:
        with self._lock:
            self._order_book = order_book.copy()

    def replace_trades(self, trades: List[Trade], sentiment: str = "neutral") -> None:
        with self._lock:
            self._trades = list(trades)
            self._sentiment = sentiment

    def chart_view(self, kline_limit: int = CHART_KLINE_LIMIT) -> Dict[str, Any]:
        with self._lock:
            klines = {
                interval: [k.to_dict() for k in _tail(rows, kline_limit)]
                for interval, rows in self._klines.items()
            }
            bids = dict(self._order_book.bids)
            asks = dict(self._order_book.asks)

        logger.debug(
            "Generated chart data: intervals=%s kline_count=%d bids_count=%d",
            len(klines),
            sum(len(rows) for rows in klines.values()),
            len(bids),
        )
        return {"kline": klines, "depth": {"bids": bids, "asks": asks}}

    def prompt_view(
        self,
        kline_limit: int = PROMPT_KLINE_LIMIT,
        depth_limit: int = PROMPT_DEPTH_LIMIT,
        trade_limit: int = PROMPT_TRADE_LIMIT,
    ) -> PromptView:
        with self._lock:
            return PromptView(
                klines={
                    interval: _tail(rows, kline_limit)
                    for interval, rows in self._klines.items()
                },
                bids=top_levels(self._order_book.bids, depth_limit, descending=True),
                asks=top_levels(self._order_book.asks, depth_limit, descending=False),
                trades=_tail(self._trades, trade_limit),
                sentiment=self._sentiment,
            )

    def order_book(self) -> OrderBook:
        with self._lock:
            return self._order_book.copy()

    def klines(self, interval: str) -> Optional[List[Kline]]:
        with self._lock:
            rows = self._klines.get(interval)
            return list(rows) if rows is not None else None

    def trades(self) -> List[Trade]:
        with self._lock:
            return list(self._trades)

    def set_latest_chart(self, chart: Dict[str, Any]) -> None:
        with self._lock:
            self._latest_chart = chart

    def latest_chart(self) -> Dict[str, Any]:
        with self._lock:
            return self._latest_chart
