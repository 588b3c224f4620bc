from __future__ import annotations

from crypto_pulse.data.models import OrderBook
from crypto_pulse.data.snapshot import SnapshotStore, top_levels
from crypto_pulse.ingest.binance import parse_klines

from conftest import kline_rows, trade_rows


def _filled_store() -> SnapshotStore:
    store = SnapshotStore()
    store.replace_klines("15m", parse_klines(kline_rows(100)))
    store.replace_klines("1h", parse_klines(kline_rows(5)))
    store.replace_order_book(
        OrderBook(
            last_update_id=7,
            bids={f"{1000 - i}": 1.0 for i in range(80)},
            asks={f"{1001 + i}": 1.0 for i in range(80)},
        )
    )
    store.replace_trades(trade_rows(120))
    return store


def test_chart_view_keeps_last_twenty_klines():
    chart = _filled_store().chart_view()
    rows = chart["kline"]["15m"]
    assert len(rows) == 20
    assert rows[-1]["open"] == "199.00"
    assert len(chart["kline"]["1h"]) == 5
    assert len(chart["depth"]["bids"]) == 80


def test_prompt_view_bounds():
    view = _filled_store().prompt_view()
    assert len(view.klines["15m"]) == 10
    assert view.klines["15m"][-1].open == "199.00"
    assert len(view.trades) == 50
    assert view.trades[-1]["a"] == 119
    assert len(view.bids) == 50
    assert len(view.asks) == 50
    assert view.sentiment == "neutral"


def test_top_levels_is_best_price_first():
    levels = {"9.5": 1.0, "10": 2.0, "100": 3.0, "1": 4.0}
    assert list(top_levels(levels, 2, descending=True)) == ["100", "10"]
    assert list(top_levels(levels, 2, descending=False)) == ["1", "9.5"]


def test_order_book_is_replaced_not_merged():
    store = SnapshotStore()
    store.replace_order_book(OrderBook(1, {"10": 1.0}, {"11": 1.0}))
    store.replace_order_book(OrderBook(2, {"9": 2.0}, {"12": 2.0}))
    book = store.order_book()
    assert book.last_update_id == 2
    assert book.bids == {"9": 2.0}
    assert book.asks == {"12": 2.0}


def test_views_are_copies():
    store = _filled_store()
    chart = store.chart_view()
    chart["depth"]["bids"].clear()
    assert store.order_book().bids
