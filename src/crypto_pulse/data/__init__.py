"""Data layer exports."""

from crypto_pulse.data.models import Kline, OrderBook, PromptView, Trade
from crypto_pulse.data.snapshot import SnapshotStore

__all__ = ["Kline", "OrderBook", "PromptView", "SnapshotStore", "Trade"]
