"""Data layer models for exchange market data."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class Kline:
    open_time: int
    open: str
    high: str
    low: str
    close: str
    volume: str
    close_time: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OrderBook:
    """Depth snapshot keyed by the exchange's price string."""

    last_update_id: int = 0
    bids: Dict[str, float] = field(default_factory=dict)
    asks: Dict[str, float] = field(default_factory=dict)

    def copy(self) -> "OrderBook":
        return OrderBook(
            last_update_id=self.last_update_id,
            bids=dict(self.bids),
            asks=dict(self.asks),
        )


Trade = Dict[str, Any]


@dataclass(frozen=True)
class PromptView:
    """Bounded copy of a snapshot used to render an analysis prompt."""

    klines: Dict[str, List[Kline]]
    bids: Dict[str, float]
    asks: Dict[str, float]
    trades: List[Trade]
    sentiment: str
