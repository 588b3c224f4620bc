"""Per-symbol polling monitor."""

from __future__ import annotations

from enum import Enum
import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from crypto_pulse.config import Settings, settings
from crypto_pulse.data.snapshot import SnapshotStore
from crypto_pulse.decision.correlator import PendingAnalysisStore
from crypto_pulse.decision.prompt_builder import PromptBuilder
from crypto_pulse.errors import CryptoPulseError
from crypto_pulse.ingest.binance import BinanceClient


logger = logging.getLogger(__name__)


class MonitorState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class MonitorEngine:
    """Fetch -> snapshot update -> chart refresh -> analysis request, every cycle.

    Cycles run sequentially on one daemon thread. `stop()` sets a flag that
    is checked before each cycle; an HTTP call already in flight finishes
    on its own timeout.
    """

    def __init__(
        self,
        symbol: str,
        intervals: Iterable[str],
        exchange: BinanceClient,
        pending: PendingAnalysisStore,
        cycle_seconds: float = 30.0,
        cycle: str = "30s",
        prompt_builder: Optional[PromptBuilder] = None,
        config: Settings = settings,
    ) -> None:
        self.symbol = symbol
        self.intervals: List[str] = list(intervals)
        self.exchange = exchange
        self.pending = pending
        self.cycle_seconds = cycle_seconds
        self.cycle = cycle
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.kline_limit = config.kline_limit
        self.depth_limit = config.depth_limit
        self.trades_limit = config.trades_limit
        self.store = SnapshotStore()
        self.state = MonitorState.CREATED
        self.last_analysis_id: Optional[str] = None
        self.cycles_completed = 0
        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def fetch_realtime_data(self) -> None:
        """One fetch pass; each piece is applied only after it parsed cleanly."""
        logger.info("Fetching real-time data: symbol=%s", self.symbol)
        for interval in self.intervals:
            klines = self.exchange.fetch_klines(self.symbol, interval, limit=self.kline_limit)
            self.store.replace_klines(interval, klines)
            logger.info("Fetched klines: interval=%s kline_count=%d", interval, len(klines))

        order_book = self.exchange.fetch_depth(self.symbol, limit=self.depth_limit)
        self.store.replace_order_book(order_book)
        logger.info(
            "Fetched order book: bids_count=%d asks_count=%d",
            len(order_book.bids),
            len(order_book.asks),
        )

        trades = self.exchange.fetch_trades(self.symbol, limit=self.trades_limit)
        self.store.replace_trades(trades, sentiment="neutral")
        logger.info("Fetched trades: trades_count=%d", len(trades))

    def generate_chart_data(self) -> Dict[str, Any]:
        return self.store.chart_view()

    def latest_chart_data(self) -> Dict[str, Any]:
        return self.store.latest_chart()

    def generate_prompt(
        self,
        analysis_type: str = "monitor",
        cycle: str = "continuous",
        start_ts: int = 0,
        end_ts: int = 0,
    ) -> str:
        view = self.store.prompt_view()
        text = self.prompt_builder.build(
            self.symbol,
            self.intervals,
            view,
            analysis_type=analysis_type,
            cycle=cycle,
            start_ts=start_ts,
            end_ts=end_ts,
        )
        return self.prompt_builder.envelope(text)

    def request_analysis(self) -> str:
        analysis_id = self.pending.issue(self.generate_prompt())
        self.last_analysis_id = analysis_id
        return analysis_id

    def run_cycle(self) -> Optional[str]:
        """Run one tick. Returns the analysis id, or None if skipped or failed."""
        if self._stop_event.is_set():
            return None
        logger.debug("Running monitor cycle: symbol=%s", self.symbol)
        try:
            self.fetch_realtime_data()
        except CryptoPulseError as exc:
            logger.error("Monitor fetch data failed: symbol=%s err=%s", self.symbol, exc)
            return None

        self.store.set_latest_chart(self.generate_chart_data())

        try:
            analysis_id = self.request_analysis()
        except CryptoPulseError as exc:
            logger.error("Monitor AI analysis failed: symbol=%s err=%s", self.symbol, exc)
            return None
        self.cycles_completed += 1
        logger.info("Monitor cycle completed: symbol=%s analysis_id=%s", self.symbol, analysis_id)
        return analysis_id

    def start(self, initial_fetch: bool = True) -> None:
        if self.state is not MonitorState.CREATED:
            raise RuntimeError(f"Monitor for {self.symbol} already {self.state.value}")
        if initial_fetch:
            self.fetch_realtime_data()
            self.store.set_latest_chart(self.generate_chart_data())
        with self._state_lock:
            if self.state is not MonitorState.CREATED:
                raise RuntimeError(f"Monitor for {self.symbol} already {self.state.value}")
            self._thread = threading.Thread(
                target=self._run,
                name=f"monitor-{self.symbol}",
                daemon=True,
            )
            self.state = MonitorState.RUNNING
            self._thread.start()
        logger.info("Starting monitor: symbol=%s cycle=%s", self.symbol, self.cycle)

    def stop(self) -> None:
        with self._state_lock:
            self._stop_event.set()
            if self.state is not MonitorState.STOPPED:
                self.state = MonitorState.STOPPED
                logger.info("Monitor stopped: symbol=%s", self.symbol)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        # Event.wait doubles as the ticker and the cancellation check.
        while not self._stop_event.wait(self.cycle_seconds):
            try:
                self.run_cycle()
            except Exception as exc:
                logger.exception("Monitor cycle error: symbol=%s err=%s", self.symbol, exc)
