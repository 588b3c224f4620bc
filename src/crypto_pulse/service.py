"""Top-level service wiring the shared stores into every monitor."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from crypto_pulse.config import Settings, settings
from crypto_pulse.decision.correlator import PendingAnalysisStore
from crypto_pulse.decision.prompt_builder import PromptBuilder
from crypto_pulse.errors import NotFoundError, ValidationError
from crypto_pulse.ingest.binance import BinanceClient
from crypto_pulse.monitor.engine import MonitorEngine
from crypto_pulse.monitor.params import MonitorParams
from crypto_pulse.monitor.registry import MonitorRegistry
from crypto_pulse.report.store import ReportStore


logger = logging.getLogger(__name__)

ONE_SHOT_INTERVALS = ("15m",)


class CryptoPulseService:
    """Owns the exchange client, pending prompts, reports and monitor registry."""

    def __init__(
        self,
        config: Settings = settings,
        exchange: Optional[BinanceClient] = None,
        report_store: Optional[ReportStore] = None,
    ) -> None:
        self.config = config
        self.exchange = exchange or BinanceClient(config=config)
        self.reports = report_store or ReportStore(config.report_dir)
        self.pending = PendingAnalysisStore(self.reports, ai_endpoint=config.ai_endpoint)
        self.prompt_builder = PromptBuilder()
        self.registry = MonitorRegistry(self._build_engine)

    def _build_engine(self, params: MonitorParams) -> MonitorEngine:
        return self.new_engine(
            params.symbol, params.intervals, params.cycle_seconds, cycle=params.cycle
        )

    def new_engine(
        self,
        symbol: str,
        intervals: Iterable[str],
        cycle_seconds: float = 30.0,
        cycle: str = "30s",
    ) -> MonitorEngine:
        return MonitorEngine(
            symbol,
            intervals,
            exchange=self.exchange,
            pending=self.pending,
            cycle_seconds=cycle_seconds,
            cycle=cycle,
            prompt_builder=self.prompt_builder,
            config=self.config,
        )

    def list_symbols(self, query: str = "") -> List[str]:
        return self.exchange.fetch_symbols(query)

    def start_monitor(
        self, symbol: str, intervals: Optional[Iterable[str]], cycle: Optional[str] = None
    ) -> Tuple[str, Dict[str, Any]]:
        params = MonitorParams.build(symbol, intervals, cycle)
        monitor_id = self.registry.start(params)
        engine = self.registry.get(monitor_id)
        chart = engine.generate_chart_data() if engine is not None else {}
        return monitor_id, chart

    def stop_monitor(self, monitor_id: str) -> None:
        if not self.registry.stop(monitor_id):
            raise NotFoundError("monitor", monitor_id)

    def monitor_chart(self, monitor_id: str) -> Dict[str, Any]:
        engine = self.registry.get(monitor_id)
        if engine is None:
            raise NotFoundError("monitor", monitor_id)
        return engine.latest_chart_data()

    def chart_snapshot(self, symbol: str) -> Dict[str, Any]:
        engine = self._one_shot(symbol)
        return engine.generate_chart_data()

    def prompt_snapshot(self, symbol: str) -> str:
        engine = self._one_shot(symbol)
        return engine.generate_prompt()

    def pending_prompt(self, analysis_id: str) -> str:
        prompt = self.pending.get(analysis_id)
        if prompt is None:
            raise NotFoundError("analysis", analysis_id)
        return prompt

    def submit_response(self, analysis_id: str, response_payload: str) -> str:
        result = self.pending.resolve(analysis_id, response_payload)
        return result.report_id

    def report_path(self, report_id: str) -> Path:
        path = self.reports.path_for(report_id)
        if path is None:
            raise NotFoundError("report", report_id)
        return path

    def close(self) -> None:
        stopped = self.registry.stop_all()
        # An in-flight cycle must finish before the shared client goes away.
        for engine in stopped:
            engine.join(timeout=self.config.http_timeout_s + 1)
        if stopped:
            logger.info("Stopped %d monitors on shutdown", len(stopped))
        self.exchange.close()

    def _one_shot(self, symbol: str) -> MonitorEngine:
        symbol = (symbol or "").strip()
        if not symbol:
            raise ValidationError("symbol is required")
        engine = self.new_engine(symbol, ONE_SHOT_INTERVALS)
        engine.fetch_realtime_data()
        return engine
