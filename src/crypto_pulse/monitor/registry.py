"""Registry of running monitors keyed by monitor id."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional
import uuid

from crypto_pulse.monitor.engine import MonitorEngine
from crypto_pulse.monitor.params import MonitorParams


logger = logging.getLogger(__name__)

EngineFactory = Callable[[MonitorParams], MonitorEngine]


class MonitorRegistry:
    def __init__(self, engine_factory: EngineFactory) -> None:
        self.engine_factory = engine_factory
        self._lock = threading.Lock()
        self._engines: Dict[str, MonitorEngine] = {}

    def start(self, params: MonitorParams) -> str:
        """Build, prime and start an engine; only registered once it is running."""
        engine = self.engine_factory(params)
        engine.start(initial_fetch=True)
        monitor_id = str(uuid.uuid4())
        with self._lock:
            self._engines[monitor_id] = engine
        logger.info(
            "Registered monitor: monitor_id=%s symbol=%s intervals=%s cycle=%s",
            monitor_id,
            params.symbol,
            ",".join(params.intervals),
            params.cycle,
        )
        return monitor_id

    def stop(self, monitor_id: str) -> bool:
        with self._lock:
            engine = self._engines.pop(monitor_id, None)
        if engine is None:
            logger.warning("Monitor not found: monitor_id=%s", monitor_id)
            return False
        engine.stop()
        return True

    def get(self, monitor_id: str) -> Optional[MonitorEngine]:
        with self._lock:
            return self._engines.get(monitor_id)

    def list_monitors(self) -> List[dict]:
        with self._lock:
            items = list(self._engines.items())
        return [
            {
                "monitor_id": monitor_id,
                "symbol": engine.symbol,
                "intervals": list(engine.intervals),
                "cycle": engine.cycle,
                "cycle_seconds": engine.cycle_seconds,
                "state": engine.state.value,
                "cycles_completed": engine.cycles_completed,
                "last_analysis_id": engine.last_analysis_id,
            }
            for monitor_id, engine in items
        ]

    def stop_all(self) -> List[MonitorEngine]:
        with self._lock:
            engines = list(self._engines.values())
            self._engines.clear()
        for engine in engines:
            engine.stop()
        return engines

    def __len__(self) -> int:
        with self._lock:
            return len(self._engines)

    def __contains__(self, monitor_id: object) -> bool:
        with self._lock:
            return monitor_id in self._engines
