from __future__ import annotations

import time

import pytest

from crypto_pulse.errors import DecodeError
from crypto_pulse.monitor.engine import MonitorState
from crypto_pulse.monitor.params import MonitorParams


def test_start_registers_running_monitor(service):
    monitor_id = service.registry.start(MonitorParams.build("BTCUSDT", ["15m"], "30s"))
    engine = service.registry.get(monitor_id)
    assert engine is not None
    assert engine.state is MonitorState.RUNNING
    assert monitor_id in service.registry
    listed = service.registry.list_monitors()
    assert [m["monitor_id"] for m in listed] == [monitor_id]
    assert listed[0]["cycle"] == "30s"
    assert listed[0]["cycle_seconds"] == 30.0


def test_stop_unknown_leaves_registry_unchanged(service):
    monitor_id = service.registry.start(MonitorParams.build("BTCUSDT", ["15m"], "30s"))
    assert service.registry.stop("nope") is False
    assert len(service.registry) == 1
    assert monitor_id in service.registry


def test_stop_known_removes_and_halts(service, fake_exchange):
    monitor_id = service.registry.start(MonitorParams.build("BTCUSDT", ["15m"], "30s"))
    engine = service.registry.get(monitor_id)

    assert service.registry.stop(monitor_id) is True
    assert monitor_id not in service.registry
    assert service.registry.stop(monitor_id) is False

    calls = len(fake_exchange.calls)
    engine.run_cycle()
    engine.join(timeout=5)
    assert len(fake_exchange.calls) == calls


def test_failed_initial_fetch_is_not_registered(service, fake_exchange):
    fake_exchange.broken.add("/api/v3/klines")
    with pytest.raises(DecodeError):
        service.registry.start(MonitorParams.build("BTCUSDT", ["15m"], "30s"))
    assert len(service.registry) == 0


def test_stop_all(service):
    for symbol in ("BTCUSDT", "ETHUSDT"):
        service.registry.start(MonitorParams.build(symbol, ["1m"], "30s"))
    engines = [service.registry.get(m["monitor_id"]) for m in service.registry.list_monitors()]
    assert service.registry.stop_all() == engines
    assert len(service.registry) == 0
    assert all(engine.state is MonitorState.STOPPED for engine in engines)


def test_close_waits_for_cycles_before_closing_client(service, monkeypatch):
    service.registry.engine_factory = lambda params: service.new_engine(
        params.symbol, params.intervals, 0.01, cycle=params.cycle
    )
    monitor_id = service.registry.start(MonitorParams.build("BTCUSDT", ["15m"], "30s"))
    engine = service.registry.get(monitor_id)
    deadline = time.monotonic() + 5
    while engine.cycles_completed < 1 and time.monotonic() < deadline:
        time.sleep(0.01)

    alive_at_close = []
    close_client = service.exchange.close

    def _close():
        alive_at_close.append(engine._thread.is_alive())
        close_client()

    monkeypatch.setattr(service.exchange, "close", _close)
    service.close()

    assert engine.cycles_completed >= 1
    assert alive_at_close == [False]
