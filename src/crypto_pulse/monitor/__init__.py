"""Monitoring layer exports."""

from crypto_pulse.monitor.engine import MonitorEngine, MonitorState
from crypto_pulse.monitor.params import ALLOWED_INTERVALS, MonitorParams, parse_duration
from crypto_pulse.monitor.registry import MonitorRegistry

__all__ = [
    "ALLOWED_INTERVALS",
    "MonitorEngine",
    "MonitorParams",
    "MonitorRegistry",
    "MonitorState",
    "parse_duration",
]
