"""Validation of monitor start requests."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterable, Optional, Tuple

from crypto_pulse.errors import ValidationError


ALLOWED_INTERVALS = ("1m", "5m", "15m", "1h", "4h", "1d")
DEFAULT_CYCLE = "30s"
MIN_CYCLE_SECONDS = 10.0

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(text: str) -> float:
    """Parse a duration such as "30s", "1m30s" or "1.5h" into seconds."""
    value = (text or "").strip()
    if value == "0":
        return 0.0
    if not value:
        raise ValueError("empty duration")
    total = 0.0
    pos = 0
    while pos < len(value):
        match = _DURATION_PART.match(value, pos)
        if not match:
            raise ValueError(f"invalid duration: {text}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    return total


@dataclass(frozen=True)
class MonitorParams:
    symbol: str
    intervals: Tuple[str, ...]
    cycle: str
    cycle_seconds: float

    @classmethod
    def build(
        cls,
        symbol: str,
        intervals: Optional[Iterable[str]],
        cycle: Optional[str] = None,
    ) -> "MonitorParams":
        symbol = (symbol or "").strip()
        if not symbol:
            raise ValidationError("symbol is required")
        interval_list = tuple(intervals or ())
        if not interval_list:
            raise ValidationError("intervals are required")
        for interval in interval_list:
            if interval not in ALLOWED_INTERVALS:
                raise ValidationError(f"invalid interval: {interval}")
        cycle = cycle or DEFAULT_CYCLE
        try:
            seconds = parse_duration(cycle)
        except ValueError as exc:
            raise ValidationError("cycle must be at least 10s") from exc
        if seconds < MIN_CYCLE_SECONDS:
            raise ValidationError("cycle must be at least 10s")
        return cls(symbol=symbol, intervals=interval_list, cycle=cycle, cycle_seconds=seconds)
