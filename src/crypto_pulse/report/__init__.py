"""Report persistence exports."""

from crypto_pulse.report.store import ReportStore

__all__ = ["ReportStore"]
