"""Prompt builder for manual market analysis."""

from __future__ import annotations

import json
from typing import Iterable, List

from crypto_pulse.data.models import PromptView


ANALYSIS_TASKS = (
    "## Analysis tasks\n"
    "1. Capital flow\n"
    "- Identify aggressive buy/sell direction\n"
    "- Track large trade behaviour\n"
    "- Judge the net inflow/outflow trend\n"
    "\n"
    "2. Technical structure\n"
    "- Cross-check multiple indicators\n"
    "- Locate key price ranges\n"
    "- Flag potential trend reversals\n"
    "\n"
    "3. Order book depth\n"
    "- Compare bid and ask strength\n"
    "- Key support/resistance zones\n"
    "\n"
    "4. Market sentiment\n"
    "- Volume distribution\n"
    "- Volatility changes\n"
    "\n"
    "5. Risk alerts\n"
    "- Abnormal price moves\n"
    "- Signs of market manipulation\n"
)


def _dumps(value) -> str:
    return json.dumps(value, ensure_ascii=True, separators=(",", ":"))


class PromptBuilder:
    """Render a bounded snapshot into the analysis prompt text."""

    def build(
        self,
        symbol: str,
        intervals: Iterable[str],
        view: PromptView,
        analysis_type: str = "monitor",
        cycle: str = "continuous",
        start_ts: int = 0,
        end_ts: int = 0,
    ) -> str:
        # start_ts/end_ts are reserved for historical-range analysis.
        interval_list: List[str] = list(intervals)
        klines_json = _dumps(
            {
                interval: [k.to_dict() for k in rows]
                for interval, rows in view.klines.items()
            }
        )
        order_book_json = _dumps({"bids": view.bids, "asks": view.asks})
        trades_json = _dumps(view.trades)

        return (
            "## Digital asset market analysis report\n"
            "\n"
            "**Input data**:\n"
            f"- Trading pair: {symbol}\n"
            f"- Klines: intervals {' '.join(interval_list)}\n"
            f"  - Data: {klines_json}\n"
            f"- Order book depth: {order_book_json}\n"
            f"- Trades: {trades_json}\n"
            f"- External sentiment: {view.sentiment}\n"
            f"- Analysis type: {analysis_type}\n"
            f"- Monitoring cycle: {cycle}\n"
            + ANALYSIS_TASKS
        )

    def envelope(self, prompt: str) -> str:
        return json.dumps({"prompt": prompt}, ensure_ascii=True)
