"""Exchange ingestion."""

from crypto_pulse.ingest.binance import BinanceClient, create_http_client

__all__ = ["BinanceClient", "create_http_client"]
