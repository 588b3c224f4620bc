"""Configuration loader for CryptoPulse."""

from dataclasses import dataclass
import os

from dotenv import load_dotenv


MANUAL_AI_ENDPOINT = "manual"


def _get_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    ai_endpoint: str
    ext_endpoint: str
    proxy_url: str
    ws_proxy_url: str
    host: str
    port: int
    report_dir: str
    binance_api_base: str
    http_timeout_s: float
    http_retry_count: int
    http_retry_wait_s: float
    kline_limit: int
    depth_limit: int
    trades_limit: int
    log_level: str

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            ai_endpoint=os.getenv("AI_ENDPOINT", MANUAL_AI_ENDPOINT),
            ext_endpoint=os.getenv("EXT_ENDPOINT", ""),
            proxy_url=os.getenv("PROXY_URL", ""),
            ws_proxy_url=os.getenv("WS_PROXY_URL", ""),
            host=os.getenv("HOST", "127.0.0.1"),
            port=_get_int(os.getenv("PORT"), 8080),
            report_dir=os.getenv("REPORT_DIR", "reports"),
            binance_api_base=os.getenv("BINANCE_API_BASE", "https://api1.binance.com"),
            http_timeout_s=_get_float(os.getenv("HTTP_TIMEOUT_S"), 10.0),
            http_retry_count=_get_int(os.getenv("HTTP_RETRY_COUNT"), 3),
            http_retry_wait_s=_get_float(os.getenv("HTTP_RETRY_WAIT_S"), 2.0),
            kline_limit=_get_int(os.getenv("KLINE_LIMIT"), 100),
            depth_limit=_get_int(os.getenv("DEPTH_LIMIT"), 1000),
            trades_limit=_get_int(os.getenv("TRADES_LIMIT"), 500),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


settings = Settings.from_env()
