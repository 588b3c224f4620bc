"""HTTP API for CryptoPulse."""

from __future__ import annotations

import argparse
from contextlib import asynccontextmanager
import dataclasses
import json
import logging
import time
from typing import Any, List, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel
import uvicorn

from crypto_pulse.config import settings
from crypto_pulse.errors import (
    CryptoPulseError,
    DecodeError,
    NotFoundError,
    TransportError,
    UnsupportedBackendError,
    ValidationError,
)
from crypto_pulse.service import CryptoPulseService


logger = logging.getLogger(__name__)


class MonitorRequest(BaseModel):
    symbol: str = ""
    intervals: List[str] = []
    cycle: str = ""


class StopMonitorRequest(BaseModel):
    monitor_id: str


class SubmitResponseRequest(BaseModel):
    analysis_id: str
    response_json: Any


def _http_error(exc: CryptoPulseError, upstream_status: int = 502) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, UnsupportedBackendError):
        return HTTPException(status_code=501, detail=str(exc))
    if isinstance(exc, (TransportError, DecodeError)):
        return HTTPException(status_code=upstream_status, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)


def create_app(service: CryptoPulseService) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        service.close()

    app = FastAPI(title="CryptoPulse API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.service = service

    @app.get("/api/health", response_class=JSONResponse)
    def api_health() -> JSONResponse:
        return JSONResponse(
            {
                "status": "ok",
                "ai_endpoint": service.config.ai_endpoint,
                "active_monitors": len(service.registry),
                "pending_analyses": len(service.pending),
            }
        )

    @app.get("/api/pairs", response_class=JSONResponse)
    def api_pairs(query: str = Query("")) -> JSONResponse:
        start = time.time()
        try:
            pairs = service.list_symbols(query)
        except CryptoPulseError as exc:
            logger.error("Fetch exchange info error: %s", exc)
            raise _http_error(exc, upstream_status=500) from exc
        logger.info("Processed /api/pairs in %dms", _elapsed_ms(start))
        return JSONResponse(pairs)

    @app.post("/api/monitor", response_class=JSONResponse)
    def api_monitor(payload: MonitorRequest = Body(...)) -> JSONResponse:
        start = time.time()
        logger.debug("Received /api/monitor request: %s", payload.model_dump())
        try:
            monitor_id, chart_data = service.start_monitor(
                payload.symbol, payload.intervals, payload.cycle
            )
        except CryptoPulseError as exc:
            logger.warning("Monitor start rejected: %s", exc)
            raise _http_error(exc, upstream_status=500) from exc
        logger.info(
            "Processed /api/monitor: symbol=%s intervals=%s monitor_id=%s in %dms",
            payload.symbol,
            ",".join(payload.intervals),
            monitor_id,
            _elapsed_ms(start),
        )
        return JSONResponse({"chart_data": chart_data, "monitor_id": monitor_id})

    @app.post("/api/monitor/stop", response_class=JSONResponse)
    def api_monitor_stop(payload: StopMonitorRequest = Body(...)) -> JSONResponse:
        try:
            service.stop_monitor(payload.monitor_id)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail="monitor not found") from exc
        logger.info("Processed /api/monitor/stop: monitor_id=%s", payload.monitor_id)
        return JSONResponse({"message": "Monitoring stopped"})

    @app.get("/api/monitors", response_class=JSONResponse)
    def api_monitors() -> JSONResponse:
        return JSONResponse({"data": service.registry.list_monitors()})

    @app.get("/api/monitor/{monitor_id}/chart", response_class=JSONResponse)
    def api_monitor_chart(monitor_id: str) -> JSONResponse:
        try:
            chart_data = service.monitor_chart(monitor_id)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail="monitor not found") from exc
        return JSONResponse({"chart_data": chart_data, "monitor_id": monitor_id})

    @app.get("/api/chart", response_class=JSONResponse)
    def api_chart(symbol: str = Query("")) -> JSONResponse:
        start = time.time()
        try:
            chart_data = service.chart_snapshot(symbol)
        except CryptoPulseError as exc:
            logger.error("Failed to fetch real-time data: symbol=%s err=%s", symbol, exc)
            raise _http_error(exc) from exc
        logger.info("Processed /api/chart: symbol=%s in %dms", symbol, _elapsed_ms(start))
        return JSONResponse({"chart_data": chart_data})

    @app.get("/api/prompt", response_class=JSONResponse)
    def api_prompt(symbol: str = Query("")) -> JSONResponse:
        start = time.time()
        try:
            prompt = service.prompt_snapshot(symbol)
        except CryptoPulseError as exc:
            logger.error("Failed to fetch real-time data: symbol=%s err=%s", symbol, exc)
            raise _http_error(exc) from exc
        logger.info("Processed /api/prompt: symbol=%s in %dms", symbol, _elapsed_ms(start))
        return JSONResponse({"symbol": symbol, "prompt": prompt})

    @app.get("/api/analysis/{analysis_id}/prompt", response_class=JSONResponse)
    def api_pending_prompt(analysis_id: str) -> JSONResponse:
        try:
            prompt = service.pending_prompt(analysis_id)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail="analysis not found") from exc
        return JSONResponse({"analysis_id": analysis_id, "prompt": prompt})

    @app.post("/api/submit_response", response_class=JSONResponse)
    def api_submit_response(payload: SubmitResponseRequest = Body(...)) -> JSONResponse:
        content = payload.response_json
        if not isinstance(content, str):
            content = json.dumps(content, ensure_ascii=False)
        try:
            report_id = service.submit_response(payload.analysis_id, content)
        except (OSError, ValueError) as exc:
            logger.error("Submit manual response error: %s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        logger.info(
            "Processed /api/submit_response: analysis_id=%s report_id=%s",
            payload.analysis_id,
            report_id,
        )
        return JSONResponse({"report_id": report_id})

    @app.get("/api/report")
    def api_report(report_id: str = Query("")) -> FileResponse:
        try:
            path = service.report_path(report_id)
        except NotFoundError as exc:
            logger.warning("Report not found: report_id=%s", report_id)
            raise HTTPException(status_code=404, detail="report not found") from exc
        return FileResponse(path, filename=path.name, media_type="application/json")

    return app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="CryptoPulse API server.")
    parser.add_argument("--host", default=settings.host, help="Bind host.")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port.")
    parser.add_argument(
        "--report-dir",
        default="",
        help="Report directory (defaults to REPORT_DIR).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = parse_args(argv)
    config = settings
    if args.report_dir:
        config = dataclasses.replace(settings, report_dir=args.report_dir)
    service = CryptoPulseService(config)
    app = create_app(service)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
