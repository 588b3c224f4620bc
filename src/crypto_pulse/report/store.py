"""Flat-file storage for submitted analysis reports."""

from __future__ import annotations

import logging
from pathlib import Path
import re
from typing import Optional


logger = logging.getLogger(__name__)

_REPORT_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class ReportStore:
    """One `{report_id}.json` file per report under `report_dir`."""

    def __init__(self, report_dir: str | Path) -> None:
        self.report_dir = Path(report_dir)
        self.report_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, report_id: str) -> Optional[Path]:
        if not _REPORT_ID.match(report_id or ""):
            return None
        return self.report_dir / f"{report_id}.json"

    def save(self, report_id: str, content: str) -> Path:
        path = self._path(report_id)
        if path is None:
            raise ValueError(f"Invalid report id: {report_id!r}")
        path.write_text(content, encoding="utf-8")
        logger.info("Saved report: report_id=%s path=%s", report_id, path)
        return path

    def path_for(self, report_id: str) -> Optional[Path]:
        path = self._path(report_id)
        if path is None or not path.is_file():
            return None
        return path
