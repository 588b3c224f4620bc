"""Process-wide registry of prompts awaiting a manual analysis response."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Dict, Optional
import uuid

from crypto_pulse.config import MANUAL_AI_ENDPOINT
from crypto_pulse.errors import UnsupportedBackendError
from crypto_pulse.report.store import ReportStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveResult:
    report_id: str
    matched: bool


class PendingAnalysisStore:
    """Maps analysis ids to the prompt that produced them.

    Shared by every monitor of a service; guarded by its own lock,
    independent of any snapshot lock.
    """

    def __init__(self, report_store: ReportStore, ai_endpoint: str = MANUAL_AI_ENDPOINT) -> None:
        self.report_store = report_store
        self.ai_endpoint = ai_endpoint
        self._lock = threading.Lock()
        self._pending: Dict[str, str] = {}

    def issue(self, prompt: str) -> str:
        if self.ai_endpoint != MANUAL_AI_ENDPOINT:
            raise UnsupportedBackendError(self.ai_endpoint)
        analysis_id = str(uuid.uuid4())
        with self._lock:
            self._pending[analysis_id] = prompt
        logger.info("Stored pending prompt: analysis_id=%s", analysis_id)
        return analysis_id

    def get(self, analysis_id: str) -> Optional[str]:
        with self._lock:
            return self._pending.get(analysis_id)

    def resolve(self, analysis_id: str, response_payload: str) -> ResolveResult:
        """Drop the pending prompt and persist the response as a new report.

        An unknown analysis id is not an error; the report is still saved
        and `matched` is False.
        """
        report_id = str(uuid.uuid4())
        # The prompt stays pending until the report is on disk.
        self.report_store.save(report_id, response_payload)

        with self._lock:
            matched = self._pending.pop(analysis_id, None) is not None
        if not matched:
            logger.warning("Resolving unknown analysis id: %s", analysis_id)
        return ResolveResult(report_id=report_id, matched=matched)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
