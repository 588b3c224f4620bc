from __future__ import annotations

import pytest

from crypto_pulse.decision.correlator import PendingAnalysisStore
from crypto_pulse.errors import UnsupportedBackendError


def test_issue_then_lookup_returns_prompt(report_store):
    pending = PendingAnalysisStore(report_store)
    analysis_id = pending.issue('{"prompt": "hello"}')
    assert pending.get(analysis_id) == '{"prompt": "hello"}'


def test_issued_ids_are_unique(report_store):
    pending = PendingAnalysisStore(report_store)
    ids = {pending.issue("p") for _ in range(50)}
    assert len(ids) == 50
    assert len(pending) == 50


def test_resolve_consumes_prompt_and_saves_report(report_store):
    pending = PendingAnalysisStore(report_store)
    analysis_id = pending.issue("prompt")

    result = pending.resolve(analysis_id, '{"verdict": "bullish"}')

    assert result.matched is True
    assert pending.get(analysis_id) is None
    path = report_store.path_for(result.report_id)
    assert path is not None
    assert path.read_text(encoding="utf-8") == '{"verdict": "bullish"}'


def test_resolve_unknown_id_still_saves(report_store):
    pending = PendingAnalysisStore(report_store)
    result = pending.resolve("missing", "{}")
    assert result.matched is False
    assert report_store.path_for(result.report_id) is not None


def test_non_manual_backend_fails_without_storing(report_store):
    pending = PendingAnalysisStore(report_store, ai_endpoint="https://llm.example/v1")
    with pytest.raises(UnsupportedBackendError):
        pending.issue("prompt")
    assert len(pending) == 0


def test_report_store_rejects_path_like_ids(report_store):
    assert report_store.path_for("../etc/passwd") is None
    with pytest.raises(ValueError):
        report_store.save("../escape", "{}")


def test_failed_save_keeps_prompt_pending(report_store, monkeypatch):
    pending = PendingAnalysisStore(report_store)
    analysis_id = pending.issue("prompt")

    def _disk_full(report_id, content):
        raise OSError("disk full")

    monkeypatch.setattr(report_store, "save", _disk_full)
    with pytest.raises(OSError):
        pending.resolve(analysis_id, "{}")

    assert pending.get(analysis_id) == "prompt"
    monkeypatch.undo()
    assert pending.resolve(analysis_id, "{}").matched is True
