"""Tests for metrics helpers."""
from __future__ import annotations

from typing import Any, Dict

from yearpeer.observability import metrics
from yearpeer.observability import tracing


class _DummyTrace:
    def __init__(self, name: str, metadata: Dict[str, Any]):
        self.name = name
        self.metadata = metadata
        self.ended = False
        self.updates: list[Dict[str, Any]] = []

    def update(self, **kwargs) -> None:
        self.updates.append(kwargs)

    def end(self) -> None:
        self.ended = True


class _DummyClient:
    def __init__(self):
        self.traces: list[_DummyTrace] = []

    def trace(self, name: str, metadata: Dict[str, Any] | None = None):
        trace = _DummyTrace(name, metadata or {})
        self.traces.append(trace)
        return trace


def test_log_metric_closes_trace(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    metrics.log_metric("demo_metric", 42, metadata={"foo": "bar"})

    assert dummy_client.traces, "Metric call should record a trace"
    assert dummy_client.traces[0].name == "metric:demo_metric"
    assert dummy_client.traces[0].metadata["value"] == 42
    assert dummy_client.traces[0].metadata["foo"] == "bar"
    assert dummy_client.traces[0].ended is True


def test_trace_records_error_and_reraises(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    try:
        with tracing.trace("goal.create", metadata={"mode": "create"}, user_id="u-1", request_id="r-1"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    recorded = dummy_client.traces[0]
    assert recorded.metadata == {"mode": "create", "user_id": "u-1", "request_id": "r-1"}
    assert recorded.updates == [{"error_info": {"message": "boom"}}]
    assert recorded.ended is True


def test_trace_is_noop_without_client(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "get_opik_client", lambda: None)

    with tracing.trace("goal.list") as span:
        tracing.annotate(span, outcome="success")
        assert span is None
