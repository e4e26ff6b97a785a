# tests/unit/infrastructure/observability/test_pipeline_metrics.py
from __future__ import annotations

from prometheus_client import REGISTRY

from ledgerwatch.infrastructure.observability import metrics


def test_metric_getters_return_singletons() -> None:
    latency = metrics.get_edgar_request_latency_seconds()
    assert latency is metrics.get_edgar_request_latency_seconds()
    assert metrics.get_cache_lookups_total() is metrics.get_cache_lookups_total()
    assert metrics.get_rate_gate_wait_seconds() is metrics.get_rate_gate_wait_seconds()


def test_verdict_counter_increments_by_risk_level() -> None:
    labels = {"risk_level": "LOW"}
    before = REGISTRY.get_sample_value("ledgerwatch_analysis_verdicts_total", labels) or 0.0

    metrics.get_analysis_verdicts_total().labels(risk_level="LOW").inc()

    assert REGISTRY.get_sample_value("ledgerwatch_analysis_verdicts_total", labels) == before + 1
