"""Prometheus metrics for the retrieval pipeline."""

from prometheus_client import Counter, Histogram

stage_latency_ms = Histogram(
    "rag_stage_latency_ms",
    "Pipeline stage latency in milliseconds",
    ["operation", "stage"],
    buckets=[1, 5, 10, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

errors_total = Counter(
    "rag_errors_total",
    "Total pipeline failures",
    ["operation", "reason"],
)

chunks_ingested_total = Counter(
    "rag_chunks_ingested_total",
    "Total chunks embedded and stored",
)


class PrometheusPipelineMetrics:
    """Prometheus-based pipeline metrics implementation."""

    def record_latency(self, operation: str, stage: str, latency_ms: float) -> None:
        """Record stage latency."""
        stage_latency_ms.labels(operation=operation, stage=stage).observe(latency_ms)

    def inc_error(self, operation: str, reason: str) -> None:
        """Increment error counter."""
        errors_total.labels(operation=operation, reason=reason).inc()

    def inc_chunks_ingested(self, count: int) -> None:
        """Add to the ingested chunk counter."""
        chunks_ingested_total.inc(count)
