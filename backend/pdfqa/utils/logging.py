"""Structured logging for pipeline stages."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredPipelineLogger:
    """Structured logger for ingestion and query stages."""

    def log_stage(
        self,
        operation: str,
        stage: str,
        outcome: str,
        latency_ms: float,
        document_id: str | None = None,
        count: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log one pipeline stage with structured data."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "stage": stage,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if document_id is not None:
            log_data["document_id"] = document_id
        if count is not None:
            log_data["count"] = count
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Pipeline {operation}.{stage} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
