"""
Metrics and Observability Module

In-memory counters for chat turns, reset every METRICS_RESET_HOURS.
All logged metrics use key=value format for easy parsing.
"""

import logging
import os
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class MetricsSnapshot:
    """Snapshot of current metrics."""
    timestamp: datetime

    backend_calls: int = 0
    successful_turns: int = 0
    failed_turns: int = 0
    rejected_too_long: int = 0
    failures_by_cause: Dict[str, int] = field(default_factory=dict)

    avg_latency_ms: float = 0.0
    p95_latency_ms: float = 0.0
    failure_rate: float = 0.0

    uptime_seconds: float = 0.0


class MetricsCollector:
    """
    Tracks backend calls, their outcome, too-long rejections and backend latency.
    """

    def __init__(self, reset_hours: int = 24):
        self.reset_hours = reset_hours
        self.start_time = datetime.now()
        self._reset()
        logger.info(f"event=metrics_initialized reset_hours={reset_hours}")

    def _reset(self) -> None:
        self.last_reset = datetime.now()
        self.latencies: deque = deque(maxlen=1000)
        self.backend_calls = 0
        self.successful_turns = 0
        self.failed_turns = 0
        self.rejected_too_long = 0
        self.failures_by_cause: Counter = Counter()

    def _check_reset(self) -> None:
        if datetime.now() - self.last_reset > timedelta(hours=self.reset_hours):
            logger.info(
                f"event=metrics_reset "
                f"backend_calls={self.backend_calls} "
                f"failed_turns={self.failed_turns}"
            )
            self._reset()

    def record_turn(self, latency_ms: float, success: bool = True, cause: Optional[str] = None) -> None:
        """
        Record the outcome of a backend call.

        Args:
            latency_ms: Time spent waiting on the backend
            success: Whether the call returned a reply
            cause: Failure cause name when not successful
        """
        self._check_reset()

        self.backend_calls += 1
        if success:
            self.successful_turns += 1
            self.latencies.append(latency_ms)
        else:
            self.failed_turns += 1
            self.failures_by_cause[cause or "unknown"] += 1
        logger.debug(
            f"event=turn_recorded latency_ms={latency_ms:.2f} "
            f"success={str(success).lower()} cause={cause or '-'}"
        )

    def record_too_long(self) -> None:
        self._check_reset()
        self.rejected_too_long += 1
        logger.debug("event=too_long_recorded")

    def get_snapshot(self) -> MetricsSnapshot:
        self._check_reset()

        latencies = sorted(self.latencies)
        avg_latency = sum(latencies) / len(latencies) if latencies else 0.0
        p95_latency = latencies[int(len(latencies) * 0.95)] if latencies else 0.0
        failure_rate = (
            self.failed_turns / self.backend_calls
            if self.backend_calls > 0 else 0.0
        )

        return MetricsSnapshot(
            timestamp=datetime.now(),
            backend_calls=self.backend_calls,
            successful_turns=self.successful_turns,
            failed_turns=self.failed_turns,
            rejected_too_long=self.rejected_too_long,
            failures_by_cause=dict(self.failures_by_cause),
            avg_latency_ms=avg_latency,
            p95_latency_ms=p95_latency,
            failure_rate=failure_rate,
            uptime_seconds=(datetime.now() - self.start_time).total_seconds(),
        )


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    global _metrics_collector
    if _metrics_collector is None:
        reset_hours = int(os.getenv("METRICS_RESET_HOURS", "24"))
        _metrics_collector = MetricsCollector(reset_hours=reset_hours)
    return _metrics_collector
