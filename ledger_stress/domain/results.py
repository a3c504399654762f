"""
Result containers produced by the fixture generator, workload driver and
orchestrator.

Timestamps are `time.perf_counter()` readings; they are only meaningful
relative to each other within one process.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class WorkerResult:
    """
    Outcome of one workload worker, published exactly once after its loop ends.
    """

    worker_index: int
    attempted: int
    succeeded: int
    failed: int
    elapsed_seconds: float
    started_at: float
    finished_at: float
    failures_by_type: Dict[str, int] = field(default_factory=dict)


@dataclass
class RunStatistics:
    """
    Aggregate for one concurrency level.

    `total_entries` is the nominal attempted count (workers x entries per worker);
    `elapsed_seconds` is the summed time of successful submissions across all
    workers.
    """

    workers: int
    entries_per_worker: int
    elapsed_seconds: float = 0.0
    succeeded: int = 0
    failed: int = 0
    failures_by_type: Dict[str, int] = field(default_factory=dict)
    started_at: float = 0.0
    finished_at: float = 0.0
    worker_results: List[WorkerResult] = field(default_factory=list)
    peak_rss_bytes: Optional[int] = None
    cpu_percent: Optional[float] = None

    @property
    def total_entries(self) -> int:
        return self.workers * self.entries_per_worker

    @property
    def wall_seconds(self) -> float:
        return max(self.finished_at - self.started_at, 0.0)

    @property
    def throughput_entries_per_sec(self) -> float:
        return self.total_entries / self.elapsed_seconds if self.elapsed_seconds > 0 else 0.0

    @property
    def mean_latency_ms(self) -> float:
        if self.total_entries == 0:
            return 0.0
        return self.elapsed_seconds * 1000.0 / self.total_entries

    def merge(self, result: WorkerResult) -> None:
        """Fold one worker's result into the run totals."""
        self.worker_results.append(result)
        self.elapsed_seconds += result.elapsed_seconds
        self.succeeded += result.succeeded
        self.failed += result.failed
        for error_type, count in result.failures_by_type.items():
            self.failures_by_type[error_type] = self.failures_by_type.get(error_type, 0) + count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workers": self.workers,
            "entries_per_worker": self.entries_per_worker,
            "total_entries": self.total_entries,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures_by_type": dict(self.failures_by_type),
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "wall_seconds": round(self.wall_seconds, 3),
            "throughput_entries_per_sec": round(self.throughput_entries_per_sec, 2),
            "mean_latency_ms": round(self.mean_latency_ms, 3),
            "peak_rss_bytes": self.peak_rss_bytes,
            "cpu_percent": round(self.cpu_percent, 1) if self.cpu_percent is not None else None,
        }


@dataclass(frozen=True)
class FixtureSummary:
    ledgers: int
    accounts: int
    duration_seconds: float

    @property
    def mean_account_ms(self) -> float:
        return self.duration_seconds * 1000.0 / self.accounts if self.accounts else 0.0

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["duration_seconds"] = round(self.duration_seconds, 3)
        payload["mean_account_ms"] = round(self.mean_account_ms, 3)
        return payload


@dataclass
class ScenarioResult:
    fixture: FixtureSummary
    runs: List[RunStatistics] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fixture": self.fixture.to_dict(),
            "runs": [run.to_dict() for run in self.runs],
        }


__all__ = ["FixtureSummary", "RunStatistics", "ScenarioResult", "WorkerResult"]
