from __future__ import annotations

from rich.console import Console

from ledger_stress.domain.results import FixtureSummary, RunStatistics, ScenarioResult, WorkerResult
from ledger_stress.reporter import print_results


def _console() -> Console:
    return Console(record=True, width=200, color_system=None)


def _run(workers: int, elapsed: float, failures=None) -> RunStatistics:
    stats = RunStatistics(workers=workers, entries_per_worker=1024, started_at=0.0, finished_at=3.0)
    stats.merge(
        WorkerResult(
            worker_index=0,
            attempted=workers * 1024,
            succeeded=workers * 1024 - sum((failures or {}).values()),
            failed=sum((failures or {}).values()),
            elapsed_seconds=elapsed,
            started_at=0.0,
            finished_at=3.0,
            failures_by_type=failures or {},
        )
    )
    stats.peak_rss_bytes = 64 * 1024 * 1024
    return stats


def test_prints_one_row_per_level_in_run_order() -> None:
    result = ScenarioResult(
        fixture=FixtureSummary(ledgers=32, accounts=16384, duration_seconds=81.92),
        runs=[_run(4, 8.0), _run(8, 16.0, {"LedgerServiceError": 3})],
    )
    console = _console()

    print_results(result, console=console)

    text = console.export_text()
    assert "Journal Entry Stress Results" in text
    assert "32 ledgers / 16,384 accounts" in text
    assert "4,096" in text
    assert "8,192" in text
    assert "LedgerServiceError=3" in text
    assert "512.00" in text
    assert "64.00" in text
    assert text.index("4,096") < text.index("8,192")


def test_prints_notice_without_runs() -> None:
    console = _console()

    print_results(ScenarioResult(fixture=FixtureSummary(0, 0, 0.0)), console=console)

    assert "No load runs to display." in console.export_text()
