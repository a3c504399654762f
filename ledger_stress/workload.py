"""
Concurrent journal-entry load against a prepared account pool.

One run = one concurrency level. Every run gets its own thread pool of exactly
`concurrency` workers. The workers start together (behind a barrier), each
submits `entries_per_worker` journal entries between randomly drawn accounts,
and the pool is shut down (all workers joined) before statistics are built.

Timing is worker-local: each worker sums the duration of its successful
`create_journal_entry` calls and returns that total once. The driver merges
the returned results after the join, so there is no shared counter to race on.

`stop()` makes every worker leave its loop after its current entry. Ctrl-C
while the driver waits for its workers does the same, so an interrupted level
does not run to completion.

A submission that raises is logged, counted by error type and left out of the
timing total; the worker moves on to its next entry. Anything else a worker
raises is a harness bug and is re-raised from the driver after the join.

Counting policy: `RunStatistics.total_entries` is the nominal attempted count
(`concurrency x entries_per_worker`), whether or not every submission succeeded.
A stopped run reports fewer attempts in its worker results.
"""

from __future__ import annotations

import random
import threading
import time
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor
from decimal import Decimal
from functools import partial
from typing import Callable, List, Optional, Protocol, Sequence, Union, runtime_checkable

from ledger_stress.domain.errors import EmptyAccountPool, EntrySubmissionFailed
from ledger_stress.domain.generators import DEFAULT_CLERK, random_journal_entry
from ledger_stress.domain.models import Account, JournalEntry
from ledger_stress.domain.results import RunStatistics, WorkerResult
from ledger_stress.infrastructure.abstract import LedgerManager
from ledger_stress.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_AMOUNT = Decimal("50.00")

EntryFactory = Callable[[Account, Decimal, Account, Decimal], JournalEntry]


@runtime_checkable
class IndexSampler(Protocol):
    """Draws uniform indices in ``[0, bound)``."""

    def next_index(self, bound: int) -> int:
        ...


class RandomIndexSampler:
    """
    Uniform sampler backed by `random.Random`.

    `for_worker()` hands each worker its own generator so workers never share
    RNG state. With a seed, worker `i` always gets the same stream.
    """

    def __init__(self, seed: Optional[Union[int, str]] = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def next_index(self, bound: int) -> int:
        return self._rng.randrange(bound)

    def for_worker(self, worker_index: int) -> "RandomIndexSampler":
        if self.seed is None:
            return RandomIndexSampler()
        return RandomIndexSampler(f"{self.seed}:{worker_index}")


SamplerFactory = Callable[[int], IndexSampler]


class WorkloadDriver:
    """
    Runs journal-entry load at a given concurrency level.

    Parameters
    ----------
    service : LedgerManager
        Receives the journal entries. Shared by all workers; must be thread-safe.
    amount : Decimal
        Amount booked on both the debtor and the creditor side.
    sampler_factory : callable(worker_index) -> IndexSampler
        Provides each worker's index sampler. Defaults to `RandomIndexSampler(seed).for_worker`.
    seed : int | None
        Seed for the default sampler factory.
    clerk : str
        Recorded as the clerk of each generated entry.
    entry_factory : callable
        Builds a journal entry from (debtor, debtor_amount, creditor, creditor_amount).
    clock : callable
        Monotonic clock used for all timings.
    """

    def __init__(
        self,
        service: LedgerManager,
        amount: Decimal = DEFAULT_AMOUNT,
        sampler_factory: Optional[SamplerFactory] = None,
        seed: Optional[int] = None,
        clerk: str = DEFAULT_CLERK,
        entry_factory: Optional[EntryFactory] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.service = service
        self.amount = Decimal(amount)
        self._sampler_factory = sampler_factory or RandomIndexSampler(seed).for_worker
        self._entry_factory = entry_factory or partial(random_journal_entry, clerk=clerk)
        self._clock = clock
        self._stop_requested = threading.Event()

    def stop(self) -> None:
        """Ask running workers to stop after their current entry."""
        self._stop_requested.set()

    def _cancel_workers(self, start_barrier: threading.Barrier) -> None:
        self._stop_requested.set()
        # Release workers still parked on the barrier.
        start_barrier.abort()

    def _submit(self, entry: JournalEntry) -> Optional[EntrySubmissionFailed]:
        try:
            self.service.create_journal_entry(entry)
        except Exception as exc:  # noqa: BLE001 - recovered per entry, run continues
            return EntrySubmissionFailed(entry.transaction_identifier, exc)
        return None

    def _work(
        self,
        worker_index: int,
        entries_per_worker: int,
        accounts: Sequence[Account],
        sampler: IndexSampler,
        start_barrier: threading.Barrier,
    ) -> WorkerResult:
        start_barrier.wait()
        started_at = self._clock()
        bound = len(accounts)
        execution_time = 0.0
        attempted = 0
        succeeded = 0
        failures: Counter[str] = Counter()

        for _ in range(entries_per_worker):
            if self._stop_requested.is_set():
                break
            attempted += 1
            debtor = accounts[sampler.next_index(bound)]
            creditor = accounts[sampler.next_index(bound)]
            entry = self._entry_factory(debtor, self.amount, creditor, self.amount)

            start = self._clock()
            failure = self._submit(entry)
            if failure is not None:
                failures[failure.error_type] += 1
                log.warning(
                    f"[ENTRY FAILED] {failure}",
                    extra={"worker": worker_index, "error_type": failure.error_type},
                )
                continue
            execution_time += self._clock() - start
            succeeded += 1

        return WorkerResult(
            worker_index=worker_index,
            attempted=attempted,
            succeeded=succeeded,
            failed=sum(failures.values()),
            elapsed_seconds=execution_time,
            started_at=started_at,
            finished_at=self._clock(),
            failures_by_type=dict(failures),
        )

    def run_load(
        self, concurrency: int, entries_per_worker: int, account_pool: Sequence[Account]
    ) -> RunStatistics:
        """
        Run `concurrency` workers to completion and return their merged statistics.

        Raises
        ------
        EmptyAccountPool
            If `account_pool` has no accounts.
        ValueError
            If `concurrency < 1` or `entries_per_worker < 0`.
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        if entries_per_worker < 0:
            raise ValueError(f"entries_per_worker must be >= 0, got {entries_per_worker}")
        if len(account_pool) == 0:
            raise EmptyAccountPool()

        stats = RunStatistics(workers=concurrency, entries_per_worker=entries_per_worker)
        log.info(
            f"[RUN START] concurrency={concurrency}",
            extra={
                "workers": concurrency,
                "entries_per_worker": entries_per_worker,
                "accounts": len(account_pool),
            },
        )

        self._stop_requested.clear()
        start_barrier = threading.Barrier(concurrency)
        futures: List[Future[WorkerResult]] = []
        stats.started_at = self._clock()
        try:
            with ThreadPoolExecutor(
                max_workers=concurrency, thread_name_prefix=f"load-{concurrency}"
            ) as executor:
                try:
                    for worker_index in range(concurrency):
                        futures.append(
                            executor.submit(
                                self._work,
                                worker_index,
                                entries_per_worker,
                                account_pool,
                                self._sampler_factory(worker_index),
                                start_barrier,
                            )
                        )
                except BaseException:
                    self._cancel_workers(start_barrier)
                    raise
        except KeyboardInterrupt:
            # Interrupted while joining: wind the workers down instead of
            # letting them finish the level.
            self._cancel_workers(start_barrier)
            log.warning(f"[RUN INTERRUPTED] concurrency={concurrency}", extra={"workers": concurrency})
            raise
        stats.finished_at = self._clock()

        for future in futures:
            stats.merge(future.result())

        log.info(
            f"[RUN COMPLETE] Added {stats.total_entries} journal entries in "
            f"{stats.elapsed_seconds:.2f}s (concurrency={concurrency})",
            extra={
                "workers": concurrency,
                "total_entries": stats.total_entries,
                "succeeded": stats.succeeded,
                "failed": stats.failed,
                "elapsed_seconds": round(stats.elapsed_seconds, 3),
                "throughput_eps": round(stats.throughput_entries_per_sec, 2),
                "mean_latency_ms": round(stats.mean_latency_ms, 3),
            },
        )
        return stats


def run_load(
    service: LedgerManager,
    concurrency: int,
    entries_per_worker: int,
    account_pool: Sequence[Account],
    amount: Decimal = DEFAULT_AMOUNT,
    seed: Optional[int] = None,
) -> RunStatistics:
    """Convenience wrapper around `WorkloadDriver.run_load`."""
    return WorkloadDriver(service, amount=amount, seed=seed).run_load(
        concurrency, entries_per_worker, account_pool
    )


__all__ = [
    "DEFAULT_AMOUNT",
    "IndexSampler",
    "RandomIndexSampler",
    "WorkloadDriver",
    "run_load",
]
