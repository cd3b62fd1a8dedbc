"""
Concurrent multi-strategy runner.

Each Strategy gets a worker id 1..K and its own thread, Simulator, Table,
Shoe and Player; nothing mutable is shared between workers. Workers stream
one SimulationSummary delta per simulation to a single aggregator over a
queue-backed channel and finish with a ``(None, worker_id)`` sentinel:

    worker k ──(delta, k)──(delta, k)── … ──(None, k)──┐
                                                       ├─► Aggregator
    worker j ──(delta, j)── … ──(None, j)──────────────┘

The aggregator merges deltas per id (create on first use) and removes an id
from its pending set when that id's sentinel arrives; it is done when the
pending set is empty. Merging is addition, so arrival order across workers
does not matter.

The sentinel is sent from a ``finally`` block, so a worker that fails still
completes the protocol and the aggregator never waits on it forever.

Failure policies:
    RAISE      siblings run to completion, then the first error is raised
               as SimulationRunError (default)
    FAIL_FAST  the first error cancels siblings at their next simulation
               boundary, then it is raised as SimulationRunError
    PARTIAL    siblings run to completion and the result carries both the
               completed summaries and the failures

Workers are threads, so pure-Python hand simulation shares the GIL; the
layout keeps every worker independent so a process pool can replace it
without touching the protocol.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np

from src.analysis.simulator import SimulationSummary, Simulator
from src.engine.config import SimulatorConfig
from src.engine.errors import ChannelSendFailure, SimulationRunError
from src.strategy.composite import Strategy

logger = logging.getLogger(__name__)

Message = tuple[SimulationSummary | None, int]


class FailurePolicy(Enum):
    RAISE = auto()
    FAIL_FAST = auto()
    PARTIAL = auto()


# ─── Channel ──────────────────────────────────────────────────────────────────

class SummaryChannel:
    """Multi-producer, single-consumer channel of ``(summary | None, worker_id)``.

    Unbounded, so producers never block on the consumer.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[Message] = queue.Queue()
        self._closed = threading.Event()

    def send(self, summary: SimulationSummary | None, worker_id: int) -> None:
        """Raises ChannelSendFailure once the receiving side has closed."""
        if self._closed.is_set():
            raise ChannelSendFailure(f"worker {worker_id}: aggregator is no longer receiving")
        self._queue.put((summary, worker_id))

    def recv(self, timeout: float | None = None) -> Message:
        """Block for the next message; raises queue.Empty on timeout."""
        return self._queue.get(timeout=timeout)

    def close(self) -> None:
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()


# ─── Aggregator ───────────────────────────────────────────────────────────────

class Aggregator(threading.Thread):
    """Merges streamed deltas per worker id until every sentinel has arrived."""

    def __init__(self, channel: SummaryChannel, worker_ids: list[int]) -> None:
        super().__init__(name="aggregator", daemon=True)
        self.channel = channel
        self.pending: set[int] = set(worker_ids)
        self.summaries: dict[int, SimulationSummary] = {}
        self.error: BaseException | None = None

    def handle(self, message: Message) -> None:
        summary, worker_id = message
        if worker_id not in self.pending:
            raise ValueError(f"message from unknown or finished worker {worker_id}")
        if summary is None:
            self.pending.discard(worker_id)
            return
        merged = self.summaries.get(worker_id)
        if merged is None:
            merged = self.summaries[worker_id] = SimulationSummary(label=summary.label)
        merged.merge(summary)

    @property
    def done(self) -> bool:
        return not self.pending

    def run(self) -> None:
        try:
            # every worker sends its sentinel from a finally block
            while self.pending:
                self.handle(self.channel.recv())
        except Exception as exc:
            self.error = exc
            logger.exception("aggregator failed")
        finally:
            self.channel.close()


# ─── Worker ───────────────────────────────────────────────────────────────────

class StrategyWorker(threading.Thread):
    """Runs ``num_simulations`` simulations of one strategy and streams the deltas."""

    def __init__(
        self,
        worker_id: int,
        strategy: Strategy,
        config: SimulatorConfig,
        channel: SummaryChannel,
        rng: np.random.Generator,
        cancel: threading.Event,
        on_failure=None,
    ) -> None:
        super().__init__(name=f"worker-{worker_id}", daemon=True)
        self.worker_id = worker_id
        self.strategy = strategy
        self.config = config
        self.channel = channel
        self.rng = rng
        self.cancel = cancel
        self.on_failure = on_failure
        self.error: BaseException | None = None
        self.completed = 0

    def _fail(self, exc: BaseException) -> None:
        if self.error is None:
            self.error = exc
            if self.on_failure is not None:
                self.on_failure(self.worker_id, exc)

    def run(self) -> None:
        label = self.strategy.label
        logger.info("worker %d started: %s", self.worker_id, label)
        try:
            simulator = Simulator(self.strategy, self.config, rng=self.rng)
            for _ in range(self.config.num_simulations):
                if self.cancel.is_set():
                    logger.info("worker %d cancelled after %d simulations", self.worker_id, self.completed)
                    break
                delta = simulator.run_single_simulation()
                self.channel.send(delta, self.worker_id)
                self.completed += 1
        except Exception as exc:
            logger.error("worker %d (%s) failed: %s", self.worker_id, label, exc)
            self._fail(exc)
        finally:
            try:
                self.channel.send(None, self.worker_id)
            except ChannelSendFailure as exc:
                self._fail(exc)
        logger.info("worker %d finished %d simulations: %s", self.worker_id, self.completed, label)


# ─── Orchestrator ─────────────────────────────────────────────────────────────

@dataclass
class RunResult:
    """Outcome of a multi-strategy run, keyed by worker id."""
    labels: dict[int, str]
    summaries: dict[int, SimulationSummary] = field(default_factory=dict)
    failures: dict[int, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def by_label(self) -> dict[str, SimulationSummary]:
        return {self.labels[i]: s for i, s in sorted(self.summaries.items())}


class MultiStrategyRunner:
    """Run several strategies concurrently under one table configuration.

    Args:
        config:         Shared table rules and simulation sizes.
        strategies:     Non-empty list of distinct Strategy instances; each
                        is mutated by its own worker only.
        failure_policy: What to do when a worker fails.

    Raises:
        ValueError: If *strategies* is empty or repeats an instance.
    """

    def __init__(
        self,
        config: SimulatorConfig,
        strategies: list[Strategy],
        failure_policy: FailurePolicy = FailurePolicy.RAISE,
    ) -> None:
        if not strategies:
            raise ValueError("at least one strategy is required")
        if len({id(s) for s in strategies}) != len(strategies):
            raise ValueError("the same Strategy instance was passed more than once")
        self.config = config
        self.strategies = list(strategies)
        self.failure_policy = failure_policy

    def run(self) -> RunResult:
        """Run every strategy to completion (or cancellation) and aggregate.

        Raises:
            SimulationRunError: First worker failure, under RAISE / FAIL_FAST.
        """
        ids = list(range(1, len(self.strategies) + 1))
        labels = {i: s.label for i, s in zip(ids, self.strategies)}
        seeds = np.random.SeedSequence(self.config.seed).spawn(len(ids))

        channel = SummaryChannel()
        cancel = threading.Event()
        failures: list[tuple[int, BaseException]] = []
        lock = threading.Lock()

        def on_failure(worker_id: int, exc: BaseException) -> None:
            with lock:
                failures.append((worker_id, exc))
            if self.failure_policy is FailurePolicy.FAIL_FAST:
                cancel.set()

        aggregator = Aggregator(channel, ids)
        workers = [
            StrategyWorker(i, s, self.config, channel, np.random.default_rng(seed), cancel, on_failure)
            for i, s, seed in zip(ids, self.strategies, seeds)
        ]

        logger.info(
            "running %d strategies × %d simulations × %d hands",
            len(workers), self.config.num_simulations, self.config.hands_per_simulation,
        )
        aggregator.start()
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()
        aggregator.join()

        if aggregator.error is not None:
            raise SimulationRunError("aggregator", aggregator.error)

        result = RunResult(
            labels=labels,
            summaries=dict(aggregator.summaries),
            failures={i: exc for i, exc in failures},
        )
        if failures and self.failure_policy is not FailurePolicy.PARTIAL:
            worker_id, exc = failures[0]
            raise SimulationRunError(labels[worker_id], exc) from exc
        return result


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from src.analysis.report import build_report, print_report
    from src.strategy.catalog import all_counting_strategies

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    cfg = SimulatorConfig(hands_per_simulation=1000, num_simulations=100, seed=7)
    runner = MultiStrategyRunner(cfg, all_counting_strategies(margin=2.0, num_decks=cfg.num_decks))
    print_report(build_report(runner.run().summaries))
