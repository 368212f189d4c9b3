"""Fan-out coordinator: one bounded probe task per peer."""

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, wait

from slc.limiter import ConcurrencyLimiter
from slc.models import Failed, LatencyRun, Measured, Peer, ProbeOutcome
from slc.progress import NullProgress, ProgressReporter
from slc.results import ResultSet

logger = logging.getLogger(__name__)

ProbeFn = Callable[[Peer], ProbeOutcome]


def check_latency(
    peers: Iterable[Peer],
    *,
    probe: ProbeFn,
    limiter: ConcurrencyLimiter | None = None,
    progress: ProgressReporter | None = None,
) -> LatencyRun:
    """Probe every peer concurrently and collect the successful measurements.

    Each peer gets its own task; at most ``limiter.capacity`` probes run at
    once.  Failures are per-peer: they are recorded in
    ``LatencyRun.failures`` and never stop sibling probes.  Progress is
    advanced exactly once per peer, and finished only after every task
    has completed.

    Args:
        peers: Peers to probe.  Duplicates (same pubkey and gossip) are
            probed once.
        probe: Callable turning a ``Peer`` into a ``ProbeOutcome``.
        limiter: Concurrency limiter (default: 20 slots).
        progress: Progress observer (default: ``NullProgress``).

    Returns:
        A ``LatencyRun`` holding results and failures.
    """
    limiter = limiter or ConcurrencyLimiter()
    progress = progress or NullProgress()

    unique = _dedupe(peers)
    run = LatencyRun(results=ResultSet(), total=len(unique))
    logger.info("Probing %d peers (concurrency %d)", run.total, limiter.capacity)

    def task(peer: Peer) -> None:
        try:
            with limiter.slot():
                try:
                    outcome = probe(peer)
                except Exception as exc:
                    outcome = Failed(peer=peer, address=peer.gossip, reason=repr(exc))
            if isinstance(outcome, Measured):
                run.results.append(outcome)
            else:
                logger.debug(
                    "Excluding %s (%s): %s", peer.pubkey, outcome.address, outcome.reason
                )
                run.add_failure(outcome)
        finally:
            progress.safe_advance()

    progress.safe_start(run.total)
    try:
        if unique:
            with ThreadPoolExecutor(
                max_workers=limiter.capacity, thread_name_prefix="probe"
            ) as pool:
                futures = [pool.submit(task, peer) for peer in unique]
                wait(futures)
                for future in futures:
                    future.result()
    finally:
        progress.safe_finish()

    logger.info(
        "Measured %d of %d peers (%d excluded)",
        run.measured_count,
        run.total,
        run.failed_count,
    )
    return run


def _dedupe(peers: Iterable[Peer]) -> list[Peer]:
    """Drop repeated peers, keeping first occurrence order."""
    seen: set[Peer] = set()
    out: list[Peer] = []
    for peer in peers:
        if peer in seen:
            logger.debug("Skipping duplicate peer %s (%s)", peer.pubkey, peer.gossip)
            continue
        seen.add(peer)
        out.append(peer)
    return out
