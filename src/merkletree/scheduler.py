"""
Level-by-level parallel hashing.

### Scheduling Model

Tree construction is a sequence of levels, and every pair hash within a level is
independent of the others. The scheduler therefore:

1.  Preallocates the output level as a list with one slot per leaf or pair.

2.  Splits the slot indices into contiguous, disjoint ranges, one per worker.

3.  Submits one task per range to a fixed-size thread pool. A task reads only the
    finished input level and writes only the slots of its own range, so no locks
    are needed.

4.  Waits for every task before returning. This is the barrier between levels:
    the next level is never started before the current one is complete.

Because each slot is a pure function of the finished child level, the output is
byte-identical for any number of workers.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from types import TracebackType
from typing import Callable, List, Optional, Sequence, Tuple, Type

from .constants import OddNodePolicy
from .hasher import Hasher
from .types import Digest

logger = logging.getLogger(__name__)

_Task = Callable[[Hasher, Sequence, List, int, int], None]
"""A range task: `(hasher, source, out, start, stop)`, writing `out[start:stop]`."""


def partition(count: int, parts: int) -> List[Tuple[int, int]]:
    """
    Split `range(count)` into at most `parts` contiguous `(start, stop)` ranges.

    Range sizes differ by at most one and empty ranges are never returned.
    Examples: (10, 3) -> [(0, 4), (4, 7), (7, 10)], (2, 4) -> [(0, 1), (1, 2)].
    """
    if parts < 1:
        raise ValueError("Need at least one part.")
    parts = min(parts, count)
    if parts == 0:
        return []
    size, extra = divmod(count, parts)
    ranges: List[Tuple[int, int]] = []
    start = 0
    for i in range(parts):
        stop = start + size + (1 if i < extra else 0)
        ranges.append((start, stop))
        start = stop
    return ranges


def _hash_pairs(
    hasher: Hasher,
    children: Sequence[Digest],
    parents: List[Optional[Digest]],
    start: int,
    stop: int,
) -> None:
    """Fill `parents[start:stop]` from the matching child pairs."""
    for i in range(start, stop):
        parents[i] = hasher.hash_internal(children[2 * i], children[2 * i + 1])


def _hash_leaves(
    hasher: Hasher,
    leaves: Sequence[bytes],
    digests: List[Optional[Digest]],
    start: int,
    stop: int,
) -> None:
    """Fill `digests[start:stop]` with the leaf digests of `leaves[start:stop]`."""
    for i in range(start, stop):
        digests[i] = hasher.hash_leaf(leaves[i])


class ParallelScheduler:
    """
    Computes tree levels on a pool of worker threads.

    With a single worker no pool is created and levels are hashed inline.
    Use as a context manager so the pool is shut down when the build ends.
    """

    def __init__(self, hasher: Hasher, workers: int, policy: OddNodePolicy):
        """Initializes with a hasher, a worker count and an odd-node policy."""
        if workers < 1:
            raise ValueError("Number of workers must be at least 1.")
        self.hasher = hasher
        self.workers = workers
        self.policy = policy
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self) -> ParallelScheduler:
        if self.workers > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="merkle-level"
            )
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the worker pool, if any."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _fan_out(self, task: _Task, count: int, source: Sequence, out: List) -> int:
        """
        Runs `task` over `range(count)` split across the workers, then joins.

        Returns the number of tasks that were run.
        """
        ranges = partition(count, self.workers)
        if self._executor is None or len(ranges) <= 1:
            for start, stop in ranges:
                task(self.hasher, source, out, start, stop)
            return len(ranges)

        futures = [
            self._executor.submit(task, self.hasher, source, out, start, stop)
            for start, stop in ranges
        ]
        # Barrier: every slot is written before anything reads the output.
        #
        # `result()` also re-raises any exception from a worker.
        for future in futures:
            future.result()
        return len(futures)

    def hash_leaves(self, leaves: Sequence[bytes]) -> Tuple[Digest, ...]:
        """Computes level 0: the leaf digests, in input order."""
        digests: List[Optional[Digest]] = [None] * len(leaves)
        tasks = self._fan_out(_hash_leaves, len(leaves), leaves, digests)
        logger.debug("Hashed %d leaves using %d task(s)", len(leaves), tasks)
        return _finalized(digests)

    def next_level(self, children: Sequence[Digest]) -> Tuple[Digest, ...]:
        """
        Computes the parent level of `children`.

        The last child of an odd-sized level is promoted unchanged or hashed with
        itself, according to the policy.
        """
        parents: List[Optional[Digest]] = [None] * (len(children) // 2)
        tasks = self._fan_out(_hash_pairs, len(parents), children, parents)

        level = list(_finalized(parents))
        if len(children) % 2 == 1:
            last = children[-1]
            if self.policy is OddNodePolicy.PROMOTE:
                level.append(last)
            else:
                level.append(self.hasher.hash_internal(last, last))

        logger.debug(
            "Hashed level of %d nodes into %d using %d task(s)", len(children), len(level), tasks
        )
        return tuple(level)

    def build_levels(self, leaves: Sequence[bytes]) -> Tuple[Tuple[Digest, ...], ...]:
        """Every level from the leaf digests of `leaves` up to the root."""
        levels: List[Tuple[Digest, ...]] = [self.hash_leaves(leaves)]
        while len(levels[-1]) > 1:
            levels.append(self.next_level(levels[-1]))
        return tuple(levels)


def _finalized(slots: List[Optional[Digest]]) -> Tuple[Digest, ...]:
    """Freezes a fully written output buffer."""
    if any(slot is None for slot in slots):
        raise RuntimeError("Level has unwritten slots after all tasks completed.")
    return tuple(slots)  # type: ignore[arg-type]
