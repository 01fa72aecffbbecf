"""
Binary Merkle tree over an ordered sequence of byte leaves.

### Construction Algorithm

1.  **Leaves**: level 0 holds `hash_leaf(leaf)` for every leaf, in input order.

2.  **Pairing**: each next level holds `hash_internal(node[2i], node[2i + 1])`
    for every adjacent pair of the level below, from left to right.

3.  **Odd levels**: when a level has an odd number of nodes, the last one is
    handled by the configured `OddNodePolicy`. The default, `PROMOTE`, carries
    it to the next level unchanged.

4.  **Termination**: the process repeats until a level holds a single node,
    the root. A tree of `n` leaves has `ceil(log2(n))` levels above the leaves.

The levels are hashed by a `ParallelScheduler`, which yields the same digests
for any number of worker threads.
"""

from __future__ import annotations

import logging
from operator import index as as_index
from typing import Iterator, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, TreeConfig
from .constants import OddNodePolicy
from .hasher import SHA256_HASHER, Hasher
from .layout import path_positions
from .proof import MerkleProof, ProofStep
from .scheduler import ParallelScheduler
from .types import Digest, EmptyInputError, IndexOutOfRangeError, TooManyLeavesError

logger = logging.getLogger(__name__)


class MerkleTree:
    """
    A fully built Merkle tree.

    The tree owns every node digest, stored level by level as tuples. It is never
    modified after `build` returns, so any number of threads may call `prove`
    concurrently.
    """

    def __init__(
        self,
        levels: Tuple[Tuple[Digest, ...], ...],
        hasher: Hasher,
        policy: OddNodePolicy,
    ):
        """Wraps already computed levels. Use `MerkleTree.build` to construct a tree."""
        if not levels or len(levels[-1]) != 1:
            raise ValueError("The last level must hold exactly one node, the root.")
        self._levels = levels
        self.hasher = hasher
        self.policy = policy

    @classmethod
    def build(
        cls,
        leaves: Sequence[bytes],
        config: Optional[TreeConfig] = None,
        hasher: Hasher = SHA256_HASHER,
    ) -> MerkleTree:
        """
        Builds a tree from raw leaves.

        Args:
            leaves: The leaf data, in order. Each leaf is any bytes-like value.
            config: Worker count, leaf limit and odd-node policy.
            hasher: The domain-separated hasher for leaves and internal nodes.

        Returns:
            The constructed tree.

        Raises:
            EmptyInputError: If `leaves` is empty.
            TooManyLeavesError: If there are more leaves than `config.max_leaves`.
            TypeError: If a leaf is not bytes-like.
        """
        config = config or DEFAULT_CONFIG
        if len(leaves) == 0:
            raise EmptyInputError()
        if len(leaves) > config.max_leaves:
            raise TooManyLeavesError(len(leaves), config.max_leaves)

        # Snapshot the input so later mutation by the caller cannot race the workers.
        data = [bytes(memoryview(leaf)) for leaf in leaves]

        workers = config.resolve_workers()
        logger.debug(
            "Building Merkle tree: %d leaves, %d worker(s), policy=%s",
            len(data),
            workers,
            config.odd_node_policy.value,
        )
        with ParallelScheduler(hasher, workers, config.odd_node_policy) as scheduler:
            levels = scheduler.build_levels(data)

        tree = cls(levels, hasher, config.odd_node_policy)
        logger.debug("Built Merkle tree of height %d, root %s", tree.height, tree.root.hex()[:16])
        return tree

    @property
    def root(self) -> Digest:
        """The root digest, summarizing every leaf."""
        return self._levels[-1][0]

    @property
    def leaf_count(self) -> int:
        """Number of leaves the tree was built from."""
        return len(self._levels[0])

    @property
    def height(self) -> int:
        """Number of levels above the leaves. Zero for a single leaf."""
        return len(self._levels) - 1

    @property
    def levels(self) -> Tuple[Tuple[Digest, ...], ...]:
        """All levels, from the leaf digests (index 0) to the root."""
        return self._levels

    def level(self, level: int) -> Tuple[Digest, ...]:
        """The digests of one level, 0 being the leaves."""
        return self._levels[level]

    def node(self, level: int, index: int) -> Digest:
        """The digest at `(level, index)`."""
        return self._levels[level][index]

    def leaf_hash(self, index: int) -> Digest:
        """The digest of the leaf at `index`."""
        return self._levels[0][self._check_index(index)]

    def __len__(self) -> int:
        return self.leaf_count

    def _check_index(self, index: int) -> int:
        # Negative indices are errors, not Python-style offsets from the end.
        index = as_index(index)
        if not 0 <= index < self.leaf_count:
            raise IndexOutOfRangeError(index, self.leaf_count)
        return index

    def prove(self, index: int) -> MerkleProof:
        """
        Computes the inclusion proof for a leaf.

        The proof climbs from the leaf to the root, recording at each level the
        sibling of the current node together with its side. A level where the
        node was promoted without a sibling contributes no step.

        Args:
            index: The position of the leaf, in `[0, leaf_count)`.

        Returns:
            A `MerkleProof` holding copies of the sibling digests.

        Raises:
            IndexOutOfRangeError: If `index` is outside `[0, leaf_count)`.
            TypeError: If `index` is not an integer.
        """
        index = self._check_index(index)
        path = [
            ProofStep(sibling=self._levels[pos.level][pos.index], side=pos.side)
            for pos in path_positions(index, self.leaf_count, self.policy)
        ]
        return MerkleProof(
            leaf_index=index,
            leaf_count=self.leaf_count,
            leaf_hash=self._levels[0][index],
            path=path,
        )

    def proofs(self) -> Iterator[MerkleProof]:
        """Yields the proof of every leaf, in leaf order."""
        for index in range(self.leaf_count):
            yield self.prove(index)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(leaf_count={self.leaf_count}, "
            f"height={self.height}, root={self.root.hex()})"
        )
