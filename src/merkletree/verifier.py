"""
Verification of Merkle inclusion proofs.

A verifier needs only the raw leaf, the proof and a trusted root; it never sees
the tree. The leaf is re-hashed here instead of trusting the digest stored in the
proof, so an internal-node digest can never be passed off as a leaf.
"""

from __future__ import annotations

import logging

from .constants import ODD_NODE_POLICY, OddNodePolicy
from .hasher import SHA256_HASHER, Hasher
from .layout import path_positions
from .proof import MerkleProof, Side
from .types import Digest, MalformedProofError

logger = logging.getLogger(__name__)


def _check_shape(proof: MerkleProof, hasher: Hasher, policy: OddNodePolicy) -> None:
    """
    Ensures the proof describes the path of its leaf in a tree of its leaf count.

    Raises:
        MalformedProofError: On an impossible index, a wrong number of steps, a
            step on the wrong side, or a sibling of the wrong length.
    """
    try:
        expected = path_positions(proof.leaf_index, proof.leaf_count, policy)
    except ValueError as e:
        raise MalformedProofError(str(e)) from e

    if len(proof.path) != len(expected):
        raise MalformedProofError(
            f"expected {len(expected)} sibling(s) for leaf {proof.leaf_index} "
            f"of {proof.leaf_count}, got {len(proof.path)}"
        )

    for depth, (step, position) in enumerate(zip(proof.path, expected, strict=True)):
        if len(step.sibling) != hasher.digest_size:
            raise MalformedProofError(
                f"sibling {depth} is {len(step.sibling)} bytes, expected {hasher.digest_size}"
            )
        if step.side != position.side:
            raise MalformedProofError(
                f"sibling {depth} is on side {step.side!r}, expected {position.side!r}"
            )


def compute_root(
    leaf: bytes,
    proof: MerkleProof,
    hasher: Hasher = SHA256_HASHER,
    policy: OddNodePolicy = ODD_NODE_POLICY,
) -> Digest:
    """
    Recomputes the root implied by `leaf` and `proof`.

    ### Algorithm

    1.  Check that the proof's shape matches the path of `leaf_index` in a tree
        of `leaf_count` leaves under `policy`.

    2.  Start from `current = hash_leaf(leaf)`.

    3.  For each step, in order, combine with the sibling on its recorded side:
        `hash_internal(current, sibling)` for a right sibling,
        `hash_internal(sibling, current)` for a left one.

    Raises:
        MalformedProofError: If the proof cannot belong to any well-formed tree.
    """
    _check_shape(proof, hasher, policy)

    current = hasher.hash_leaf(leaf)
    for step in proof.path:
        if step.side == Side.RIGHT:
            current = hasher.hash_internal(current, step.sibling)
        else:
            current = hasher.hash_internal(step.sibling, current)
    return current


def verify(
    leaf: bytes,
    proof: MerkleProof,
    expected_root: bytes,
    hasher: Hasher = SHA256_HASHER,
    policy: OddNodePolicy = ODD_NODE_POLICY,
) -> bool:
    """
    Verifies that `leaf` is included in the tree with root `expected_root`.

    Returns `False`, never raises, for a tampered leaf, sibling or root and for a
    malformed proof. Returns `True` only if the recomputed root equals
    `expected_root` byte for byte.
    """
    if len(expected_root) != hasher.digest_size:
        logger.debug("Rejected proof: root is %d bytes", len(expected_root))
        return False

    try:
        root = compute_root(leaf, proof, hasher=hasher, policy=policy)
    except MalformedProofError as e:
        logger.debug("Rejected proof for leaf %d: %s", proof.leaf_index, e.detail)
        return False

    if hasher.hash_leaf(leaf) != proof.leaf_hash:
        logger.debug("Rejected proof for leaf %d: leaf hash mismatch", proof.leaf_index)
        return False

    return bytes(root) == bytes(expected_root)


class Verifier:
    """Checks proofs against one known, trusted root."""

    def __init__(
        self,
        root: Digest,
        hasher: Hasher = SHA256_HASHER,
        policy: OddNodePolicy = ODD_NODE_POLICY,
    ):
        """Initializes with the trusted root, the hasher and the odd-node policy."""
        self.root = Digest(root)
        self.hasher = hasher
        self.policy = policy

    def verify(self, leaf: bytes, proof: MerkleProof) -> bool:
        """Verifies that `leaf` is included in the tree with this verifier's root."""
        return verify(leaf, proof, self.root, hasher=self.hasher, policy=self.policy)
