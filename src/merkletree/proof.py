"""Inclusion proofs for a single leaf."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Sequence

from pydantic import Field, model_validator

from .constants import ODD_NODE_POLICY, OddNodePolicy
from .types import Digest, StrictBaseModel

if TYPE_CHECKING:
    from .hasher import Hasher


class Side(IntEnum):
    """
    Position of a sibling relative to the node on the proof path.

    The side is stored explicitly rather than derived from the leaf index: once a
    node has been promoted past a level, the parity of the leaf index no longer
    tells which side its siblings are on.
    """

    LEFT = 0
    """The sibling is the left child: `parent = H(sibling, current)`."""
    RIGHT = 1
    """The sibling is the right child: `parent = H(current, sibling)`."""


class ProofStep(StrictBaseModel):
    """One level of an authentication path."""

    sibling: Digest = Field(..., description="Digest of the sibling node.")
    side: Side = Field(..., description="Side of the sibling relative to the path node.")


class MerkleProof(StrictBaseModel):
    """
    Evidence that a leaf is included in a tree with a given root.

    The proof holds copies of the sibling digests it needs and no reference to the
    tree that produced it, so it stays valid after the tree is gone and can be
    checked any number of times against different roots.

    This object is immutable; once created, its contents cannot be changed.
    """

    leaf_index: int = Field(..., ge=0, description="Position of the proven leaf.")

    leaf_count: int = Field(..., gt=0, description="Number of leaves in the tree.")

    leaf_hash: Digest = Field(..., description="Leaf digest recorded at construction.")

    path: Sequence[ProofStep] = Field(
        ..., description="Sibling digests from the leaf level up to, excluding, the root."
    )

    @model_validator(mode="after")
    def check_index_in_range(self) -> MerkleProof:
        """Ensures the proven leaf exists in a tree of `leaf_count` leaves."""
        if self.leaf_index >= self.leaf_count:
            raise ValueError("The leaf index must be smaller than the leaf count.")
        return self

    @property
    def siblings(self) -> list[Digest]:
        """The sibling digests, in path order."""
        return [step.sibling for step in self.path]

    @property
    def sides(self) -> list[Side]:
        """The sibling sides, in path order."""
        return [step.side for step in self.path]

    def verify(
        self,
        leaf: bytes,
        root: Digest,
        hasher: Hasher | None = None,
        policy: OddNodePolicy = ODD_NODE_POLICY,
    ) -> bool:
        """
        Verifies this proof for `leaf` against a known root.

        This is a convenience method that delegates to `verifier.verify()`.
        """
        from .hasher import SHA256_HASHER
        from .verifier import verify

        return verify(leaf, self, root, hasher=hasher or SHA256_HASHER, policy=policy)
