"""
Domain-separated hashing for Merkle trees.

### Why Domain Separation

A Merkle tree hashes two kinds of things: raw leaf data and pairs of child digests.
If both were hashed as `H(data)`, the concatenation `left || right` of two child
digests would be a perfectly valid 64-byte "leaf". An attacker could then present
an internal node as a leaf and produce a proof that verifies for data that was
never inserted into the tree.

Every hash input therefore starts with a one-byte `HashPrefix`:

- leaves:         `H(0x00 || data)`
- internal nodes: `H(0x01 || left || right)`

so a leaf digest and an internal digest are never computed over the same input.
"""

from __future__ import annotations

import hashlib
from enum import Enum

from pydantic import Field, model_validator

from .constants import DIGEST_SIZE, HashPrefix
from .types import Digest, StrictBaseModel


class HashAlgorithm(str, Enum):
    """Hash functions available from `hashlib` that produce `DIGEST_SIZE`-byte digests."""

    SHA256 = "sha256"
    SHA3_256 = "sha3_256"
    BLAKE2S = "blake2s"


def hash_data_sequences(*parts: bytes, algorithm: HashAlgorithm = HashAlgorithm.SHA256) -> Digest:
    """Hash the concatenation of `parts` without materializing it."""
    h = hashlib.new(algorithm.value)
    for part in parts:
        h.update(part)
    return Digest(h.digest())


class Hasher(StrictBaseModel):
    """
    Computes leaf and internal-node digests for a given hash algorithm.

    Instances are immutable and hold no hashing state between calls, so a single
    hasher can be shared by every worker thread of a parallel build.
    """

    algorithm: HashAlgorithm = Field(
        default=HashAlgorithm.SHA256, description="The underlying hash function."
    )

    @model_validator(mode="after")
    def check_digest_size(self) -> Hasher:
        """Reject algorithms whose output does not fit a `Digest`."""
        size = hashlib.new(self.algorithm.value).digest_size
        if size != DIGEST_SIZE:
            raise ValueError(f"{self.algorithm.value} produces {size}-byte digests")
        return self

    @property
    def digest_size(self) -> int:
        """Length in bytes of every digest this hasher returns."""
        return DIGEST_SIZE

    def hash_leaf(self, data: bytes) -> Digest:
        """
        Hash raw leaf data: `H(0x00 || data)`.

        Empty data is valid and hashed as-is.
        """
        return hash_data_sequences(HashPrefix.LEAF.encode(), data, algorithm=self.algorithm)

    def hash_internal(self, left: Digest, right: Digest) -> Digest:
        """Hash two child digests into their parent: `H(0x01 || left || right)`."""
        return hash_data_sequences(
            HashPrefix.INTERNAL.encode(), left, right, algorithm=self.algorithm
        )


SHA256_HASHER = Hasher()
"""The default hasher."""
