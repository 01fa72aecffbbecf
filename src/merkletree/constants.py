"""Constants of the Merkle tree construction."""

from enum import Enum, IntEnum
from typing import Final

DIGEST_SIZE: Final[int] = 32
"""Number of bytes in every digest produced by a supported hash algorithm."""

MAX_LEAVES: Final[int] = 1 << 20
"""Default upper bound on the number of leaves accepted by a single build."""


class HashPrefix(IntEnum):
    """
    Domain-separation tag prepended to every hash input.

    A leaf is hashed as `H(0x00 || data)` and an internal node as
    `H(0x01 || left || right)`. Without the tag, the 64-byte concatenation of two
    child digests could be presented as a leaf, and an internal node digest would
    then verify as a leaf of a shorter tree (second-preimage forgery).
    """

    LEAF = 0x00
    INTERNAL = 0x01

    def encode(self) -> bytes:
        """The single prefix byte."""
        return bytes([self.value])


class OddNodePolicy(Enum):
    """
    What happens to the last node of a level with an odd number of nodes.

    The rule changes both the root of odd-sized inputs and the shape of proofs, so
    construction, proof generation and verification must all agree on it.
    """

    PROMOTE = "promote"
    """
    Carry the unpaired node to the next level unchanged.

    No hash is computed for it and its proof records no sibling at that level.
    Distinct leaf sequences never share a root.
    """

    DUPLICATE = "duplicate"
    """
    Pair the unpaired node with itself: `hash_internal(x, x)`.

    Every proof has exactly `ceil(log2(n))` steps. Weaker: `[a, b, c]` and
    `[a, b, c, c]` produce the same root.
    """


ODD_NODE_POLICY: Final = OddNodePolicy.PROMOTE
"""The odd-node rule used unless a caller explicitly configures another one."""
