"""Exception hierarchy for Merkle tree construction, proofs and verification."""

from __future__ import annotations


class MerkleError(Exception):
    """
    Base exception for all Merkle-tree errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class EmptyInputError(MerkleError):
    """Raised when a tree is built from an empty leaf sequence."""

    def __init__(self) -> None:
        super().__init__("Cannot build a Merkle tree from zero leaves")


class TooManyLeavesError(MerkleError):
    """
    Raised when the leaf sequence exceeds the configured maximum.

    Attributes:
        leaf_count: The number of leaves supplied.
        limit: The maximum number of leaves allowed.
    """

    def __init__(self, leaf_count: int, limit: int) -> None:
        self.leaf_count = leaf_count
        self.limit = limit
        super().__init__(f"{leaf_count} leaves exceed the maximum of {limit}")


class IndexOutOfRangeError(MerkleError, IndexError):
    """
    Raised when a proof is requested for a leaf that does not exist.

    Attributes:
        index: The requested leaf index.
        leaf_count: The number of leaves in the tree.
    """

    def __init__(self, index: int, leaf_count: int) -> None:
        self.index = index
        self.leaf_count = leaf_count
        super().__init__(f"Leaf index {index} is out of range [0, {leaf_count})")


class MalformedProofError(MerkleError):
    """
    Raised when a proof cannot describe any path in a well-formed tree.

    Wrong digest sizes and sibling counts or sides that disagree with the tree
    shape implied by `(leaf_index, leaf_count)` both end up here.

    Attributes:
        detail: Description of what is wrong with the proof.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Malformed proof: {detail}")
