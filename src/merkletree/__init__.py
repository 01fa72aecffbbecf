"""
Binary Merkle trees with parallel construction and inclusion proofs.

Example::

    from merkletree import MerkleTree, TreeConfig, Verifier

    tree = MerkleTree.build([b"a", b"b", b"c"], TreeConfig(threads=4))
    proof = tree.prove(2)
    assert Verifier(tree.root).verify(b"c", proof)
"""

from .config import AUTO, DEFAULT_CONFIG, TreeConfig
from .constants import DIGEST_SIZE, MAX_LEAVES, ODD_NODE_POLICY, HashPrefix, OddNodePolicy
from .hasher import SHA256_HASHER, HashAlgorithm, Hasher, hash_data_sequences
from .proof import MerkleProof, ProofStep, Side
from .tree import MerkleTree
from .types import (
    Digest,
    EmptyInputError,
    IndexOutOfRangeError,
    MalformedProofError,
    MerkleError,
    TooManyLeavesError,
)
from .verifier import Verifier, compute_root, verify

__all__ = [
    # Construction
    "MerkleTree",
    "TreeConfig",
    "DEFAULT_CONFIG",
    "AUTO",
    # Hashing
    "Hasher",
    "HashAlgorithm",
    "HashPrefix",
    "SHA256_HASHER",
    "hash_data_sequences",
    "Digest",
    "DIGEST_SIZE",
    # Proofs
    "MerkleProof",
    "ProofStep",
    "Side",
    "Verifier",
    "compute_root",
    "verify",
    # Policy
    "OddNodePolicy",
    "ODD_NODE_POLICY",
    "MAX_LEAVES",
    # Errors
    "MerkleError",
    "EmptyInputError",
    "TooManyLeavesError",
    "IndexOutOfRangeError",
    "MalformedProofError",
]
