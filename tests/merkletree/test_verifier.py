"""Tests for proof verification."""

from collections.abc import Callable
from typing import List

import pytest
from hypothesis import given
from hypothesis import strategies as st

from merkletree import (
    SHA256_HASHER,
    HashAlgorithm,
    Hasher,
    MalformedProofError,
    MerkleProof,
    MerkleTree,
    OddNodePolicy,
    ProofStep,
    Side,
    TreeConfig,
    Verifier,
    compute_root,
    verify,
)
from merkletree.types import Digest


def _flip(data: bytes, position: int) -> bytes:
    """Returns `data` with one bit flipped at byte `position`."""
    mutated = bytearray(data)
    mutated[position] ^= 0x01
    return bytes(mutated)


def _with_path(proof: MerkleProof, path: List[ProofStep]) -> MerkleProof:
    return MerkleProof(
        leaf_index=proof.leaf_index,
        leaf_count=proof.leaf_count,
        leaf_hash=proof.leaf_hash,
        path=path,
    )


def test_simple_protocol() -> None:
    """Build, prove and verify one leaf."""
    data = [b"integration00", b"integration01", b"integration02", b"integration03"]
    tree = MerkleTree.build(data, TreeConfig(threads=1))
    proof = tree.prove(3)

    verifier = Verifier(tree.root)
    assert verifier.verify(data[3], proof)


@pytest.mark.parametrize("leaf_count", [1, 2, 3, 5, 7, 8, 9, 16, 33])
@pytest.mark.parametrize("policy", list(OddNodePolicy))
def test_every_proof_verifies(
    make_leaves: Callable[..., List[bytes]], leaf_count: int, policy: OddNodePolicy
) -> None:
    """Completeness: every leaf of every tree size verifies against the root."""
    data = make_leaves(leaf_count)
    tree = MerkleTree.build(data, TreeConfig(odd_node_policy=policy))

    for i, leaf in enumerate(data):
        proof = tree.prove(i)
        assert verify(leaf, proof, tree.root, policy=policy), f"leaf {i} of {leaf_count}"
        assert compute_root(leaf, proof, policy=policy) == tree.root


@pytest.mark.slow
def test_thread_numbers_and_leaf_indices_systematically(leaves_1000: List[bytes]) -> None:
    """Every leaf of a 1000-leaf tree verifies for every thread count up to 16."""
    for num_threads in range(1, 17):
        tree = MerkleTree.build(leaves_1000, TreeConfig(threads=num_threads))
        verifier = Verifier(tree.root)
        for leaf_index, leaf in enumerate(leaves_1000):
            assert verifier.verify(leaf, tree.prove(leaf_index))


def test_wrong_proof() -> None:
    """A proof from a different tree does not verify against another root."""
    data1 = [b"integration00", b"integration01", b"integration02", b"integration03"]
    data2 = [b"integration00", b"integration01", b"integration02", b"modified"]

    root1 = MerkleTree.build(data1).root
    proof2 = MerkleTree.build(data2).prove(3)

    assert not Verifier(root1).verify(b"modified", proof2)


def test_tampered_leaf(make_leaves: Callable[..., List[bytes]]) -> None:
    """Flipping any byte of the leaf fails verification."""
    data = make_leaves(7)
    tree = MerkleTree.build(data)
    proof = tree.prove(5)

    for position in range(len(data[5])):
        assert verify(_flip(data[5], position), proof, tree.root) is False


def test_tampered_sibling(make_leaves: Callable[..., List[bytes]]) -> None:
    """Flipping any byte of any sibling fails verification."""
    data = make_leaves(7)
    tree = MerkleTree.build(data)
    proof = tree.prove(2)

    for depth, step in enumerate(proof.path):
        for position in range(len(step.sibling)):
            path = list(proof.path)
            path[depth] = ProofStep(sibling=_flip(step.sibling, position), side=step.side)
            assert verify(data[2], _with_path(proof, path), tree.root) is False


def test_tampered_root(make_leaves: Callable[..., List[bytes]]) -> None:
    """Flipping any byte of the expected root fails verification."""
    data = make_leaves(5)
    tree = MerkleTree.build(data)
    proof = tree.prove(0)

    for position in range(len(tree.root)):
        assert verify(data[0], proof, _flip(tree.root, position)) is False


@pytest.mark.parametrize(
    "root",
    [
        pytest.param(b"", id="empty"),
        pytest.param(b"\x00" * 31, id="short"),
        pytest.param(b"\x00" * 33, id="long"),
    ],
)
def test_root_of_wrong_length(root: bytes) -> None:
    """A root that is not a digest never verifies."""
    tree = MerkleTree.build([b"a", b"b"])
    assert verify(b"a", tree.prove(0), root) is False


def test_missing_sibling_is_malformed(make_leaves: Callable[..., List[bytes]]) -> None:
    """A path shorter than the tree shape requires is malformed."""
    data = make_leaves(4)
    tree = MerkleTree.build(data)
    proof = tree.prove(1)
    truncated = _with_path(proof, list(proof.path[:-1]))

    with pytest.raises(MalformedProofError, match="expected 2 sibling"):
        compute_root(data[1], truncated)
    assert verify(data[1], truncated, tree.root) is False


def test_extra_sibling_is_malformed(make_leaves: Callable[..., List[bytes]]) -> None:
    """A path longer than the tree shape allows is malformed."""
    data = make_leaves(4)
    tree = MerkleTree.build(data)
    proof = tree.prove(1)
    padded = _with_path(proof, [*proof.path, ProofStep(sibling=tree.root, side=Side.RIGHT)])

    with pytest.raises(MalformedProofError):
        compute_root(data[1], padded)
    assert verify(data[1], padded, tree.root) is False


def test_wrong_side_is_malformed(make_leaves: Callable[..., List[bytes]]) -> None:
    """Sides must match the position of the leaf."""
    data = make_leaves(4)
    tree = MerkleTree.build(data)
    proof = tree.prove(0)
    path = list(proof.path)
    path[0] = ProofStep(sibling=path[0].sibling, side=Side.LEFT)
    swapped = _with_path(proof, path)

    with pytest.raises(MalformedProofError, match="sibling 0"):
        compute_root(data[0], swapped)
    assert verify(data[0], swapped, tree.root) is False


def test_short_sibling_is_rejected_not_raised(make_leaves: Callable[..., List[bytes]]) -> None:
    """A sibling of the wrong length that bypassed validation still fails cleanly."""
    data = make_leaves(2)
    tree = MerkleTree.build(data)
    proof = tree.prove(0)
    bad_step = ProofStep.model_construct(sibling=b"\x00" * 31, side=Side.RIGHT)
    malformed = MerkleProof.model_construct(
        leaf_index=0, leaf_count=2, leaf_hash=proof.leaf_hash, path=[bad_step]
    )

    with pytest.raises(MalformedProofError, match="31 bytes"):
        compute_root(data[0], malformed)
    assert verify(data[0], malformed, tree.root) is False


def test_impossible_index_is_rejected_not_raised(make_leaves: Callable[..., List[bytes]]) -> None:
    """A proof whose index exceeds its own leaf count fails cleanly."""
    data = make_leaves(2)
    tree = MerkleTree.build(data)
    proof = tree.prove(1)
    malformed = MerkleProof.model_construct(
        leaf_index=2, leaf_count=2, leaf_hash=proof.leaf_hash, path=proof.path
    )
    assert verify(data[1], malformed, tree.root) is False


def test_leaf_hash_mismatch(make_leaves: Callable[..., List[bytes]]) -> None:
    """A proof that records a different leaf digest is rejected."""
    data = make_leaves(4)
    tree = MerkleTree.build(data)
    proof = tree.prove(2)
    inconsistent = MerkleProof(
        leaf_index=2,
        leaf_count=4,
        leaf_hash=SHA256_HASHER.hash_leaf(b"something else"),
        path=proof.path,
    )
    assert verify(data[2], inconsistent, tree.root) is False


def test_internal_node_cannot_be_passed_off_as_leaf() -> None:
    """
    Second-preimage forgery: claim the children of a level-1 node as a leaf.

    Without domain separation, `H(left || right)` would equal the level-1 node and
    the forged two-leaf proof would verify.
    """
    tree = MerkleTree.build([b"a", b"b", b"c", b"d"])
    forged_leaf = tree.node(0, 0) + tree.node(0, 1)
    forged = MerkleProof(
        leaf_index=0,
        leaf_count=2,
        leaf_hash=SHA256_HASHER.hash_leaf(forged_leaf),
        path=[ProofStep(sibling=tree.node(1, 1), side=Side.RIGHT)],
    )
    assert verify(forged_leaf, forged, tree.root) is False


def test_policy_mismatch(make_leaves: Callable[..., List[bytes]]) -> None:
    """Proofs are only valid under the odd-node rule they were built with."""
    data = make_leaves(5)
    duplicate = TreeConfig(odd_node_policy=OddNodePolicy.DUPLICATE)
    tree = MerkleTree.build(data, duplicate)
    proof = tree.prove(4)

    assert verify(data[4], proof, tree.root, policy=OddNodePolicy.DUPLICATE)
    assert not verify(data[4], proof, tree.root, policy=OddNodePolicy.PROMOTE)


def test_hasher_mismatch(make_leaves: Callable[..., List[bytes]]) -> None:
    """Proofs are only valid under the hash function they were built with."""
    data = make_leaves(3)
    blake = Hasher(algorithm=HashAlgorithm.BLAKE2S)
    tree = MerkleTree.build(data, hasher=blake)
    proof = tree.prove(0)

    assert Verifier(tree.root, hasher=blake).verify(data[0], proof)
    assert not Verifier(tree.root).verify(data[0], proof)


def test_proof_is_reusable(make_leaves: Callable[..., List[bytes]]) -> None:
    """A proof can be checked repeatedly and against several roots."""
    data = make_leaves(3)
    tree = MerkleTree.build(data)
    other = MerkleTree.build(make_leaves(3, prefix="other"))
    proof = tree.prove(1)

    assert verify(data[1], proof, tree.root)
    assert not verify(data[1], proof, other.root)
    assert verify(data[1], proof, tree.root)


def test_verifier_keeps_root() -> None:
    """The verifier stores the trusted root as a digest."""
    root = b"\x01" * 32
    verifier = Verifier(root)
    assert verifier.root == root
    assert isinstance(verifier.root, Digest)


@given(
    data=st.data(),
    leaf_count=st.integers(min_value=1, max_value=64),
    leaf=st.binary(max_size=32),
    root=st.binary(max_size=40),
)
def test_verify_never_raises_on_arbitrary_proofs(
    data: st.DataObject, leaf_count: int, leaf: bytes, root: bytes
) -> None:
    """Any well-typed proof yields a boolean, never an exception."""
    leaf_index = data.draw(st.integers(min_value=0, max_value=leaf_count - 1))
    path = data.draw(
        st.lists(
            st.builds(
                ProofStep,
                sibling=st.binary(min_size=32, max_size=32),
                side=st.sampled_from(Side),
            ),
            max_size=8,
        )
    )
    proof = MerkleProof(
        leaf_index=leaf_index,
        leaf_count=leaf_count,
        leaf_hash=SHA256_HASHER.hash_leaf(leaf),
        path=path,
    )
    assert verify(leaf, proof, root) in (True, False)
