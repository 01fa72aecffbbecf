"""Shared fixtures for the merkletree tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import List

import pytest

from merkletree import MerkleTree, TreeConfig


def _make_leaves(count: int, prefix: str = "data") -> List[bytes]:
    return [f"{prefix}{i:04d}".encode() for i in range(count)]


@pytest.fixture
def make_leaves() -> Callable[..., List[bytes]]:
    """Factory for deterministic, distinct leaves: `data0000`, `data0001`, ..."""
    return _make_leaves


@pytest.fixture
def leaves_1000() -> List[bytes]:
    """A thousand distinct leaves."""
    return _make_leaves(1000, prefix="integration")


@pytest.fixture
def tree_factory() -> Callable[..., MerkleTree]:
    """Factory building a single-threaded tree of `count` generated leaves."""

    def _create(count: int, threads: int = 1, **config: object) -> MerkleTree:
        return MerkleTree.build(_make_leaves(count), TreeConfig(threads=threads, **config))

    return _create
