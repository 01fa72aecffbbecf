"""Reusable type definitions for the Merkle tree library."""

from .base import StrictBaseModel
from .byte_arrays import BaseBytes, Digest
from .exceptions import (
    EmptyInputError,
    IndexOutOfRangeError,
    MalformedProofError,
    MerkleError,
    TooManyLeavesError,
)

__all__ = [
    # Core types
    "BaseBytes",
    "Digest",
    "StrictBaseModel",
    # Exceptions
    "MerkleError",
    "EmptyInputError",
    "TooManyLeavesError",
    "IndexOutOfRangeError",
    "MalformedProofError",
]
