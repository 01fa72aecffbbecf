"""
Global configuration for Merkle tree construction.

Environment-driven defaults are read once at import time:

- `MERKLE_THREADS`: default worker count, `"auto"` or a positive integer.
"""

from __future__ import annotations

import os
from typing import Literal

from pydantic import Field, PositiveInt

from .constants import MAX_LEAVES, ODD_NODE_POLICY, OddNodePolicy
from .types import StrictBaseModel

AUTO: Literal["auto"] = "auto"
"""Sentinel for "one worker per available CPU"."""

Threads = PositiveInt | Literal["auto"]
"""A worker count: a positive integer or `"auto"`."""


def _parse_threads(raw: str) -> Threads:
    """Parse the `MERKLE_THREADS` environment value."""
    value = raw.strip().lower()
    if value == AUTO:
        return AUTO
    if value.isdigit() and int(value) > 0:
        return int(value)
    raise ValueError(
        f"Invalid MERKLE_THREADS environment variable: '{raw}'. "
        f"Supported values: '{AUTO}' or a positive integer"
    )


MERKLE_THREADS: Threads = _parse_threads(os.environ.get("MERKLE_THREADS", AUTO))
"""The default worker count for tree construction. Defaults to 'auto'."""


def available_parallelism() -> int:
    """Number of CPUs usable by this process, at least 1."""
    return os.cpu_count() or 1


class TreeConfig(StrictBaseModel):
    """Options for a single tree construction."""

    threads: Threads = Field(
        default=MERKLE_THREADS,
        description="Worker threads used to hash each level, or 'auto' for one per CPU.",
    )

    max_leaves: PositiveInt = Field(
        default=MAX_LEAVES, description="Largest leaf sequence accepted by a build."
    )

    odd_node_policy: OddNodePolicy = Field(
        default=ODD_NODE_POLICY,
        description="How the last node of an odd-sized level is carried upward.",
    )

    def resolve_workers(self) -> int:
        """The concrete number of worker threads to use."""
        if self.threads == AUTO:
            return available_parallelism()
        return self.threads


DEFAULT_CONFIG = TreeConfig()
"""Configuration used when a build is given none."""
