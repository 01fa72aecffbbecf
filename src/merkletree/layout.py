"""
Index arithmetic for trees with an arbitrary number of leaves.

These helpers depend only on the leaf count and the odd-node policy, never on
digests. Proof generation and proof verification both derive the authentication
path from `path_positions`, which keeps the two sides on the same odd-node rule.
"""

from __future__ import annotations

from typing import List, NamedTuple

from .constants import OddNodePolicy
from .proof import Side


class PathPosition(NamedTuple):
    """Where a proof step's sibling lives in the tree."""

    level: int
    """Level of the sibling, 0 being the leaves."""
    index: int
    """Index of the sibling within its level."""
    side: Side
    """Which side of the path node the sibling sits on."""


def level_widths(leaf_count: int) -> List[int]:
    """
    Node counts of every level, from the leaves up to the root.

    Both odd-node policies halve a level rounding up, so the widths are the same
    for either policy. Examples: 1 -> [1], 5 -> [5, 3, 2, 1].
    """
    if leaf_count < 1:
        raise ValueError("A tree needs at least one leaf.")
    widths = [leaf_count]
    while widths[-1] > 1:
        widths.append((widths[-1] + 1) // 2)
    return widths


def tree_height(leaf_count: int) -> int:
    """Number of levels above the leaves: `ceil(log2(leaf_count))`."""
    return len(level_widths(leaf_count)) - 1


def path_positions(index: int, leaf_count: int, policy: OddNodePolicy) -> List[PathPosition]:
    """
    Sibling positions on the path from leaf `index` to the root.

    At each level below the root:

    - an odd node has its left neighbour as sibling,
    - an even node with a right neighbour has that neighbour as sibling,
    - the last node of an odd-sized level has no neighbour. Under `PROMOTE`
      it moves up unchanged and no position is emitted. Under `DUPLICATE` it is
      paired with itself, so it is emitted as its own right sibling.

    Raises:
        ValueError: If `index` is not in `[0, leaf_count)`.
    """
    if not 0 <= index < leaf_count:
        raise ValueError(f"Leaf index {index} is out of range [0, {leaf_count})")

    positions: List[PathPosition] = []
    current = index
    for level, width in enumerate(level_widths(leaf_count)[:-1]):
        if current % 2 == 1:
            positions.append(PathPosition(level, current - 1, Side.LEFT))
        elif current + 1 < width:
            positions.append(PathPosition(level, current + 1, Side.RIGHT))
        elif policy is OddNodePolicy.DUPLICATE:
            positions.append(PathPosition(level, current, Side.RIGHT))
        current //= 2
    return positions
