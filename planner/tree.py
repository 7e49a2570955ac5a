"""
Subnet plan tree.

A plan starts as a single root network (/16 to /64) and is refined by
splitting subnets into children and joining them back.  The tree is an
arena: every node lives in one flat mapping keyed by canonical CIDR, and
each node lists the CIDRs of its children in numeric order.  There is no
second nested copy to keep in sync.

Each node stores:
  note      Free-text annotation.
  color     Row colour (usually "#rrggbb"); "" means none.
  children  Child CIDR keys, ascending by address.  Empty for a leaf.

Splitting
---------
``split("3fff::/20")`` cuts at the next nibble boundary (sixteen /24s).
An explicit target that crosses several nibble boundaries builds every
aligned level in between, so ``split("3fff::/20", 28)`` yields sixteen
/24s each holding sixteen /28s.  New children copy the parent's note and
colour into whichever of their own fields are still empty, level by level.

Joining
-------
``join(cidr, prefix)`` finds the ancestor of *cidr* at *prefix* and drops
its whole subtree.  The ancestor keeps its own note and colour.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .address import Address, make_cidr, require_address, split_cidr
from .errors import (
    CannotSplitMinimumSubnet,
    InvalidTarget,
    TooManyChildren,
)
from .ordering import sort_cidrs
from .prefix import (
    canonical_cidr,
    child_at,
    mask,
    next_nibble_boundary,
    nibble_boundaries,
)

MIN_ROOT_PREFIX = 16
MAX_PREFIX = 64
MAX_CHILDREN_PER_LEVEL = 1024

PALETTE = [
    "#FFE5E5",  # Soft Pink
    "#E5F3FF",  # Sky Blue
    "#E5FFE5",  # Mint Green
    "#FFF5E5",  # Peach
    "#F5E5FF",  # Lavender
    "#E5FFFF",  # Cyan
    "#FFFFE5",  # Cream
    "#FFE5F5",  # Rose
    "#E5F5FF",  # Ice Blue
    "#F5FFE5",  # Pale Lime
    "#FFE5D5",  # Apricot
    "#E5E5FF",  # Periwinkle
    "#FFEED5",  # Sand
    "#D5FFE5",  # Seafoam
    "#FFD5E5",  # Blush
    "#E5FFED",  # Aqua Mint
]


@dataclass
class SubnetNode:
    note: str = ""
    color: str = ""
    children: List[str] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def inherit_from(self, parent: SubnetNode) -> None:
        """Copy the parent's annotation into fields that are still empty."""
        if not self.note:
            self.note = parent.note
        if not self.color:
            self.color = parent.color


def _prefix_of(cidr: str) -> int:
    return int(cidr.rsplit("/", 1)[1])


def _check_level_size(parent_prefix: int, target_prefix: int) -> None:
    count = 1 << (target_prefix - parent_prefix)
    if count > MAX_CHILDREN_PER_LEVEL:
        raise TooManyChildren(
            f"Splitting /{parent_prefix} into /{target_prefix} would create "
            f"{count:,} subnets (limit {MAX_CHILDREN_PER_LEVEL:,} per level)"
        )


class SubnetTree:
    """Mutable subnet plan rooted at one network."""

    def __init__(
        self,
        network: Address | str,
        prefix: int,
        nodes: Optional[Dict[str, SubnetNode]] = None,
    ):
        if isinstance(network, str):
            network = require_address(network)
        self.prefix = prefix
        self.network = mask(network, prefix)
        self.nodes: Dict[str, SubnetNode] = {} if nodes is None else nodes
        self._lock = threading.RLock()
        self.get_or_create_node(self.root_cidr)

    @classmethod
    def from_network(cls, text: str, prefix: int) -> SubnetTree:
        """Start a fresh plan from user input, enforcing the /16–/64 range."""
        address = require_address(text)
        if not MIN_ROOT_PREFIX <= prefix <= MAX_PREFIX:
            raise InvalidTarget(
                f"Prefix must be between /{MIN_ROOT_PREFIX} and /{MAX_PREFIX}"
            )
        return cls(address, prefix)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def root_cidr(self) -> str:
        return make_cidr(self.network, self.prefix)

    @property
    def root(self) -> SubnetNode:
        return self.nodes[self.root_cidr]

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, cidr: str) -> bool:
        return canonical_cidr(cidr) in self.nodes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SubnetTree):
            return NotImplemented
        return (
            self.network == other.network
            and self.prefix == other.prefix
            and self.nodes == other.nodes
        )

    def __repr__(self) -> str:
        return f"SubnetTree({self.root_cidr!r}, nodes={len(self.nodes)})"

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_node(self, cidr: str) -> Optional[SubnetNode]:
        return self.nodes.get(canonical_cidr(cidr))

    def get_or_create_node(self, cidr: str) -> SubnetNode:
        key = canonical_cidr(cidr)
        node = self.nodes.get(key)
        if node is None:
            node = self.nodes[key] = SubnetNode()
        return node

    def is_split(self, cidr: str) -> bool:
        node = self.get_node(cidr)
        return node is not None and not node.is_leaf

    def children(self, cidr: str) -> List[str]:
        node = self.get_node(cidr)
        return list(node.children) if node else []

    def annotate(
        self,
        cidr: str,
        note: Optional[str] = None,
        color: Optional[str] = None,
    ) -> SubnetNode:
        """Set the note and/or colour of an existing subnet."""
        with self._lock:
            node = self.get_node(cidr)
            if node is None:
                raise InvalidTarget(f"{cidr} is not part of the plan")
            if note is not None:
                node.note = note
            if color is not None:
                node.color = color
            return node

    # ------------------------------------------------------------------
    # Split
    # ------------------------------------------------------------------

    def split(self, cidr: str, target_prefix: Optional[int] = None) -> List[str]:
        """
        Split *cidr* down to *target_prefix* (next nibble boundary if omitted).

        Returns every CIDR created, first level first.  All checks run
        before the tree is touched, so a rejected split changes nothing.
        """
        key = canonical_cidr(cidr)
        prefix = _prefix_of(key)

        if prefix >= MAX_PREFIX:
            raise CannotSplitMinimumSubnet(f"Cannot split /{MAX_PREFIX} or smaller: {key}")

        if target_prefix is None:
            target_prefix = next_nibble_boundary(prefix)
        elif not prefix < target_prefix <= MAX_PREFIX:
            raise InvalidTarget(
                f"Target /{target_prefix} must be between /{prefix + 1} and /{MAX_PREFIX}"
            )

        levels = nibble_boundaries(prefix, target_prefix)
        previous = prefix
        for level in levels:
            _check_level_size(previous, level)
            previous = level

        with self._lock:
            if key not in self.nodes:
                raise InvalidTarget(f"{key} is not part of the plan")
            if self.is_split(key):
                raise InvalidTarget(f"{key} is already split; join it first")
            if len(levels) == 1:
                return self.create_intermediate_level(key, target_prefix)
            return self.create_intermediate_levels(key, target_prefix)

    def create_intermediate_level(self, parent_cidr: str, target_prefix: int) -> List[str]:
        """Create every /target_prefix child of *parent_cidr* in one step.

        Existing children are reused and only pick up the parent's
        annotation where their own is empty.  Returns the children in
        address order; ``[]`` when *target_prefix* is not below the parent.
        """
        key = canonical_cidr(parent_cidr)
        address, prefix = split_cidr(key)
        if target_prefix <= prefix:
            return []
        _check_level_size(prefix, target_prefix)

        with self._lock:
            parent = self.get_or_create_node(key)
            created = []
            for i in range(1 << (target_prefix - prefix)):
                child_cidr = make_cidr(
                    child_at(address, target_prefix, i, parent_prefix=prefix),
                    target_prefix,
                )
                self.get_or_create_node(child_cidr).inherit_from(parent)
                created.append(child_cidr)

            if parent.is_leaf:
                parent.children = list(created)
            else:
                parent.children = sort_cidrs(set(parent.children) | set(created))
            return created

    def create_intermediate_levels(self, parent_cidr: str, target_prefix: int) -> List[str]:
        """Build the full subtree from *parent_cidr* down to *target_prefix*.

        One child level is created per nibble boundary in between, each
        under every node of the level above.
        """
        key = canonical_cidr(parent_cidr)
        levels = nibble_boundaries(_prefix_of(key), target_prefix)
        if len(levels) == 1:
            return self.create_intermediate_level(key, target_prefix)

        with self._lock:
            created: List[str] = []
            frontier = [key]
            for level in levels:
                next_frontier: List[str] = []
                for cidr in frontier:
                    next_frontier.extend(self.create_intermediate_level(cidr, level))
                created.extend(next_frontier)
                frontier = next_frontier
            return created

    # ------------------------------------------------------------------
    # Join / delete
    # ------------------------------------------------------------------

    def join(self, cidr: str, target_prefix: int) -> str:
        """Collapse the /target_prefix ancestor of *cidr*; returns its CIDR."""
        key = canonical_cidr(cidr)
        if key not in self.nodes:
            raise InvalidTarget(f"{key} is not part of the plan")
        address, prefix = split_cidr(key)
        if not self.prefix <= target_prefix <= prefix:
            raise InvalidTarget(
                f"/{target_prefix} is not an ancestor prefix of {key}"
            )

        ancestor = key
        p = prefix - 4
        while p >= target_prefix:
            ancestor = make_cidr(mask(address, p), p)
            p -= 4
        if _prefix_of(ancestor) != target_prefix:
            ancestor = make_cidr(mask(address, target_prefix), target_prefix)

        if ancestor not in self.nodes:
            raise InvalidTarget(f"No /{target_prefix} ancestor of {key} in the plan")

        self.delete_descendants(ancestor)
        return ancestor

    def delete_descendants(self, cidr: str) -> int:
        """Remove everything below *cidr*, keeping the node itself.

        Returns the number of nodes removed.
        """
        with self._lock:
            node = self.get_node(cidr)
            if node is None or node.is_leaf:
                return 0

            removed = 0
            stack = list(node.children)
            node.children = []
            while stack:
                child = self.nodes.pop(stack.pop(), None)
                if child is None:
                    continue
                removed += 1
                stack.extend(child.children)
            return removed

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def walk(self) -> Iterator[Tuple[str, int, SubnetNode]]:
        """Depth-first (cidr, depth, node) from the root, children in order."""
        stack: List[Tuple[str, int]] = [(self.root_cidr, 0)]
        while stack:
            cidr, depth = stack.pop()
            node = self.nodes[cidr]
            yield cidr, depth, node
            stack.extend((child, depth + 1) for child in reversed(node.children))

    def leaves(self) -> Iterator[str]:
        for cidr, _, node in self.walk():
            if node.is_leaf:
                yield cidr
