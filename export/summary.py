"""
Plan statistics.

Statistics
----------
nodes           every subnet in the plan, root included
leaves          subnets that are not split any further
max_depth       deepest split level below the root
slash48_total   /48 networks covered by the leaves (0 for leaves longer than /48)
slash64_total   /64 networks covered by the leaves
annotated       subnets carrying a note or a colour

Counts are exact integers; a /16 alone already holds 2^48 /64s.
All functions are pure (no I/O).
"""

from __future__ import annotations

from typing import Any, Dict, List

from planner.prefix import subnet_count
from planner.tree import SubnetTree


# ─── Labels ───────────────────────────────────────────────────────────────────

def contains_label(prefix: int) -> str:
    """Human label for the "Contains" column.

    Example:
        contains_label(20) → "268,435,456 /48s"
        contains_label(56) → "256 /64s"
        contains_label(64) → "Host Subnet"
    """
    if prefix >= 64:
        return "Host Subnet"
    if prefix >= 48:
        return f"{subnet_count(prefix, 64):,} /64s"
    return f"{subnet_count(prefix, 48):,} /48s"


# ─── Rows ─────────────────────────────────────────────────────────────────────

def collect_rows(tree: SubnetTree) -> List[Dict[str, Any]]:
    """Flatten the plan into display rows, parents before children."""
    rows = []
    ancestry: List[str] = []
    for cidr, depth, node in tree.walk():
        del ancestry[depth:]
        prefix = int(cidr.rsplit("/", 1)[1])
        rows.append({
            "cidr":     cidr,
            "depth":    depth,
            "ancestry": list(ancestry),
            "prefix":   prefix,
            "note":     node.note,
            "color":    node.color,
            "is_leaf":  node.is_leaf,
            "contains": contains_label(prefix),
        })
        ancestry.append(cidr)
    return rows


# ─── Summary ──────────────────────────────────────────────────────────────────

def plan_summary(tree: SubnetTree) -> Dict[str, Any]:
    """Compute the statistics listed in the module docstring."""
    n_nodes    = 0
    n_leaves   = 0
    max_depth  = 0
    n_noted    = 0
    total_48   = 0
    total_64   = 0

    for cidr, depth, node in tree.walk():
        n_nodes  += 1
        max_depth = max(max_depth, depth)
        if node.note or node.color:
            n_noted += 1
        if node.is_leaf:
            prefix = int(cidr.rsplit("/", 1)[1])
            n_leaves += 1
            total_48 += subnet_count(prefix, 48)
            total_64 += subnet_count(prefix, 64)

    return {
        "root":          tree.root_cidr,
        "nodes":         n_nodes,
        "leaves":        n_leaves,
        "max_depth":     max_depth,
        "slash48_total": total_48,
        "slash64_total": total_64,
        "annotated":     n_noted,
    }
