"""
IPv6 subnet planner core.

Partition an IPv6 block into a tree of nested subnets, annotate each
subnet with a note and colour, and save the whole plan as one string.

Pieces
------
address   RFC 5952 text codec over 16-octet addresses.
prefix    Masks, nibble boundaries, child address derivation.
tree      SubnetTree: split / join / intermediate levels / traversal.
ordering  Numeric ordering of sibling CIDRs.
state     encode_state / decode_state for persisting a plan.

Usage
-----
    from planner import SubnetTree, encode_state, decode_state

    plan = SubnetTree.from_network("3fff::", 20)
    plan.split("3fff::/20")                  # sixteen /24s
    plan.annotate("3fff:100::/24", note="Data Center", color="#FF0000")
    blob = encode_state(plan)
    assert decode_state(blob) == plan

The core performs no I/O and prints nothing; see ``main.py`` for the
command-line front end and ``export`` for reporting.
"""

from __future__ import annotations

from .address import Address, format_address, parse_address, require_address
from .errors import (
    CannotSplitMinimumSubnet,
    DecodeError,
    InvalidFormat,
    InvalidTarget,
    PlannerError,
    TooManyChildren,
)
from .ordering import compare_cidr, sort_cidrs
from .prefix import canonical_cidr, child_at, mask, next_nibble_boundary, nibble_boundaries
from .state import decode_state, decode_state_or_default, encode_state
from .tree import PALETTE, SubnetNode, SubnetTree

__all__ = [
    "Address",
    "CannotSplitMinimumSubnet",
    "DecodeError",
    "InvalidFormat",
    "InvalidTarget",
    "PALETTE",
    "PlannerError",
    "SubnetNode",
    "SubnetTree",
    "TooManyChildren",
    "canonical_cidr",
    "child_at",
    "compare_cidr",
    "decode_state",
    "decode_state_or_default",
    "encode_state",
    "format_address",
    "mask",
    "next_nibble_boundary",
    "nibble_boundaries",
    "parse_address",
    "require_address",
    "sort_cidrs",
]
