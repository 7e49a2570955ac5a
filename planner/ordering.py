"""
Numeric ordering of sibling CIDRs.

Children are listed by address value, not by text, so ``3fff::/24`` comes
before ``3fff:100::/24`` and ``3fff:f00::/24`` comes last.  The prefix
length is ignored: two CIDRs with the same address compare equal whatever
their prefixes.  That is only meaningful among siblings, which is the only
place the planner compares CIDRs.
"""

from __future__ import annotations

from typing import Iterable, List

import numpy as np

from .address import require_address


def _octets(cidr: str) -> np.ndarray:
    addr_text = cidr.split("/", 1)[0]
    return require_address(addr_text).as_array()


def compare_cidr(a: str, b: str) -> int:
    """Return <0, 0 or >0 as the address of *a* is below, equal to or above *b*."""
    diff = _octets(a).astype(np.int16) - _octets(b).astype(np.int16)
    nonzero = np.flatnonzero(diff)
    return int(diff[nonzero[0]]) if nonzero.size else 0


def sort_cidrs(cidrs: Iterable[str]) -> List[str]:
    """Sort CIDRs by address, ascending (stable for equal addresses)."""
    cidrs = list(cidrs)
    if len(cidrs) < 2:
        return cidrs
    matrix = np.stack([_octets(c) for c in cidrs])      # shape (n, 16)
    # lexsort treats the last key as primary, so feed byte 15 first.
    order = np.lexsort(matrix.T[::-1])
    return [cidrs[i] for i in order]
