"""
Prefix and nibble arithmetic over 128-bit addresses.

Subnets in a plan are cut on nibble (4-bit) boundaries by default, since
those are the prefixes that line up with hex digits in the address text:
a /20 splits into sixteen /24s whose addresses differ in exactly one digit.
Non-aligned prefixes are allowed, but a split that crosses several nibble
boundaries materialises every aligned level in between (see
:func:`nibble_boundaries`).

All arithmetic is exact: masks work on the 16 octets, child addresses use
Python integers truncated to 128 bits.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List

import numpy as np

from .address import Address, make_cidr, split_cidr

_BITS = 128
_MAX_INT = (1 << _BITS) - 1


# ---------------------------------------------------------------------------
# Masking
# ---------------------------------------------------------------------------

@lru_cache(maxsize=None)
def _prefix_mask(prefix: int) -> np.ndarray:
    """16-byte network mask for *prefix* (leading ones, trailing zeros)."""
    bits = np.zeros(_BITS, dtype=np.uint8)
    bits[:prefix] = 1
    mask = np.packbits(bits)
    mask.setflags(write=False)
    return mask


def mask(address: Address, prefix: int) -> Address:
    """Zero every bit of *address* past *prefix*."""
    if not 0 <= prefix <= _BITS:
        raise ValueError(f"Prefix must be between 0 and 128, got {prefix}")
    return Address.from_array(address.as_array() & _prefix_mask(prefix))


def canonical_cidr(cidr: str) -> str:
    """Mask the address to its prefix and render ``"<addr>/<prefix>"``."""
    address, prefix = split_cidr(cidr)
    return make_cidr(mask(address, prefix), prefix)


# ---------------------------------------------------------------------------
# Nibble boundaries
# ---------------------------------------------------------------------------

def next_nibble_boundary(prefix: int) -> int:
    """Default split target: the next multiple of 4 strictly after an aligned
    prefix, or the enclosing multiple of 4 for a non-aligned one."""
    if prefix % 4 == 0:
        return prefix + 4
    return -(-prefix // 4) * 4


def nibble_boundaries(start: int, end: int) -> List[int]:
    """
    Every level a split from /start to /end has to materialise.

    Example:
        nibble_boundaries(20, 30) → [24, 28, 30]
        nibble_boundaries(21, 25) → [24, 25]
        nibble_boundaries(24, 24) → [24]
    """
    if start >= end:
        return [start]
    levels = []
    p = next_nibble_boundary(start)
    while p < end:
        levels.append(p)
        p += 4
    levels.append(end)
    return levels


# ---------------------------------------------------------------------------
# Child derivation
# ---------------------------------------------------------------------------

def child_at(
    parent: Address,
    target_prefix: int,
    index: int,
    parent_prefix: int | None = None,
) -> Address:
    """
    Address of the *index*-th /target_prefix subnet under *parent*.

    Index 0 is the parent's own base address.  When *parent_prefix* is
    given the index is checked against the number of children the parent
    actually has at that depth.
    """
    if not 0 <= target_prefix <= _BITS:
        raise ValueError(f"Prefix must be between 0 and 128, got {target_prefix}")
    limit_bits = target_prefix if parent_prefix is None else target_prefix - parent_prefix
    if limit_bits < 0 or not 0 <= index < (1 << limit_bits):
        raise ValueError(
            f"Child index {index} out of range for /{target_prefix}"
            + (f" under /{parent_prefix}" if parent_prefix is not None else "")
        )
    value = int(parent) + (index << (_BITS - target_prefix))
    return Address.from_int(value & _MAX_INT)


# ---------------------------------------------------------------------------
# Subnet counts
# ---------------------------------------------------------------------------

def subnet_count(prefix: int, unit: int) -> int:
    """Number of /unit networks inside one /prefix (0 if prefix > unit)."""
    if prefix > unit:
        return 0
    return 1 << (unit - prefix)
