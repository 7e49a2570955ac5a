"""
IPv6 address text codec.

Addresses are held as 16 big-endian octets and rendered in RFC 5952
canonical form.

Accepted input
--------------
expanded    2001:0db8:0000:0000:0000:0000:0000:0001   (exactly 8 groups)
compressed  2001:db8::1                               (at most one "::")

Groups are 1–4 hex digits, case-insensitive.  Validation is purely
syntactic: link-local, multicast, documentation ranges etc. are all just
128-bit values here.

Output is always the canonical compressed form: lowercase, no leading
zeros, the longest run (leftmost on ties) of two or more zero groups
replaced by "::".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .errors import InvalidFormat

_HEX = "0123456789abcdef"
_GROUPS = 8
_MAX_INT = (1 << 128) - 1


# ---------------------------------------------------------------------------
# Address value
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Address:
    octets: bytes   # 16 bytes, network order

    def __post_init__(self) -> None:
        if len(self.octets) != 16:
            raise ValueError(f"Expected 16 octets, got {len(self.octets)}")

    @classmethod
    def from_int(cls, value: int) -> Address:
        if not 0 <= value <= _MAX_INT:
            raise ValueError("Address value out of 128-bit range")
        return cls(value.to_bytes(16, "big"))

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Address:
        return cls(arr.astype(np.uint8).tobytes())

    def __int__(self) -> int:
        return int.from_bytes(self.octets, "big")

    def as_array(self) -> np.ndarray:
        """Octets as a read-only uint8 vector of length 16."""
        return np.frombuffer(self.octets, dtype=np.uint8)

    def groups(self) -> Tuple[int, ...]:
        """The eight 16-bit groups."""
        o = self.octets
        return tuple((o[i] << 8) | o[i + 1] for i in range(0, 16, 2))

    def __str__(self) -> str:
        return format_address(self)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _parse_group(group: str) -> Optional[int]:
    if not 1 <= len(group) <= 4 or any(c not in _HEX for c in group):
        return None
    return int(group, 16)


def parse_address(text: str) -> Optional[Address]:
    """
    Parse an IPv6 literal.

    Returns None if *text* is not a syntactically valid address.
    """
    addr = text.strip().lower()

    if "::" in addr:
        parts = addr.split("::")
        if len(parts) > 2:
            return None
        left = parts[0].split(":") if parts[0] else []
        right = parts[1].split(":") if parts[1] else []
        missing = _GROUPS - len(left) - len(right)
        if missing < 1:
            return None
        groups = left + ["0"] * missing + right
    else:
        groups = addr.split(":")
        if len(groups) != _GROUPS:
            return None

    values = [_parse_group(g) for g in groups]
    if any(v is None for v in values):
        return None
    return Address(b"".join(v.to_bytes(2, "big") for v in values))


def require_address(text: str) -> Address:
    """Like :func:`parse_address` but raises ``InvalidFormat``."""
    addr = parse_address(text)
    if addr is None:
        raise InvalidFormat(f"Invalid IPv6 address: {text!r}")
    return addr


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def _longest_zero_run(groups: Tuple[int, ...]) -> Tuple[int, int]:
    """Return (start, length) of the leftmost longest run of zero groups."""
    best_start, best_len = -1, 0
    run_start, run_len = -1, 0
    for i, g in enumerate(groups):
        if g == 0:
            if run_start == -1:
                run_start = i
            run_len += 1
            if run_len > best_len:
                best_start, best_len = run_start, run_len
        else:
            run_start, run_len = -1, 0
    return best_start, best_len


def format_address(address: Address) -> str:
    """Render *address* in RFC 5952 canonical compressed form."""
    groups = address.groups()
    start, length = _longest_zero_run(groups)

    if length < 2:
        return ":".join(f"{g:x}" for g in groups)

    left = ":".join(f"{g:x}" for g in groups[:start])
    right = ":".join(f"{g:x}" for g in groups[start + length:])
    return f"{left}::{right}"


def canonical_address(text: str) -> str:
    """Canonical spelling of an address literal (raises ``InvalidFormat``)."""
    return format_address(require_address(text))


# ---------------------------------------------------------------------------
# CIDR helpers
# ---------------------------------------------------------------------------

def split_cidr(cidr: str) -> Tuple[Address, int]:
    """
    Split ``"<address>/<prefix>"`` into its parts.

    The address is returned as written (not masked).  Raises
    ``InvalidFormat`` on malformed text or a prefix outside 0–128.
    """
    addr_text, sep, prefix_text = cidr.strip().partition("/")
    prefix_text = prefix_text.strip()
    if not sep or not (prefix_text.isascii() and prefix_text.isdigit()):
        raise InvalidFormat(f"Invalid CIDR: {cidr!r}")
    prefix = int(prefix_text)
    if prefix > 128:
        raise InvalidFormat(f"Invalid prefix length in {cidr!r}")
    return require_address(addr_text), prefix


def make_cidr(address: Address, prefix: int) -> str:
    return f"{format_address(address)}/{prefix}"

