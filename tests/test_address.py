"""Tests for the IPv6 address text codec."""

import pytest

from planner.address import (
    Address,
    canonical_address,
    format_address,
    make_cidr,
    parse_address,
    require_address,
    split_cidr,
)
from planner.errors import InvalidFormat


def _fmt(text: str) -> str:
    addr = parse_address(text)
    assert addr is not None, text
    return format_address(addr)


class TestParse:
    """Tests for parse_address."""

    def test_compressed_root(self) -> None:
        """'::' is the all-zero address."""
        assert parse_address("::") == Address(bytes(16))

    def test_expanded(self) -> None:
        """Eight full groups parse to the expected octets."""
        addr = parse_address("2001:0db8:0000:0000:0000:0000:0000:0001")
        assert addr is not None
        assert addr.octets == bytes.fromhex("20010db8000000000000000000000001")

    def test_compressed_matches_expanded(self) -> None:
        """Different spellings of the same bits parse equal."""
        assert parse_address("2001:db8::1") == parse_address("2001:DB8:0:0:0:0:0:1")

    def test_trims_and_lowercases(self) -> None:
        """Surrounding whitespace and upper case are accepted."""
        assert parse_address("  3FFF::  ") == parse_address("3fff::")

    def test_trailing_and_leading_compression(self) -> None:
        """'::' may start or end the address."""
        assert int(parse_address("::1")) == 1
        assert int(parse_address("3fff::")) == 0x3FFF << 112

    @pytest.mark.parametrize("text", [
        "",
        "1:2:3:4:5:6:7",
        "1:2:3:4:5:6:7:8:9",
        "1::2::3",
        "12345::",
        "g::",
        "1:2:3:4:5:6:7:8::",
        "::1:2:3:4:5:6:7:8",
        ":1::",
        "1:::2",
        "1.2.3.4",
        "3fff::/20",
    ])
    def test_invalid_returns_none(self, text: str) -> None:
        """Syntactically invalid text yields None rather than raising."""
        assert parse_address(text) is None

    def test_no_semantic_rejection(self) -> None:
        """Link-local, multicast and loopback are all just values."""
        for text in ("fe80::1", "ff02::1", "::1", "ffff:ffff:ffff:ffff:ffff:ffff:ffff:ffff"):
            assert parse_address(text) is not None

    def test_require_address_raises(self) -> None:
        """require_address turns None into InvalidFormat."""
        with pytest.raises(InvalidFormat):
            require_address("not an address")


class TestFormat:
    """Tests for format_address (RFC 5952)."""

    @pytest.mark.parametrize("text, expected", [
        ("0:0:0:0:0:0:0:0", "::"),
        ("0:0:0:0:0:0:0:1", "::1"),
        ("2001:db8:0:0:0:0:0:1", "2001:db8::1"),
        ("2001:0db8:0000:0001:0000:0000:0000:0001", "2001:db8:0:1::1"),
        ("2001:db8:0:0:1:0:0:1", "2001:db8::1:0:0:1"),
        ("2001:db8:0:1:1:1:1:1", "2001:db8:0:1:1:1:1:1"),
        ("3fff:0100:0:0:0:0:0:0", "3fff:100::"),
        ("1:0:0:2:0:0:0:3", "1:0:0:2::3"),
        ("ABCD:EF01:2345:6789:ABCD:EF01:2345:6789", "abcd:ef01:2345:6789:abcd:ef01:2345:6789"),
    ])
    def test_canonical_form(self, text: str, expected: str) -> None:
        """Known inputs render to their RFC 5952 form."""
        assert _fmt(text) == expected

    def test_single_zero_group_not_compressed(self) -> None:
        """A lone zero group stays as '0'."""
        assert "::" not in _fmt("1:0:2:3:4:5:6:7")

    def test_leftmost_run_wins_tie(self) -> None:
        """Equal-length zero runs compress the leftmost."""
        assert _fmt("1:0:0:2:3:0:0:4") == "1::2:3:0:0:4"

    def test_fixed_point(self) -> None:
        """Formatting the parse of a formatted address changes nothing."""
        for text in ("2001:DB8::0:1", "0:0::1", "fe80:0:0:0:0:0:0:0", "1:2:3:4:5:6:7:8"):
            once = _fmt(text)
            assert _fmt(once) == once

    def test_output_shape(self) -> None:
        """No uppercase, at most one '::', no leading zeros."""
        for text in ("00AB:0:0:0:0:0:0:00CD", "0:0:1:0:0:0:1:0", "FFFF::"):
            out = _fmt(text)
            assert out == out.lower()
            assert out.count("::") <= 1
            for group in out.split(":"):
                assert group == "" or group == "0" or not group.startswith("0")

    def test_canonical_address(self) -> None:
        """canonical_address is parse + format."""
        assert canonical_address("3FFF:0:0::") == "3fff::"


class TestAddressValue:
    """Tests for the Address value type."""

    def test_int_round_trip(self) -> None:
        """from_int / int are inverses."""
        value = 0x20010DB8 << 96 | 0xABCD
        assert int(Address.from_int(value)) == value

    def test_out_of_range(self) -> None:
        """Values outside 128 bits are rejected."""
        with pytest.raises(ValueError):
            Address.from_int(1 << 128)
        with pytest.raises(ValueError):
            Address(b"\x00" * 15)

    def test_array_view(self) -> None:
        """as_array exposes the 16 octets."""
        arr = require_address("3fff::1").as_array()
        assert arr.shape == (16,)
        assert arr[0] == 0x3F and arr[1] == 0xFF and arr[15] == 1

    def test_groups(self) -> None:
        """groups returns the eight 16-bit values."""
        assert require_address("1:2::8").groups() == (1, 2, 0, 0, 0, 0, 0, 8)

    def test_str(self) -> None:
        """str() gives the canonical text."""
        assert str(require_address("2001:0DB8::")) == "2001:db8::"


class TestCidrText:
    """Tests for CIDR text helpers."""

    def test_split_cidr(self) -> None:
        """Address and prefix are separated."""
        addr, prefix = split_cidr("3fff:100::/24")
        assert prefix == 24
        assert str(addr) == "3fff:100::"

    @pytest.mark.parametrize("text", ["3fff::", "3fff::/", "3fff::/abc", "3fff::/129", "zz::/24"])
    def test_split_cidr_invalid(self, text: str) -> None:
        """Malformed CIDR text raises InvalidFormat."""
        with pytest.raises(InvalidFormat):
            split_cidr(text)

    def test_make_cidr(self) -> None:
        """make_cidr renders address/prefix."""
        assert make_cidr(require_address("3fff:0::"), 20) == "3fff::/20"
