"""
Tests for address and decimal conversion helpers.
"""

import pytest

from simledger.utils.helpers import (
    address_from_bytes,
    address_to_bytes,
    normalize_address,
    to_scaled_int,
)


class TestNormalizeAddress:
    def test_lowercases(self):
        assert normalize_address("0x" + "AbCd" * 10) == "0x" + "abcd" * 10

    def test_accepts_missing_prefix_and_whitespace(self):
        assert normalize_address("  " + "12" * 20 + " ") == "0x" + "12" * 20

    @pytest.mark.parametrize("bad", ["", "0x", "0x" + "12" * 19, "0x" + "zz" * 20, "0x" + "12" * 21])
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValueError):
            normalize_address(bad)

    def test_rejects_non_string(self):
        with pytest.raises(ValueError, match="string"):
            normalize_address(1234)


class TestAddressBytes:
    def test_to_bytes(self):
        assert address_to_bytes("0x" + "FF" * 20) == b"\xff" * 20

    def test_from_bytes(self):
        assert address_from_bytes(b"\x01" * 20) == "0x" + "01" * 20

    def test_from_bytes_wrong_size(self):
        with pytest.raises(ValueError):
            address_from_bytes(b"\x01" * 19)


class TestToScaledInt:
    @pytest.mark.parametrize(
        "value,decimals,expected",
        [
            ("65000.5", 6, 65_000_500000),
            ("1.2345678", 6, 1_234_567),
            ("-1.5", 2, -150),
            (3, 2, 300),
            ("0", 8, 0),
        ],
    )
    def test_scaling(self, value, decimals, expected):
        assert to_scaled_int(value, decimals) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "NaN", "inf"])
    def test_empty_or_invalid_gives_default(self, value):
        assert to_scaled_int(value, 6) == 0
        assert to_scaled_int(value, 6, default=-1) == -1

    def test_more_digits_than_default_precision_truncates(self):
        """30 significant digits: the dropped tail must never round the result up."""
        value = "1.23456789012345678901234567899"
        assert to_scaled_int(value, 28) == 12345678901234567890123456789

    def test_long_integer_part_is_exact(self):
        assert to_scaled_int("123456789012345678901234567890.999", 2) == 12345678901234567890123456789099
