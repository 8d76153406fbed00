"""
Common conversion helpers.

These handle the two kinds of foreign input the view sees: addresses typed
into scenarios/CLI, and decimal strings returned by the exchange API.
"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext
from typing import Any

from ..config.constants import ADDRESS_SIZE

_HEX_DIGITS = set("0123456789abcdef")


def normalize_address(address: Any) -> str:
    """
    Normalize an account/validator/vault address.

    Args:
        address: "0x"-prefixed hex string, any case

    Returns:
        Lowercase "0x" + 40 hex digits

    Raises:
        ValueError: If the address is not 20 bytes of hex

    Examples:
        >>> normalize_address("0xABCDEF0123456789ABCDEF0123456789ABCDEF01")
        '0xabcdef0123456789abcdef0123456789abcdef01'
    """
    if not isinstance(address, str):
        raise ValueError(f"Address must be a string, got {type(address).__name__}")

    text = address.strip().lower()
    if text.startswith("0x"):
        text = text[2:]

    if len(text) != ADDRESS_SIZE * 2 or not set(text) <= _HEX_DIGITS:
        raise ValueError(f"Invalid address: '{address}'")

    return "0x" + text


def address_to_bytes(address: str) -> bytes:
    """20-byte form of an address (normalizes first)."""
    return bytes.fromhex(normalize_address(address)[2:])


def address_from_bytes(raw: bytes) -> str:
    if len(raw) != ADDRESS_SIZE:
        raise ValueError(f"Address must be {ADDRESS_SIZE} bytes, got {len(raw)}")
    return "0x" + raw.hex()


def to_scaled_int(value: Any, decimals: int, default: int = 0) -> int:
    """
    Convert an API decimal string to a fixed-point integer.

    Bybit returns numbers as strings and sometimes as "" for zero.
    Extra precision is truncated toward zero.

    Args:
        value: "123.45", 123.45, "", None, ...
        decimals: Number of fractional digits kept in the integer
        default: Returned for empty/unparseable input

    Returns:
        int(value * 10**decimals), truncated

    Examples:
        >>> to_scaled_int("1.2345678", 6)
        1234567
        >>> to_scaled_int("", 6)
        0
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return default
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default
    if not amount.is_finite():
        return default
    # scaleb rounds to the context precision; keep every digit so only
    # ROUND_DOWN decides the result
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(amount.as_tuple().digits))
        return int(amount.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))
