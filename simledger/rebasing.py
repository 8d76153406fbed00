"""
Rebasing engine.

Stored equity and delegation amounts are recorded together with the
multiplier observed at write time. On read they are scaled by
current / last_observed so a multiplier change never has to rewrite the
stored records.

Sentinel convention:
- A multiplier of 0 means "never set" and reads as BASE_UNIT
- Consequently a multiplier of exactly BASE_UNIT is indistinguishable
  from an unset one

Order of operations:
- raw * current is formed in Python's unbounded int domain (never truncated)
- the product is floor-divided by last_observed
- ONLY the quotient is narrowed to uint64

So an intermediate product above 2**64 is fine as long as the quotient fits;
a quotient above UINT64_MAX raises AmountOverflowError instead of wrapping.
"""

from typing import Hashable, Mapping

from .config.constants import BASE_UNIT, INT64_MAX, INT64_MIN, UINT64_MAX
from .errors import AmountOverflowError


def multiplier_or_base(value: int) -> int:
    """Substitute BASE_UNIT for the zero sentinel."""
    return value if value != 0 else BASE_UNIT


def lookup_multiplier(table: Mapping[Hashable, int], key: Hashable) -> int:
    """
    Read a multiplier table entry with the sentinel made explicit.

    Missing keys and stored zeros both read as BASE_UNIT.
    """
    return multiplier_or_base(table.get(key, 0))


def to_uint64(value: int) -> int:
    """Narrow to uint64 or raise AmountOverflowError."""
    if value < 0 or value > UINT64_MAX:
        raise AmountOverflowError(value, "uint64")
    return value


def to_int64(value: int) -> int:
    """Narrow to int64 or raise AmountOverflowError."""
    if value < INT64_MIN or value > INT64_MAX:
        raise AmountOverflowError(value, "int64")
    return value


def rebase(raw_amount: int, current_multiplier: int, last_observed_multiplier: int) -> int:
    """
    Scale a stored amount by the multiplier change since it was observed.

    Args:
        raw_amount: Amount as stored
        current_multiplier: Global multiplier now (0 = BASE_UNIT)
        last_observed_multiplier: Multiplier when raw_amount was stored (0 = BASE_UNIT)

    Returns:
        raw_amount * current // last, as a uint64

    Raises:
        AmountOverflowError: If the quotient does not fit in uint64
    """
    current = multiplier_or_base(current_multiplier)
    last = multiplier_or_base(last_observed_multiplier)

    if current == last:
        return to_uint64(raw_amount)

    return to_uint64(raw_amount * current // last)
