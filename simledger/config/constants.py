"""
Centralized constants for the simulated ledger view.

Fixed-point and integer-width limits mirror the settlement layer the
simulation stands in for. They are NOT configurable: a scenario that needs a
different unit must scale its amounts instead.
"""


# ==================== Fixed-Point ====================

# Multiplier of exactly 1.0. An unset (zero) multiplier reads as this value.
BASE_UNIT = 10**18


# ==================== Integer Widths ====================

UINT32_MAX = 2**32 - 1
UINT64_MAX = 2**64 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


# ==================== Withdrawal Records ====================

# owner (20 bytes) + amount (uint64, big-endian)
ADDRESS_SIZE = 20
WITHDRAW_RECORD_SIZE = ADDRESS_SIZE + 8

ZERO_ADDRESS = "0x" + "00" * ADDRESS_SIZE
