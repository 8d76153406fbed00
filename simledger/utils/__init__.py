"""
Utility modules.
"""

from .logger import get_logger, setup_logger, LedgerLogger
from .rate_limiter import RateLimiter, MultiRateLimiter, create_oracle_limiters
from .helpers import normalize_address, address_to_bytes, address_from_bytes, to_scaled_int

__all__ = [
    # Logger
    "get_logger",
    "setup_logger",
    "LedgerLogger",
    # Rate limiting
    "RateLimiter",
    "MultiRateLimiter",
    "create_oracle_limiters",
    # Conversion helpers
    "normalize_address",
    "address_to_bytes",
    "address_from_bytes",
    "to_scaled_int",
]
