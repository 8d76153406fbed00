"""
External oracle.

Ground-truth values for facts without a local override.
"""

from .protocol import Oracle, OfflineOracle
from .bybit_oracle import BybitOracle

__all__ = [
    "Oracle",
    "OfflineOracle",
    "BybitOracle",
]
