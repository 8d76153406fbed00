"""
Exchange client modules.

Read-only Bybit client backing the external oracle, via the official
pybit library.
"""

from .bybit_client import BybitClient, BybitAPIError, handle_pybit_errors

# Re-export pybit exceptions for convenience
from pybit.exceptions import (
    FailedRequestError,
    InvalidRequestError,
)

__all__ = [
    "BybitClient",
    "BybitAPIError",
    "handle_pybit_errors",
    "FailedRequestError",
    "InvalidRequestError",
]
