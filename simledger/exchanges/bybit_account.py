"""
Bybit account endpoints used by the oracle.

Both need an authenticated client; they report only the key's own account.
"""

from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .bybit_client import BybitClient


def get_balance(client: "BybitClient", account_type: str = "UNIFIED") -> Dict[str, Any]:
    """Wallet of one account type: totals plus a per-coin "coin" list."""
    client._private_limiter.acquire()
    result = client._extract_result(client._session.get_wallet_balance(accountType=account_type))
    wallets = result.get("list") or []
    return wallets[0] if wallets else {}


def get_account_info(client: "BybitClient") -> Dict[str, Any]:
    """Account settings (margin mode, status); {} if the key has no account."""
    client._private_limiter.acquire()
    return client._extract_result(client._session.get_account_info())
