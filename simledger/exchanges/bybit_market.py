"""
Bybit market data endpoints used by the oracle.
"""

from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .bybit_client import BybitClient


def get_ticker(client: "BybitClient", symbol: str, category: str = "linear") -> Dict[str, Any]:
    """
    Ticker for one symbol in a category ("linear" or "spot").

    Returns {} when Bybit lists nothing for the symbol.
    """
    client._public_limiter.acquire()
    result = client._extract_result(client._session.get_tickers(category=category, symbol=symbol))
    entries = result.get("list") or []
    return entries[0] if entries else {}
