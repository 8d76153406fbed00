"""
Read-only Bybit v5 client on top of pybit.

The oracle needs three endpoints: tickers (bybit_market), wallet balance
and account info (bybit_account). This class owns the pybit session, the
rate limiters and response unwrapping; the endpoint functions live in those
modules and receive the client.

pybit exceptions never leave this class: they are re-raised as
BybitAPIError, which the view treats as any other OracleError.
"""

from functools import wraps
from typing import Any, Dict, Optional, Union

from pybit.exceptions import FailedRequestError, InvalidRequestError
from pybit.unified_trading import HTTP

from ..errors import OracleError
from ..utils.logger import get_logger
from ..utils.rate_limiter import create_oracle_limiters

DEMO_URL = "https://api-demo.bybit.com"
LIVE_URL = "https://api.bybit.com"

# Response headers reported by Bybit on every request
_LIMIT_HEADERS = {
    "remaining": "X-Bapi-Limit-Remaining",
    "limit": "X-Bapi-Limit",
    "reset_timestamp": "X-Bapi-Limit-Reset-Timestamp",
}


class BybitAPIError(OracleError):
    """A failed Bybit request; the pybit exception is kept as original."""

    @classmethod
    def from_pybit(cls, error: Union[FailedRequestError, InvalidRequestError]) -> "BybitAPIError":
        return cls(
            message=str(getattr(error, "message", error)),
            code=getattr(error, "status_code", -1),
            original=error,
        )


def handle_pybit_errors(func):
    """Re-raise pybit request errors as BybitAPIError."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (FailedRequestError, InvalidRequestError) as e:
            raise BybitAPIError.from_pybit(e) from e
    return wrapper


class BybitClient:
    """
    Bybit client for oracle reads.

    Usage:
        client = BybitClient()                                  # tickers only
        client = BybitClient(api_key="...", api_secret="...")   # + wallet (demo)
        client.get_ticker("BTCUSDT")["markPrice"]
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        use_demo: bool = True,
        recv_window: int = 20000,
        log_requests: bool = False,
        session: Any = None,
    ):
        """
        Args:
            api_key: Key for account endpoints (None = public data only)
            api_secret: Secret matching api_key
            use_demo: Demo trading endpoint instead of live
            recv_window: Signature validity window in milliseconds
            log_requests: Let pybit log raw requests
            session: Ready pybit session to use instead of building one
        """
        self.api_key = api_key
        self.use_demo = use_demo
        self.base_url = DEMO_URL if use_demo else LIVE_URL

        if session is None:
            session = HTTP(
                testnet=False,
                demo=use_demo,
                api_key=api_key,
                api_secret=api_secret,
                recv_window=recv_window,
                log_requests=log_requests,
                return_response_headers=True,
            )
        self._session = session

        limiters = create_oracle_limiters()
        self._public_limiter = limiters.get_limiter("public")
        self._private_limiter = limiters.get_limiter("private")
        self._rate_limit_status: Dict[str, Optional[str]] = dict.fromkeys(_LIMIT_HEADERS)

        self.logger = get_logger()
        self.logger.info(
            f"BybitClient ready: {'DEMO' if use_demo else 'LIVE'} {self.base_url}, "
            f"{'authenticated' if api_key else 'public-only'}"
        )

    def _extract_result(self, response) -> dict:
        """
        The "result" object of a pybit response.

        With return_response_headers=True pybit returns
        (body, elapsed, headers); a bare body dict is accepted too.
        """
        if isinstance(response, tuple):
            body = response[0]
            if len(response) >= 3 and response[2]:
                headers = response[2]
                for key, header in _LIMIT_HEADERS.items():
                    self._rate_limit_status[key] = headers.get(header)
        else:
            body = response
        if not isinstance(body, dict):
            return {}
        return body.get("result") or {}

    @property
    def rate_limit_status(self) -> Dict[str, Optional[str]]:
        """Last reported rate-limit headers (None until the first response)."""
        return dict(self._rate_limit_status)

    # ==================== Market Data ====================

    @handle_pybit_errors
    def get_ticker(self, symbol: str, category: str = "linear") -> Dict[str, Any]:
        from . import bybit_market
        return bybit_market.get_ticker(self, symbol, category)

    # ==================== Account ====================

    @handle_pybit_errors
    def get_balance(self, account_type: str = "UNIFIED") -> Dict[str, Any]:
        from . import bybit_account
        return bybit_account.get_balance(self, account_type)

    @handle_pybit_errors
    def get_account_info(self) -> Dict[str, Any]:
        from . import bybit_account
        return bybit_account.get_account_info(self)
