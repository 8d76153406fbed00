"""
Bybit-backed oracle.

Maps the ledger's integer ids onto Bybit symbols and returns exchange
values as fixed-point integers:

    mark_px(perp)       linear ticker markPrice      * 10**px_decimals
    spot_px(spot)       spot ticker lastPrice        * 10**px_decimals
    spot_balance(u, t)  wallet coin walletBalance    * 10**balance_decimals
                        wallet coin locked (hold)    * 10**balance_decimals
    withdrawable(u)     totalAvailableBalance        * 10**usd_decimals
    account_exists(u)   account info is non-empty

Bybit only reports the account that owns the API key. Account-scoped
queries for any other address return empty records.
"""

from typing import Dict, Optional

from ..config.config import OracleConfig
from ..errors import UnmappedIdError
from ..exchanges.bybit_client import BybitClient
from ..types import Address, CoreUserExists, SpotBalance, Withdrawable
from ..utils.helpers import normalize_address, to_scaled_int
from ..utils.logger import get_logger


class BybitOracle:
    """Ground truth from one Bybit account plus public market data."""

    def __init__(
        self,
        client: BybitClient,
        account: str = "",
        perp_symbols: Optional[Dict[int, str]] = None,
        spot_symbols: Optional[Dict[int, str]] = None,
        token_coins: Optional[Dict[int, str]] = None,
        px_decimals: int = 6,
        balance_decimals: int = 8,
        usd_decimals: int = 6,
    ):
        """
        Args:
            client: Bybit client (authenticated for account reads)
            account: Address the API key's account stands in for ("" = none)
            perp_symbols: perp id -> linear symbol (e.g. {0: "BTCUSDT"})
            spot_symbols: spot market id -> spot symbol
            token_coins: token id -> wallet coin (e.g. {0: "USDC"})
            px_decimals: Fractional digits kept in prices
            balance_decimals: Fractional digits kept in spot balances
            usd_decimals: Fractional digits kept in withdrawable USD
        """
        self._client = client
        self._account = normalize_address(account) if account else ""
        self._perp_symbols = dict(perp_symbols or {})
        self._spot_symbols = dict(spot_symbols or {})
        self._token_coins = dict(token_coins or {})
        self.px_decimals = px_decimals
        self.balance_decimals = balance_decimals
        self.usd_decimals = usd_decimals
        self.logger = get_logger()

    @classmethod
    def from_config(cls, config: OracleConfig, client: Optional[BybitClient] = None) -> "BybitOracle":
        """Build the client (unless given) and oracle from OracleConfig."""
        if client is None:
            client = BybitClient(
                api_key=config.api_key or None,
                api_secret=config.api_secret or None,
                use_demo=config.use_demo,
                recv_window=config.recv_window,
            )
        return cls(
            client,
            account=config.account,
            perp_symbols=config.perp_symbols,
            spot_symbols=config.spot_symbols,
            token_coins=config.token_coins,
            px_decimals=config.px_decimals,
            balance_decimals=config.balance_decimals,
            usd_decimals=config.usd_decimals,
        )

    @property
    def source_name(self) -> str:
        return "bybit_demo" if self._client.use_demo else "bybit_live"

    def _is_bound(self, user: Address) -> bool:
        return bool(self._account) and normalize_address(user) == self._account

    # ==================== Prices ====================

    def mark_px(self, perp: int) -> int:
        symbol = self._perp_symbols.get(perp)
        if symbol is None:
            raise UnmappedIdError("perp", perp)
        ticker = self._client.get_ticker(symbol, category="linear")
        return to_scaled_int(ticker.get("markPrice"), self.px_decimals)

    def spot_px(self, spot: int) -> int:
        symbol = self._spot_symbols.get(spot)
        if symbol is None:
            raise UnmappedIdError("spot", spot)
        ticker = self._client.get_ticker(symbol, category="spot")
        return to_scaled_int(ticker.get("lastPrice"), self.px_decimals)

    # ==================== Account ====================

    def spot_balance(self, user: Address, token: int) -> SpotBalance:
        coin = self._token_coins.get(token)
        if coin is None:
            raise UnmappedIdError("token", token)
        if not self._is_bound(user):
            return SpotBalance()

        wallet = self._client.get_balance()
        for entry in wallet.get("coin", []):
            if entry.get("coin") == coin:
                return SpotBalance(
                    total=to_scaled_int(entry.get("walletBalance"), self.balance_decimals),
                    hold=to_scaled_int(entry.get("locked"), self.balance_decimals),
                    entry_ntl=0,
                )
        self.logger.debug(f"Coin {coin} not in wallet of {user}; reporting zero balance")
        return SpotBalance()

    def withdrawable(self, user: Address) -> Withdrawable:
        if not self._is_bound(user):
            return Withdrawable()
        wallet = self._client.get_balance()
        return Withdrawable(
            withdrawable=to_scaled_int(wallet.get("totalAvailableBalance"), self.usd_decimals)
        )

    def account_exists(self, user: Address) -> CoreUserExists:
        if not self._is_bound(user):
            return CoreUserExists(exists=False)
        return CoreUserExists(exists=bool(self._client.get_account_info()))
