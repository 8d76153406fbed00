"""
Tests for the Bybit-backed oracle and the client beneath it.

No network: BybitOracle is driven by a fake client, BybitClient by a
MagicMock standing in for the pybit HTTP session.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from pybit.exceptions import FailedRequestError, InvalidRequestError

from simledger.config import OracleConfig
from simledger.errors import OracleError, UnmappedIdError
from simledger.exchanges import BybitAPIError, BybitClient
from simledger.oracle import BybitOracle, Oracle
from simledger.types import CoreUserExists, SpotBalance, Withdrawable
from simledger.view import LedgerView

ACCOUNT = "0x" + "aa" * 20
STRANGER = "0x" + "cc" * 20


class FakeClient:
    def __init__(self, use_demo=True):
        self.use_demo = use_demo
        self.tickers = {}
        self.wallet = {}
        self.account_info = {}
        self.ticker_calls = []

    def get_ticker(self, symbol, category="linear"):
        self.ticker_calls.append((symbol, category))
        return self.tickers.get((symbol, category), {})

    def get_balance(self, account_type="UNIFIED"):
        return self.wallet

    def get_account_info(self):
        return self.account_info


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def bybit(client):
    return BybitOracle(
        client,
        account=ACCOUNT,
        perp_symbols={0: "BTCUSDT"},
        spot_symbols={10: "ETHUSDT"},
        token_coins={0: "USDC", 1: "ETH"},
    )


class TestPrices:
    def test_mark_px_scaled(self, bybit, client):
        client.tickers[("BTCUSDT", "linear")] = {"markPrice": "65000.25", "lastPrice": "1"}
        assert bybit.mark_px(0) == 65_000_250000
        assert client.ticker_calls == [("BTCUSDT", "linear")]

    def test_spot_px_uses_last_price(self, bybit, client):
        client.tickers[("ETHUSDT", "spot")] = {"lastPrice": "2500.5"}
        assert bybit.spot_px(10) == 2_500_500000

    def test_unknown_symbol_reads_zero(self, bybit):
        assert bybit.mark_px(0) == 0

    def test_unmapped_perp(self, bybit, client):
        with pytest.raises(UnmappedIdError) as exc_info:
            bybit.mark_px(5)
        assert exc_info.value.kind == "perp"
        assert exc_info.value.ident == 5
        assert client.ticker_calls == []

    def test_unmapped_spot_is_oracle_error(self, bybit):
        with pytest.raises(OracleError):
            bybit.spot_px(99)


class TestAccountReads:
    def test_spot_balance_from_wallet_coin(self, bybit, client):
        client.wallet = {
            "coin": [
                {"coin": "USDC", "walletBalance": "12.5", "locked": "0.25"},
                {"coin": "ETH", "walletBalance": "1", "locked": ""},
            ]
        }
        assert bybit.spot_balance(ACCOUNT, 0) == SpotBalance(total=1_250_000_000, hold=25_000_000, entry_ntl=0)
        assert bybit.spot_balance(ACCOUNT, 1) == SpotBalance(total=100_000_000)

    def test_coin_missing_from_wallet(self, bybit, client):
        client.wallet = {"coin": []}
        assert bybit.spot_balance(ACCOUNT, 0) == SpotBalance()

    def test_unmapped_token(self, bybit):
        with pytest.raises(UnmappedIdError):
            bybit.spot_balance(ACCOUNT, 7)

    def test_withdrawable(self, bybit, client):
        client.wallet = {"totalAvailableBalance": "1000.123456789"}
        assert bybit.withdrawable(ACCOUNT) == Withdrawable(withdrawable=1_000_123456)

    def test_account_exists(self, bybit, client):
        assert bybit.account_exists(ACCOUNT) == CoreUserExists(exists=False)
        client.account_info = {"marginMode": "REGULAR_MARGIN"}
        assert bybit.account_exists(ACCOUNT) == CoreUserExists(exists=True)

    def test_bound_account_matches_case_insensitively(self, bybit, client):
        client.account_info = {"marginMode": "REGULAR_MARGIN"}
        assert bybit.account_exists("0x" + "AA" * 20).exists is True

    def test_other_accounts_are_empty(self, bybit, client):
        client.wallet = {"totalAvailableBalance": "5", "coin": [{"coin": "USDC", "walletBalance": "5"}]}
        client.account_info = {"marginMode": "REGULAR_MARGIN"}
        assert bybit.spot_balance(STRANGER, 0) == SpotBalance()
        assert bybit.withdrawable(STRANGER) == Withdrawable()
        assert bybit.account_exists(STRANGER) == CoreUserExists(exists=False)

    def test_unbound_oracle_answers_only_prices(self, client):
        client.wallet = {"totalAvailableBalance": "5"}
        oracle = BybitOracle(client, perp_symbols={0: "BTCUSDT"})
        assert oracle.withdrawable(ACCOUNT) == Withdrawable()


class TestOracleWiring:
    def test_source_name_follows_mode(self, client):
        assert BybitOracle(client).source_name == "bybit_demo"
        assert BybitOracle(FakeClient(use_demo=False)).source_name == "bybit_live"

    def test_satisfies_protocol(self, bybit):
        assert isinstance(bybit, Oracle)

    def test_from_config_with_injected_client(self, client):
        config = OracleConfig(account=ACCOUNT, perp_symbols={3: "SOLUSDT"}, px_decimals=2)
        client.tickers[("SOLUSDT", "linear")] = {"markPrice": "150.129"}
        oracle = BybitOracle.from_config(config, client=client)
        assert oracle.mark_px(3) == 15012

    def test_view_falls_back_to_bybit(self, store, bybit, client):
        client.tickers[("BTCUSDT", "linear")] = {"markPrice": "100"}
        view = LedgerView(store, bybit)
        assert view.read_mark_px(0) == 100_000000

        store.set_mark_px(0, 1)
        assert view.read_mark_px(0) == 1
        assert len(client.ticker_calls) == 1


def _response(result):
    return ({"retCode": 0, "result": result}, timedelta(milliseconds=5), {"X-Bapi-Limit-Remaining": "99"})


class TestBybitClient:
    def test_get_ticker_unwraps_first_entry(self):
        session = MagicMock()
        session.get_tickers.return_value = _response({"list": [{"symbol": "BTCUSDT", "markPrice": "1"}]})
        client = BybitClient(session=session)

        assert client.get_ticker("BTCUSDT") == {"symbol": "BTCUSDT", "markPrice": "1"}
        session.get_tickers.assert_called_once_with(category="linear", symbol="BTCUSDT")
        assert client.rate_limit_status["remaining"] == "99"

    def test_empty_ticker_list(self):
        session = MagicMock()
        session.get_tickers.return_value = _response({"list": []})
        assert BybitClient(session=session).get_ticker("NOPE", category="spot") == {}

    def test_get_balance_first_account(self):
        session = MagicMock()
        session.get_wallet_balance.return_value = _response({"list": [{"totalAvailableBalance": "3"}]})
        client = BybitClient(session=session)

        assert client.get_balance() == {"totalAvailableBalance": "3"}
        session.get_wallet_balance.assert_called_once_with(accountType="UNIFIED")

    def test_get_account_info(self):
        session = MagicMock()
        session.get_account_info.return_value = {"result": {"marginMode": "ISOLATED_MARGIN"}}
        assert BybitClient(session=session).get_account_info() == {"marginMode": "ISOLATED_MARGIN"}

    @pytest.mark.parametrize("error_cls", [FailedRequestError, InvalidRequestError])
    def test_pybit_errors_become_oracle_errors(self, error_cls):
        session = MagicMock()
        session.get_tickers.side_effect = error_cls(
            request="GET /v5/market/tickers",
            message="symbol invalid",
            status_code=10001,
            time="12:00:00",
            resp_headers={},
        )
        client = BybitClient(session=session)

        with pytest.raises(BybitAPIError) as exc_info:
            client.get_ticker("BTCUSDT")
        assert isinstance(exc_info.value, OracleError)
        assert exc_info.value.code == 10001
        assert isinstance(exc_info.value.original, error_cls)

    def test_mode_and_base_url(self):
        live = BybitClient(use_demo=False, session=MagicMock())
        assert live.base_url == "https://api.bybit.com"
        assert BybitClient(session=MagicMock()).base_url == "https://api-demo.bybit.com"
