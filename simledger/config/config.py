"""
Configuration management for simledger.
Everything comes from environment variables, optionally seeded from .env files.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv


def parse_id_map(text: str) -> Dict[int, str]:
    """
    Parse an "id:symbol" list.

    Args:
        text: Comma-separated entries, e.g. "0:BTCUSDT, 1:ETHUSDT"

    Returns:
        Mapping of integer id to symbol (symbol kept as written, stripped)

    Raises:
        ValueError: If an entry is not "<int>:<non-empty symbol>" or an id repeats
    """
    result: Dict[int, str] = {}
    for entry in text.split(","):
        entry = entry.strip()
        if not entry:
            continue
        ident, sep, symbol = entry.partition(":")
        symbol = symbol.strip()
        if not sep or not symbol:
            raise ValueError(f"Invalid id map entry '{entry}', expected '<id>:<symbol>'")
        try:
            key = int(ident.strip())
        except ValueError:
            raise ValueError(f"Invalid id in entry '{entry}'") from None
        if key in result:
            raise ValueError(f"Duplicate id {key} in id map")
        result[key] = symbol
    return result


@dataclass
class OracleConfig:
    """
    External oracle (Bybit v5) configuration.

    The oracle is bound to ONE account: Bybit only reports balances for the
    account that owns the API key, so account-scoped queries for any other
    address come back empty.

    Integer scaling:
        px_decimals: mark/spot prices are returned as int(price * 10**px_decimals)
        balance_decimals: spot balances as int(amount * 10**balance_decimals)
        usd_decimals: withdrawable USD as int(usd * 10**usd_decimals)
    """
    api_key: str = ""
    api_secret: str = ""
    use_demo: bool = True
    recv_window: int = 20000

    account: str = ""
    perp_symbols: Dict[int, str] = field(default_factory=dict)
    spot_symbols: Dict[int, str] = field(default_factory=dict)
    token_coins: Dict[int, str] = field(default_factory=dict)

    px_decimals: int = 6
    balance_decimals: int = 8
    usd_decimals: int = 6

    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_secret)

    def get_mode_name(self) -> str:
        return "DEMO" if self.use_demo else "LIVE"


@dataclass
class LogConfig:
    """Logging configuration. An empty log_dir disables log files."""
    level: str = "INFO"
    log_dir: str = "logs"


@dataclass
class ScenarioConfig:
    """Default scenario file used by the CLI when --scenario is omitted."""
    path: str = ""


class Config:
    """
    Process-wide simledger settings.

    Built once from the environment; sections are plain dataclasses
    (oracle, log, scenario).
    """

    _instance: Optional['Config'] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, env_file: str = ".env"):
        if self._initialized:
            return

        # Later files override earlier ones
        for env_name in ["api_keys.env", ".env", env_file]:
            env_path = Path(env_name)
            if env_path.exists():
                load_dotenv(env_path, override=True)

        self.oracle = self._load_oracle_config()
        self.log = self._load_log_config()
        self.scenario = self._load_scenario_config()

        self._initialized = True

    def _load_oracle_config(self) -> OracleConfig:
        """Load oracle configuration from environment."""
        return OracleConfig(
            api_key=os.getenv("BYBIT_API_KEY", ""),
            api_secret=os.getenv("BYBIT_API_SECRET", ""),
            use_demo=os.getenv("BYBIT_USE_DEMO", "true").lower() == "true",
            recv_window=int(os.getenv("BYBIT_RECV_WINDOW", "20000")),
            account=os.getenv("SIMLEDGER_ORACLE_ACCOUNT", ""),
            perp_symbols=parse_id_map(os.getenv("SIMLEDGER_PERP_SYMBOLS", "")),
            spot_symbols=parse_id_map(os.getenv("SIMLEDGER_SPOT_SYMBOLS", "")),
            token_coins=parse_id_map(os.getenv("SIMLEDGER_TOKEN_COINS", "")),
            px_decimals=int(os.getenv("SIMLEDGER_PX_DECIMALS", "6")),
            balance_decimals=int(os.getenv("SIMLEDGER_BALANCE_DECIMALS", "8")),
            usd_decimals=int(os.getenv("SIMLEDGER_USD_DECIMALS", "6")),
        )

    def _load_log_config(self) -> LogConfig:
        """LOG_LEVEL / LOG_DIR."""
        return LogConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=os.getenv("LOG_DIR", "logs"),
        )

    def _load_scenario_config(self) -> ScenarioConfig:
        return ScenarioConfig(path=os.getenv("SIMLEDGER_SCENARIO", ""))

    def summary_short(self) -> str:
        """One-line description of the oracle settings."""
        key_status = "✓" if self.oracle.has_credentials() else "✗"
        account = self.oracle.account or "(unbound)"
        return (
            f"Oracle: Bybit {self.oracle.get_mode_name()} | API: {key_status} | "
            f"Account: {account} | Perps: {len(self.oracle.perp_symbols)}"
        )


def get_config(env_file: str = ".env") -> Config:
    """Shared Config, built on first call."""
    return Config(env_file)
