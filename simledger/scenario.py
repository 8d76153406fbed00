"""
Scenario loading.

A scenario is a YAML document describing the overrides a test wants; every
fact it does not mention falls through to the oracle.

Example:

    tokens:
      0: USDC
      150: {name: HYPE, sz_decimals: 2, wei_decimals: 8}
    mark_px:
      0: 65000000000
    spot_px: {}
    vault_multipliers:
      "0x1111111111111111111111111111111111111111": 2000000000000000000
    staking_yield_index: 0
    accounts:
      "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa":
        activated: true
        perp_balance: 1000000
        staking: 50
        spot: {0: 500}
        positions:
          0: {szi: 2, entry_ntl: 120000, leverage: 5}
        delegations:
          "0x2222222222222222222222222222222222222222": {amount: 100, locked_until: 0}
        vault_equity:
          "0x1111111111111111111111111111111111111111": {equity: 1000, last_multiplier: 1000000000000000000}
    withdrawals:
      - {owner: "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa", amount: 5}

Global multipliers are applied before accounts, so snapshots observe the
current multiplier unless last_multiplier / last_index says otherwise.
Addresses should be quoted: YAML reads a bare 0x... as an integer (which is
accepted and converted back).
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .store.state import LedgerStore
from .types import Position
from .utils.helpers import normalize_address
from .utils.logger import get_logger

SCENARIO_SECTIONS = (
    "tokens",
    "mark_px",
    "spot_px",
    "vault_multipliers",
    "staking_yield_index",
    "accounts",
    "withdrawals",
)

_POSITION_FIELDS = {"szi", "entry_ntl", "isolated_raw_usd", "leverage", "is_isolated"}


def _address(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return "0x" + format(value, "040x")
    return normalize_address(value)


def _int(value: Any, what: str) -> int:
    """
    Exact integer from a YAML scalar.

    YAML reads 1.0e+18 as a float; integral floats are accepted and
    converted exactly, anything fractional or non-numeric is rejected.
    """
    if isinstance(value, bool):
        raise ValueError(f"{what}: expected an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{what}: expected an integer, got {value!r}")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{what}: expected an integer, got {value!r}") from None


def _optional_int(value: Any, what: str) -> Optional[int]:
    return None if value is None else _int(value, what)


def _mapping(value: Any, what: str) -> Mapping[Any, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _section(data: Mapping[str, Any], name: str) -> Dict[Any, Any]:
    return dict(_mapping(data.get(name), f"Scenario section '{name}'"))


def _load_account(store: LedgerStore, user: str, spec: Mapping[str, Any]) -> None:
    if spec.get("activated", False):
        store.activate_account(user)
    if "perp_balance" in spec:
        store.set_perp_balance(user, _int(spec["perp_balance"], f"{user} perp_balance"))
    if "staking" in spec:
        store.set_staking(user, _int(spec["staking"], f"{user} staking"))

    for token, amount in _section(spec, "spot").items():
        store.set_spot_balance(user, _int(token, "spot token"), _int(amount, f"{user} spot[{token}]"))

    for perp, fields in _section(spec, "positions").items():
        fields = _mapping(fields, f"Position {perp} of {user}")
        unknown = set(fields) - _POSITION_FIELDS
        if unknown:
            raise ValueError(f"Unknown position fields for perp {perp}: {sorted(unknown)}")
        values = {
            name: (bool(value) if name == "is_isolated" else _int(value, f"position {perp} {name}"))
            for name, value in fields.items()
        }
        store.set_position(user, _int(perp, "perp"), Position(**values))

    for validator, fields in _section(spec, "delegations").items():
        fields = _mapping(fields, f"Delegation to {validator} of {user}")
        store.delegate(
            user,
            _address(validator),
            _int(fields.get("amount", 0), "delegation amount"),
            locked_until_timestamp=_int(fields.get("locked_until", 0), "delegation locked_until"),
            observed_index=_optional_int(fields.get("last_index"), "delegation last_index"),
        )

    for vault, fields in _section(spec, "vault_equity").items():
        fields = _mapping(fields, f"Vault equity in {vault} of {user}")
        store.set_vault_equity(
            user,
            _address(vault),
            _int(fields.get("equity", 0), "vault equity"),
            locked_until_timestamp=_int(fields.get("locked_until", 0), "vault equity locked_until"),
            observed_multiplier=_optional_int(fields.get("last_multiplier"), "vault equity last_multiplier"),
        )


def build_store(data: Mapping[str, Any]) -> LedgerStore:
    """
    Build a LedgerStore from a parsed scenario.

    Args:
        data: Scenario mapping (see module docstring)

    Returns:
        Populated store

    Raises:
        ValueError: On unknown sections, malformed sections or bad addresses
    """
    unknown = set(data) - set(SCENARIO_SECTIONS)
    if unknown:
        raise ValueError(f"Unknown scenario sections: {sorted(unknown)}")

    store = LedgerStore()

    for token, spec in _section(data, "tokens").items():
        if isinstance(spec, Mapping):
            store.register_token(
                _int(token, "token"),
                str(spec.get("name", "")),
                sz_decimals=_int(spec.get("sz_decimals", 0), f"token {token} sz_decimals"),
                wei_decimals=_int(spec.get("wei_decimals", 0), f"token {token} wei_decimals"),
            )
        else:
            store.register_token(_int(token, "token"), str(spec))

    for perp, px in _section(data, "mark_px").items():
        store.set_mark_px(_int(perp, "perp"), _int(px, f"mark_px[{perp}]"))
    for spot, px in _section(data, "spot_px").items():
        store.set_spot_px(_int(spot, "spot"), _int(px, f"spot_px[{spot}]"))

    for vault, multiplier in _section(data, "vault_multipliers").items():
        store.set_vault_multiplier(_address(vault), _int(multiplier, f"vault_multipliers[{vault}]"))
    store.set_staking_yield_index(_int(data.get("staking_yield_index") or 0, "staking_yield_index"))

    for user, spec in _section(data, "accounts").items():
        _load_account(store, _address(user), _mapping(spec, f"Account {user}"))

    withdrawals = data.get("withdrawals") or []
    if not isinstance(withdrawals, list):
        raise ValueError("Scenario section 'withdrawals' must be a list")
    for entry in withdrawals:
        entry = _mapping(entry, "Withdrawal entry")
        if "owner" not in entry or "amount" not in entry:
            raise ValueError(f"Withdrawal entry needs owner and amount: {dict(entry)}")
        store.request_withdrawal(_address(entry["owner"]), _int(entry["amount"], "withdrawal amount"))

    return store


def load_scenario(path: Union[str, Path]) -> LedgerStore:
    """
    Read a YAML scenario file into a LedgerStore.

    Raises:
        ValueError: If the file cannot be read, is not valid YAML or is not
            a valid scenario
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ValueError(f"Cannot read scenario {path}: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise ValueError(f"Scenario {path} is not valid YAML: {e}") from e
    if not isinstance(data, Mapping):
        raise ValueError(f"Scenario {path} must contain a mapping at top level")

    store = build_store(data)
    get_logger().info(
        f"Loaded scenario {path.name}: "
        f"{len(_section(data, 'accounts'))} accounts, {len(store.withdrawals)} withdrawals"
    )
    return store
