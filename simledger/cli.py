"""
simledger CLI.

Queries a LedgerView from the command line: facts overridden by the
scenario are answered locally, everything else goes to the Bybit oracle
(or fails, with --offline).

Examples:
  simledger --scenario scenarios/basic.yaml summary 0xaaaa...aaaa
  simledger --offline --scenario scenarios/basic.yaml vault-equity 0xaaaa... 0x1111...
  simledger mark-px 0                       # straight from the oracle
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from .config.config import get_config
from .errors import SimLedgerError
from .oracle.bybit_oracle import BybitOracle
from .oracle.protocol import OfflineOracle
from .scenario import load_scenario
from .store.state import LedgerStore
from .utils.logger import get_logger, setup_logger
from .view.ledger_view import LedgerView
from .view.sources import Fact

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="simledger",
        description="simledger - simulated ledger view with oracle fallback",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scenario", help="YAML scenario with local overrides (default: $SIMLEDGER_SCENARIO)")
    parser.add_argument("--offline", action="store_true", help="No oracle: un-overridden facts raise")
    parser.add_argument("--debug", action="store_true", help="Log every override/oracle resolution")

    sub = parser.add_subparsers(dest="command", required=True, help="Query to run")

    p = sub.add_parser("token-exists", help="Is the token registered")
    p.add_argument("token", type=int)

    p = sub.add_parser("user-exists", help="Does the account exist")
    p.add_argument("user")

    p = sub.add_parser("mark-px", help="Perp mark price")
    p.add_argument("perp", type=int)

    p = sub.add_parser("spot-px", help="Spot market price")
    p.add_argument("spot", type=int)

    p = sub.add_parser("spot-balance", help="Spot balance of a token")
    p.add_argument("user")
    p.add_argument("token", type=int)

    p = sub.add_parser("withdrawable", help="Withdrawable perp balance")
    p.add_argument("user")

    p = sub.add_parser("position", help="Perp position")
    p.add_argument("user")
    p.add_argument("perp", type=int)

    p = sub.add_parser("vault-equity", help="Rebased vault equity")
    p.add_argument("user")
    p.add_argument("vault")

    p = sub.add_parser("delegations", help="Rebased delegations")
    p.add_argument("user")

    p = sub.add_parser("summary", help="Delegator summary")
    p.add_argument("user")

    p = sub.add_parser("margin", help="Account margin summary")
    p.add_argument("user")
    p.add_argument("--version", type=int, default=0, dest="perp_version")

    return parser


def _build_view(args: argparse.Namespace) -> LedgerView:
    config = get_config()
    scenario = args.scenario or config.scenario.path
    store = load_scenario(scenario) if scenario else LedgerStore()
    oracle = OfflineOracle() if args.offline else BybitOracle.from_config(config.oracle)
    return LedgerView(store, oracle)


def _print_records(title: str, rows: List[Dict[str, Any]], source: Optional[str] = None) -> None:
    if source:
        title = f"{title} [dim]({source})[/dim]"
    table = Table(title=title, show_header=True, header_style="bold")
    if not rows:
        console.print(f"{title}: (none)")
        return
    for column in rows[0]:
        table.add_column(column, justify="right" if column != "validator" else "left")
    for row in rows:
        table.add_row(*(str(value) for value in row.values()))
    console.print(table)


def run(args: argparse.Namespace) -> None:
    view = _build_view(args)
    resolver = view.resolver
    cmd = args.command

    if cmd == "token-exists":
        _print_records("Token", [{"token": args.token, "exists": view.token_exists(args.token)}])
    elif cmd == "user-exists":
        source = resolver.source_for(Fact.CORE_USER_EXISTS, args.user).source_name
        _print_records("Core user", [view.core_user_exists(args.user).to_dict()], source)
    elif cmd == "mark-px":
        source = resolver.source_for(Fact.MARK_PX, args.perp).source_name
        _print_records("Mark price", [{"perp": args.perp, "px": view.read_mark_px(args.perp)}], source)
    elif cmd == "spot-px":
        source = resolver.source_for(Fact.SPOT_PX, args.spot).source_name
        _print_records("Spot price", [{"spot": args.spot, "px": view.read_spot_px(args.spot)}], source)
    elif cmd == "spot-balance":
        source = resolver.source_for(Fact.SPOT_BALANCE, args.user, args.token).source_name
        _print_records("Spot balance", [view.read_spot_balance(args.user, args.token).to_dict()], source)
    elif cmd == "withdrawable":
        source = resolver.source_for(Fact.WITHDRAWABLE, args.user).source_name
        _print_records("Withdrawable", [view.read_withdrawable(args.user).to_dict()], source)
    elif cmd == "position":
        _print_records("Position", [view.read_position(args.user, args.perp).to_dict()])
    elif cmd == "vault-equity":
        _print_records("Vault equity", [view.read_user_vault_equity(args.user, args.vault).to_dict()])
    elif cmd == "delegations":
        _print_records("Delegations", [d.to_dict() for d in view.read_delegations(args.user)])
    elif cmd == "summary":
        _print_records("Delegator summary", [view.read_delegator_summary(args.user).to_dict()])
    elif cmd == "margin":
        summary = view.read_account_margin_summary(args.perp_version, args.user)
        _print_records("Account margin", [summary.to_dict()])


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = get_config()
    if args.debug:
        logger = setup_logger(config.log.log_dir, "DEBUG")
    else:
        logger = get_logger(config.log.log_dir, config.log.level)

    try:
        run(args)
    except (SimLedgerError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
