"""
Interactive ATM session over a single in-memory AccountManager.

Usage:
    python main.py [--env development] [--log-level DEBUG] [--script commands.txt]

Commands (one per line):
    register <account_number> <pin> <owner name ...> <initial_balance>
    deposit <account_number> <pin> <amount>
    withdraw <account_number> <pin> <amount>
    balance <account_number> <pin>
    ledger [file_path] <account_number> <pin>
    accounts
    quit
"""
import argparse
import shlex
import sys
from typing import Iterable, List, Optional, TextIO

import structlog

from config import get_settings, get_settings_for_environment
from exceptions import AtmError
from logging_config import configure_logging
from services import AccountManager

logger = structlog.get_logger(__name__)

QUIT_COMMANDS = {"quit", "exit"}

USAGE = {
    "register": "register <account_number> <pin> <owner name ...> <initial_balance>",
    "deposit": "deposit <account_number> <pin> <amount>",
    "withdraw": "withdraw <account_number> <pin> <amount>",
    "balance": "balance <account_number> <pin>",
    "ledger": "ledger [file_path] <account_number> <pin>",
    "accounts": "accounts",
}


class UsageError(Exception):
    pass


def _parse_key(tokens: List[str]):
    try:
        return int(tokens[0]), int(tokens[1])
    except ValueError:
        raise UsageError("account number and pin must be integers")


def _register(manager: AccountManager, args: List[str]) -> str:
    if len(args) < 4:
        raise UsageError(USAGE["register"])
    account_number, pin = _parse_key(args)
    owner_name = " ".join(args[2:-1])
    manager.register_account(account_number, pin, owner_name, args[-1])
    return f"Registered {account_number} for {owner_name}"


def _deposit(manager: AccountManager, args: List[str]) -> str:
    if len(args) != 3:
        raise UsageError(USAGE["deposit"])
    account_number, pin = _parse_key(args)
    balance = manager.deposit_cash(account_number, pin, args[2])
    return f"Balance: ${balance:.2f}"


def _withdraw(manager: AccountManager, args: List[str]) -> str:
    if len(args) != 3:
        raise UsageError(USAGE["withdraw"])
    account_number, pin = _parse_key(args)
    balance = manager.withdraw_cash(account_number, pin, args[2])
    return f"Balance: ${balance:.2f}"


def _balance(manager: AccountManager, args: List[str]) -> str:
    if len(args) != 2:
        raise UsageError(USAGE["balance"])
    account_number, pin = _parse_key(args)
    return f"Balance: ${manager.check_balance(account_number, pin):.2f}"


def _ledger(manager: AccountManager, args: List[str]) -> str:
    if len(args) == 2:
        args = [get_settings().default_ledger_path] + args
    if len(args) != 3:
        raise UsageError(USAGE["ledger"])
    account_number, pin = _parse_key(args[1:])
    manager.print_ledger(args[0], account_number, pin)
    return f"Ledger written to {args[0]}"


def _accounts(manager: AccountManager, args: List[str]) -> str:
    if args:
        raise UsageError(USAGE["accounts"])
    accounts = manager.get_accounts()
    if not accounts:
        return "No accounts registered"
    return "\n".join(
        f"{key.account_number}: {account.owner_name} ${account.balance:.2f}"
        for key, account in accounts.items()
    )


COMMANDS = {
    "register": _register,
    "deposit": _deposit,
    "withdraw": _withdraw,
    "balance": _balance,
    "ledger": _ledger,
    "accounts": _accounts,
}


def run_command(manager: AccountManager, line: str) -> str:
    """Execute one command line and return the text to show the user."""
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        return f"error: {e}"
    if not tokens:
        return ""

    name, args = tokens[0].lower(), tokens[1:]
    handler = COMMANDS.get(name)
    if handler is None:
        return "unknown command, expected one of: " + ", ".join(sorted(COMMANDS))

    try:
        return handler(manager, args)
    except UsageError as e:
        return f"usage: {e}"
    except AtmError as e:
        return f"error[{e.error_code.value}]: {e.detail}"
    except OSError as e:
        logger.warning("Command failed", command=name, error=str(e))
        return f"error: {e}"


def run_session(manager: AccountManager, lines: Iterable[str], out: TextIO) -> int:
    """Feed lines to ``run_command`` until EOF or ``quit``. Returns the number of commands run."""
    executed = 0
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.lower() in QUIT_COMMANDS:
            break
        response = run_command(manager, line)
        executed += 1
        if response:
            print(response, file=out)
    return executed


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simple ATM: register accounts, move cash, print ledgers.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--env",
        default=None,
        help="Settings profile: development, production or testing (default: environment variables only).",
    )
    parser.add_argument("--log-level", default=None, help="Override the configured log level.")
    parser.add_argument("--script", default=None, help="Read commands from this file instead of stdin.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    settings = get_settings_for_environment(args.env) if args.env else get_settings()
    if args.log_level:
        settings = settings.model_copy(update={"log_level": args.log_level})
    configure_logging(settings)

    manager = AccountManager(ledger_encoding=settings.ledger_encoding)
    logger.info("Starting ATM session", app=settings.app_name, version=settings.app_version)

    if args.script:
        with open(args.script, encoding="utf-8") as fh:
            executed = run_session(manager, fh, sys.stdout)
    else:
        executed = run_session(manager, sys.stdin, sys.stdout)

    logger.info("ATM session finished", commands=executed, accounts=len(manager))
    return 0


if __name__ == "__main__":
    sys.exit(main())
