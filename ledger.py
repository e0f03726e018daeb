"""Ledger line formatting and ledger file output."""
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Union

from models import TransactionType


def format_money(value: Decimal) -> str:
    return f"${value:.2f}"


def format_entry(transaction_type: TransactionType, amount: Decimal, new_balance: Decimal) -> str:
    """Render one ledger line, e.g. ``Deposit - Amount: $40.00, Updated Balance: $340.30``."""
    return (
        f"{transaction_type.value} - Amount: {format_money(amount)}, "
        f"Updated Balance: {format_money(new_balance)}"
    )


def write_ledger(file_path: Union[str, Path], entries: Iterable[str], encoding: str = "utf-8") -> int:
    """Overwrite ``file_path`` with one entry per line. Returns the number of lines written."""
    written = 0
    with open(file_path, "w", encoding=encoding, newline="\n") as fh:
        for entry in entries:
            fh.write(f"{entry}\n")
            written += 1
    return written
