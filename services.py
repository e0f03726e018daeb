from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, MutableMapping, Optional, Union
import structlog

from exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    InsufficientFundsError,
    InvalidAmountError,
)
from ledger import format_entry, write_ledger
from models import Account, AccountKey, AccountRecord, TransactionType
from repositories import AccountRepository, InMemoryAccountRepository

logger = structlog.get_logger(__name__)

Amount = Union[int, float, str, Decimal]


def to_decimal(value: Amount, field: str = "amount") -> Decimal:
    """Normalize a user-supplied amount. Floats go through ``str`` so 300.30 stays 300.3."""
    if isinstance(value, bool):
        raise InvalidAmountError(f"{field} must be a number, got {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"{field} must be a number, got {value!r}")
    if not result.is_finite():
        raise InvalidAmountError(f"{field} must be finite, got {value!r}")
    return result


class AccountManager:
    """In-memory ATM: accounts keyed by (account number, PIN) with a per-account ledger.

    Each instance owns its own repository; nothing is shared between instances.
    Every failed operation raises an ``AtmError`` subclass and leaves state untouched.
    Log output goes through structlog; call ``logging_config.configure_logging`` first
    to route it, otherwise structlog's default console output is used.
    """

    def __init__(self, repository: Optional[AccountRepository] = None, ledger_encoding: str = "utf-8"):
        self.repository = repository if repository is not None else InMemoryAccountRepository()
        self.ledger_encoding = ledger_encoding

    def __len__(self) -> int:
        return self.repository.count()

    def __contains__(self, key: AccountKey) -> bool:
        return self.repository.exists(key)

    def register_account(self, account_number: int, pin: int, owner_name: str, initial_balance: Amount) -> None:
        key = AccountKey(account_number=account_number, pin=pin)
        if self.repository.exists(key):
            logger.warning("Duplicate account registration", account=str(key))
            raise DuplicateAccountError(key)

        # Opening balances are not sign-checked; a negative balance is accepted as given.
        balance = to_decimal(initial_balance, "initial_balance")
        record = AccountRecord(account=Account(owner_name=owner_name, balance=balance))
        self.repository.add(key, record)

        logger.info("Account registered", account=str(key), owner_name=owner_name, balance=str(balance))

    def withdraw_cash(self, account_number: int, pin: int, amount: Amount) -> Decimal:
        """Withdraw ``amount`` and return the updated balance."""
        key, record = self._lookup(account_number, pin)
        amount = self._validate_amount(key, amount, TransactionType.withdrawal)

        account = record.account
        if amount > account.balance:
            logger.warning(
                "Insufficient funds for withdrawal",
                account=str(key),
                current_balance=str(account.balance),
                requested_amount=str(amount)
            )
            raise InsufficientFundsError(key, account.balance, amount)

        return self._apply(key, record, TransactionType.withdrawal, amount, account.balance - amount)

    def deposit_cash(self, account_number: int, pin: int, amount: Amount) -> Decimal:
        """Deposit ``amount`` and return the updated balance."""
        key, record = self._lookup(account_number, pin)
        amount = self._validate_amount(key, amount, TransactionType.deposit)
        return self._apply(key, record, TransactionType.deposit, amount, record.account.balance + amount)

    def check_balance(self, account_number: int, pin: int) -> Decimal:
        _, record = self._lookup(account_number, pin)
        return record.account.balance

    def get_accounts(self) -> MutableMapping[AccountKey, Account]:
        return self.repository.accounts_view()

    def get_transactions(self) -> MutableMapping[AccountKey, List[str]]:
        return self.repository.transactions_view()

    def print_ledger(self, file_path: Union[str, Path], account_number: int, pin: int) -> None:
        """Write the account's transaction log to ``file_path``, one entry per line, replacing its contents."""
        key, record = self._lookup(account_number, pin)
        lines = write_ledger(file_path, list(record.transactions), encoding=self.ledger_encoding)
        logger.info("Ledger written", account=str(key), file_path=str(file_path), lines=lines)

    def _lookup(self, account_number: int, pin: int):
        key = AccountKey(account_number=account_number, pin=pin)
        record = self.repository.get(key)
        if record is None:
            logger.warning("Account not found", account=str(key))
            raise AccountNotFoundError(key)
        return key, record

    def _validate_amount(self, key: AccountKey, amount: Amount, transaction_type: TransactionType) -> Decimal:
        amount = to_decimal(amount)
        if amount < 0:
            logger.warning(
                "Negative amount rejected",
                account=str(key),
                type=transaction_type.value,
                requested_amount=str(amount)
            )
            raise InvalidAmountError(f"{transaction_type.value} amount cannot be negative: {amount}")
        return amount

    def _apply(
        self,
        key: AccountKey,
        record: AccountRecord,
        transaction_type: TransactionType,
        amount: Decimal,
        new_balance: Decimal
    ) -> Decimal:
        old_balance = record.account.balance
        record.account.balance = new_balance
        record.transactions.append(format_entry(transaction_type, amount, new_balance))

        logger.debug(
            f"{transaction_type.value} processed",
            account=str(key),
            amount=str(amount),
            old_balance=str(old_balance),
            new_balance=str(new_balance)
        )
        logger.info(
            "Transaction processed successfully",
            account=str(key),
            type=transaction_type.value,
            new_balance=str(new_balance)
        )
        return new_balance


# The name the ATM was originally exposed under.
Atm = AccountManager
