from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from typing import Dict, Iterator, List, Optional

from exceptions import AccountNotFoundError
from models import Account, AccountKey, AccountRecord


class RecordFieldView(MutableMapping):
    """Live key -> ``record.<field>`` mapping over a repository's records.

    Assigning to an existing key replaces that field on the stored record.
    Keys can only be added by registering an account, and never removed.
    """

    def __init__(self, records: Dict[AccountKey, AccountRecord], field: str):
        self._records = records
        self._field = field

    def __getitem__(self, key: AccountKey):
        return getattr(self._records[key], self._field)

    def __setitem__(self, key: AccountKey, value) -> None:
        record = self._records.get(key)
        if record is None:
            raise AccountNotFoundError(key)
        setattr(record, self._field, value)

    def __delitem__(self, key: AccountKey) -> None:
        raise TypeError(f"Account {key} cannot be removed")

    def __iter__(self) -> Iterator[AccountKey]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._field}: {dict(self)!r})"


class AccountRepository(ABC):
    @abstractmethod
    def get(self, key: AccountKey) -> Optional[AccountRecord]:
        """Get account record. Returns None if account doesn't exist."""
        pass

    @abstractmethod
    def add(self, key: AccountKey, record: AccountRecord) -> None:
        """Store a new account record."""
        pass

    @abstractmethod
    def exists(self, key: AccountKey) -> bool:
        """Check if account exists."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Get total number of accounts."""
        pass

    @abstractmethod
    def accounts_view(self) -> "MutableMapping[AccountKey, Account]":
        pass

    @abstractmethod
    def transactions_view(self) -> "MutableMapping[AccountKey, List[str]]":
        pass


class InMemoryAccountRepository(AccountRepository):
    def __init__(self):
        self.records: Dict[AccountKey, AccountRecord] = {}

    def get(self, key: AccountKey) -> Optional[AccountRecord]:
        return self.records.get(key)

    def add(self, key: AccountKey, record: AccountRecord) -> None:
        if key in self.records:
            raise ValueError(f"Account {key} already exists")
        self.records[key] = record

    def exists(self, key: AccountKey) -> bool:
        return key in self.records

    def count(self) -> int:
        return len(self.records)

    def accounts_view(self) -> RecordFieldView:
        """Key -> live Account objects, in registration order."""
        return RecordFieldView(self.records, "account")

    def transactions_view(self) -> RecordFieldView:
        """Key -> live transaction lists; appending or assigning updates the record."""
        return RecordFieldView(self.records, "transactions")
