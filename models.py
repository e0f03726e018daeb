from pydantic import BaseModel, ConfigDict, Field
from enum import Enum
from typing import List
from decimal import Decimal


class TransactionType(str, Enum):
    withdrawal = "Withdrawal"
    deposit = "Deposit"


class ErrorCode(str, Enum):
    duplicate_key = "duplicate_key"
    key_not_found = "key_not_found"
    invalid_argument = "invalid_argument"
    insufficient_funds = "insufficient_funds"


class AccountKey(BaseModel):
    """Composite (account number, PIN) identifier. Hashable so it can key a dict."""

    model_config = ConfigDict(frozen=True)

    account_number: int = Field(..., description="Account number")
    pin: int = Field(..., description="Personal identification number")

    def __str__(self) -> str:
        return f"{self.account_number}/{self.pin}"


class Account(BaseModel):
    owner_name: str = Field(..., description="Account holder name")
    balance: Decimal = Field(..., description="Current balance, may be negative")


class AccountRecord(BaseModel):
    account: Account
    transactions: List[str] = Field(
        default_factory=list,
        description="Human-readable ledger lines in chronological order"
    )
