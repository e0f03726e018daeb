from models import AccountKey, ErrorCode


class AtmError(Exception):
    """Base class for every rejected ATM operation."""

    error_code: ErrorCode

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"detail": self.detail, "error_code": self.error_code.value}


class DuplicateAccountError(AtmError, ValueError):
    error_code = ErrorCode.duplicate_key

    def __init__(self, key: AccountKey):
        super().__init__(f"Account {key} is already registered")
        self.key = key


class AccountNotFoundError(AtmError, LookupError):
    error_code = ErrorCode.key_not_found

    def __init__(self, key: AccountKey):
        super().__init__(f"Account {key} not found")
        self.key = key


class InvalidAmountError(AtmError, ValueError):
    error_code = ErrorCode.invalid_argument


class InsufficientFundsError(AtmError, RuntimeError):
    error_code = ErrorCode.insufficient_funds

    def __init__(self, key: AccountKey, balance, amount):
        super().__init__(
            f"Insufficient funds in account {key}: balance {balance:.2f}, requested {amount:.2f}"
        )
        self.key = key
        self.balance = balance
        self.amount = amount
