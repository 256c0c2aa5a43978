class LedgerError(Exception):
    """Base class for errors raised while decoding ledger input."""


class InvalidTransactionType(LedgerError, ValueError):
    def __init__(self, token: str):
        super().__init__(f"Invalid transaction type {token!r}")
        self.token = token


class MalformedRow(LedgerError, ValueError):
    """Row could not be decoded into a Transaction (bad ids, amount or field count)."""
