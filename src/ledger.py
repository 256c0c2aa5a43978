import logging
from typing import Dict, List, Optional

from models import Transaction, TransactionType, ClientAccount, AccountSnapshot, ProcessingResult
from processor import TransactionProcessor

logger = logging.getLogger(__name__)


class Ledger:
    """
    Client id -> account mapping.
    Accounts are created on first sight and never removed.
    """

    def __init__(self, processor: Optional[TransactionProcessor] = None):
        self._accounts: Dict[int, ClientAccount] = {}
        self._processor = processor or TransactionProcessor()

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """Route a transaction to its client's account, opening the account if needed."""
        account = self._accounts.get(transaction.client_id)
        if account is None:
            account, result = self._open_account(transaction)
            self._accounts[transaction.client_id] = account
            return result

        return self._processor.process(account, transaction)

    def _open_account(self, transaction: Transaction):
        """
        A new client starts at zero. Only a deposit with a non-negative amount
        takes effect as the opening transaction; anything else just registers
        the client.
        """
        account = ClientAccount(client_id=transaction.client_id)

        if transaction.transaction_type == TransactionType.DEPOSIT and transaction.amount is not None:
            return account, self._processor.process(account, transaction)

        logger.debug(f"{transaction}: opened empty account for client {transaction.client_id}")
        return account, ProcessingResult.IGNORED

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def snapshot(self) -> List[AccountSnapshot]:
        """Rounded state of every account, ordered by client id."""
        return [self._accounts[client_id].snapshot() for client_id in sorted(self._accounts)]

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)
