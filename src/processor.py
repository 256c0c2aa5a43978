import logging

from models import Transaction, TransactionType, ClientAccount, ProcessingResult

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies one transaction to one account, mutating the account in place.
    Holds no state of its own: balances and dispute history live on the account.
    Every rejected transaction is a silent no-op reported as IGNORED.
    """

    def process(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction against its client's account.

        Returns:
            APPLIED: The account changed
            IGNORED: Locked account, negative amount, or a failed precondition
        """
        if account.locked:
            logger.debug(f"{transaction}: account {account.client_id} is locked")
            return ProcessingResult.IGNORED

        if transaction.has_negative_amount:
            logger.debug(f"{transaction}: negative amount")
            return ProcessingResult.IGNORED

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)

        return ProcessingResult.IGNORED

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            logger.debug(f"{transaction}: deposit without amount")
            return ProcessingResult.IGNORED

        if account.has_transaction(transaction.transaction_id):
            logger.debug(f"{transaction}: tx id already in history, skipping")
            return ProcessingResult.IGNORED

        account.deposit(transaction.transaction_id, transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            logger.debug(f"{transaction}: withdrawal without amount")
            return ProcessingResult.IGNORED

        if account.has_transaction(transaction.transaction_id):
            logger.debug(f"{transaction}: tx id already in history, skipping")
            return ProcessingResult.IGNORED

        if account.available < transaction.amount:
            logger.debug(f"{transaction}: insufficient funds (available {account.available})")
            return ProcessingResult.IGNORED

        account.withdraw(transaction.transaction_id, transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = account.history.get(transaction.transaction_id)

        if original is None:
            logger.debug(f"{transaction}: unknown tx id")
            return ProcessingResult.IGNORED

        if original.is_under_dispute:
            logger.debug(f"{transaction}: transaction already disputed")
            return ProcessingResult.IGNORED

        account.open_dispute(original)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = account.history.get(transaction.transaction_id)

        if original is None or not original.is_under_dispute:
            logger.debug(f"{transaction}: no dispute to resolve")
            return ProcessingResult.IGNORED

        # The dispute flag stays set: a resolved transaction can't be disputed again.
        account.resolve_dispute(original)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        original = account.history.get(transaction.transaction_id)

        if original is None or not original.is_under_dispute:
            logger.debug(f"{transaction}: no dispute to charge back")
            return ProcessingResult.IGNORED

        account.charge_back(original)
        return ProcessingResult.APPLIED
