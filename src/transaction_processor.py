import logging
from typing import Dict, Optional

from models import Transaction, TransactionType, ClientAccount, ProcessingResult

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to an explicit mapping of client id to account.
    Every rejected instruction is a silent no-op reported as IGNORED, never an exception.
    """

    def __init__(self, accounts: Optional[Dict[int, ClientAccount]] = None):
        self._accounts = accounts if accounts is not None else {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            APPLIED: The transition changed the account
            IGNORED: A precondition failed (locked account, missing amount,
                insufficient funds, unknown or wrongly disputed tx); nothing changed
        """
        account = self.get_or_create_account(transaction.client_id)

        if account.locked:
            logger.debug(f"{transaction}: account {account.client_id} is locked, skipping")
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
            case _:
                return ProcessingResult.IGNORED

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            logger.debug(f"Deposit tx {transaction.transaction_id}: no amount")
            return ProcessingResult.IGNORED

        account.deposit(transaction.transaction_id, transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        if transaction.amount is None:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: no amount")
            return ProcessingResult.IGNORED

        if account.available < transaction.amount:
            logger.debug(
                f"Withdrawal tx {transaction.transaction_id}: insufficient funds "
                f"({account.available} < {transaction.amount})"
            )
            return ProcessingResult.IGNORED

        account.withdraw(transaction.amount)
        return ProcessingResult.APPLIED

    # Only deposits are logged, so disputes naming a withdrawal or another
    # client's transaction never find an entry.
    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry = account.transaction_log.get(transaction.transaction_id)

        if entry is None:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: no deposit on client {account.client_id}")
            return ProcessingResult.IGNORED

        if entry.disputed:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: already disputed")
            return ProcessingResult.IGNORED

        account.open_dispute(entry)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry = account.transaction_log.get(transaction.transaction_id)

        if entry is None or not entry.disputed:
            logger.debug(f"Resolve for tx {transaction.transaction_id}: not under dispute")
            return ProcessingResult.IGNORED

        account.resolve_dispute(entry)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        entry = account.transaction_log.get(transaction.transaction_id)

        if entry is None or not entry.disputed:
            logger.debug(f"Chargeback for tx {transaction.transaction_id}: not under dispute")
            return ProcessingResult.IGNORED

        account.charge_back(entry)
        return ProcessingResult.APPLIED


def apply_transaction(accounts: Dict[int, ClientAccount], transaction: Transaction) -> bool:
    """Apply one transaction to ``accounts`` in place. Returns whether it changed anything."""
    result = TransactionProcessor(accounts).process_transaction(transaction)
    return result == ProcessingResult.APPLIED
