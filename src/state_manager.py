from typing import Dict, Optional, Set

from models import Transaction, ClientAccount, AccountSnapshot


class StateManager:
    """
    Single owner of ledger state: client accounts, revertible transaction
    history for dispute lookups, and the set of currently disputed transactions.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}
        self._disputed_transaction_ids: Set[int] = set()

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def store_transaction(self, transaction: Transaction) -> None:
        """Store transaction for future dispute lookups."""
        self._transactions[transaction.transaction_id] = transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def mark_transaction_disputed(self, transaction_id: int) -> None:
        """Mark a transaction as disputed."""
        self._disputed_transaction_ids.add(transaction_id)

    def is_transaction_disputed(self, transaction_id: int) -> bool:
        """Check if transaction is currently disputed."""
        return transaction_id in self._disputed_transaction_ids

    def clear_transaction_dispute(self, transaction_id: int) -> None:
        """Clear dispute status for a transaction."""
        self._disputed_transaction_ids.discard(transaction_id)

    def snapshot_accounts(self) -> Dict[int, AccountSnapshot]:
        """Return a copy of every account's state, in creation order (for final output)."""
        return {client_id: account.snapshot() for client_id, account in self._accounts.items()}
