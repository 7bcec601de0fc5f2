"""In-memory storage for accounts, transactions and the security log.

One MemoryStore is created by the process entry point and passed to the
services that need it; nothing lives at module level. Transactions are
indexed by user id for the history queries the feature extractor needs.
All data lives in memory and is lost on restart.
"""

import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

from riskguard.models import Account, SecurityLogEntry, StoredTransaction, as_utc


class MemoryStore:
    """Thread-safe in-memory store. Every access takes the store lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._accounts: Dict[str, Account] = {}
        # Transactions indexed by user id, in insertion order
        self._transactions: Dict[str, List[StoredTransaction]] = {}
        self._security_log: List[SecurityLogEntry] = []

    # -- accounts -----------------------------------------------------------

    def add_account(self, account: Account) -> None:
        with self._lock:
            self._accounts[account.account_id] = account

    def get_account(self, account_id: str) -> Optional[Account]:
        """Return a copy of the account, or None if unknown."""
        with self._lock:
            account = self._accounts.get(account_id)
            return account.model_copy() if account is not None else None

    def get_user_accounts(self, user_id: str) -> List[Account]:
        with self._lock:
            return [
                a.model_copy() for a in self._accounts.values() if a.user_id == user_id
            ]

    def adjust_balance(self, account_id: str, delta: float) -> None:
        """Add delta (negative to debit) to an account's balance."""
        with self._lock:
            account = self._accounts.get(account_id)
            if account is not None:
                account.balance += delta

    def add_daily_spend(self, account_id: str, amount: float) -> None:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is not None:
                account.amount_spent_today += amount

    # -- transactions -------------------------------------------------------

    def add_transaction(self, tx: StoredTransaction) -> None:
        with self._lock:
            self._transactions.setdefault(tx.user_id, []).append(tx)

    def get_transactions(self, user_id: str) -> List[StoredTransaction]:
        """Return a user's transactions, newest first."""
        with self._lock:
            txns = list(self._transactions.get(user_id, []))
        # Reversed first so equal timestamps keep latest-inserted first
        return sorted(reversed(txns), key=lambda t: t.timestamp, reverse=True)

    def get_all_transactions(self) -> List[StoredTransaction]:
        with self._lock:
            txns = [t for txn_list in self._transactions.values() for t in txn_list]
        return sorted(reversed(txns), key=lambda t: t.timestamp, reverse=True)

    def count_transactions_in_window(
        self,
        user_id: str,
        window: timedelta,
        now: datetime,
    ) -> int:
        """Count a user's transactions, any status, with now - window < ts <= now."""
        since = now - window
        with self._lock:
            return sum(
                1
                for t in self._transactions.get(user_id, [])
                if since < t.timestamp <= now
            )

    def get_known_recipients(self, user_id: str) -> Set[str]:
        """Distinct recipients of the user's completed (non-blocked) transfers."""
        with self._lock:
            return {
                t.recipient_label
                for t in self._transactions.get(user_id, [])
                if t.status == "COMPLETED"
            }

    def get_recent_recipients(self, user_id: str, count: int) -> List[str]:
        """Recipients of the user's latest `count` completed transfers, newest first."""
        completed = [t for t in self.get_transactions(user_id) if t.status == "COMPLETED"]
        return [t.recipient_label for t in completed[:count]]

    # -- security log -------------------------------------------------------

    def add_security_log(self, entry: SecurityLogEntry) -> None:
        with self._lock:
            self._security_log.append(entry)

    def get_security_logs(
        self,
        transaction_id: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[SecurityLogEntry]:
        """Return log entries newest first, optionally filtered by transaction ID and/or time range."""
        since = as_utc(since) if since is not None else None
        until = as_utc(until) if until is not None else None
        with self._lock:
            entries = list(self._security_log)

        results: List[SecurityLogEntry] = []
        for entry in entries:
            if transaction_id is not None and entry.transaction_id != transaction_id:
                continue
            if since is not None and entry.timestamp < since:
                continue
            if until is not None and entry.timestamp > until:
                continue
            results.append(entry)
        return sorted(reversed(results), key=lambda e: e.timestamp, reverse=True)
