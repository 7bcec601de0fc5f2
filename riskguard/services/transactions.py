"""Transfer submission: the caller side of the decision engine.

The service owns everything the engine deliberately does not:
  - precondition checks (InvalidRequest, AccountNotFound)
  - taking the account and history snapshots
  - persisting the transaction and its security log entry
  - debiting/crediting balances and accruing daily spend, only on allow

Each user has one lock covering all of their accounts. Snapshot,
evaluation, persistence and mutation all run inside it, so concurrent
transfers cannot pass the daily limit or read history against a stale
snapshot. The request time always comes from the service clock.
"""

import logging
import math
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from riskguard.errors import AccountNotFound, InvalidRequest
from riskguard.models import (
    Account,
    Decision,
    HistoryFacts,
    RiskModelConfig,
    SecurityLogEntry,
    StoredTransaction,
    TransactionCreate,
    TransactionRequest,
    TransactionResult,
)
from riskguard.screening.engine import DecisionEngine
from riskguard.storage.memory import MemoryStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _plain_amount(amount: float) -> str:
    return f"{amount:.0f}" if float(amount).is_integer() else str(amount)


class TransactionService:
    """Validates, evaluates and commits transfers against a MemoryStore."""

    def __init__(
        self,
        store: MemoryStore,
        engine: DecisionEngine,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.engine = engine
        self.clock = clock
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _user_lock(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            if user_id not in self._locks:
                self._locks[user_id] = threading.Lock()
            return self._locks[user_id]

    # -- preconditions ------------------------------------------------------

    def _validate(self, payload: TransactionCreate) -> Account:
        """Check the payload and return the source account."""
        if not math.isfinite(payload.amount) or payload.amount <= 0:
            raise InvalidRequest("Amount must be a positive number")
        if not payload.recipient_label.strip():
            raise InvalidRequest("Recipient is required")
        if payload.transfer_type == "internal" and not payload.destination_account_id:
            raise InvalidRequest("Internal transfers require a destination account")

        account = self.store.get_account(payload.source_account_id)
        if account is None:
            raise AccountNotFound(payload.source_account_id)
        if payload.destination_account_id is not None:
            if self.store.get_account(payload.destination_account_id) is None:
                raise AccountNotFound(payload.destination_account_id)
        return account

    def _to_request(self, payload: TransactionCreate) -> TransactionRequest:
        return TransactionRequest(
            source_account_id=payload.source_account_id,
            destination_account_id=payload.destination_account_id,
            recipient_label=payload.recipient_label.strip(),
            amount=payload.amount,
            transfer_type=payload.transfer_type,
            description=payload.description,
            automated=payload.automated,
            originating_device_id=payload.originating_device_id,
            requested_at=self.clock(),
        )

    def history_facts(
        self,
        user_id: str,
        requested_at: datetime,
        config: RiskModelConfig,
    ) -> HistoryFacts:
        """Snapshot the requester's history for feature extraction."""
        return HistoryFacts(
            recent_transaction_count=self.store.count_transactions_in_window(
                user_id,
                window=timedelta(minutes=config.frequency_window_minutes),
                now=requested_at,
            ),
            known_recipients=frozenset(self.store.get_known_recipients(user_id)),
            recent_recipients=tuple(
                self.store.get_recent_recipients(user_id, config.recent_recipients_count)
            ),
        )

    # -- operations ---------------------------------------------------------

    def screen(self, payload: TransactionCreate) -> Decision:
        """Evaluate a transfer against current state without committing it."""
        account = self._validate(payload)
        request = self._to_request(payload)
        engine = self.engine
        history = self.history_facts(account.user_id, request.requested_at, engine.config)
        decision, _ = engine.evaluate(request, account.policy_snapshot(), history)
        return decision

    def create_transaction(self, payload: TransactionCreate) -> TransactionResult:
        """Evaluate a transfer, persist it with its decision, and apply it if allowed."""
        owner = self._validate(payload)
        engine = self.engine
        config = engine.config

        with self._user_lock(owner.user_id):
            request = self._to_request(payload)
            account = self.store.get_account(request.source_account_id)
            if account is None:
                raise AccountNotFound(request.source_account_id)

            history = self.history_facts(account.user_id, request.requested_at, config)
            decision, should_block = engine.evaluate(
                request, account.policy_snapshot(), history
            )

            transaction = StoredTransaction(
                transaction_id=str(uuid.uuid4()),
                user_id=account.user_id,
                source_account_id=request.source_account_id,
                destination_account_id=request.destination_account_id,
                recipient_label=request.recipient_label,
                transfer_type=request.transfer_type,
                amount=request.amount,
                currency=config.currency,
                status="BLOCKED" if should_block else "COMPLETED",
                timestamp=request.requested_at,
                description=request.description,
                decision=decision,
            )
            self.store.add_transaction(transaction)
            self._record_security_log(transaction, decision, should_block)

            if not should_block:
                self.store.adjust_balance(request.source_account_id, -request.amount)
                self.store.add_daily_spend(request.source_account_id, request.amount)
                if request.transfer_type == "internal" and request.destination_account_id:
                    self.store.adjust_balance(request.destination_account_id, request.amount)

        warning: Optional[str] = None
        if should_block:
            reason_summary = ", ".join(r.label for r in decision.block_reasons)
            warning = f"Transaction blocked. Reasons: {reason_summary}"
            logger.warning(
                "Blocked transfer %s from %s (%s, score=%.3f)",
                transaction.transaction_id,
                request.source_account_id,
                decision.threat_type,
                decision.risk_score,
            )
        else:
            logger.info(
                "Allowed transfer %s from %s (score=%.3f)",
                transaction.transaction_id,
                request.source_account_id,
                decision.risk_score,
            )

        return TransactionResult(transaction=transaction, blocked=should_block, warning=warning)

    def _record_security_log(
        self,
        transaction: StoredTransaction,
        decision: Decision,
        should_block: bool,
    ) -> None:
        """Write the audit entry; a failure here must not lose the decision."""
        kind = "Internal" if transaction.transfer_type == "internal" else "External"
        outcome = "blocked" if should_block else "allowed"
        details = (
            f"{kind} transfer of {_plain_amount(transaction.amount)} {transaction.currency} "
            f"to {transaction.recipient_label} {outcome}. Risk: {decision.risk_score}"
        )
        try:
            self.store.add_security_log(
                SecurityLogEntry(
                    log_id=str(uuid.uuid4()),
                    timestamp=transaction.timestamp,
                    transaction_id=transaction.transaction_id,
                    threat_type=decision.threat_type,
                    risk_score=decision.risk_score,
                    confidence=decision.confidence,
                    label=decision.label,
                    action_taken=decision.action_taken,
                    details=details,
                    block_reasons=list(decision.block_reasons),
                )
            )
        except Exception:
            logger.exception(
                "Failed to write security log for transaction %s",
                transaction.transaction_id,
            )

    def get_user_transactions(self, user_id: str) -> List[StoredTransaction]:
        return self.store.get_transactions(user_id)
