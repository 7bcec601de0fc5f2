"""Shared fixtures for the test suite."""

import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient

from riskguard.main import app
from riskguard.models import (
    Account,
    AccountPolicyState,
    Decision,
    HistoryFacts,
    RiskModelConfig,
    StoredTransaction,
    TransactionCreate,
    TransactionFeatures,
    TransactionRequest,
)
from riskguard.screening.engine import DecisionEngine
from riskguard.services.transactions import TransactionService
from riskguard.storage.memory import MemoryStore

# 09:15 UTC is 15:15 bank time, outside the suspicious hours
DAYTIME = "2026-02-07T09:15:00Z"
# 20:10 UTC is 02:10 bank time
NIGHTTIME = "2026-02-07T20:10:00Z"


def ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def config():
    return RiskModelConfig()


@pytest.fixture
def engine(config):
    return DecisionEngine(config=config)


@pytest.fixture
def store():
    store = MemoryStore()
    store.add_account(make_account())
    store.add_account(make_account(
        account_id="acc-savings-001",
        account_type="savings",
        label="Savings",
        balance=8_420_000,
        daily_spend_limit=1_000_000,
        per_transaction_limit=15_000_000,
    ))
    return store


class SettableClock:
    """Stands in for the service clock; tests move it with set()."""

    def __init__(self, value: str = DAYTIME) -> None:
        self.now = ts(value)

    def __call__(self) -> datetime:
        return self.now

    def set(self, value: str) -> None:
        self.now = ts(value)


@pytest.fixture
def clock():
    return SettableClock()


@pytest.fixture
def service(store, engine, clock):
    return TransactionService(store=store, engine=engine, clock=clock)


@pytest.fixture
def client(clock):
    with TestClient(app) as c:
        app.state.service.clock = clock
        yield c


def make_account(
    account_id="acc-checking-001",
    user_id="user-001",
    account_type="checking",
    label="Primary Checking",
    balance=2_750_000,
    daily_spend_limit=2_000_000,
    amount_spent_today=0,
    per_transaction_limit=5_000_000,
    trusted_device_id="device-main-001",
) -> Account:
    return Account(
        account_id=account_id,
        user_id=user_id,
        account_type=account_type,
        label=label,
        balance=balance,
        daily_spend_limit=daily_spend_limit,
        amount_spent_today=amount_spent_today,
        per_transaction_limit=per_transaction_limit,
        trusted_device_id=trusted_device_id,
    )


def make_snapshot(**overrides) -> AccountPolicyState:
    return make_account(**overrides).policy_snapshot()


def make_request(
    recipient="Almaty Electric Co.",
    amount=15_200.0,
    automated=False,
    device_id=None,
    timestamp=DAYTIME,
    account_id="acc-checking-001",
    transfer_type="external",
    destination=None,
) -> TransactionRequest:
    return TransactionRequest(
        source_account_id=account_id,
        destination_account_id=destination,
        recipient_label=recipient,
        amount=amount,
        transfer_type=transfer_type,
        automated=automated,
        originating_device_id=device_id,
        requested_at=ts(timestamp),
    )


def make_payload(
    recipient="Almaty Electric Co.",
    amount=15_200.0,
    automated=False,
    device_id=None,
    account_id="acc-checking-001",
    transfer_type="external",
    destination=None,
) -> TransactionCreate:
    return TransactionCreate(
        source_account_id=account_id,
        destination_account_id=destination,
        recipient_label=recipient,
        amount=amount,
        transfer_type=transfer_type,
        automated=automated,
        originating_device_id=device_id,
    )


def make_history(count=0, known=(), recent=()) -> HistoryFacts:
    return HistoryFacts(
        recent_transaction_count=count,
        known_recipients=frozenset(known),
        recent_recipients=tuple(recent),
    )


def make_features(
    amount=0.1,
    frequency=0.05,
    new_recipient=0.05,
    automated=0.0,
    repetitive=0.05,
) -> TransactionFeatures:
    return TransactionFeatures(
        amount_risk=amount,
        frequency_risk=frequency,
        new_recipient_risk=new_recipient,
        automated_behavior_risk=automated,
        repetitive_pattern_risk=repetitive,
    )


def make_stored(
    recipient="Someone",
    status="COMPLETED",
    timestamp=DAYTIME,
    tx_id="test-id",
    user_id="user-001",
    amount=1_000.0,
) -> StoredTransaction:
    return StoredTransaction(
        transaction_id=tx_id,
        user_id=user_id,
        source_account_id="acc-checking-001",
        recipient_label=recipient,
        transfer_type="external",
        amount=amount,
        currency="KZT",
        status=status,
        timestamp=ts(timestamp),
        decision=Decision(
            risk_score=0.05,
            confidence=0.99,
            label="benign" if status == "COMPLETED" else "suspicious",
            threat_type="none",
            action_taken="ALLOWED" if status == "COMPLETED" else "BLOCKED",
            features=make_features(),
            model_version="1.0.0",
        ),
    )
