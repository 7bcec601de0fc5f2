"""Pydantic models for the transaction risk decision service."""

import math
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TransferType = Literal["internal", "external"]
AccountType = Literal["checking", "savings"]
ReasonCategory = Literal["behavioral", "policy"]


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so window and hour math is consistent."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Risk model configuration
# ---------------------------------------------------------------------------


class FeatureWeights(BaseModel):
    """Linear weights of the behavioral risk model. Must sum to 1.0."""
    amount_risk: float = Field(default=0.25, ge=0)
    frequency_risk: float = Field(default=0.25, ge=0)
    new_recipient_risk: float = Field(default=0.15, ge=0)
    automated_behavior_risk: float = Field(default=0.20, ge=0)
    repetitive_pattern_risk: float = Field(default=0.15, ge=0)

    @model_validator(mode="after")
    def _check_sum(self) -> "FeatureWeights":
        total = sum(self.model_dump().values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"feature weights must sum to 1.0, got {total:.6f}")
        return self


class RiskModelConfig(BaseModel):
    """Versioned, tunable table of weights and thresholds for the engine."""
    version: str = "1.0.0"
    weights: FeatureWeights = Field(default_factory=FeatureWeights)
    risk_threshold: float = Field(default=0.55, ge=0, le=1)

    # (minimum value, risk) steps, checked from the highest minimum down
    amount_steps: list[tuple[float, float]] = [
        (1_000_000, 0.95),
        (500_000, 0.6),
        (200_000, 0.3),
    ]
    amount_base_risk: float = 0.1
    frequency_steps: list[tuple[int, float]] = [(6, 0.95), (3, 0.7), (2, 0.3)]
    frequency_base_risk: float = 0.05
    frequency_window_minutes: int = Field(default=5, gt=0)
    recent_recipients_count: int = Field(default=5, gt=0)

    local_utc_offset_hours: int = Field(default=6, ge=-12, le=14)
    suspicious_hour_start: int = Field(default=0, ge=0, le=23)
    suspicious_hour_end: int = Field(default=6, ge=0, le=24)
    savings_withdrawal_ratio: float = Field(default=0.5, gt=0)

    rules_enabled: bool = True
    currency: str = "KZT"


# ---------------------------------------------------------------------------
# Engine inputs
# ---------------------------------------------------------------------------


class TransactionCreate(BaseModel):
    """Incoming transfer as submitted over HTTP. The server stamps the time."""
    source_account_id: str
    destination_account_id: Optional[str] = None
    recipient_label: str
    amount: float
    transfer_type: TransferType = "external"
    description: Optional[str] = None
    automated: bool = False
    originating_device_id: Optional[str] = None


class TransactionRequest(BaseModel):
    """A transfer as handed to the decision engine. Immutable."""
    model_config = ConfigDict(frozen=True)

    source_account_id: str
    destination_account_id: Optional[str] = None
    recipient_label: str
    amount: float
    transfer_type: TransferType
    description: Optional[str] = None
    automated: bool = False
    originating_device_id: Optional[str] = None
    requested_at: datetime

    @field_validator("requested_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class AccountPolicyState(BaseModel):
    """Read-only snapshot of the account state the policy rules look at."""
    model_config = ConfigDict(frozen=True)

    account_type: AccountType
    current_balance: float
    daily_spend_limit: float
    amount_spent_today: float
    per_transaction_limit: float
    trusted_device_id: Optional[str] = None


class HistoryFacts(BaseModel):
    """History-derived facts about the requester, taken from one snapshot."""
    model_config = ConfigDict(frozen=True)

    recent_transaction_count: int = 0
    known_recipients: frozenset[str] = frozenset()
    recent_recipients: tuple[str, ...] = ()  # newest first


# ---------------------------------------------------------------------------
# Engine outputs
# ---------------------------------------------------------------------------


class TransactionFeatures(BaseModel):
    """Normalized risk features, each clamped to [0, 1]."""
    model_config = ConfigDict(frozen=True)

    amount_risk: float
    frequency_risk: float
    new_recipient_risk: float
    automated_behavior_risk: float
    repetitive_pattern_risk: float

    @field_validator("*")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return min(1.0, max(0.0, value))


class BlockReason(BaseModel):
    """One explainable justification for blocking a transfer."""
    model_config = ConfigDict(frozen=True)

    category: ReasonCategory
    code: str
    label: str
    description: str


class Decision(BaseModel):
    """Outcome of evaluating one transfer. Attached to the stored record."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    risk_score: float
    confidence: float
    label: Literal["benign", "suspicious"]
    threat_type: str
    action_taken: Literal["ALLOWED", "BLOCKED"]
    features: TransactionFeatures
    block_reasons: tuple[BlockReason, ...] = ()
    model_version: str


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------


class Account(BaseModel):
    """An account as held by the store."""
    account_id: str
    user_id: str
    account_type: AccountType
    label: str
    account_number: str = ""
    balance: float
    daily_spend_limit: float
    amount_spent_today: float = 0
    per_transaction_limit: float
    trusted_device_id: Optional[str] = "device-main-001"

    def policy_snapshot(self) -> AccountPolicyState:
        return AccountPolicyState(
            account_type=self.account_type,
            current_balance=self.balance,
            daily_spend_limit=self.daily_spend_limit,
            amount_spent_today=self.amount_spent_today,
            per_transaction_limit=self.per_transaction_limit,
            trusted_device_id=self.trusted_device_id,
        )


class StoredTransaction(BaseModel):
    """A transfer persisted with its decision, blocked or not."""
    transaction_id: str
    user_id: str
    source_account_id: str
    destination_account_id: Optional[str] = None
    recipient_label: str
    transfer_type: TransferType
    amount: float
    currency: str
    status: Literal["COMPLETED", "BLOCKED"]
    timestamp: datetime
    description: Optional[str] = None
    decision: Decision

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class SecurityLogEntry(BaseModel):
    """Audit record written for every evaluated transfer."""
    log_id: str
    timestamp: datetime
    transaction_id: str
    threat_type: str
    risk_score: float
    confidence: float
    label: str
    action_taken: str
    details: str
    block_reasons: list[BlockReason]

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class TransactionResult(BaseModel):
    """Response for a submitted transfer."""
    transaction: StoredTransaction
    blocked: bool
    warning: Optional[str] = None


class SecurityStatus(BaseModel):
    """Aggregate view over the security log for one user."""
    overall_threat_level: Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
    total_transactions: int
    blocked_transactions: int
    safe_transactions: int
    recent_threats: int
    last_scan_time: datetime
    blocks_by_category: dict[str, int]
