"""Behavioral feature extraction.

Turns a pending transfer plus the requester's history facts into five
normalized risk signals. Every step function is pure: the same inputs
always give the same feature values.

The amount steps are absolute and currency-agnostic. They are a policy
knob carried in RiskModelConfig, not a property of any currency.
"""

from typing import Iterable, Sequence

from riskguard.models import (
    HistoryFacts,
    RiskModelConfig,
    TransactionFeatures,
    TransactionRequest,
)

KNOWN_RECIPIENT_RISK = 0.05
NEW_RECIPIENT_RISK = 0.5
AUTOMATED_RISK = 0.9


def _step(value: float, steps: Iterable[tuple[float, float]], base: float) -> float:
    """Return the risk of the highest step whose minimum `value` reaches."""
    for minimum, risk in sorted(steps, reverse=True):
        if value >= minimum:
            return risk
    return base


def amount_risk(amount: float, config: RiskModelConfig) -> float:
    return _step(amount, config.amount_steps, config.amount_base_risk)


def frequency_risk(recent_count: int, config: RiskModelConfig) -> float:
    return _step(recent_count, config.frequency_steps, config.frequency_base_risk)


def new_recipient_risk(recipient: str, known_recipients: frozenset[str]) -> float:
    if recipient in known_recipients:
        return KNOWN_RECIPIENT_RISK
    return NEW_RECIPIENT_RISK


def automated_behavior_risk(automated: bool) -> float:
    return AUTOMATED_RISK if automated else 0.0


def repetitive_pattern_risk(recipient: str, recent_recipients: Sequence[str]) -> float:
    """Score how often the recipient shows up among the latest successful transfers."""
    same_count = sum(1 for r in recent_recipients if r == recipient)
    if same_count >= 3:
        return 0.85
    if same_count >= 2:
        return 0.5
    return 0.05


def extract_features(
    request: TransactionRequest,
    history: HistoryFacts,
    config: RiskModelConfig,
) -> TransactionFeatures:
    """Derive the full feature vector for one transfer."""
    recent = history.recent_recipients[: config.recent_recipients_count]
    return TransactionFeatures(
        amount_risk=amount_risk(request.amount, config),
        frequency_risk=frequency_risk(history.recent_transaction_count, config),
        new_recipient_risk=new_recipient_risk(
            request.recipient_label, history.known_recipients
        ),
        automated_behavior_risk=automated_behavior_risk(request.automated),
        repetitive_pattern_risk=repetitive_pattern_risk(request.recipient_label, recent),
    )
