"""Threat classification and behavioral block reasons.

Classification is an ordered table of (predicate, threat type) pairs,
evaluated top to bottom; the first match wins and the last entry always
matches. It is only consulted when the risk score exceeds the threshold.

Behavioral reasons are collected separately: every signal above its own
trigger contributes a reason, not just the one that named the threat.
"""

from typing import Callable

from riskguard.models import BlockReason, TransactionFeatures

NO_THREAT = "none"

Predicate = Callable[[TransactionFeatures], bool]

THREAT_PATTERNS: list[tuple[Predicate, str]] = [
    (
        lambda f: f.automated_behavior_risk > 0.7 and f.frequency_risk > 0.5,
        "automated-ransomware-pattern",
    ),
    (lambda f: f.repetitive_pattern_risk > 0.7, "repetitive-actions-pattern"),
    (
        lambda f: f.amount_risk > 0.8 and f.new_recipient_risk > 0.3,
        "high-value-suspicious-transfer",
    ),
    (lambda f: f.frequency_risk > 0.7, "rapid-fire-exfiltration"),
    (lambda f: f.amount_risk > 0.5, "unusual-amount-pattern"),
    (lambda f: True, "general-suspicious-activity"),
]

BEHAVIORAL_SIGNALS: list[tuple[Predicate, BlockReason]] = [
    (
        lambda f: f.automated_behavior_risk > 0.7,
        BlockReason(
            category="behavioral",
            code="AUTOMATED_BEHAVIOR",
            label="Automated Transaction Behavior",
            description=(
                "Transaction appears to be initiated by automated software, "
                "not a human user"
            ),
        ),
    ),
    (
        lambda f: f.frequency_risk > 0.5,
        BlockReason(
            category="behavioral",
            code="UNUSUAL_FREQUENCY",
            label="Unusual Transaction Frequency",
            description=(
                "Multiple transactions detected in a short time window, "
                "potential burst attack"
            ),
        ),
    ),
    (
        lambda f: f.amount_risk > 0.5,
        BlockReason(
            category="behavioral",
            code="SUDDEN_HIGH_VALUE",
            label="Sudden High-Value Transfer",
            description="Transaction amount significantly exceeds normal spending patterns",
        ),
    ),
    (
        lambda f: f.repetitive_pattern_risk > 0.4,
        BlockReason(
            category="behavioral",
            code="REPETITIVE_PATTERN",
            label="Repetitive Actions Pattern",
            description=(
                "Same recipient targeted repeatedly in a short period, "
                "possible automated drain"
            ),
        ),
    ),
    (
        lambda f: f.new_recipient_risk > 0.3,
        BlockReason(
            category="behavioral",
            code="NEW_RECIPIENT",
            label="Unknown Recipient",
            description="First-time recipient combined with other risk factors",
        ),
    ),
]


def classify_threat(
    features: TransactionFeatures,
    risk_score: float,
    threshold: float,
) -> str:
    """Name the threat for a score above the threshold, else "none"."""
    if risk_score <= threshold:
        return NO_THREAT

    for predicate, threat_type in THREAT_PATTERNS:
        if predicate(features):
            return threat_type
    return NO_THREAT  # unreachable while the catch-all row is last


def collect_behavioral_reasons(features: TransactionFeatures) -> list[BlockReason]:
    """Every behavioral signal that is over its trigger, in table order."""
    return [reason for predicate, reason in BEHAVIORAL_SIGNALS if predicate(features)]
