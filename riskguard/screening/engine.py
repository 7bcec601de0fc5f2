"""Core decision orchestrator.

Evaluates one transfer in a fixed sequence:
  1. Feature extraction from the request and history facts
  2. Risk score and confidence
  3. Threat classification and behavioral reasons
  4. Policy rules against the account snapshot
  5. Merge: block if the score is over the threshold OR any rule fired

The engine is a pure function of its inputs. It keeps no state between
calls, never touches the store, and never mutates the snapshots it is
given, so the same inputs always give an identical Decision.
"""

import logging

from riskguard.models import (
    AccountPolicyState,
    BlockReason,
    Decision,
    HistoryFacts,
    RiskModelConfig,
    TransactionRequest,
)
from riskguard.screening.classifier import classify_threat, collect_behavioral_reasons
from riskguard.screening.features import extract_features
from riskguard.screening.policy import check_rules
from riskguard.screening.scorer import compute_confidence, compute_risk_score

logger = logging.getLogger(__name__)


def threat_type_from_code(code: str) -> str:
    """DAILY_LIMIT_EXCEEDED -> daily-limit-exceeded."""
    return code.lower().replace("_", "-")


class DecisionEngine:
    """Combines the behavioral model with policy rules into one decision."""

    def __init__(self, config: RiskModelConfig) -> None:
        self.config = config

    def exceeds_threshold(self, risk_score: float) -> bool:
        # Strict: a score equal to the threshold does not trigger
        return risk_score > self.config.risk_threshold

    def evaluate(
        self,
        request: TransactionRequest,
        account: AccountPolicyState,
        history: HistoryFacts,
    ) -> tuple[Decision, bool]:
        """Evaluate a transfer and return (decision, should_block)."""
        config = self.config

        features = extract_features(request, history, config)
        risk_score = compute_risk_score(features, config.weights)
        confidence = compute_confidence(features, risk_score)

        ai_triggered = self.exceeds_threshold(risk_score)
        threat_type = classify_threat(features, risk_score, config.risk_threshold)
        behavioral_reasons = collect_behavioral_reasons(features)

        policy_reasons: list[BlockReason] = []
        if config.rules_enabled:
            policy_reasons = check_rules(
                account=account,
                amount=request.amount,
                timestamp=request.requested_at,
                device_id=request.originating_device_id,
                config=config,
            )
        rule_triggered = bool(policy_reasons)

        should_block = ai_triggered or rule_triggered

        if not ai_triggered and rule_triggered:
            threat_type = threat_type_from_code(policy_reasons[0].code)

        block_reasons = behavioral_reasons + policy_reasons if should_block else []

        decision = Decision(
            risk_score=round(risk_score, 3),
            confidence=round(confidence, 3),
            label="suspicious" if should_block else "benign",
            threat_type=threat_type,
            action_taken="BLOCKED" if should_block else "ALLOWED",
            features=features,
            block_reasons=tuple(block_reasons),
            model_version=config.version,
        )

        logger.debug(
            "Evaluated transfer from %s: score=%.3f confidence=%.3f "
            "ai=%s rules=%d action=%s threat=%s",
            request.source_account_id,
            risk_score,
            confidence,
            ai_triggered,
            len(policy_reasons),
            decision.action_taken,
            threat_type,
        )
        return decision, should_block
