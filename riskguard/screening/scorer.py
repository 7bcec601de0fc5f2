"""Risk score and confidence computation.

The "model" is a fixed linear weighting of the feature vector:

    risk_score = clamp01(sum(feature_i * weight_i))

Confidence measures how tightly the features agree with the score:

    confidence = clamp(1 - variance(features around risk_score), 0.5, 1.0)

A vector with one extreme feature and the rest near zero is split, so
confidence drops; it never goes below 0.5.
"""

from riskguard.models import FeatureWeights, TransactionFeatures

MIN_CONFIDENCE = 0.5


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def compute_risk_score(features: TransactionFeatures, weights: FeatureWeights) -> float:
    """Weighted sum of the features, clamped to [0, 1]."""
    feature_values = features.model_dump()
    weighted = sum(
        feature_values[name] * weight
        for name, weight in weights.model_dump().items()
    )
    return _clamp(weighted, 0.0, 1.0)


def compute_confidence(features: TransactionFeatures, risk_score: float) -> float:
    """1 minus the mean squared distance of the features from the score."""
    values = list(features.model_dump().values())
    variance = sum((v - risk_score) ** 2 for v in values) / len(values)
    return _clamp(1 - variance, MIN_CONFIDENCE, 1.0)
