"""Shared numeric helpers for risk score calculations."""

import math
from collections.abc import Iterable
from datetime import datetime, timedelta

from vendoriq.risk.types import RiskLevel

# Lower bounds of each risk band, highest first
RISK_LEVEL_THRESHOLDS: tuple[tuple[int, RiskLevel], ...] = (
    (80, RiskLevel.CRITICAL),
    (60, RiskLevel.HIGH),
    (40, RiskLevel.MEDIUM),
)

# Days until the next review, by lower bound of the score band
REVIEW_INTERVAL_DAYS: tuple[tuple[int, int], ...] = (
    (80, 30),
    (60, 90),
    (40, 180),
)
DEFAULT_REVIEW_INTERVAL_DAYS = 365


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties going up, e.g. 77.5 -> 78 and 0.125 -> 0.13.

    Python's built-in round() uses banker's rounding, which would turn a
    77.5 aggregate into 78 but 76.5 into 76.
    """
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def round_score(value: float) -> int:
    """Round and clamp a raw weighted sum into an integer score in [0, 100]."""
    return int(clamp(round_half_up(value)))


def score_to_risk_level(score: float) -> RiskLevel:
    """Map a numeric score onto its risk band.

    >= 80 critical, >= 60 high, >= 40 medium, otherwise low.
    """
    for threshold, level in RISK_LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.LOW


def next_review_date(score: float, now: datetime) -> datetime:
    """Next assessment due date for a score: 30/90/180/365 days out."""
    for threshold, days in REVIEW_INTERVAL_DAYS:
        if score >= threshold:
            return now + timedelta(days=days)
    return now + timedelta(days=DEFAULT_REVIEW_INTERVAL_DAYS)


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean, 0.0 for an empty input."""
    items = list(values)
    if not items:
        return 0.0
    return sum(items) / len(items)


def population_variance(values: list[float]) -> float:
    """Population variance (divides by n), 0.0 for an empty input."""
    if not values:
        return 0.0
    avg = mean(values)
    return sum((v - avg) ** 2 for v in values) / len(values)


def band_guidance(score: float) -> list[str]:
    """General guidance lines for a score band.

    Scores below 40 get no general guidance.
    """
    if score >= 80:
        return [
            "Immediate risk mitigation required",
            "Consider alternative vendors",
            "Implement additional monitoring",
        ]
    if score >= 60:
        return [
            "Regular risk monitoring",
            "Quarterly assessments",
            "Enhanced security controls",
        ]
    if score >= 40:
        return [
            "Annual risk assessment",
            "Standard security controls",
            "Regular vendor communication",
        ]
    return []


def dedupe(items: Iterable[str]) -> list[str]:
    """Remove duplicates, keeping first-seen order."""
    return list(dict.fromkeys(items))
