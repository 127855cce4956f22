from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .stats import as_series, mean, std_dev

VERY_HIGH_LEVEL = "very high"
HIGH_LEVEL = "high"
MODERATE_LEVEL = "moderate"
LOW_LEVEL = "low"
STABLE_LEVEL = "stable"

# (exclusive lower bound, level), checked top-down
VOLATILITY_LEVELS: Sequence[Tuple[float, str]] = (
    (30.0, VERY_HIGH_LEVEL),
    (20.0, HIGH_LEVEL),
    (10.0, MODERATE_LEVEL),
    (5.0, LOW_LEVEL),
)

Z_SCORES: Dict[float, float] = {
    0.99: 2.576,
    0.95: 1.96,
    0.90: 1.645,
}
DEFAULT_CONFIDENCE = 0.95
DEFAULT_Z_SCORE = 1.96


@dataclass
class VolatilityResult:
    volatility: float = 0.0
    level: str = STABLE_LEVEL
    std_dev: float = 0.0
    mean: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ConfidenceInterval:
    upper: List[float] = field(default_factory=list)
    lower: List[float] = field(default_factory=list)
    std_dev: float = 0.0
    margin: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def volatility_level(volatility: float) -> str:
    for bound, level in VOLATILITY_LEVELS:
        if volatility > bound:
            return level
    return STABLE_LEVEL


def calculate_volatility(series: Optional[Iterable[float]]) -> VolatilityResult:
    """Coefficient of variation (population std / mean) as a percentage."""
    data = as_series(series)
    if len(data) < 2:
        return VolatilityResult()

    avg = mean(data)
    spread = std_dev(data, ddof=0)
    volatility = spread / avg * 100 if avg > 0 else 0.0
    return VolatilityResult(volatility=volatility, level=volatility_level(volatility), std_dev=spread, mean=avg)


def z_score(confidence: float) -> float:
    for level, score in Z_SCORES.items():
        if math.isclose(confidence, level):
            return score
    return DEFAULT_Z_SCORE


def calculate_confidence_intervals(
    historical: Optional[Iterable[float]],
    forecast: Optional[Iterable[float]],
    confidence: float = DEFAULT_CONFIDENCE,
) -> ConfidenceInterval:
    history = as_series(historical)
    projected = as_series(forecast)
    if len(history) < 2:
        return ConfidenceInterval(upper=list(projected), lower=list(projected))

    spread = std_dev(history, ddof=1)
    z = z_score(confidence)
    n = len(history)

    upper: List[float] = []
    lower: List[float] = []
    for step, value in enumerate(projected):
        # widens with the forecast horizon
        margin = spread * z * math.sqrt(1 + (step + 1) / n)
        upper.append(value + margin)
        lower.append(max(0.0, value - margin))

    return ConfidenceInterval(upper=upper, lower=lower, std_dev=spread, margin=spread * z)
