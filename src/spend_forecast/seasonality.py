"""Month-of-year seasonal indices for monthly aggregates keyed ``"YYYY-MM"``."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Mapping, Optional

from .stats import as_series, mean, std_dev

SEASONALITY_THRESHOLD = 0.15
MIN_SEASONAL_POINTS = 12
MONTHS_PER_YEAR = 12


@dataclass
class SeasonalityResult:
    has_seasonality: bool = False
    indices: Dict[int, float] = field(default_factory=dict)
    strength: float = 0.0
    monthly_averages: Dict[int, float] = field(default_factory=dict)
    overall_average: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def _calendar_month(key: str) -> Optional[int]:
    parts = str(key).split("-")
    if len(parts) < 2:
        return None
    try:
        month = int(parts[1])
    except ValueError:
        return None
    if 1 <= month <= MONTHS_PER_YEAR:
        return month
    return None


def detect_seasonality(monthly_data: Optional[Mapping[str, float]]) -> SeasonalityResult:
    if not monthly_data or len(monthly_data) < MIN_SEASONAL_POINTS:
        return SeasonalityResult()

    groups: Dict[int, List[float]] = defaultdict(list)
    for key, value in monthly_data.items():
        month = _calendar_month(key)
        values = as_series([value])
        if month is None or not values:
            continue
        groups[month].extend(values)

    monthly_averages = {month: mean(values) for month, values in sorted(groups.items())}
    # divided by 12 even when some calendar months are missing
    overall_average = sum(monthly_averages.values()) / MONTHS_PER_YEAR

    indices = {
        month: (average / overall_average if overall_average > 0 else 1.0)
        for month, average in monthly_averages.items()
    }

    index_values = list(indices.values())
    index_mean = mean(index_values)
    strength = std_dev(index_values) / index_mean if index_mean > 0 else 0.0

    return SeasonalityResult(
        has_seasonality=strength > SEASONALITY_THRESHOLD,
        indices=indices,
        strength=strength,
        monthly_averages=monthly_averages,
        overall_average=overall_average,
    )
