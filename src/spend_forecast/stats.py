from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

OUTLIER_IQR_FACTOR = 1.5
MIN_OUTLIER_POINTS = 4
QUARTILE_LOWER = 0.25
QUARTILE_UPPER = 0.75


def _finite(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _finite_positions(values: Optional[Iterable[float]]) -> List[Tuple[int, float]]:
    if values is None:
        return []
    positions: List[Tuple[int, float]] = []
    for index, value in enumerate(values):
        number = _finite(value)
        if number is not None:
            positions.append((index, number))
    return positions


def as_series(values: Optional[Iterable[float]]) -> List[float]:
    """Copy ``values`` into a list of floats, dropping NaN and infinities."""
    return [number for _, number in _finite_positions(values)]


def mean(series: Sequence[float]) -> float:
    if len(series) == 0:
        return 0.0
    return float(np.mean(np.asarray(series, dtype=float)))


def variance(series: Sequence[float], ddof: int = 0) -> float:
    # ddof=0 is the population variance, ddof=1 the sample variance
    if len(series) - ddof <= 0:
        return 0.0
    return float(np.var(np.asarray(series, dtype=float), ddof=ddof))


def std_dev(series: Sequence[float], ddof: int = 0) -> float:
    return math.sqrt(variance(series, ddof))


def quartiles(series: Sequence[float]) -> Tuple[float, float]:
    """Lower-index quartiles: ``sorted[floor(n*0.25)]`` and ``sorted[floor(n*0.75)]``.

    No interpolation between neighbours is done.
    """
    ordered = sorted(series)
    if not ordered:
        return 0.0, 0.0
    n = len(ordered)
    q1 = ordered[int(math.floor(n * QUARTILE_LOWER))]
    q3 = ordered[int(math.floor(n * QUARTILE_UPPER))]
    return float(q1), float(q3)


@dataclass
class Outlier:
    index: int
    value: float


@dataclass
class OutlierResult:
    outliers: List[Outlier] = field(default_factory=list)
    clean_data: List[float] = field(default_factory=list)
    q1: Optional[float] = None
    q3: Optional[float] = None
    iqr: Optional[float] = None
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None

    @property
    def count(self) -> int:
        return len(self.outliers)

    def to_dict(self) -> dict:
        return asdict(self)


def detect_outliers(series: Optional[Iterable[float]]) -> OutlierResult:
    """IQR fences over the finite values; outlier indices are positions in ``series``."""
    positions = _finite_positions(series)
    data = [number for _, number in positions]
    if len(data) < MIN_OUTLIER_POINTS:
        return OutlierResult(outliers=[], clean_data=data)

    q1, q3 = quartiles(data)
    iqr = q3 - q1
    lower_bound = q1 - OUTLIER_IQR_FACTOR * iqr
    upper_bound = q3 + OUTLIER_IQR_FACTOR * iqr

    outliers: List[Outlier] = []
    clean_data: List[float] = []
    for index, value in positions:
        if value < lower_bound or value > upper_bound:
            outliers.append(Outlier(index=index, value=value))
        else:
            clean_data.append(value)

    return OutlierResult(
        outliers=outliers,
        clean_data=clean_data,
        q1=q1,
        q3=q3,
        iqr=iqr,
        lower_bound=lower_bound,
        upper_bound=upper_bound,
    )
