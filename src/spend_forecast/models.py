from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Iterable, List, Optional

import numpy as np

from .stats import as_series

DEFAULT_ALPHA = 0.3
DEFAULT_BETA = 0.1
DEFAULT_PERIODS = 6
DEFAULT_WINDOW = 3


@dataclass
class SmoothingResult:
    smoothed: List[float] = field(default_factory=list)
    forecast: List[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DoubleSmoothingResult(SmoothingResult):
    level: List[float] = field(default_factory=list)
    trend: List[float] = field(default_factory=list)


@dataclass
class RegressionResult:
    slope: float = 0.0
    intercept: float = 0.0
    r2: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RegressionForecast(RegressionResult):
    forecast: List[float] = field(default_factory=list)


def calculate_moving_average(series: Optional[Iterable[float]], window: int = DEFAULT_WINDOW) -> List[float]:
    data = as_series(series)
    if window < 1 or len(data) < window:
        return []
    return [sum(data[i - window + 1 : i + 1]) / window for i in range(window - 1, len(data))]


def exponential_smoothing(
    series: Optional[Iterable[float]],
    alpha: float = DEFAULT_ALPHA,
    periods: int = DEFAULT_PERIODS,
) -> SmoothingResult:
    data = as_series(series)
    if not data:
        return SmoothingResult()

    smoothed = [data[0]]
    for value in data[1:]:
        smoothed.append(alpha * value + (1 - alpha) * smoothed[-1])

    # flat forecast at the last smoothed value
    forecast = [smoothed[-1]] * max(periods, 0)
    return SmoothingResult(smoothed=smoothed, forecast=forecast)


def double_exponential_smoothing(
    series: Optional[Iterable[float]],
    alpha: float = DEFAULT_ALPHA,
    beta: float = DEFAULT_BETA,
    periods: int = DEFAULT_PERIODS,
) -> DoubleSmoothingResult:
    """Holt's linear method: smooth a level and a trend, extrapolate the trend.

    Forecast values are floored at zero since spending cannot be negative.
    """
    data = as_series(series)
    if len(data) < 2:
        return DoubleSmoothingResult()

    level = [data[0]]
    trend = [data[1] - data[0]]
    for value in data[1:]:
        new_level = alpha * value + (1 - alpha) * (level[-1] + trend[-1])
        new_trend = beta * (new_level - level[-1]) + (1 - beta) * trend[-1]
        level.append(new_level)
        trend.append(new_trend)

    last_level = level[-1]
    last_trend = trend[-1]
    forecast = [max(0.0, last_level + step * last_trend) for step in range(1, periods + 1)]
    return DoubleSmoothingResult(
        smoothed=list(level),
        forecast=forecast,
        level=level,
        trend=trend,
    )


def linear_regression(series: Optional[Iterable[float]]) -> RegressionResult:
    data = as_series(series)
    n = len(data)
    if n < 2:
        return RegressionResult()

    y = np.asarray(data, dtype=float)
    x = np.arange(n, dtype=float)
    sum_x = float(x.sum())
    sum_y = float(y.sum())
    sum_xy = float((x * y).sum())
    sum_xx = float((x * x).sum())

    denominator = n * sum_xx - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator != 0 else 0.0
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_total = float(((y - y_mean) ** 2).sum())
    ss_residual = float(((y - (slope * x + intercept)) ** 2).sum())
    r2 = 1 - ss_residual / ss_total if ss_total > 0 else 0.0

    return RegressionResult(slope=float(slope), intercept=float(intercept), r2=min(1.0, max(0.0, r2)))


def regression_forecast(regression: RegressionResult, n: int, periods: int = DEFAULT_PERIODS) -> List[float]:
    """Extend the fitted line past index ``n - 1``, floored at zero."""
    return [max(0.0, regression.slope * (n + step) + regression.intercept) for step in range(periods)]
