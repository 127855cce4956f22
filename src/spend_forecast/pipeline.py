from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional

import pandas as pd

from .models import (
    DEFAULT_ALPHA,
    DEFAULT_BETA,
    DEFAULT_PERIODS,
    DoubleSmoothingResult,
    RegressionForecast,
    SmoothingResult,
    double_exponential_smoothing,
    exponential_smoothing,
    linear_regression,
    regression_forecast,
)
from .stats import as_series, detect_outliers, mean
from .volatility import (
    DEFAULT_CONFIDENCE,
    LOW_LEVEL,
    STABLE_LEVEL,
    VERY_HIGH_LEVEL,
    ConfidenceInterval,
    VolatilityResult,
    calculate_confidence_intervals,
    calculate_volatility,
)

logger = logging.getLogger(__name__)

METHOD_EXPONENTIAL = "exponential"
METHOD_REGRESSION = "regression"
METHOD_DOUBLE_EXPONENTIAL = "double-exponential"
REGRESSION_R2_THRESHOLD = 0.7
MIN_FORECAST_POINTS = 3
SIMPLE_AVERAGE_WINDOW = 6


@dataclass
class ForecastConfig:
    horizon: int = DEFAULT_PERIODS
    alpha: float = DEFAULT_ALPHA
    beta: float = DEFAULT_BETA
    simple_window: int = SIMPLE_AVERAGE_WINDOW
    r2_threshold: float = REGRESSION_R2_THRESHOLD
    confidence: float = DEFAULT_CONFIDENCE
    min_points: int = MIN_FORECAST_POINTS


@dataclass
class BestForecast:
    method: str
    forecast: List[float]
    confidence: ConfidenceInterval


@dataclass
class DataQuality:
    r2: float
    volatility: float
    outlier_count: int


@dataclass
class ComprehensiveForecast:
    simple: SmoothingResult
    exponential: SmoothingResult
    double_exponential: DoubleSmoothingResult
    regression: RegressionForecast
    best: BestForecast
    volatility: VolatilityResult
    outliers: int
    data_quality: DataQuality

    def to_dict(self) -> dict:
        return asdict(self)


def select_method(regression_r2: float, volatility_level: str, r2_threshold: float = REGRESSION_R2_THRESHOLD) -> str:
    """Priority chain: a good linear fit wins, calm series get Holt, the rest flat smoothing."""
    if regression_r2 > r2_threshold and volatility_level != VERY_HIGH_LEVEL:
        return METHOD_REGRESSION
    if volatility_level in (LOW_LEVEL, STABLE_LEVEL):
        return METHOD_DOUBLE_EXPONENTIAL
    return METHOD_EXPONENTIAL


def comprehensive_forecast(
    historical: Optional[Iterable[float]],
    periods: Optional[int] = None,
    config: Optional[ForecastConfig] = None,
) -> Optional[ComprehensiveForecast]:
    if config is None:
        config = ForecastConfig()
    horizon = config.horizon if periods is None else periods

    history = as_series(historical)
    if len(history) < max(config.min_points, 1):
        return None

    outlier_result = detect_outliers(history)
    data = outlier_result.clean_data if len(outlier_result.clean_data) >= config.min_points else history

    window = min(config.simple_window, len(data))
    simple_average = mean(data[-window:]) if window > 0 else 0.0
    simple = SmoothingResult(smoothed=[], forecast=[simple_average] * horizon)

    exponential = exponential_smoothing(data, config.alpha, horizon)
    double_exponential = double_exponential_smoothing(data, config.alpha, config.beta, horizon)
    fit = linear_regression(data)
    regression = RegressionForecast(
        slope=fit.slope,
        intercept=fit.intercept,
        r2=fit.r2,
        forecast=regression_forecast(fit, len(data), horizon),
    )

    volatility = calculate_volatility(data)
    method = select_method(regression.r2, volatility.level, config.r2_threshold)
    chosen = {
        METHOD_REGRESSION: regression.forecast,
        METHOD_DOUBLE_EXPONENTIAL: double_exponential.forecast,
        METHOD_EXPONENTIAL: exponential.forecast,
    }[method]
    logger.debug(
        "Selected %s (r2=%.3f, volatility=%.1f%% %s, outliers=%d)",
        method,
        regression.r2,
        volatility.volatility,
        volatility.level,
        outlier_result.count,
    )

    confidence = calculate_confidence_intervals(data, chosen, config.confidence)

    return ComprehensiveForecast(
        simple=simple,
        exponential=exponential,
        double_exponential=double_exponential,
        regression=regression,
        best=BestForecast(method=method, forecast=list(chosen), confidence=confidence),
        volatility=volatility,
        outliers=outlier_result.count,
        data_quality=DataQuality(
            r2=regression.r2,
            volatility=volatility.volatility,
            outlier_count=outlier_result.count,
        ),
    )


FORECAST_COLUMNS = [
    "category",
    "ds",
    "simple",
    "exponential",
    "double_exponential",
    "regression",
    "selected_method",
    "selected_forecast",
    "lower",
    "upper",
]


def build_forecasts(monthly_df: pd.DataFrame, config: Optional[ForecastConfig] = None) -> pd.DataFrame:
    """Forecast every category of a monthly frame with ``category``, ``ds`` and ``y`` columns."""
    if config is None:
        config = ForecastConfig()
    records: list[dict] = []

    for category, group in monthly_df.groupby("category"):
        category_df = group.sort_values("ds").reset_index(drop=True)
        result = comprehensive_forecast(category_df["y"].to_list(), config=config)
        if result is None:
            logger.debug("Skipping %s: %d months of history", category, len(category_df))
            continue

        last_date = pd.Timestamp(category_df["ds"].iloc[-1])
        future_dates = [last_date + pd.DateOffset(months=i + 1) for i in range(config.horizon)]

        for idx, future_date in enumerate(future_dates):
            records.append(
                {
                    "category": category,
                    "ds": future_date,
                    "simple": result.simple.forecast[idx],
                    "exponential": result.exponential.forecast[idx],
                    "double_exponential": result.double_exponential.forecast[idx],
                    "regression": result.regression.forecast[idx],
                    "selected_method": result.best.method,
                    "selected_forecast": result.best.forecast[idx],
                    "lower": result.best.confidence.lower[idx],
                    "upper": result.best.confidence.upper[idx],
                }
            )

    return pd.DataFrame.from_records(records, columns=FORECAST_COLUMNS)
