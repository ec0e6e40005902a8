from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math
from statistics import median


@dataclass(frozen=True)
class RegressionFit:
    slope: float
    intercept: float
    r_squared: float


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def population_std(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    center = mean(values)
    variance = sum((value - center) ** 2 for value in values) / len(values)
    return math.sqrt(variance) if variance > 0 else 0.0


def linear_regression(series: Sequence[float]) -> RegressionFit:
    """OLS fit of ``series`` against its zero-based index.

    R² is 0 when the series has no variance: a flat line carries no trend.
    """
    n = len(series)
    if n == 0:
        return RegressionFit(slope=0.0, intercept=0.0, r_squared=0.0)
    if n == 1:
        return RegressionFit(slope=0.0, intercept=float(series[0]), r_squared=0.0)
    x_sum = float(sum(range(n)))
    y_sum = float(sum(series))
    xx_sum = float(sum(index * index for index in range(n)))
    xy_sum = float(sum(index * series[index] for index in range(n)))
    denom = n * xx_sum - x_sum * x_sum
    if denom == 0:
        return RegressionFit(slope=0.0, intercept=y_sum / n, r_squared=0.0)
    slope = (n * xy_sum - x_sum * y_sum) / denom
    intercept = (y_sum - slope * x_sum) / n

    y_mean = y_sum / n
    ss_tot = sum((value - y_mean) ** 2 for value in series)
    ss_res = sum((value - (slope * index + intercept)) ** 2 for index, value in enumerate(series))
    r_squared = 0.0 if ss_tot == 0 else 1.0 - (ss_res / ss_tot)
    return RegressionFit(slope=slope, intercept=intercept, r_squared=r_squared)


def percentile(values: Sequence[float], rank: float) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    position = (rank / 100.0) * (len(ordered) - 1)
    lower = math.floor(position)
    upper = math.ceil(position)
    weight = position - lower
    return ordered[lower] * (1.0 - weight) + ordered[upper] * weight


def compound_annual_growth(values: Sequence[float], *, min_months: int) -> float | None:
    """CAGR from the first non-zero value to the last value.

    Returns ``None`` when growth is undefined: too few months or no non-zero value.
    """
    if len(values) < min_months:
        return None
    first = next((value for value in values if value != 0), 0.0)
    if first == 0:
        return None
    years = len(values) / 12.0
    ratio = abs(values[-1]) / abs(first)
    if ratio == 0:
        return -1.0
    return ratio ** (1.0 / years) - 1.0


def monthly_rate_from_annual(annual_rate: float) -> float:
    if annual_rate <= -1.0:
        return -1.0
    return (1.0 + annual_rate) ** (1.0 / 12.0) - 1.0


def median_or_zero(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return float(median(values))
