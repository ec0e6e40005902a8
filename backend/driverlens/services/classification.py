from __future__ import annotations

from collections.abc import Sequence
import math

from driverlens.core.errors import InputShapeError
from driverlens.models.drivers import DriverScore
from driverlens.models.enums import Category, Classification, Trend
from driverlens.models.series import MonthlySeries


RECURRING_VARIABILITY_CEILING = 0.2
VARIABLE_COST_CORRELATION = 0.7
TREND_BAND = 0.05


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    if len(x) != len(y):
        raise InputShapeError(f"Cannot correlate series of length {len(x)} and {len(y)}.")
    if not x:
        return 0.0
    mean_x = sum(x) / len(x)
    mean_y = sum(y) / len(y)
    numerator = 0.0
    denom_x = 0.0
    denom_y = 0.0
    for x_value, y_value in zip(x, y):
        diff_x = x_value - mean_x
        diff_y = y_value - mean_y
        numerator += diff_x * diff_y
        denom_x += diff_x * diff_x
        denom_y += diff_y * diff_y
    denominator = math.sqrt(denom_x * denom_y)
    if denominator == 0:
        return 0.0
    corr = numerator / denominator
    if not math.isfinite(corr):
        return 0.0
    return max(-1.0, min(1.0, corr))


def classify(category: Category, score: DriverScore, correlation_with_revenue: float) -> Classification:
    match Category(category):
        case Category.revenue:
            if score.variability < RECURRING_VARIABILITY_CEILING:
                return Classification.recurring_revenue
            return Classification.variable_revenue
        case Category.expense:
            if abs(correlation_with_revenue) > VARIABLE_COST_CORRELATION:
                return Classification.variable_cost
            return Classification.fixed_cost


def trend_for(annual_growth_rate: float) -> Trend:
    if annual_growth_rate > TREND_BAND:
        return Trend.growing
    if annual_growth_rate < -TREND_BAND:
        return Trend.declining
    return Trend.stable


def correlated_groups(series: Sequence[MonthlySeries], threshold: float) -> dict[str, tuple[str, ...]]:
    groups: dict[str, list[str]] = {row.name: [] for row in series}
    for index, left in enumerate(series):
        for right in series[index + 1 :]:
            if abs(pearson(left.values, right.values)) >= threshold:
                groups[left.name].append(right.name)
                groups[right.name].append(left.name)
    return {name: tuple(sorted(names)) for name, names in groups.items()}
