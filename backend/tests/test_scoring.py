from concurrent.futures import ThreadPoolExecutor

import pytest

from driverlens.core.errors import ConfigurationError, InputShapeError
from driverlens.models.criteria import ScoringConfig
from driverlens.models.series import MonthlySeries
from driverlens.services.normalizer import normalize_report
from driverlens.services.sample_report import build_sample_report
from driverlens.services.scoring import (
    composite_score,
    data_quality_score,
    growth_impact_score,
    growth_rate,
    materiality_score,
    predictability_score,
    score_batch,
    score_series,
    variability_score,
)


def _series(name: str, values: list[float], months: tuple[str, ...] | None = None) -> MonthlySeries:
    axis = months or tuple(f"M{index + 1:02d}" for index in range(len(values)))
    return MonthlySeries(
        name=name,
        category="expense",
        months=axis,
        values=tuple(values),
        business_totals=tuple(value * 4 for value in values),
    )


def test_materiality_is_share_of_category_total() -> None:
    assert materiality_score(50_000, 500_000) == pytest.approx(0.10)
    assert materiality_score(-50_000, 500_000) == pytest.approx(0.10)


def test_materiality_with_zero_business_total_is_zero() -> None:
    assert materiality_score(1_000, 0) == 0.0


@pytest.mark.parametrize("line_totals", [(1_000, 5_000, 20_000, 100_000, 900_000)])
def test_materiality_is_monotonic(line_totals) -> None:
    scores = [materiality_score(total, 500_000) for total in line_totals]
    assert scores == sorted(scores)
    assert scores[-1] == 1.0


def test_variability_uses_population_coefficient_of_variation() -> None:
    # population stddev 73.951, mean 4012.5, CV 0.01843
    assert variability_score([4000, 4100, 3900, 4050]) == pytest.approx(0.003686, abs=1e-5)


def test_variability_needs_three_non_zero_points() -> None:
    assert variability_score([0, 0, 100, 200]) == 0.0


def test_variability_is_capped() -> None:
    values = [0.0] * 30 + [10_000.0, 1.0, 1.0]
    assert variability_score(values) <= 1.0


def test_constant_series_scores_zero_on_shape_components() -> None:
    values = [2_500.0] * 12
    assert variability_score(values) == 0.0
    assert predictability_score(values) == 0.0
    assert growth_rate(values) == 0.0
    assert growth_impact_score(values) == 0.0


def test_predictability_needs_three_points() -> None:
    assert predictability_score([1.0, 2.0]) == 0.0
    assert predictability_score([1.0, 2.0, 3.0, 4.0]) == pytest.approx(1.0)


def test_growth_over_eighteen_months() -> None:
    values = [10_000 + 5_000 * index / 17 for index in range(18)]
    assert growth_rate(values) == pytest.approx(1.5 ** (1 / 1.5) - 1)
    assert growth_rate(values) == pytest.approx(0.3104, abs=1e-4)
    assert growth_impact_score(values) == 1.0


def test_growth_needs_six_months() -> None:
    values = [100.0, 200.0, 300.0, 400.0, 500.0]
    assert growth_impact_score(values) == 0.0
    assert growth_rate(values) == 0.0


def test_data_quality_counts_non_zero_months() -> None:
    values = [1.0, 0, 2.0, 3.0, 0, 4.0, 5.0, 0, 6.0, 7.0, 0, 8.0]
    assert data_quality_score(values) == pytest.approx(8 / 12)


def test_composite_is_weighted_sum() -> None:
    config = ScoringConfig(
        materiality=0.5,
        variability=0.1,
        predictability=0.1,
        growth_impact=0.2,
        data_quality=0.1,
    )
    composite = composite_score(
        materiality=0.4,
        variability=0.2,
        predictability=0.9,
        growth_impact=0.5,
        data_quality=1.0,
        config=config,
    )
    assert composite == pytest.approx(0.4 * 0.5 + 0.2 * 0.1 + 0.9 * 0.1 + 0.5 * 0.2 + 1.0 * 0.1)


@pytest.mark.parametrize(
    "weights",
    [
        {"materiality": 0.4},
        {"materiality": -0.1, "variability": 0.6},
        {"data_quality": float("nan")},
    ],
)
def test_scoring_config_rejects_invalid_weights(weights) -> None:
    with pytest.raises(ConfigurationError):
        ScoringConfig(**weights)


def test_score_series_rejects_empty_series() -> None:
    with pytest.raises(InputShapeError):
        score_series(_series("Empty", []))


def test_score_batch_rejects_mismatched_axes() -> None:
    left = _series("A", [1.0, 2.0, 3.0])
    right = _series("B", [1.0, 2.0, 3.0], months=("Jan", "Feb", "Mar"))
    with pytest.raises(InputShapeError):
        score_batch([left, right])


def test_score_batch_rejects_empty_batch() -> None:
    with pytest.raises(InputShapeError):
        score_batch([])


def test_score_batch_in_parallel_matches_sequential() -> None:
    report = normalize_report(build_sample_report(months=18))
    sequential = score_batch(report.series)
    parallel = score_batch(report.series, max_workers=4)
    assert parallel == sequential


def test_scores_stay_in_unit_interval() -> None:
    report = normalize_report(build_sample_report(months=18))
    with ThreadPoolExecutor(max_workers=2) as pool:
        scores = list(pool.map(score_series, report.series))
    for score in scores:
        for value in list(score.components().values()) + [score.composite]:
            assert 0.0 <= value <= 1.0
