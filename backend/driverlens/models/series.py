from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import math

from driverlens.core.errors import InputShapeError
from driverlens.models.enums import Category


@dataclass(frozen=True)
class MonthlySeries:
    name: str
    category: Category
    months: tuple[str, ...]
    values: tuple[float, ...]
    business_totals: tuple[float, ...]
    account_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", Category(self.category))
        object.__setattr__(self, "months", tuple(self.months))
        object.__setattr__(self, "values", tuple(float(value) for value in self.values))
        object.__setattr__(self, "business_totals", tuple(float(value) for value in self.business_totals))
        if len(self.values) != len(self.months) or len(self.business_totals) != len(self.months):
            raise InputShapeError(
                f"Series '{self.name}' has {len(self.values)} values and {len(self.business_totals)} "
                f"business totals for {len(self.months)} months."
            )
        if any(not math.isfinite(value) for value in self.values + self.business_totals):
            raise InputShapeError(f"Series '{self.name}' contains non-finite values.")

    @property
    def month_count(self) -> int:
        return len(self.months)

    @property
    def total(self) -> float:
        return sum(self.values)

    @property
    def business_total(self) -> float:
        return sum(self.business_totals)


@dataclass(frozen=True)
class ParsedReport:
    months: tuple[str, ...]
    series: tuple[MonthlySeries, ...]
    revenue_totals: tuple[float, ...]
    expense_totals: tuple[float, ...]
    period_start: date | None = None
    period_end: date | None = None
    currency: str | None = None
    report_basis: str | None = None
    skipped_lines: tuple[str, ...] = field(default_factory=tuple)

    @property
    def net_income(self) -> tuple[float, ...]:
        return tuple(revenue - expense for revenue, expense in zip(self.revenue_totals, self.expense_totals))

    def series_for(self, category: Category) -> tuple[MonthlySeries, ...]:
        return tuple(row for row in self.series if row.category == category)
