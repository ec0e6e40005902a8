"""Flatten a QuickBooks-style Profit & Loss report into per-line monthly series.

This is the only module that knows the nested report shape. Everything
downstream consumes :class:`MonthlySeries`.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
import logging
import math
import re
from typing import Any

from driverlens.core.errors import InputShapeError
from driverlens.models.enums import Category
from driverlens.models.series import MonthlySeries, ParsedReport


logger = logging.getLogger("driverlens.normalizer")

SECTION_GROUPS = {"Income": Category.revenue, "Expenses": Category.expense}
TOTAL_COLUMN = "Total"
MIN_LINE_TOTAL = 1.0

_AMOUNT_NOISE = re.compile(r"[,$\s()]")


@dataclass(frozen=True)
class _LeafLine:
    name: str
    account_id: str | None
    category: Category
    values: tuple[float, ...]


def parse_amount(raw: Any) -> float:
    if raw is None:
        return 0.0
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        value = float(raw)
        return value if math.isfinite(value) else 0.0
    text = str(raw).strip()
    if not text or text == "-":
        return 0.0
    negative = "(" in text or text.startswith("-")
    cleaned = _AMOUNT_NOISE.sub("", text).lstrip("-")
    try:
        amount = float(cleaned)
    except ValueError:
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return -amount if negative else amount


def _parse_header_date(raw: Any) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        logger.warning("Ignoring unparseable report period date %r.", raw)
        return None


def _month_columns(report: Mapping[str, Any]) -> list[tuple[int, str]]:
    columns = (report.get("Columns") or {}).get("Column")
    if not isinstance(columns, list) or len(columns) < 2:
        raise InputShapeError("Report must declare an account column followed by at least one month column.")
    month_columns: list[tuple[int, str]] = []
    for index, column in enumerate(columns):
        if index == 0:
            continue
        title = str((column or {}).get("ColTitle", "")).strip()
        if title == TOTAL_COLUMN or not title:
            continue
        month_columns.append((index, title))
    if not month_columns:
        raise InputShapeError("Report has no month columns.")
    return month_columns


def _leaf_from_row(
    row: Mapping[str, Any],
    month_columns: list[tuple[int, str]],
    category: Category,
) -> _LeafLine | None:
    col_data = row.get("ColData")
    if not isinstance(col_data, list) or not col_data:
        return None
    label = col_data[0] or {}
    name = str(label.get("value") or "").strip()
    if not name:
        return None
    values = []
    for index, _ in month_columns:
        cell = col_data[index] if index < len(col_data) else None
        values.append(parse_amount((cell or {}).get("value")))
    account_id = label.get("id")
    return _LeafLine(
        name=name,
        account_id=str(account_id) if account_id is not None else None,
        category=category,
        values=tuple(values),
    )


def _collect_leaves(
    rows: Sequence[Any],
    month_columns: list[tuple[int, str]],
    section: Category,
    out: list[_LeafLine],
) -> None:
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        row_section = SECTION_GROUPS.get(row.get("group"), section)
        if row.get("type") == "Data":
            leaf = _leaf_from_row(row, month_columns, row_section)
            if leaf is not None:
                out.append(leaf)
        nested = (row.get("Rows") or {}).get("Row")
        if isinstance(nested, list):
            _collect_leaves(nested, month_columns, row_section, out)


def _category_totals(leaves: list[_LeafLine], category: Category, month_count: int) -> tuple[float, ...]:
    totals = [0.0] * month_count
    for leaf in leaves:
        if leaf.category != category:
            continue
        for index, value in enumerate(leaf.values):
            totals[index] += value
    return tuple(totals)


def _build_report(
    months: tuple[str, ...],
    leaves: list[_LeafLine],
    *,
    period_start: date | None = None,
    period_end: date | None = None,
    currency: str | None = None,
    report_basis: str | None = None,
) -> ParsedReport:
    month_count = len(months)
    totals = {
        Category.revenue: _category_totals(leaves, Category.revenue, month_count),
        Category.expense: _category_totals(leaves, Category.expense, month_count),
    }

    series: list[MonthlySeries] = []
    skipped: list[str] = []
    for leaf in leaves:
        business_totals = totals[leaf.category]
        if abs(sum(leaf.values)) < MIN_LINE_TOTAL or all(value == 0 for value in business_totals):
            skipped.append(leaf.name)
            continue
        series.append(
            MonthlySeries(
                name=leaf.name,
                account_id=leaf.account_id,
                category=leaf.category,
                months=months,
                values=leaf.values,
                business_totals=business_totals,
            )
        )

    if skipped:
        logger.info("Dropped %d signal-free lines: %s", len(skipped), ", ".join(skipped))
    return ParsedReport(
        months=months,
        series=tuple(series),
        revenue_totals=totals[Category.revenue],
        expense_totals=totals[Category.expense],
        period_start=period_start,
        period_end=period_end,
        currency=currency,
        report_basis=report_basis,
        skipped_lines=tuple(skipped),
    )


def normalize_report(report: Mapping[str, Any]) -> ParsedReport:
    if not isinstance(report, Mapping):
        raise InputShapeError("Report must be a mapping.")
    month_columns = _month_columns(report)
    rows = (report.get("Rows") or {}).get("Row")
    if not isinstance(rows, list):
        raise InputShapeError("Report has no Rows.Row list.")

    leaves: list[_LeafLine] = []
    _collect_leaves(rows, month_columns, Category.revenue, leaves)

    header = report.get("Header") or {}
    months = tuple(title for _, title in month_columns)
    parsed = _build_report(
        months,
        leaves,
        period_start=_parse_header_date(header.get("StartPeriod")),
        period_end=_parse_header_date(header.get("EndPeriod")),
        currency=header.get("Currency"),
        report_basis=header.get("ReportBasis"),
    )
    logger.info(
        "Normalized report: %d months, %d revenue lines, %d expense lines.",
        len(months),
        len(parsed.series_for(Category.revenue)),
        len(parsed.series_for(Category.expense)),
    )
    return parsed


def series_from_mapping(
    months: Sequence[str],
    *,
    revenue: Mapping[str, Sequence[float]] | None = None,
    expenses: Mapping[str, Sequence[float]] | None = None,
) -> ParsedReport:
    month_axis = tuple(months)
    if not month_axis:
        raise InputShapeError("At least one month is required.")
    leaves: list[_LeafLine] = []
    for category, lines in ((Category.revenue, revenue or {}), (Category.expense, expenses or {})):
        for name, values in lines.items():
            if len(values) != len(month_axis):
                raise InputShapeError(
                    f"Line '{name}' has {len(values)} values for {len(month_axis)} months."
                )
            leaves.append(
                _LeafLine(name=name, account_id=None, category=category, values=tuple(float(v) for v in values))
            )
    return _build_report(month_axis, leaves)
