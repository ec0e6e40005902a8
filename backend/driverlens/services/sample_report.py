"""Deterministic synthetic Profit & Loss report in QuickBooks JSON shape."""
from __future__ import annotations

from datetime import date
from typing import Any


SEASONALITY = (0.6, 0.8, 1.4, 0.5, 1.9, 0.7, 1.2, 0.4, 1.6, 0.9, 1.3, 0.5)
MARKETING_PATTERN = (0.0, 3_000.0, 500.0, 8_000.0, 0.0, 1_200.0)
MISC_PATTERN = (120.0, 0.0, 340.0, 0.0, 2_150.0, 60.0, 0.0, 95.0)


def _month_starts(start: date, months: int) -> list[date]:
    out: list[date] = []
    year, month = start.year, start.month
    for _ in range(months):
        out.append(date(year, month, 1))
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return out


def _month_end(value: date) -> date:
    if value.month == 12:
        return date(value.year, 12, 31)
    return date.fromordinal(date(value.year, value.month + 1, 1).toordinal() - 1)


def _fmt(amount: float) -> str:
    return f"{amount:.2f}"


def _data_row(name: str, account_id: str, values: list[float]) -> dict[str, Any]:
    return {
        "type": "Data",
        "ColData": [{"value": name, "id": account_id}]
        + [{"value": _fmt(value)} for value in values]
        + [{"value": _fmt(sum(values))}],
    }


def _section(title: str, rows: list[dict[str, Any]], *, group: str | None = None) -> dict[str, Any]:
    section: dict[str, Any] = {
        "type": "Section",
        "Header": {"ColData": [{"value": title}]},
        "Rows": {"Row": rows},
    }
    if group is not None:
        section["group"] = group
    return section


def sample_lines(months: int = 18) -> tuple[dict[str, list[float]], dict[str, list[float]]]:
    subscriptions = [40_000.0 + 800.0 * index for index in range(months)]
    consulting = [12_000.0 * SEASONALITY[index % len(SEASONALITY)] for index in range(months)]
    interest = [45.0 for _ in range(months)]
    revenue_total = [a + b + c for a, b, c in zip(subscriptions, consulting, interest)]

    salaries = [22_000.0 + 200.0 * index for index in range(months)]
    revenue = {
        "Subscription Revenue": subscriptions,
        "Consulting Services": consulting,
        "Interest Income": interest,
    }
    expenses = {
        "Salaries & Wages": salaries,
        "Payroll Taxes": [round(value * 0.1, 2) for value in salaries],
        "Rent": [5_000.0 for _ in range(months)],
        "Cost of Goods Sold": [round(value * 0.3, 2) for value in revenue_total],
        "Advertising & Marketing": [MARKETING_PATTERN[index % len(MARKETING_PATTERN)] for index in range(months)],
        "Miscellaneous Expense": [MISC_PATTERN[index % len(MISC_PATTERN)] for index in range(months)],
        "Bank Fees": [0.0 for _ in range(months)],
    }
    return revenue, expenses


def build_sample_report(months: int = 18, start: date = date(2024, 1, 1)) -> dict[str, Any]:
    if months < 1:
        raise ValueError("months must be >= 1")
    starts = _month_starts(start, months)
    revenue, expenses = sample_lines(months)

    payroll = _section(
        "Payroll Expenses",
        [
            _data_row("Salaries & Wages", "61", expenses["Salaries & Wages"]),
            _data_row("Payroll Taxes", "62", expenses["Payroll Taxes"]),
        ],
    )
    expense_rows = [payroll] + [
        _data_row(name, str(70 + offset), values)
        for offset, (name, values) in enumerate(expenses.items())
        if name not in {"Salaries & Wages", "Payroll Taxes"}
    ]
    income_rows = [
        _data_row(name, str(40 + offset), values) for offset, (name, values) in enumerate(revenue.items())
    ]

    return {
        "Header": {
            "ReportName": "ProfitAndLoss",
            "StartPeriod": starts[0].isoformat(),
            "EndPeriod": _month_end(starts[-1]).isoformat(),
            "Currency": "USD",
            "ReportBasis": "Accrual",
            "SummarizeColumnsBy": "Month",
        },
        "Columns": {
            "Column": [{"ColTitle": "", "ColType": "Account"}]
            + [{"ColTitle": value.strftime("%b %Y"), "ColType": "Money"} for value in starts]
            + [{"ColTitle": "Total", "ColType": "Money"}]
        },
        "Rows": {
            "Row": [
                _section("Income", income_rows, group="Income"),
                _section("Expenses", expense_rows, group="Expenses"),
            ]
        },
    }
