"""Financial summaries computed from a window of the ledger."""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import DEDUCTIBLE_CATEGORIES, PropertyConfig
from .loader import filter_by_date
from .models import MaintenanceRequest, Transaction
from .periods import months_in_period


STRONG_GROWTH = "Strong Growth"
POSITIVE = "Positive"
BREAK_EVEN = "Break-even"
LOSS = "Loss"

# Annual revenue multiple used to guess a property value for the ROI estimate.
CAPITALIZATION_MULTIPLE = 10


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


@dataclass(frozen=True)
class LargestTransaction:
    amount: float = 0.0
    source: str = ""


@dataclass(frozen=True)
class CategoryTotals:
    total_income: float
    total_expenses: float
    income_tx_count: int
    expense_tx_count: int
    gross_volume: float
    income_by_category: Dict[str, float]
    expenses_by_category: Dict[str, float]
    payment_method_totals: Dict[str, float]
    largest_income: LargestTransaction
    largest_expense: LargestTransaction


@dataclass(frozen=True)
class PeriodAnalysis:
    period_start: date
    period_end: date
    total_income: float
    total_expenses: float
    net_profit: float
    profit_margin: int
    income_tx_count: int
    expense_tx_count: int
    avg_transaction_size: float
    income_by_category: Dict[str, float]
    expenses_by_category: Dict[str, float]
    payment_method_totals: Dict[str, float]
    largest_income: LargestTransaction
    largest_expense: LargestTransaction
    trend_label: str

    @property
    def expense_ratio(self) -> float:
        return ratio(self.total_expenses, self.total_income)


@dataclass(frozen=True)
class ProfitabilityMetrics:
    period_start: date
    period_end: date
    total_revenue: float
    total_expenses: float
    net_profit: float
    profit_margin: int
    cash_flow_ratio: float
    roi_estimate: int
    break_even_monthly: float


@dataclass(frozen=True)
class TaxSummary:
    period_start: date
    period_end: date
    total_income: float
    total_deductions: float
    net_income: float
    income_by_category: Dict[str, float]
    deductible_by_category: Dict[str, float]


@dataclass(frozen=True)
class MaintenanceCostReport:
    total_cost: float
    request_count: int
    average_cost: float
    cost_by_category: Sequence[Tuple[str, float]]

    @property
    def most_expensive_category(self) -> Optional[str]:
        return self.cost_by_category[0][0] if self.cost_by_category else None


def aggregate_transactions(transactions: Iterable[Transaction]) -> CategoryTotals:
    """Single pass producing income/expense totals and their breakdowns.

    Zero-amount rows only show up in the payment method totals. The largest
    income and expense keep the first transaction seen on exact ties.
    """

    total_income = 0.0
    total_expenses = 0.0
    income_count = 0
    expense_count = 0
    gross_volume = 0.0
    income_by_category: Dict[str, float] = defaultdict(float)
    expenses_by_category: Dict[str, float] = defaultdict(float)
    payment_methods: Dict[str, float] = defaultdict(float)
    largest_income = LargestTransaction()
    largest_expense = LargestTransaction()

    for tx in transactions:
        amount = abs(tx.amount)
        payment_methods[tx.payment_method] += amount
        if tx.is_income:
            income_count += 1
            gross_volume += amount
            total_income += amount
            income_by_category[tx.category] += amount
            if amount > largest_income.amount:
                largest_income = LargestTransaction(amount, tx.description)
        elif tx.is_expense:
            expense_count += 1
            gross_volume += amount
            total_expenses += amount
            expenses_by_category[tx.category] += amount
            if amount > largest_expense.amount:
                largest_expense = LargestTransaction(amount, tx.description)

    return CategoryTotals(
        total_income=total_income,
        total_expenses=total_expenses,
        income_tx_count=income_count,
        expense_tx_count=expense_count,
        gross_volume=gross_volume,
        income_by_category=dict(income_by_category),
        expenses_by_category=dict(expenses_by_category),
        payment_method_totals=dict(payment_methods),
        largest_income=largest_income,
        largest_expense=largest_expense,
    )


def profit_margin(net_profit: float, total_income: float) -> int:
    if total_income > 0:
        return round_half_up(net_profit / total_income * 100)
    return 0


def classify_trend(net_profit: float, total_income: float) -> str:
    """Label the cash flow of a period; the first matching threshold wins."""

    if net_profit > total_income * 0.2:
        return STRONG_GROWTH
    if net_profit > 0:
        return POSITIVE
    if net_profit > -total_income * 0.1:
        return BREAK_EVEN
    return LOSS


def analyze_period(
    transactions: Iterable[Transaction], start: date, end: date
) -> PeriodAnalysis:
    """Aggregate the ledger between ``start`` and ``end`` into a :class:`PeriodAnalysis`."""

    totals = aggregate_transactions(filter_by_date(transactions, start, end))
    net_profit = totals.total_income - totals.total_expenses
    count = totals.income_tx_count + totals.expense_tx_count
    return PeriodAnalysis(
        period_start=start,
        period_end=end,
        total_income=totals.total_income,
        total_expenses=totals.total_expenses,
        net_profit=net_profit,
        profit_margin=profit_margin(net_profit, totals.total_income),
        income_tx_count=totals.income_tx_count,
        expense_tx_count=totals.expense_tx_count,
        avg_transaction_size=ratio(totals.gross_volume, count),
        income_by_category=totals.income_by_category,
        expenses_by_category=totals.expenses_by_category,
        payment_method_totals=totals.payment_method_totals,
        largest_income=totals.largest_income,
        largest_expense=totals.largest_expense,
        trend_label=classify_trend(net_profit, totals.total_income),
    )


def profitability_from_totals(
    total_revenue: float, total_expenses: float, start: date, end: date
) -> ProfitabilityMetrics:
    """Derive ratios for a period from its revenue and expense totals.

    The ROI figure is a rough heuristic: the property is assumed to be worth
    ten years of the period's revenue annualised, so it is only useful for
    comparing periods against each other.
    """

    net_profit = total_revenue - total_expenses
    estimated_value = total_revenue * 12 * CAPITALIZATION_MULTIPLE
    roi = round_half_up(net_profit * 12 / estimated_value * 100) if estimated_value > 0 else 0
    return ProfitabilityMetrics(
        period_start=start,
        period_end=end,
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        net_profit=net_profit,
        profit_margin=profit_margin(net_profit, total_revenue),
        cash_flow_ratio=ratio(total_revenue, total_expenses),
        roi_estimate=roi,
        break_even_monthly=total_expenses / months_in_period(start, end),
    )


def compute_profitability(
    transactions: Iterable[Transaction], start: date, end: date
) -> ProfitabilityMetrics:
    totals = aggregate_transactions(filter_by_date(transactions, start, end))
    return profitability_from_totals(totals.total_income, totals.total_expenses, start, end)


def compute_tax_summary(
    transactions: Iterable[Transaction],
    year_start: date,
    year_end: date,
    config: PropertyConfig | None = None,
) -> TaxSummary:
    """Income and deductible expenses for a tax year.

    Expenses outside the deductible categories are left out entirely.
    """

    deductible = set(config.deductible_categories if config else DEDUCTIBLE_CATEGORIES)
    total_income = 0.0
    total_deductions = 0.0
    income_by_category: Dict[str, float] = defaultdict(float)
    deductible_by_category: Dict[str, float] = defaultdict(float)

    for tx in filter_by_date(transactions, year_start, year_end):
        if tx.is_income:
            total_income += tx.amount
            income_by_category[tx.category] += tx.amount
        elif tx.is_expense and tx.category in deductible:
            amount = abs(tx.amount)
            total_deductions += amount
            deductible_by_category[tx.category] += amount

    return TaxSummary(
        period_start=year_start,
        period_end=year_end,
        total_income=total_income,
        total_deductions=total_deductions,
        net_income=total_income - total_deductions,
        income_by_category=dict(income_by_category),
        deductible_by_category=dict(deductible_by_category),
    )


def build_maintenance_cost_report(
    requests: Iterable[MaintenanceRequest],
) -> MaintenanceCostReport:
    cost_by_category: Dict[str, float] = defaultdict(float)
    total = 0.0
    count = 0
    for request in requests:
        cost_by_category[request.issue_type] += request.actual_cost
        total += request.actual_cost
        count += 1

    ranked: List[Tuple[str, float]] = sorted(
        cost_by_category.items(), key=lambda item: (-item[1], item[0])
    )
    return MaintenanceCostReport(
        total_cost=total,
        request_count=count,
        average_cost=ratio(total, count),
        cost_by_category=tuple(ranked),
    )
