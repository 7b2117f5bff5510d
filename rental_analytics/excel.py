from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Sequence

from .config import PropertyConfig
from .models import Transaction
from .summary import PeriodAnalysis, TaxSummary

TRANSACTION_HEADERS = [
    "Date",
    "Type",
    "Description",
    "Amount",
    "Category",
    "Payment Method",
    "Reference",
]


def _write_breakdown(ws, totals: Mapping[str, float], grand_total: float) -> None:
    ws.append(["Category", "Amount", "Share"])
    for category, amount in sorted(totals.items(), key=lambda item: -item[1]):
        share = round(amount / grand_total, 4) if grand_total else 0.0
        ws.append([category, round(amount, 2), share])


def _autosize(ws) -> None:
    for column in ws.columns:
        width = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
        ws.column_dimensions[column[0].column_letter].width = min(max(width + 2, 10), 60)


def export_workbook(
    output_path: Path,
    analysis: PeriodAnalysis,
    tax_summary: TaxSummary | None = None,
    transactions: Sequence[Transaction] | Iterable[Transaction] = (),
    config: PropertyConfig | None = None,
) -> None:
    """
    Write an accountant-facing workbook with Summary, Income, Expenses,
    Tax and Transactions sheets to ``output_path``.
    """

    try:
        from openpyxl import Workbook
        from openpyxl.styles import Font
    except ImportError as exc:  # pragma: no cover - dependency guidance
        raise SystemExit(
            "openpyxl is required for Excel output. Install with: pip install openpyxl"
        ) from exc

    config = config or PropertyConfig()
    wb = Workbook()
    summary_ws = wb.active
    summary_ws.title = "Summary"
    summary_rows = [
        ("Property", config.property_name),
        ("Period Start", analysis.period_start),
        ("Period End", analysis.period_end),
        ("Total Income", round(analysis.total_income, 2)),
        ("Total Expenses", round(analysis.total_expenses, 2)),
        ("Net Profit", round(analysis.net_profit, 2)),
        ("Profit Margin %", analysis.profit_margin),
        ("Income Transactions", analysis.income_tx_count),
        ("Expense Transactions", analysis.expense_tx_count),
        ("Average Transaction", round(analysis.avg_transaction_size, 2)),
        ("Largest Income", round(analysis.largest_income.amount, 2)),
        ("Largest Income Source", analysis.largest_income.source),
        ("Largest Expense", round(analysis.largest_expense.amount, 2)),
        ("Largest Expense Source", analysis.largest_expense.source),
        ("Cash Flow Trend", analysis.trend_label),
    ]
    for row in summary_rows:
        summary_ws.append(list(row))
    for cell in summary_ws["A"]:
        cell.font = Font(bold=True)

    income_ws = wb.create_sheet("Income")
    _write_breakdown(income_ws, analysis.income_by_category, analysis.total_income)
    expenses_ws = wb.create_sheet("Expenses")
    _write_breakdown(expenses_ws, analysis.expenses_by_category, analysis.total_expenses)

    if tax_summary is not None:
        tax_ws = wb.create_sheet("Tax")
        tax_ws.append(["Total Rental Income", round(tax_summary.total_income, 2)])
        tax_ws.append(["Total Deductible Expenses", round(tax_summary.total_deductions, 2)])
        tax_ws.append(["Net Rental Income", round(tax_summary.net_income, 2)])
        tax_ws.append([])
        _write_breakdown(tax_ws, tax_summary.deductible_by_category, tax_summary.total_deductions)

    tx_ws = wb.create_sheet("Transactions")
    tx_ws.append(TRANSACTION_HEADERS)
    for tx in transactions:
        tx_ws.append(
            [
                tx.date,
                tx.kind,
                tx.description,
                tx.amount,
                tx.category,
                tx.payment_method,
                tx.reference,
            ]
        )

    for ws in wb.worksheets:
        for cell in ws[1]:
            cell.font = Font(bold=True)
        _autosize(ws)

    wb.save(str(output_path))
