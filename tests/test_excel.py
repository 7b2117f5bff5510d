from datetime import date

import openpyxl

from rental_analytics.config import PropertyConfig
from rental_analytics.excel import export_workbook
from rental_analytics.models import Transaction
from rental_analytics.summary import analyze_period, compute_tax_summary


def make_transaction(day, amount, category, description=""):
    return Transaction(
        date=date(2024, 3, day),
        kind="Income" if amount > 0 else "Expense",
        description=description,
        amount=amount,
        category=category,
    )


def test_export_workbook_writes_summary_and_breakdowns(tmp_path):
    ledger = [
        make_transaction(2, 1000, "Rent", "Room 1 rent"),
        make_transaction(5, -200, "Maintenance", "Plumber"),
        make_transaction(6, -50, "Other", "Snacks"),
    ]
    start, end = date(2024, 3, 1), date(2024, 3, 31)
    analysis = analyze_period(ledger, start, end)
    tax_summary = compute_tax_summary(ledger, start, end)
    output = tmp_path / "march.xlsx"

    export_workbook(output, analysis, tax_summary, ledger, PropertyConfig(property_name="Maple House"))

    wb = openpyxl.load_workbook(output)
    summary = {row[0]: row[1] for row in wb["Summary"].iter_rows(values_only=True)}
    assert summary["Property"] == "Maple House"
    assert summary["Net Profit"] == 750
    assert summary["Cash Flow Trend"] == "Strong Growth"
    assert summary["Largest Expense Source"] == "Plumber"

    expenses = list(wb["Expenses"].iter_rows(min_row=2, values_only=True))
    assert expenses[0] == ("Maintenance", 200, 0.8)
    assert expenses[1] == ("Other", 50, 0.2)

    tax_rows = list(wb["Tax"].iter_rows(values_only=True))
    assert tax_rows[1] == ("Total Deductible Expenses", 200, None)

    transactions = list(wb["Transactions"].iter_rows(min_row=2, values_only=True))
    assert len(transactions) == 3
    assert transactions[1][2] == "Plumber"


def test_export_workbook_without_tax_sheet(tmp_path):
    analysis = analyze_period([], date(2024, 1, 1), date(2024, 1, 31))
    output = tmp_path / "empty.xlsx"

    export_workbook(output, analysis)

    wb = openpyxl.load_workbook(output)
    assert wb.sheetnames == ["Summary", "Income", "Expenses", "Transactions"]
