"""Utility helpers for turning report objects into text tables."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from .config import PropertyConfig
from .dashboard import Dashboard
from .occupancy import OccupancyStats, TenantStats
from .summary import (
    MaintenanceCostReport,
    PeriodAnalysis,
    ProfitabilityMetrics,
    TaxSummary,
)


def _column_widths(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> Sequence[int]:
    widths = [len(h) for h in headers]
    for row in rows:
        for idx, cell in enumerate(row):
            widths[idx] = max(widths[idx], len(cell))
    return widths


def _format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = _column_widths(headers, rows)

    def format_row(row: Sequence[str]) -> str:
        return " | ".join(cell.ljust(widths[idx]) for idx, cell in enumerate(row))

    header_line = format_row(headers)
    separator = "-+-".join("-" * w for w in widths)
    body = "\n".join(format_row(row) for row in rows)
    return "\n".join([header_line, separator, body]) if body else "\n".join(
        [header_line, separator]
    )


def _money(value: float) -> str:
    return f"{value:,.2f}"


def _breakdown(title: str, totals: Mapping[str, float], grand_total: float) -> str:
    rows = [
        [
            name,
            _money(amount),
            f"{amount / grand_total * 100:.1f}%" if grand_total else "0.0%",
        ]
        for name, amount in sorted(totals.items(), key=lambda item: -item[1])
    ]
    return title + "\n" + _format_table(["Category", "Amount", "Share"], rows)


def _insight_lines(insights: Iterable[str] | None) -> list[str]:
    if not insights:
        return []
    return ["", "Insights"] + [f"  - {message}" for message in insights]


def format_period_analysis(
    analysis: PeriodAnalysis, insights: Iterable[str] | None = None
) -> str:
    header_lines = [
        "Financial Report",
        f"Period: {analysis.period_start:%Y-%m-%d} to {analysis.period_end:%Y-%m-%d}",
        f"Total Income: {_money(analysis.total_income)} ({analysis.income_tx_count} transactions)",
        f"Total Expenses: {_money(analysis.total_expenses)} ({analysis.expense_tx_count} transactions)",
        f"Net Profit: {_money(analysis.net_profit)}",
        f"Profit Margin: {analysis.profit_margin}%",
        f"Average Transaction: {_money(analysis.avg_transaction_size)}",
        f"Cash Flow Trend: {analysis.trend_label}",
    ]
    if analysis.largest_income.amount:
        header_lines.append(
            f"Largest Income: {_money(analysis.largest_income.amount)} ({analysis.largest_income.source})"
        )
    if analysis.largest_expense.amount:
        header_lines.append(
            f"Largest Expense: {_money(analysis.largest_expense.amount)} ({analysis.largest_expense.source})"
        )

    method_rows = [
        [method, _money(amount)]
        for method, amount in sorted(analysis.payment_method_totals.items())
    ]
    sections = [
        "",
        _breakdown("Income by Category", analysis.income_by_category, analysis.total_income),
        "",
        _breakdown("Expenses by Category", analysis.expenses_by_category, analysis.total_expenses),
        "",
        "Payment Methods\n" + _format_table(["Method", "Amount"], method_rows),
    ]
    return "\n".join(header_lines + sections + _insight_lines(insights))


def format_profitability(
    metrics: Sequence[tuple[str, ProfitabilityMetrics]],
    insights: Iterable[str] | None = None,
) -> str:
    headers = [
        "Period",
        "Revenue",
        "Expenses",
        "Net Profit",
        "Margin",
        "Cash Flow",
        "ROI (est.)",
        "Break-even / month",
    ]
    rows = [
        [
            label,
            _money(m.total_revenue),
            _money(m.total_expenses),
            _money(m.net_profit),
            f"{m.profit_margin}%",
            f"{m.cash_flow_ratio:.2f}x",
            f"{m.roi_estimate}%",
            _money(m.break_even_monthly),
        ]
        for label, m in metrics
    ]
    lines = ["Profitability", _format_table(headers, rows)]
    return "\n".join(lines + _insight_lines(insights))


def _target_line(label: str, actual: float, target: float) -> str:
    if actual >= target:
        return f"{label}: {actual:g}% (target {target:g}% met)"
    return f"{label}: {actual:g}% ({target - actual:.1f}% to target {target:g}%)"


def format_occupancy(
    stats: OccupancyStats,
    insights: Iterable[str] | None = None,
    config: PropertyConfig | None = None,
) -> str:
    config = config or PropertyConfig()
    rows = [
        ["Overall", f"{stats.overall_occupancy}%", f"{stats.total_occupied}/{stats.total_rooms}"],
        [
            "Long-term",
            f"{stats.tenant_occupancy}%",
            f"{stats.tenants_occupied}/{stats.total_tenant_rooms}",
        ],
        [
            "Guest rooms",
            f"{stats.guest_occupancy}%",
            f"{stats.guests_occupied}/{stats.total_guest_rooms}",
        ],
    ]
    lines = [
        "Occupancy Analytics",
        _format_table(["Segment", "Occupancy", "Rooms"], rows),
        "",
        f"RevPAR long-term: {_money(stats.tenant_revpar)}/month",
        f"RevPAR guest rooms: {_money(stats.guest_revpar)}",
        f"ADR long-term equivalent: {_money(stats.tenant_adr)}/night",
        f"ADR guest rooms: {_money(stats.guest_adr)}/night",
        "",
        _target_line("Overall occupancy", stats.overall_occupancy, config.target_overall_occupancy),
        _target_line("Guest room occupancy", stats.guest_occupancy, config.target_guest_occupancy),
    ]
    return "\n".join(lines + _insight_lines(insights))


def format_tax_summary(summary: TaxSummary, config: PropertyConfig | None = None) -> str:
    config = config or PropertyConfig()
    lines = [
        f"Tax Report - {config.property_name}",
        f"Period: {summary.period_start:%Y-%m-%d} to {summary.period_end:%Y-%m-%d}",
        f"Total Rental Income: {_money(summary.total_income)}",
        f"Total Deductible Expenses: {_money(summary.total_deductions)}",
        f"Net Rental Income: {_money(summary.net_income)}",
        "",
        _breakdown("Income", summary.income_by_category, summary.total_income),
        "",
        _breakdown("Deductible Expenses", summary.deductible_by_category, summary.total_deductions),
        "",
        "This report is for informational purposes only. "
        "Consult a qualified tax professional for official tax preparation.",
    ]
    if config.manager_email:
        lines.append(f"Questions: {config.manager_email}")
    return "\n".join(lines)


def format_tenant_stats(stats: TenantStats) -> str:
    lines = [
        "Tenant Overview",
        f"Rooms: {stats.total_rooms} (occupied {stats.occupied_rooms}, "
        f"vacant {stats.vacant_rooms}, maintenance {stats.maintenance_rooms})",
        f"Occupancy Rate: {stats.occupancy_rate}%",
        f"Payments: paid {stats.paid_count}, due {stats.due_count}, overdue {stats.overdue_count}",
        f"Current Monthly Revenue: {_money(stats.current_revenue)}",
        f"Potential Monthly Revenue: {_money(stats.potential_revenue)}",
    ]
    if stats.next_rent_due:
        lines.append(f"Next Rent Due: {stats.next_rent_due:%B %d, %Y}")
    if stats.late_fees_outstanding:
        lines.append(f"Late Fees Outstanding: {_money(stats.late_fees_outstanding)}")
    if stats.overdue:
        rows = [
            [
                tenant.room,
                tenant.name or "Unspecified",
                f"{tenant.last_payment:%Y-%m-%d}" if tenant.last_payment else "Never",
                tenant.email or "-",
                _money(tenant.late_fee),
            ]
            for tenant in stats.overdue
        ]
        headers = ["Room", "Tenant", "Last Payment", "Email", "Late Fee"]
        lines += ["", "Overdue Tenants", _format_table(headers, rows)]
    return "\n".join(lines)


def format_maintenance_report(report: MaintenanceCostReport) -> str:
    rows = [[category, _money(cost)] for category, cost in report.cost_by_category]
    lines = [
        "Maintenance Cost Report",
        f"Total Maintenance Costs: {_money(report.total_cost)}",
        f"Total Requests: {report.request_count}",
        f"Average Cost per Request: {_money(report.average_cost)}",
        f"Most Expensive Category: {report.most_expensive_category or 'N/A'}",
        "",
        _format_table(["Issue Type", "Cost"], rows),
    ]
    return "\n".join(lines)


def format_dashboard(dashboard: Dashboard, config: PropertyConfig | None = None) -> str:
    config = config or PropertyConfig()
    income_change = (
        (dashboard.month.total_income - dashboard.previous_month.total_income)
        / dashboard.previous_month.total_income
        * 100
        if dashboard.previous_month.total_income > 0
        else 0.0
    )
    overview_rows = [
        [
            label,
            _money(analysis.total_income),
            _money(analysis.total_expenses),
            _money(analysis.net_profit),
            f"{analysis.profit_margin}%",
            analysis.trend_label,
        ]
        for label, analysis in (
            ("This month", dashboard.month),
            ("Previous month", dashboard.previous_month),
            ("This quarter", dashboard.quarter),
            ("Year to date", dashboard.ytd),
        )
    ]
    parts = [
        f"{config.property_name} - Financial Dashboard ({dashboard.as_of:%B %Y})",
        _format_table(
            ["Period", "Income", "Expenses", "Net", "Margin", "Trend"], overview_rows
        ),
        f"Income vs last month: {income_change:+.1f}%",
        "\n".join(_insight_lines(dashboard.financial_insights)),
        "",
        format_occupancy(dashboard.occupancy, dashboard.occupancy_insights, config),
        "",
        format_profitability(
            [
                ("Month", dashboard.monthly_profit),
                ("Quarter", dashboard.quarterly_profit),
                ("Year", dashboard.yearly_profit),
            ],
            dashboard.profitability_insights,
        ),
    ]
    return "\n".join(parts)
