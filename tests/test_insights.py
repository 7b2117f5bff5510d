from dataclasses import replace
from datetime import date

from rental_analytics.config import PropertyConfig
from rental_analytics.insights import (
    FINANCIAL_RULES,
    OCCUPANCY_RULES,
    PROFITABILITY_RULES,
    FinancialContext,
    InsightRule,
    RuleSet,
    classify_insights,
    financial_insights,
    occupancy_insights,
    profitability_insights,
)
from rental_analytics.occupancy import OccupancyStats
from rental_analytics.summary import (
    LargestTransaction,
    PeriodAnalysis,
    profitability_from_totals,
)


def make_analysis(income=0.0, expenses=0.0, margin=None, expenses_by_category=None):
    net = income - expenses
    if margin is None:
        margin = round(net / income * 100) if income else 0
    return PeriodAnalysis(
        period_start=date(2024, 1, 1),
        period_end=date(2024, 1, 31),
        total_income=income,
        total_expenses=expenses,
        net_profit=net,
        profit_margin=margin,
        income_tx_count=0,
        expense_tx_count=0,
        avg_transaction_size=0.0,
        income_by_category={},
        expenses_by_category=expenses_by_category or {},
        payment_method_totals={},
        largest_income=LargestTransaction(),
        largest_expense=LargestTransaction(),
        trend_label="Positive",
    )


def make_occupancy(**kwargs):
    base = dict(
        total_rooms=10,
        total_occupied=8,
        total_tenant_rooms=8,
        tenants_occupied=7,
        total_guest_rooms=2,
        guests_occupied=1,
        overall_occupancy=80,
        tenant_occupancy=88,
        guest_occupancy=50,
        tenant_revenue=5600.0,
        guest_revenue=0.0,
        guest_nights=0.0,
        tenant_revpar=700.0,
        guest_revpar=0.0,
        tenant_adr=26.0,
        guest_adr=30.0,
    )
    base.update(kwargs)
    return OccupancyStats(**base)


def names(rule_set, context):
    return [rule.name for rule in rule_set.rules if rule.applies(context)]


def test_default_message_when_nothing_fires():
    rule_set = RuleSet(rules=(InsightRule("never", lambda c: False, "nope"),), default="steady")

    assert classify_insights(rule_set, object()) == ["steady"]


def test_multiple_rules_fire_in_order():
    rule_set = RuleSet(
        rules=(
            InsightRule("a", lambda c: c > 1, "first"),
            InsightRule("b", lambda c: c > 2, "second"),
            InsightRule("c", lambda c: c > 100, "third"),
        ),
        default="none",
    )

    assert classify_insights(rule_set, 5) == ["first", "second"]


def test_financial_stable_month():
    month = make_analysis(income=1000, expenses=800, margin=20)
    ytd = make_analysis(income=3000, expenses=1800, margin=20)
    messages = financial_insights(month, month, ytd, months_elapsed=3)

    assert messages == [FINANCIAL_RULES.default]


def test_financial_growth_and_high_costs():
    current = make_analysis(income=2000, expenses=500)
    previous = make_analysis(income=1000, expenses=500)
    ytd = make_analysis(
        income=4000, expenses=3200, margin=20, expenses_by_category={"Maintenance": 700}
    )
    context = FinancialContext(current, previous, ytd, months_elapsed=3)

    assert names(FINANCIAL_RULES, context) == [
        "revenue_growth",
        "high_expense_ratio",
        "high_maintenance",
        "above_average",
    ]


def test_financial_decline_and_margin_bands():
    current = make_analysis(income=800)
    previous = make_analysis(income=1000)
    low = FinancialContext(current, previous, make_analysis(income=1000, margin=5), 1)
    high = FinancialContext(current, previous, make_analysis(income=1000, margin=30), 1)

    assert "revenue_decline" in names(FINANCIAL_RULES, low)
    assert "low_margin" in names(FINANCIAL_RULES, low)
    assert "excellent_margin" in names(FINANCIAL_RULES, high)


def test_expense_ratio_is_zero_without_income():
    ytd = make_analysis(income=0, expenses=500, margin=0)
    context = FinancialContext(ytd, ytd, ytd, 1)

    assert "high_expense_ratio" not in names(FINANCIAL_RULES, context)


def test_occupancy_balanced_default():
    messages = occupancy_insights(make_occupancy())

    assert messages == [OCCUPANCY_RULES.default]


def test_occupancy_low_and_below_benchmark():
    stats = make_occupancy(overall_occupancy=60, tenant_occupancy=60, tenant_revpar=300.0)
    messages = occupancy_insights(stats)

    assert messages[0].startswith("Low overall occupancy")
    assert messages[-1].startswith("Long-term revenue below benchmark")
    assert len(messages) == 2


def test_occupancy_segment_balance_rules():
    convert = make_occupancy(overall_occupancy=85, tenant_occupancy=100, guest_occupancy=0)
    expand = make_occupancy(overall_occupancy=75, tenant_occupancy=65, guest_occupancy=100)

    assert any("converting guest rooms" in m for m in occupancy_insights(convert))
    assert any("expanding short-term" in m for m in occupancy_insights(expand))


def test_occupancy_guest_rate_premium_and_configured_benchmark():
    stats = make_occupancy(guest_adr=60.0, tenant_adr=30.0)
    messages = occupancy_insights(stats, PropertyConfig(tenant_revpar_benchmark=1000.0))

    assert any("higher daily rates" in m for m in messages)
    assert any("below benchmark" in m for m in messages)


def test_profitability_rules():
    year = profitability_from_totals(12000, 6000, date(2024, 1, 1), date(2024, 6, 30))
    quarter = profitability_from_totals(6000, 3000, date(2024, 4, 1), date(2024, 6, 30))
    month = profitability_from_totals(4000, 1000, date(2024, 6, 1), date(2024, 6, 30))
    messages = profitability_insights(month, quarter, year, months_elapsed=6)

    # margin 50%, cash flow 2.0x, ROI round(6000 * 12 / 1440000 * 100) = 5
    assert messages == [
        "Excellent profit margins! Your property is highly profitable.",
        "Strong performance this month! Above average profitability.",
        "Strong cash flow. Consider reinvestment opportunities.",
        "ROI below market average. Consider optimization strategies.",
    ]


def test_profitability_negative_average_reports_one_month_band():
    year = profitability_from_totals(1000, 4000, date(2024, 1, 1), date(2024, 3, 31))
    month = profitability_from_totals(0, 1000, date(2024, 3, 1), date(2024, 3, 31))
    messages = profitability_insights(month, month, year, months_elapsed=3)

    # average -1000 per month: -1000 is both above -1200 and below -800
    assert any(m.startswith("Strong performance") for m in messages)
    assert not any(m.startswith("Below-average month") for m in messages)
    assert any(m.startswith("Negative cash flow") for m in messages)


def test_profitability_default():
    stable = profitability_from_totals(1000, 850, date(2024, 1, 1), date(2024, 1, 31))
    stable = replace(stable, profit_margin=15, cash_flow_ratio=1.2, roi_estimate=8)
    messages = profitability_insights(stable, stable, stable, months_elapsed=1)

    assert messages == [PROFITABILITY_RULES.default]
