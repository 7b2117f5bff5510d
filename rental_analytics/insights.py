"""Threshold rules that turn computed metrics into short observations.

Each rule set is an ordered tuple of :class:`InsightRule`. Every rule is
checked, so several observations can be reported together; when nothing
fires the rule set's default message is returned instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Sequence, TypeVar

from .config import PropertyConfig
from .occupancy import OccupancyStats
from .summary import PeriodAnalysis, ProfitabilityMetrics, ratio

C = TypeVar("C")


@dataclass(frozen=True)
class InsightRule(Generic[C]):
    name: str
    predicate: Callable[[C], bool]
    message: str

    def applies(self, context: C) -> bool:
        return bool(self.predicate(context))


@dataclass(frozen=True)
class RuleSet(Generic[C]):
    rules: Sequence[InsightRule[C]]
    default: str


def classify_insights(rule_set: RuleSet[Any], context: Any) -> List[str]:
    messages = [rule.message for rule in rule_set.rules if rule.applies(context)]
    return messages or [rule_set.default]


@dataclass(frozen=True)
class FinancialContext:
    current: PeriodAnalysis
    previous: PeriodAnalysis
    ytd: PeriodAnalysis
    months_elapsed: int

    @property
    def monthly_average_income(self) -> float:
        return ratio(self.ytd.total_income, max(1, self.months_elapsed))


@dataclass(frozen=True)
class OccupancyContext:
    stats: OccupancyStats
    revpar_benchmark: float = 500.0


@dataclass(frozen=True)
class ProfitabilityContext:
    monthly: ProfitabilityMetrics
    quarterly: ProfitabilityMetrics
    yearly: ProfitabilityMetrics
    months_elapsed: int

    @property
    def monthly_average_profit(self) -> float:
        return self.yearly.net_profit / max(1, self.months_elapsed)


def _strong_month(c: ProfitabilityContext) -> bool:
    return c.monthly.net_profit > c.monthly_average_profit * 1.2


def _weak_month(c: ProfitabilityContext) -> bool:
    # With a negative average both bands overlap; a strong month wins.
    return not _strong_month(c) and c.monthly.net_profit < c.monthly_average_profit * 0.8


FINANCIAL_RULES: RuleSet[FinancialContext] = RuleSet(
    rules=(
        InsightRule(
            "revenue_growth",
            lambda c: c.current.total_income > c.previous.total_income * 1.1,
            "Strong revenue growth this month. Consider investing in property improvements.",
        ),
        InsightRule(
            "revenue_decline",
            lambda c: c.current.total_income < c.previous.total_income * 0.9,
            "Revenue declined from last month. Review pricing strategy and occupancy rates.",
        ),
        InsightRule(
            "excellent_margin",
            lambda c: c.ytd.profit_margin > 25,
            "Excellent profit margins. Consider expanding or improving amenities.",
        ),
        InsightRule(
            "low_margin",
            lambda c: c.ytd.profit_margin < 10,
            "Low profit margins. Review expenses and consider rent increases.",
        ),
        InsightRule(
            "high_expense_ratio",
            lambda c: c.ytd.expense_ratio > 0.7,
            "High expense ratio. Look for cost reduction opportunities.",
        ),
        InsightRule(
            "high_maintenance",
            lambda c: c.ytd.expenses_by_category.get("Maintenance", 0.0)
            > c.ytd.total_income * 0.15,
            "High maintenance costs. Consider preventive maintenance programs.",
        ),
        InsightRule(
            "above_average",
            lambda c: c.current.total_income > c.monthly_average_income * 1.2,
            "Above-average performance this month. Great work!",
        ),
    ),
    default="Stable performance. Continue monitoring key metrics for optimization opportunities.",
)

OCCUPANCY_RULES: RuleSet[OccupancyContext] = RuleSet(
    rules=(
        InsightRule(
            "low_occupancy",
            lambda c: c.stats.overall_occupancy < 70,
            "Low overall occupancy. Focus on marketing and competitive pricing.",
        ),
        InsightRule(
            "excellent_occupancy",
            lambda c: c.stats.overall_occupancy > 90,
            "Excellent occupancy! Consider raising rates or expanding capacity.",
        ),
        InsightRule(
            "convert_guest_rooms",
            lambda c: c.stats.tenant_occupancy > 95 and c.stats.guest_occupancy < 50,
            "Consider converting guest rooms to long-term rentals given high demand.",
        ),
        InsightRule(
            "expand_short_term",
            lambda c: c.stats.guest_occupancy > 80 and c.stats.tenant_occupancy < 70,
            "Guest rooms performing well. Consider expanding short-term offerings.",
        ),
        InsightRule(
            "guest_rate_premium",
            lambda c: c.stats.guest_adr > c.stats.tenant_adr * 1.5,
            "Guest rooms generate higher daily rates. Optimize guest room mix.",
        ),
        InsightRule(
            "revpar_below_benchmark",
            lambda c: c.stats.tenant_revpar < c.revpar_benchmark,
            "Long-term revenue below benchmark. Review rent levels and vacancy reduction.",
        ),
    ),
    default="Occupancy performance is balanced. Continue monitoring for optimization opportunities.",
)

PROFITABILITY_RULES: RuleSet[ProfitabilityContext] = RuleSet(
    rules=(
        InsightRule(
            "excellent_margin",
            lambda c: c.yearly.profit_margin > 25,
            "Excellent profit margins! Your property is highly profitable.",
        ),
        InsightRule(
            "low_margin",
            lambda c: c.yearly.profit_margin < 10,
            "Low profit margins. Review expenses and consider rent increases.",
        ),
        InsightRule(
            "strong_month",
            _strong_month,
            "Strong performance this month! Above average profitability.",
        ),
        InsightRule(
            "below_average_month",
            _weak_month,
            "Below-average month. Review recent changes and seasonal factors.",
        ),
        InsightRule(
            "negative_cash_flow",
            lambda c: c.yearly.cash_flow_ratio < 1.0,
            "Negative cash flow. Immediate action needed to reduce expenses or increase revenue.",
        ),
        InsightRule(
            "strong_cash_flow",
            lambda c: c.yearly.cash_flow_ratio > 1.5,
            "Strong cash flow. Consider reinvestment opportunities.",
        ),
        InsightRule(
            "excellent_roi",
            lambda c: c.yearly.roi_estimate > 12,
            "Excellent ROI! Your investment is performing very well.",
        ),
        InsightRule(
            "low_roi",
            lambda c: c.yearly.roi_estimate < 6,
            "ROI below market average. Consider optimization strategies.",
        ),
    ),
    default="Stable profitability. Continue monitoring for optimization opportunities.",
)


def financial_insights(
    current: PeriodAnalysis,
    previous: PeriodAnalysis,
    ytd: PeriodAnalysis,
    months_elapsed: int,
) -> List[str]:
    return classify_insights(
        FINANCIAL_RULES, FinancialContext(current, previous, ytd, months_elapsed)
    )


def occupancy_insights(
    stats: OccupancyStats, config: PropertyConfig | None = None
) -> List[str]:
    benchmark = (config or PropertyConfig()).tenant_revpar_benchmark
    return classify_insights(OCCUPANCY_RULES, OccupancyContext(stats, benchmark))


def profitability_insights(
    monthly: ProfitabilityMetrics,
    quarterly: ProfitabilityMetrics,
    yearly: ProfitabilityMetrics,
    months_elapsed: int,
) -> List[str]:
    return classify_insights(
        PROFITABILITY_RULES, ProfitabilityContext(monthly, quarterly, yearly, months_elapsed)
    )
