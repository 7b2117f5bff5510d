"""Bundle every report for a given day into one value."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Sequence

from .config import PropertyConfig
from .insights import financial_insights, occupancy_insights, profitability_insights
from .loader import (
    TableStore,
    load_bookings,
    load_guest_rooms,
    load_rooms,
    load_transactions,
)
from .models import BookingRecord, GuestRoomRecord, RoomRecord, Transaction
from .occupancy import OccupancyStats, compute_occupancy
from .periods import last_month_range, quarter_start
from .summary import (
    PeriodAnalysis,
    ProfitabilityMetrics,
    analyze_period,
    compute_profitability,
)


@dataclass(frozen=True)
class Snapshot:
    transactions: Sequence[Transaction]
    rooms: Sequence[RoomRecord]
    guest_rooms: Sequence[GuestRoomRecord]
    bookings: Sequence[BookingRecord]


@dataclass(frozen=True)
class Dashboard:
    as_of: date
    month: PeriodAnalysis
    previous_month: PeriodAnalysis
    quarter: PeriodAnalysis
    ytd: PeriodAnalysis
    occupancy: OccupancyStats
    monthly_profit: ProfitabilityMetrics
    quarterly_profit: ProfitabilityMetrics
    yearly_profit: ProfitabilityMetrics
    financial_insights: List[str]
    occupancy_insights: List[str]
    profitability_insights: List[str]


def load_snapshot(store: TableStore) -> Snapshot:
    """Read the ledger and every entity table the reports need."""

    return Snapshot(
        transactions=load_transactions(store),
        rooms=load_rooms(store),
        guest_rooms=load_guest_rooms(store),
        bookings=load_bookings(store),
    )


def gather_dashboard(
    snapshot: Snapshot, as_of: date | None = None, config: PropertyConfig | None = None
) -> Dashboard:
    as_of = as_of or date.today()
    month_start = as_of.replace(day=1)
    q_start = quarter_start(as_of)
    year_start = date(as_of.year, 1, 1)
    prev_start, prev_end = last_month_range(as_of)
    ledger = snapshot.transactions

    month = analyze_period(ledger, month_start, as_of)
    previous = analyze_period(ledger, prev_start, prev_end)
    ytd = analyze_period(ledger, year_start, as_of)
    occupancy = compute_occupancy(
        snapshot.rooms, snapshot.guest_rooms, snapshot.bookings, as_of=as_of
    )
    monthly_profit = compute_profitability(ledger, month_start, as_of)
    quarterly_profit = compute_profitability(ledger, q_start, as_of)
    yearly_profit = compute_profitability(ledger, year_start, as_of)

    return Dashboard(
        as_of=as_of,
        month=month,
        previous_month=previous,
        quarter=analyze_period(ledger, q_start, as_of),
        ytd=ytd,
        occupancy=occupancy,
        monthly_profit=monthly_profit,
        quarterly_profit=quarterly_profit,
        yearly_profit=yearly_profit,
        financial_insights=financial_insights(month, previous, ytd, as_of.month),
        occupancy_insights=occupancy_insights(occupancy, config),
        profitability_insights=profitability_insights(
            monthly_profit, quarterly_profit, yearly_profit, as_of.month
        ),
    )
