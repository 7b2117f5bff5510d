"""Occupancy and tenant roll-ups built from room and booking snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .config import PropertyConfig
from .models import (
    BookingRecord,
    GuestRoomRecord,
    PaymentStatus,
    RoomRecord,
    RoomStatus,
)
from .periods import last_month_range, next_rent_due
from .summary import ratio, round_half_up


# Days used to turn a monthly rent into a nightly rate.
DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class OccupancyStats:
    total_rooms: int
    total_occupied: int
    total_tenant_rooms: int
    tenants_occupied: int
    total_guest_rooms: int
    guests_occupied: int
    overall_occupancy: int
    tenant_occupancy: int
    guest_occupancy: int
    tenant_revenue: float
    guest_revenue: float
    guest_nights: float
    tenant_revpar: float
    guest_revpar: float
    tenant_adr: float
    guest_adr: float


@dataclass(frozen=True)
class OverdueTenant:
    name: str
    room: str
    last_payment: Optional[date]
    email: str = ""
    late_fee: float = 0.0


@dataclass(frozen=True)
class TenantStats:
    total_rooms: int
    occupied_rooms: int
    vacant_rooms: int
    maintenance_rooms: int
    paid_count: int
    due_count: int
    overdue_count: int
    current_revenue: float
    potential_revenue: float
    occupancy_rate: int
    overdue: Sequence[OverdueTenant]
    late_fees_outstanding: float = 0.0
    next_rent_due: Optional[date] = None


def occupancy_rate(occupied: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(occupied / total * 100)


def compute_occupancy(
    rooms: Iterable[RoomRecord],
    guest_rooms: Iterable[GuestRoomRecord],
    bookings: Iterable[BookingRecord],
    as_of: date | None = None,
) -> OccupancyStats:
    """Occupancy, RevPAR and ADR across long-term and guest rooms.

    Guest revenue only counts bookings checked in since the start of the
    month containing ``as_of``.
    """

    month_start = (as_of or date.today()).replace(day=1)

    total_tenant_rooms = 0
    tenants_occupied = 0
    tenant_revenue = 0.0
    for room in rooms:
        if not room.room_number:
            continue
        total_tenant_rooms += 1
        if room.is_occupied:
            tenants_occupied += 1
            tenant_revenue += room.effective_rent

    total_guest_rooms = 0
    guests_occupied = 0
    for guest_room in guest_rooms:
        if not guest_room.room_number:
            continue
        total_guest_rooms += 1
        if guest_room.is_occupied:
            guests_occupied += 1

    guest_revenue = 0.0
    guest_nights = 0.0
    for booking in bookings:
        if booking.check_in_date is None or booking.check_in_date < month_start:
            continue
        if booking.total_amount > 0:
            guest_revenue += booking.total_amount
            guest_nights += booking.nights

    total_rooms = total_tenant_rooms + total_guest_rooms
    total_occupied = tenants_occupied + guests_occupied
    return OccupancyStats(
        total_rooms=total_rooms,
        total_occupied=total_occupied,
        total_tenant_rooms=total_tenant_rooms,
        tenants_occupied=tenants_occupied,
        total_guest_rooms=total_guest_rooms,
        guests_occupied=guests_occupied,
        overall_occupancy=occupancy_rate(total_occupied, total_rooms),
        tenant_occupancy=occupancy_rate(tenants_occupied, total_tenant_rooms),
        guest_occupancy=occupancy_rate(guests_occupied, total_guest_rooms),
        tenant_revenue=tenant_revenue,
        guest_revenue=guest_revenue,
        guest_nights=guest_nights,
        tenant_revpar=ratio(tenant_revenue, total_tenant_rooms),
        guest_revpar=ratio(guest_revenue, total_guest_rooms),
        tenant_adr=ratio(tenant_revenue, tenants_occupied) / DAYS_PER_MONTH,
        guest_adr=ratio(guest_revenue, guest_nights),
    )


def derive_payment_status(room: RoomRecord, as_of: date | None = None) -> str:
    """Payment status of ``room`` from its last payment date.

    Rooms that are not occupied have no status. Otherwise a payment since the
    first of the current month is ``Paid``, one since the first of the previous
    month is ``Due`` and anything older, or no payment at all, is ``Overdue``.
    """

    if not room.is_occupied:
        return ""
    as_of = as_of or date.today()
    previous_month_start, _ = last_month_range(as_of)
    paid_on = room.last_payment_date
    if paid_on is None:
        return PaymentStatus.OVERDUE
    if paid_on >= as_of.replace(day=1):
        return PaymentStatus.PAID
    if paid_on >= previous_month_start:
        return PaymentStatus.DUE
    return PaymentStatus.OVERDUE


def compute_tenant_stats(
    rooms: Iterable[RoomRecord],
    as_of: date | None = None,
    config: PropertyConfig | None = None,
) -> TenantStats:
    """Room status and payment status counts for the long-term rooms.

    Payment status is derived from each room's last payment date as of
    ``as_of``. Overdue tenants carry the configured late fee.
    """

    as_of = as_of or date.today()
    config = config or PropertyConfig()

    total = occupied = vacant = maintenance = 0
    paid = due = overdue_count = 0
    current_revenue = 0.0
    potential_revenue = 0.0
    overdue: List[OverdueTenant] = []

    for room in rooms:
        if not room.room_number:
            continue
        total += 1
        rent = room.effective_rent
        if room.status == RoomStatus.OCCUPIED:
            occupied += 1
            current_revenue += rent
        elif room.status == RoomStatus.VACANT:
            vacant += 1
        elif room.status == RoomStatus.MAINTENANCE:
            maintenance += 1
        potential_revenue += rent

        status = derive_payment_status(room, as_of)
        if status == PaymentStatus.PAID:
            paid += 1
        elif status == PaymentStatus.DUE:
            due += 1
        elif status == PaymentStatus.OVERDUE:
            overdue_count += 1
            overdue.append(
                OverdueTenant(
                    name=room.occupant_name,
                    room=room.room_number,
                    last_payment=room.last_payment_date,
                    email=room.email,
                    late_fee=config.late_fee_amount,
                )
            )

    return TenantStats(
        total_rooms=total,
        occupied_rooms=occupied,
        vacant_rooms=vacant,
        maintenance_rooms=maintenance,
        paid_count=paid,
        due_count=due,
        overdue_count=overdue_count,
        current_revenue=current_revenue,
        potential_revenue=potential_revenue,
        occupancy_rate=occupancy_rate(occupied, total),
        overdue=tuple(overdue),
        late_fees_outstanding=sum(tenant.late_fee for tenant in overdue),
        next_rent_due=next_rent_due(as_of, config.late_fee_days),
    )
