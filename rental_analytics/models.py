"""Data models used by the rental analytics engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


DEFAULT_CATEGORY = "Other"
DEFAULT_PAYMENT_METHOD = "Not Specified"


class RoomStatus:
    VACANT = "Vacant"
    OCCUPIED = "Occupied"
    MAINTENANCE = "Maintenance"
    PENDING = "Pending"


class GuestRoomStatus:
    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    MAINTENANCE = "Maintenance"


class PaymentStatus:
    PAID = "Paid"
    DUE = "Due"
    OVERDUE = "Overdue"


@dataclass(frozen=True)
class Transaction:
    """Represents a single row of the ``Budget`` ledger table.

    ``date`` is ``None`` when the stored value could not be parsed; such rows
    never fall inside a reporting window.
    """

    date: Optional[date]
    kind: str
    description: str
    amount: float
    category: str = DEFAULT_CATEGORY
    payment_method: str = DEFAULT_PAYMENT_METHOD
    reference: str = ""
    related_party: str = ""
    receipt_ref: str = ""

    @property
    def is_income(self) -> bool:
        """Return ``True`` when the transaction represents money received."""

        return self.amount > 0

    @property
    def is_expense(self) -> bool:
        """Return ``True`` when the transaction represents money paid out."""

        return self.amount < 0


@dataclass(frozen=True)
class RoomRecord:
    """A long-term room from the ``Tenants`` table."""

    room_number: str
    standard_rent: float
    negotiated_rent: Optional[float]
    occupant_name: str
    status: str
    last_payment_date: Optional[date] = None
    email: str = ""
    security_deposit: float = 0.0

    @property
    def effective_rent(self) -> float:
        if self.negotiated_rent is not None:
            return self.negotiated_rent
        return self.standard_rent

    @property
    def is_occupied(self) -> bool:
        return self.status == RoomStatus.OCCUPIED


@dataclass(frozen=True)
class GuestRoomRecord:
    room_number: str
    status: str

    @property
    def is_occupied(self) -> bool:
        return self.status == GuestRoomStatus.OCCUPIED


@dataclass(frozen=True)
class BookingRecord:
    check_in_date: Optional[date]
    nights: float
    total_amount: float
    room_number: str = ""


@dataclass(frozen=True)
class MaintenanceRequest:
    issue_type: str
    actual_cost: float
