"""Helpers for reading and appending rows in the CSV table store."""

from __future__ import annotations

import csv
import logging
import math
import os
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from .models import (
    DEFAULT_CATEGORY,
    DEFAULT_PAYMENT_METHOD,
    BookingRecord,
    GuestRoomRecord,
    MaintenanceRequest,
    RoomRecord,
    Transaction,
)

logger = logging.getLogger(__name__)


BUDGET = "Budget"
TENANTS = "Tenants"
GUEST_ROOMS = "Guest Rooms"
GUEST_BOOKINGS = "Guest Room Bookings"
MAINTENANCE = "Maintenance Requests"
SETTINGS = "System Settings"

HEADERS: Dict[str, List[str]] = {
    BUDGET: [
        "Date",
        "Type",
        "Description",
        "Amount",
        "Category",
        "Payment Method",
        "Reference Number",
        "Tenant/Guest",
        "Receipt",
    ],
    TENANTS: [
        "Room Number",
        "Rental Price",
        "Negotiated Price",
        "Current Tenant Name",
        "Tenant Email",
        "Tenant Phone",
        "Move-In Date",
        "Security Deposit Paid",
        "Room Status",
        "Last Payment Date",
        "Payment Status",
        "Move-Out Date (Planned)",
        "Emergency Contact",
        "Lease End Date",
        "Notes",
    ],
    GUEST_ROOMS: [
        "Booking ID",
        "Room Number",
        "Room Name",
        "Room Type",
        "Max Occupancy",
        "Amenities",
        "Daily Rate",
        "Weekly Rate",
        "Monthly Rate",
        "Status",
        "Last Cleaned",
        "Maintenance Notes",
        "Check-In Date",
        "Check-Out Date",
        "Number of Nights",
        "Number of Guests",
        "Current Guest",
        "Purpose of Visit",
        "Special Requests",
        "Source",
        "Total Amount",
        "Payment Status",
        "Booking Status",
        "Notes",
    ],
    GUEST_BOOKINGS: [
        "Booking ID",
        "Timestamp",
        "Guest Name",
        "Email",
        "Phone",
        "Room Number",
        "Check-In Date",
        "Check-Out Date",
        "Number of Nights",
        "Number of Guests",
        "Purpose of Visit",
        "Special Requests",
        "Total Amount",
        "Payment Status",
        "Booking Status",
        "Notes",
    ],
    MAINTENANCE: [
        "Request ID",
        "Timestamp",
        "Room/Area",
        "Issue Type",
        "Priority",
        "Description",
        "Reported By",
        "Contact Info",
        "Assigned To",
        "Status",
        "Estimated Cost",
        "Actual Cost",
        "Date Started",
        "Date Completed",
        "Parts Used",
        "Labor Hours",
        "Photos",
        "Notes",
    ],
    SETTINGS: [
        "Setting Key",
        "Setting Value",
        "Description",
        "Category",
        "Last Modified",
        "Modified By",
    ],
}

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d %B %Y", "%B %d, %Y")


class MissingTableError(FileNotFoundError):
    """Raised when a table has no backing CSV file in the store."""


def _iter_clean_rows(path: Path) -> Iterator[List[str]]:
    with path.open(newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.reader(csvfile)
        for row in reader:
            if not any(field.strip() for field in row):
                continue
            yield row


def _ends_with_newline(path: Path) -> bool:
    with path.open("rb") as handle:
        handle.seek(0, os.SEEK_END)
        if handle.tell() == 0:
            return True
        handle.seek(-1, os.SEEK_END)
        return handle.read(1) in (b"\n", b"\r")


class TableStore:
    """A directory of CSV files, one per table, each with a fixed header."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, table: str) -> Path:
        return self.root / f"{table}.csv"

    def has_table(self, table: str) -> bool:
        return self.path_for(table).exists()

    def ensure_table(self, table: str) -> Path:
        """Create ``table`` with its header row if it does not exist yet."""

        path = self.path_for(table)
        if not path.exists():
            self.root.mkdir(parents=True, exist_ok=True)
            with path.open("w", newline="", encoding="utf-8") as handle:
                csv.writer(handle).writerow(HEADERS[table])
            logger.info("Created table %s at %s", table, path)
        return path

    def read_rows(self, table: str) -> List[Dict[str, str]]:
        """Return every data row of ``table`` keyed by column header."""

        path = self.path_for(table)
        if not path.exists():
            raise MissingTableError(f"Table '{table}' not found: {path}")

        header = HEADERS[table]
        rows = list(_iter_clean_rows(path))
        if not rows:
            return []
        first, *data_rows = rows
        if [cell.strip() for cell in first] != header:
            raise ValueError(f"Unexpected CSV header in table '{table}'")

        records: List[Dict[str, str]] = []
        for raw in data_rows:
            padded = list(raw) + [""] * (len(header) - len(raw))
            records.append(dict(zip(header, padded)))
        return records

    def append_row(self, table: str, row: Iterable[Any]) -> int:
        """Append ``row`` to ``table`` and return its 1-based data row position."""

        path = self.path_for(table)
        if not path.exists():
            raise MissingTableError(f"Table '{table}' not found: {path}")
        values = list(row)
        header = HEADERS[table]
        if len(values) > len(header):
            logger.warning(
                "Row length (%d) exceeds header length (%d) for table %s",
                len(values),
                len(header),
                table,
            )
        terminated = _ends_with_newline(path)
        with path.open("a", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            if not terminated:
                handle.write(writer.dialect.lineterminator)
            writer.writerow(values)
        return sum(1 for _ in _iter_clean_rows(path)) - 1

    def write_rows(self, table: str, records: Iterable[Mapping[str, Any]]) -> None:
        """Replace the data rows of ``table`` with ``records`` keyed by header."""

        path = self.path_for(table)
        if not path.exists():
            raise MissingTableError(f"Table '{table}' not found: {path}")
        header = HEADERS[table]
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(header)
            for record in records:
                writer.writerow([record.get(column, "") for column in header])


def coerce_amount(value: Any) -> float:
    """Turn a stored cell into a float, treating anything unreadable as ``0``."""

    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "").replace("$", "")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


def _optional_amount(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return coerce_amount(value)


def parse_date(value: Any) -> Optional[date]:
    """Return ``value`` as a date, or ``None`` when it cannot be read."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _checked_date(value: Any, table: str, position: int) -> Optional[date]:
    parsed = parse_date(value)
    if parsed is None and str(value or "").strip():
        logger.warning(
            "Unparsable date %r in table %s row %d; row excluded from dated reports",
            value,
            table,
            position,
        )
    return parsed


def _text(record: Mapping[str, Any], key: str) -> str:
    return str(record.get(key) or "").strip()


def parse_transaction(record: Mapping[str, Any], position: int = 0) -> Transaction:
    return Transaction(
        date=_checked_date(record.get("Date"), BUDGET, position),
        kind=_text(record, "Type"),
        description=_text(record, "Description"),
        amount=coerce_amount(record.get("Amount")),
        category=_text(record, "Category") or DEFAULT_CATEGORY,
        payment_method=_text(record, "Payment Method") or DEFAULT_PAYMENT_METHOD,
        reference=_text(record, "Reference Number"),
        related_party=_text(record, "Tenant/Guest"),
        receipt_ref=_text(record, "Receipt"),
    )


def parse_room(record: Mapping[str, Any], position: int = 0) -> RoomRecord:
    return RoomRecord(
        room_number=_text(record, "Room Number"),
        standard_rent=coerce_amount(record.get("Rental Price")),
        negotiated_rent=_optional_amount(record.get("Negotiated Price")),
        occupant_name=_text(record, "Current Tenant Name"),
        status=_text(record, "Room Status"),
        last_payment_date=_checked_date(record.get("Last Payment Date"), TENANTS, position),
        email=_text(record, "Tenant Email"),
        security_deposit=coerce_amount(record.get("Security Deposit Paid")),
    )


def parse_guest_room(record: Mapping[str, Any], position: int = 0) -> GuestRoomRecord:
    return GuestRoomRecord(
        room_number=_text(record, "Room Number"),
        status=_text(record, "Status"),
    )


def parse_booking(record: Mapping[str, Any], position: int = 0) -> BookingRecord:
    return BookingRecord(
        check_in_date=_checked_date(record.get("Check-In Date"), GUEST_BOOKINGS, position),
        nights=coerce_amount(record.get("Number of Nights")),
        total_amount=coerce_amount(record.get("Total Amount")),
        room_number=_text(record, "Room Number"),
    )


def parse_maintenance_request(record: Mapping[str, Any], position: int = 0) -> MaintenanceRequest:
    return MaintenanceRequest(
        issue_type=_text(record, "Issue Type") or DEFAULT_CATEGORY,
        actual_cost=coerce_amount(record.get("Actual Cost")),
    )


def load_transactions(store: TableStore) -> List[Transaction]:
    """Load the ledger from the ``Budget`` table."""

    return [
        parse_transaction(record, idx)
        for idx, record in enumerate(store.read_rows(BUDGET), start=1)
    ]


def load_rooms(store: TableStore) -> List[RoomRecord]:
    return [parse_room(r, idx) for idx, r in enumerate(store.read_rows(TENANTS), start=1)]


def load_guest_rooms(store: TableStore) -> List[GuestRoomRecord]:
    return [
        parse_guest_room(r, idx)
        for idx, r in enumerate(store.read_rows(GUEST_ROOMS), start=1)
    ]


def load_bookings(store: TableStore) -> List[BookingRecord]:
    return [
        parse_booking(r, idx)
        for idx, r in enumerate(store.read_rows(GUEST_BOOKINGS), start=1)
    ]


def load_maintenance_requests(store: TableStore) -> List[MaintenanceRequest]:
    return [
        parse_maintenance_request(r, idx)
        for idx, r in enumerate(store.read_rows(MAINTENANCE), start=1)
    ]


def filter_by_date(
    transactions: Iterable[Transaction], start: date, end: date
) -> List[Transaction]:
    """Return transactions that occurred between ``start`` and ``end`` inclusive."""

    selected = [t for t in transactions if t.date is not None and start <= t.date <= end]
    logger.debug("Selected %d transactions between %s and %s", len(selected), start, end)
    return selected


def manual_entry(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``data`` with the amount signed by its ``type``.

    ``Expense`` entries are always stored as negative amounts and every other
    type as positive, whatever sign the caller typed.
    """

    entry = dict(data)
    amount = abs(coerce_amount(data.get("amount")))
    entry["amount"] = -amount if data.get("type") == "Expense" else amount
    return entry


def record_transaction(store: TableStore, data: Mapping[str, Any]) -> int:
    """Append one ledger row built from ``data`` and return its position.

    A missing date defaults to today. A date that is given but cannot be read
    raises ``ValueError`` and nothing is written.
    """

    raw_date = data.get("date")
    if raw_date is None or not str(raw_date).strip():
        when = date.today()
    else:
        when = parse_date(raw_date)
        if when is None:
            raise ValueError(f"Unrecognised transaction date: {raw_date!r}")
    amount = coerce_amount(data.get("amount"))
    kind = data.get("type") or "Other"
    row = [
        when.isoformat(),
        kind,
        data.get("description") or "",
        amount,
        data.get("category") or DEFAULT_CATEGORY,
        data.get("payment_method") or "",
        data.get("reference") or "",
        data.get("related_party") or data.get("tenant") or "",
        data.get("receipt") or "",
    ]
    position = store.append_row(BUDGET, row)
    logger.info("Financial transaction logged: %s - %.2f", kind, amount)
    return position


def write_transactions_csv(path: str | Path, transactions: Iterable[Transaction]) -> int:
    """Write ``transactions`` to ``path`` using the ledger header; return the row count."""

    count = 0
    with Path(path).open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADERS[BUDGET])
        for tx in transactions:
            writer.writerow(
                [
                    tx.date.isoformat() if tx.date else "",
                    tx.kind,
                    tx.description,
                    tx.amount,
                    tx.category,
                    tx.payment_method,
                    tx.reference,
                    tx.related_party,
                    tx.receipt_ref,
                ]
            )
            count += 1
    return count
