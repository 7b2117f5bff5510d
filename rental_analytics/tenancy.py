"""Ledger entries and room updates for rent payments, move-ins and move-outs."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Mapping

from .loader import TENANTS, TableStore, coerce_amount, parse_room, record_transaction
from .models import PaymentStatus, RoomRecord, RoomStatus
from .occupancy import derive_payment_status

logger = logging.getLogger(__name__)


def rent_payment_entry(
    room: RoomRecord, paid_on: date, amount: Any = None, method: str = ""
) -> Dict[str, Any]:
    """Ledger entry for a rent payment; ``amount`` defaults to the effective rent."""

    rent = coerce_amount(amount) or room.effective_rent
    description = f"Rent payment from {room.occupant_name} - Room {room.room_number}"
    if method:
        description += f" ({method})"
    return {
        "date": paid_on,
        "type": "Rent Income",
        "description": description,
        "amount": rent,
        "category": "Rent",
        "payment_method": method,
        "tenant": room.occupant_name,
        "reference": f"RENT-{room.room_number}-{paid_on:%Y%m}",
    }


def deposit_entry(
    room_number: str, tenant: str, deposit: Any, moved_in: date
) -> Dict[str, Any] | None:
    """Ledger entry for a security deposit taken at move-in, if one was paid."""

    amount = coerce_amount(deposit)
    if amount <= 0:
        return None
    return {
        "date": moved_in,
        "type": "Security Deposit",
        "description": f"Security deposit from {tenant} - Room {room_number}",
        "amount": amount,
        "category": "Deposit",
        "tenant": tenant,
        "reference": f"DEPOSIT-{room_number}-{moved_in:%Y%m%d}",
    }


def move_out_entries(
    room_number: str,
    tenant: str,
    deposit: Any,
    deductions: Any,
    moved_out: date,
    reason: str = "",
) -> List[Dict[str, Any]]:
    """Ledger entries for a move-out: the deposit refund and any deduction kept.

    The refund is ``deposit - deductions`` paid out as a negative amount. The
    deduction is income booked under ``Maintenance``.
    """

    held = coerce_amount(deposit)
    kept = coerce_amount(deductions)
    refund = held - kept
    entries: List[Dict[str, Any]] = []
    if refund > 0:
        entries.append(
            {
                "date": moved_out,
                "type": "Security Deposit Refund",
                "description": f"Security deposit refund to {tenant} - Room {room_number}",
                "amount": -refund,
                "category": "Deposit Refund",
                "tenant": tenant,
                "reference": f"REFUND-{room_number}-{moved_out:%Y%m%d}",
            }
        )
    if kept > 0:
        entries.append(
            {
                "date": moved_out,
                "type": "Deposit Deduction",
                "description": f"Deposit deduction - {tenant} - {reason}".rstrip(" -"),
                "amount": kept,
                "category": "Maintenance",
                "tenant": tenant,
                "reference": f"DEDUCTION-{room_number}-{moved_out:%Y%m%d}",
            }
        )
    return entries


def _update_room(store: TableStore, room_number: str, changes: Mapping[str, Any]) -> Dict[str, str]:
    records = store.read_rows(TENANTS)
    for record in records:
        if record["Room Number"].strip() == room_number:
            record.update({key: "" if value is None else str(value) for key, value in changes.items()})
            store.write_rows(TENANTS, records)
            return record
    raise ValueError(f"Room {room_number} not found in table '{TENANTS}'")


def find_room(store: TableStore, room_number: str) -> RoomRecord:
    for position, record in enumerate(store.read_rows(TENANTS), start=1):
        if record["Room Number"].strip() == room_number:
            return parse_room(record, position)
    raise ValueError(f"Room {room_number} not found in table '{TENANTS}'")


def record_rent_payment(
    store: TableStore, room_number: str, paid_on: date, amount: Any = None, method: str = ""
) -> int:
    """Log a rent payment and mark the room as paid; return the ledger position."""

    room = find_room(store, room_number)
    position = record_transaction(store, rent_payment_entry(room, paid_on, amount, method))
    _update_room(
        store,
        room_number,
        {"Last Payment Date": paid_on.isoformat(), "Payment Status": PaymentStatus.PAID},
    )
    logger.info("Rent recorded for room %s on %s", room_number, paid_on)
    return position


def complete_move_in(
    store: TableStore,
    room_number: str,
    tenant: str,
    moved_in: date,
    deposit: Any = 0,
    negotiated_rent: Any = None,
    email: str = "",
) -> None:
    """Occupy ``room_number`` and log the security deposit when one was paid."""

    _update_room(
        store,
        room_number,
        {
            "Current Tenant Name": tenant,
            "Tenant Email": email,
            "Move-In Date": moved_in.isoformat(),
            "Security Deposit Paid": coerce_amount(deposit),
            "Room Status": RoomStatus.OCCUPIED,
            "Payment Status": PaymentStatus.DUE,
            "Negotiated Price": negotiated_rent if negotiated_rent not in (None, "") else "",
        },
    )
    entry = deposit_entry(room_number, tenant, deposit, moved_in)
    if entry is not None:
        record_transaction(store, entry)
    logger.info("Move-in completed for room %s (%s)", room_number, tenant)


def complete_move_out(
    store: TableStore,
    room_number: str,
    moved_out: date,
    deductions: Any = 0,
    reason: str = "",
) -> List[Dict[str, Any]]:
    """Vacate ``room_number``, settle its deposit and return the ledger entries logged."""

    room = find_room(store, room_number)
    entries = move_out_entries(
        room_number, room.occupant_name, room.security_deposit, deductions, moved_out, reason
    )
    for entry in entries:
        record_transaction(store, entry)
    _update_room(
        store,
        room_number,
        {
            "Room Status": RoomStatus.VACANT,
            "Move-Out Date (Planned)": moved_out.isoformat(),
            "Payment Status": "",
            "Current Tenant Name": "",
            "Tenant Email": "",
            "Tenant Phone": "",
            "Last Payment Date": "",
            "Emergency Contact": "",
            "Lease End Date": "",
            "Notes": f"MOVED OUT: {moved_out.isoformat()} - former tenant {room.occupant_name}",
        },
    )
    logger.info("Move-out completed for room %s", room_number)
    return entries


def refresh_payment_statuses(store: TableStore, as_of: date | None = None) -> int:
    """Rewrite the stored payment status of every room; return the occupied count."""

    records = store.read_rows(TENANTS)
    updated = 0
    for position, record in enumerate(records, start=1):
        status = derive_payment_status(parse_room(record, position), as_of)
        record["Payment Status"] = status
        if status:
            updated += 1
    store.write_rows(TENANTS, records)
    logger.info("Updated payment status for %d tenants", updated)
    return updated
