import csv
from datetime import date

import pytest

from rental_analytics.loader import (
    BUDGET,
    GUEST_BOOKINGS,
    HEADERS,
    TENANTS,
    MissingTableError,
    TableStore,
    coerce_amount,
    load_bookings,
    load_rooms,
    load_transactions,
    manual_entry,
    parse_date,
    record_transaction,
    write_transactions_csv,
)


def write_table(store, table, rows):
    path = store.path_for(table)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADERS[table])
        writer.writerows(rows)


def test_coerce_amount_defaults_to_zero():
    assert coerce_amount("1,250.50") == 1250.5
    assert coerce_amount("$-40") == -40
    assert coerce_amount("") == 0
    assert coerce_amount(None) == 0
    assert coerce_amount("n/a") == 0
    assert coerce_amount("nan") == 0
    assert coerce_amount(True) == 0
    assert coerce_amount(12) == 12.0


def test_parse_date_formats():
    assert parse_date("2024-03-02") == date(2024, 3, 2)
    assert parse_date("03/02/2024") == date(2024, 3, 2)
    assert parse_date(date(2024, 3, 2)) == date(2024, 3, 2)
    assert parse_date("yesterday") is None
    assert parse_date("") is None


def test_load_transactions_applies_defaults(tmp_path, caplog):
    store = TableStore(tmp_path)
    write_table(
        store,
        BUDGET,
        [
            ["2024-03-02", "Rent Payment", "Room 1", "1000", "Rent", "Zelle", "R-1", "Ann", ""],
            ["2024-03-05", "Expense", "Fix sink", "-200", "", "", "", "", ""],
            ["not a date", "Expense", "Mystery", "abc", "Supplies", "Cash", "", "", ""],
            ["", "", "", "", "", "", "", "", ""],
        ],
    )

    with caplog.at_level("WARNING"):
        transactions = load_transactions(store)

    assert len(transactions) == 3
    rent, sink, mystery = transactions
    assert rent.amount == 1000
    assert rent.related_party == "Ann"
    assert sink.category == "Other"
    assert sink.payment_method == "Not Specified"
    assert mystery.date is None
    assert mystery.amount == 0
    assert "Unparsable date" in caplog.text


def test_short_rows_are_padded(tmp_path):
    store = TableStore(tmp_path)
    write_table(store, BUDGET, [["2024-03-02", "Income", "Deposit", "300"]])

    [tx] = load_transactions(store)
    assert tx.category == "Other"
    assert tx.reference == ""


def test_missing_table_raises(tmp_path):
    with pytest.raises(MissingTableError):
        load_transactions(TableStore(tmp_path))


def test_unexpected_header_raises(tmp_path):
    path = tmp_path / f"{BUDGET}.csv"
    path.write_text("When,What\n2024-01-01,Rent\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_transactions(TableStore(tmp_path))


def test_load_rooms_and_bookings(tmp_path):
    store = TableStore(tmp_path)
    write_table(
        store,
        TENANTS,
        [
            ["101", "550", "", "Ann", "ann@example.com", "", "2023-09-01", "550",
             "Occupied", "2024-03-01", "Paid", "", "", "2024-08-31", ""],
            ["102", "550", "500", "", "", "", "", "", "Vacant", "", "", "", "", "", ""],
        ],
    )
    write_table(
        store,
        GUEST_BOOKINGS,
        [["B-1", "", "Guest", "", "", "G1", "2024-03-04", "2024-03-06", "2", "1", "", "", "180"]],
    )

    first, second = load_rooms(store)
    assert first.negotiated_rent is None
    assert first.effective_rent == 550
    assert first.email == "ann@example.com"
    assert first.security_deposit == 550
    assert first.last_payment_date == date(2024, 3, 1)
    assert second.effective_rent == 500
    [booking] = load_bookings(store)
    assert booking.check_in_date == date(2024, 3, 4)
    assert booking.nights == 2
    assert booking.total_amount == 180


def test_record_transaction_appends_row(tmp_path):
    store = TableStore(tmp_path)
    store.ensure_table(BUDGET)

    first = record_transaction(store, {"date": date(2024, 3, 2), "type": "Rent Payment", "amount": 800})
    second = record_transaction(store, {"description": "No details"})

    assert (first, second) == (1, 2)
    rent, blank = load_transactions(store)
    assert rent.amount == 800
    assert rent.category == "Other"
    assert blank.kind == "Other"
    assert blank.amount == 0
    assert blank.date == date.today()


def test_manual_entry_signs_amount_by_type():
    assert manual_entry({"type": "Expense", "amount": "45"})["amount"] == -45
    assert manual_entry({"type": "Expense", "amount": -45})["amount"] == -45
    assert manual_entry({"type": "Income", "amount": "-120"})["amount"] == 120
    assert manual_entry({"type": "Income", "amount": "oops"})["amount"] == 0


def test_append_to_missing_table_raises(tmp_path):
    with pytest.raises(MissingTableError):
        TableStore(tmp_path).append_row(BUDGET, ["2024-01-01"])


def test_write_transactions_csv_round_trips_window(tmp_path):
    store = TableStore(tmp_path / "data")
    store.ensure_table(BUDGET)
    record_transaction(store, {"date": "2024-03-02", "type": "Income", "amount": 100, "category": "Rent"})
    transactions = load_transactions(store)

    out = tmp_path / "export.csv"
    assert write_transactions_csv(out, transactions) == 1
    with out.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == HEADERS[BUDGET]
    assert rows[1][:5] == ["2024-03-02", "Income", "", "100.0", "Rent"]


def test_append_after_row_without_trailing_newline(tmp_path):
    store = TableStore(tmp_path)
    header = ",".join(HEADERS[BUDGET])
    store.path_for(BUDGET).write_text(
        header + "\r\n2024-03-02,Rent Payment,Room 1 rent,1000,Rent,Cash,,,", encoding="utf-8"
    )

    position = record_transaction(
        store, {"date": "2024-03-05", "type": "Expense", "amount": -200, "category": "Maintenance"}
    )

    assert position == 2
    rent, repair = load_transactions(store)
    assert (rent.date, rent.amount, rent.category) == (date(2024, 3, 2), 1000, "Rent")
    assert (repair.date, repair.amount, repair.category) == (date(2024, 3, 5), -200, "Maintenance")


def test_record_transaction_rejects_unreadable_date(tmp_path):
    store = TableStore(tmp_path)
    store.ensure_table(BUDGET)

    with pytest.raises(ValueError, match="31/03/2024"):
        record_transaction(store, {"date": "31/03/2024", "type": "Income", "amount": 100})

    assert load_transactions(store) == []


def test_write_rows_replaces_table_body(tmp_path):
    store = TableStore(tmp_path)
    write_table(store, TENANTS, [["101", "550"], ["102", "600"]])

    records = store.read_rows(TENANTS)
    records[1]["Room Status"] = "Vacant"
    store.write_rows(TENANTS, records[1:])

    [room] = load_rooms(store)
    assert room.room_number == "102"
    assert room.status == "Vacant"
