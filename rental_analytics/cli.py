"""Command line entry point for the rental property reports."""

from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path
from typing import Iterable

from .config import PropertyConfig, load_settings
from .dashboard import gather_dashboard, load_snapshot
from .excel import export_workbook
from .formatting import (
    format_dashboard,
    format_maintenance_report,
    format_occupancy,
    format_period_analysis,
    format_profitability,
    format_tax_summary,
    format_tenant_stats,
)
from .insights import occupancy_insights, profitability_insights
from .loader import (
    HEADERS,
    SETTINGS,
    MissingTableError,
    TableStore,
    filter_by_date,
    load_bookings,
    load_guest_rooms,
    load_maintenance_requests,
    load_rooms,
    load_transactions,
    manual_entry,
    record_transaction,
    write_transactions_csv,
)
from .occupancy import compute_occupancy, compute_tenant_stats
from .periods import month_range, quarter_start, year_range
from .summary import (
    analyze_period,
    build_maintenance_cost_report,
    compute_profitability,
    compute_tax_summary,
)
from .tenancy import (
    complete_move_in,
    complete_move_out,
    record_rent_payment,
    refresh_payment_statuses,
)

logger = logging.getLogger(__name__)


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--data-dir",
        type=Path,
        default=Path("."),
        help="Directory holding one CSV file per table (default: current directory).",
    )
    common.add_argument(
        "--as-of",
        type=date.fromisoformat,
        help="Override the date used to determine the reporting periods.",
    )
    common.add_argument(
        "--settings",
        type=Path,
        help=(
            "Settings CSV with 'Setting Key' and 'Setting Value' columns. "
            "Defaults to 'System Settings.csv' in the data directory when present."
        ),
    )
    common.add_argument(
        "--output",
        type=Path,
        help="Write the report to the specified file instead of printing to stdout.",
    )
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return common


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    common = _common_options()
    parser = argparse.ArgumentParser(
        description="Financial and occupancy reports for a small rental property."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", parents=[common], help="Income and expense report.")
    report.add_argument("--start", type=date.fromisoformat, help="First day of the window.")
    report.add_argument("--end", type=date.fromisoformat, help="Last day of the window.")

    sub.add_parser("profitability", parents=[common], help="Month, quarter and year ratios.")
    sub.add_parser("occupancy", parents=[common], help="Occupancy, RevPAR and ADR.")
    sub.add_parser("tenants", parents=[common], help="Room and payment status overview.")
    sub.add_parser("maintenance", parents=[common], help="Maintenance costs by issue type.")
    sub.add_parser("dashboard", parents=[common], help="Every report for the current month.")

    tax = sub.add_parser("tax", parents=[common], help="Tax-deductible summary for a year.")
    tax.add_argument("--year", type=int, help="Tax year (default: year of --as-of).")

    sub.add_parser("init", parents=[common], help="Create any missing table files.")

    entry = sub.add_parser("add-entry", parents=[common], help="Record a manual ledger entry.")
    entry.add_argument("--type", choices=["Income", "Expense"], required=True)
    entry.add_argument("--amount", required=True)
    entry.add_argument("--description", required=True)
    entry.add_argument("--date", dest="entry_date", type=date.fromisoformat)
    entry.add_argument("--category", default="")
    entry.add_argument("--method", default="")
    entry.add_argument("--reference", default="")
    entry.add_argument("--tenant", default="")

    rent = sub.add_parser("record-rent", parents=[common], help="Record a tenant's rent payment.")
    rent.add_argument("--room", required=True)
    rent.add_argument(
        "--date", dest="paid_on", type=date.fromisoformat, help="Payment date (default: --as-of)."
    )
    rent.add_argument("--amount", help="Amount paid (default: the room's effective rent).")
    rent.add_argument("--method", default="")

    move_in = sub.add_parser("move-in", parents=[common], help="Move a tenant into a room.")
    move_in.add_argument("--room", required=True)
    move_in.add_argument("--tenant", required=True)
    move_in.add_argument(
        "--date", dest="moved_in", type=date.fromisoformat, help="Move-in date (default: --as-of)."
    )
    move_in.add_argument("--deposit", default="0")
    move_in.add_argument("--rent", help="Negotiated monthly rent.")
    move_in.add_argument("--email", default="")

    move_out = sub.add_parser(
        "move-out", parents=[common], help="Move a tenant out and settle the deposit."
    )
    move_out.add_argument("--room", required=True)
    move_out.add_argument(
        "--date", dest="moved_out", type=date.fromisoformat, help="Move-out date (default: --as-of)."
    )
    move_out.add_argument("--deductions", default="0")
    move_out.add_argument("--reason", default="")

    sub.add_parser("check-payments", parents=[common], help="Refresh stored payment statuses.")

    export = sub.add_parser("export", parents=[common], help="Export a window of the ledger.")
    export.add_argument("--start", type=date.fromisoformat, required=True)
    export.add_argument("--end", type=date.fromisoformat, required=True)
    export.add_argument("--csv", type=Path, help="Write the window's transactions as CSV.")
    export.add_argument("--excel", type=Path, help="Write an accountant workbook (.xlsx).")
    return parser.parse_args(argv)


def _load_config(args: argparse.Namespace, store: TableStore) -> PropertyConfig:
    settings_path = args.settings or store.path_for(SETTINGS)
    if args.settings or settings_path.exists():
        return load_settings(settings_path)
    return PropertyConfig()


def _report(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    start, end = month_range(today)
    analysis = analyze_period(load_transactions(store), args.start or start, args.end or end)
    return format_period_analysis(analysis)


def _profitability(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    transactions = load_transactions(store)
    monthly = compute_profitability(transactions, today.replace(day=1), today)
    quarterly = compute_profitability(transactions, quarter_start(today), today)
    yearly = compute_profitability(transactions, date(today.year, 1, 1), today)
    insights = profitability_insights(monthly, quarterly, yearly, today.month)
    return format_profitability(
        [("Month", monthly), ("Quarter", quarterly), ("Year", yearly)], insights
    )


def _occupancy(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    stats = compute_occupancy(
        load_rooms(store), load_guest_rooms(store), load_bookings(store), as_of=today
    )
    return format_occupancy(stats, occupancy_insights(stats, config), config)


def _tenants(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    return format_tenant_stats(compute_tenant_stats(load_rooms(store), today, config))


def _maintenance(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    requests = load_maintenance_requests(store)
    return format_maintenance_report(build_maintenance_cost_report(requests))


def _tax(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    year_start, year_end = year_range(args.year or today.year)
    summary = compute_tax_summary(load_transactions(store), year_start, year_end, config)
    return format_tax_summary(summary, config)


def _dashboard(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    return format_dashboard(gather_dashboard(load_snapshot(store), today, config), config)


def _init(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    created = []
    for table in HEADERS:
        if not store.has_table(table):
            store.ensure_table(table)
            created.append(table)
    if not created:
        return "All tables already exist."
    return "Created tables: " + ", ".join(created)


def _add_entry(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    entry = manual_entry(
        {
            "date": args.entry_date or today,
            "type": args.type,
            "description": args.description,
            "amount": args.amount,
            "category": args.category,
            "payment_method": args.method,
            "reference": args.reference,
            "tenant": args.tenant,
        }
    )
    position = record_transaction(store, entry)
    return f"Recorded {args.type.lower()} of {abs(entry['amount']):,.2f} at row {position}."


def _record_rent(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    position = record_rent_payment(store, args.room, args.paid_on or today, args.amount, args.method)
    return f"Recorded rent for room {args.room} at row {position}."


def _move_in(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    complete_move_in(
        store,
        args.room,
        args.tenant,
        args.moved_in or today,
        deposit=args.deposit,
        negotiated_rent=args.rent,
        email=args.email,
    )
    return f"Moved {args.tenant} into room {args.room}."


def _move_out(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    entries = complete_move_out(
        store, args.room, args.moved_out or today, args.deductions, args.reason
    )
    lines = [f"Room {args.room} is now vacant."]
    lines += [f"{entry['type']}: {entry['amount']:,.2f}" for entry in entries]
    return "\n".join(lines)


def _check_payments(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    updated = refresh_payment_statuses(store, today)
    return f"Updated payment status for {updated} tenants."


def _export(args: argparse.Namespace, store: TableStore, config: PropertyConfig, today: date) -> str:
    if not args.csv and not args.excel:
        raise SystemExit("Nothing to export: pass --csv and/or --excel.")
    transactions = load_transactions(store)
    window = filter_by_date(transactions, args.start, args.end)
    lines = []
    if args.csv:
        count = write_transactions_csv(args.csv, window)
        lines.append(f"Wrote {count} transactions to {args.csv}")
    if args.excel:
        analysis = analyze_period(transactions, args.start, args.end)
        tax_summary = compute_tax_summary(transactions, args.start, args.end, config)
        export_workbook(args.excel, analysis, tax_summary, window, config)
        lines.append(f"Wrote workbook to {args.excel}")
    return "\n".join(lines)


COMMANDS = {
    "report": _report,
    "profitability": _profitability,
    "occupancy": _occupancy,
    "tenants": _tenants,
    "maintenance": _maintenance,
    "tax": _tax,
    "dashboard": _dashboard,
    "init": _init,
    "add-entry": _add_entry,
    "record-rent": _record_rent,
    "move-in": _move_in,
    "move-out": _move_out,
    "check-payments": _check_payments,
    "export": _export,
}


def run(argv: Iterable[str] | None = None) -> str:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    store = TableStore(args.data_dir)
    if args.command != "init" and not args.data_dir.is_dir():
        raise SystemExit(f"Data directory not found: {args.data_dir}")
    today = args.as_of or date.today()
    logger.debug("Running %s against %s as of %s", args.command, store.root, today)

    try:
        config = _load_config(args, store)
        output_text = COMMANDS[args.command](args, store, config, today)
    except (MissingTableError, FileNotFoundError) as exc:
        raise SystemExit(str(exc)) from exc
    except ValueError as exc:
        raise SystemExit(f"Invalid data: {exc}") from exc

    if args.output:
        args.output.write_text(output_text + "\n", encoding="utf-8")
    else:
        print(output_text)
    return output_text


def main() -> None:
    run()


if __name__ == "__main__":
    main()
