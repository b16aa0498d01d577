import argparse
import json
import logging
import os
import sys
from dataclasses import dataclass
from datetime import date

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO

from services.backup_service import BackupService
from services.calendar_service import CalendarService
from services.dashboard_service import DashboardService
from services.forecast_service import ForecastService
from services.report_service import SORT_KEYS, ReportService
from services.transaction_service import TransactionService

from utils import app_config
from utils.constants import APP_NAME, FREQUENCIES, FREQUENCY_LABELS, TRANSACTION_TYPES
from utils.currency import format_compact, format_currency, format_signed
from utils.date_helpers import format_date, friendly_month, parse_date, parse_month, today
from utils.recurrence import normalize_frequency

logger = logging.getLogger(__name__)

WEEKDAY_HEADERS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass
class App:
    db: DatabaseManager
    transactions: TransactionService
    calendar: CalendarService
    dashboard: DashboardService
    forecast: ForecastService
    reports: ReportService
    backups: BackupService

    @property
    def symbol(self) -> str:
        return self.db.get_setting("currency_symbol", "$")


def build_app(db_folder: str | None = None, backup_folder: str | None = None) -> App:
    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager.open(db_folder=db_folder or app_config.get_db_folder())

    # ── DAOs ─────────────────────────────────────────────────────────────────
    tx_dao = TransactionDAO(db)

    # ── Services ─────────────────────────────────────────────────────────────
    tx_svc = TransactionService(tx_dao)
    return App(
        db=db,
        transactions=tx_svc,
        calendar=CalendarService(tx_svc),
        dashboard=DashboardService(tx_svc),
        forecast=ForecastService(tx_svc),
        reports=ReportService(tx_svc),
        backups=BackupService(
            db, tx_dao, tx_svc, backup_folder or app_config.get_backup_folder()
        ),
    )


def _date_arg(value: str) -> date:
    d = parse_date(value)
    if d is None:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r} (use YYYY-MM-DD)")
    return d


def _month_arg(value: str) -> date:
    d = parse_month(value)
    if d is None:
        raise argparse.ArgumentTypeError(f"invalid month: {value!r} (use YYYY-MM)")
    return d


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="budget", description=APP_NAME)
    p.add_argument("--db-folder", help="Directory holding the database file")
    p.add_argument("--backup-folder", help="Directory holding CSV backups")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Record an expense or income")
    add.add_argument("type", choices=TRANSACTION_TYPES)
    add.add_argument("--name", required=True)
    add.add_argument("--amount", type=float, required=True)
    add.add_argument("--frequency", required=True, help=", ".join(FREQUENCIES))
    add.add_argument("--date", type=_date_arg, default=None, help="Due/receive date")
    add.add_argument("--category", default=None)
    add.add_argument("--emoji", default=None)

    ls = sub.add_parser("list", help="List transactions")
    ls.add_argument("--type", choices=TRANSACTION_TYPES)
    ls.add_argument("--search", default="")

    upd = sub.add_parser("update", help="Edit an expense or income")
    upd.add_argument("id")
    upd.add_argument("--name", default=None)
    upd.add_argument("--amount", type=float, default=None)
    upd.add_argument("--frequency", default=None, help=", ".join(FREQUENCIES))
    upd.add_argument("--date", type=_date_arg, default=None, help="Due/receive date")
    upd.add_argument("--category", default=None)
    upd.add_argument("--emoji", default=None)

    rm = sub.add_parser("delete", help="Delete a transaction")
    rm.add_argument("id")

    cal = sub.add_parser("calendar", help="Month calendar with daily totals")
    cal.add_argument("month", nargs="?", type=_month_arg, default=None)
    cal.add_argument("--search", default=None)

    day = sub.add_parser("day", help="Transactions occurring on a date")
    day.add_argument("date", type=_date_arg)

    dash = sub.add_parser("dashboard", help="Summary cards")
    dash.add_argument("--days", type=int, default=None, help="Upcoming window in days")

    fc = sub.add_parser("forecast", help="Projected income and expenses")
    fc.add_argument("--months", type=int, default=12)
    fc.add_argument("--years", type=int, default=0, help="Show yearly totals instead")
    fc.add_argument("--chart", default=None, help="Also draw the monthly chart to this file")

    rep = sub.add_parser("report", help="Export transactions to CSV")
    rep.add_argument("path")
    rep.add_argument("--type", choices=TRANSACTION_TYPES, default="expense")
    rep.add_argument("--search", default=None)
    rep.add_argument("--sort", choices=SORT_KEYS, default=None)
    rep.add_argument("--desc", action="store_true")

    chart = sub.add_parser("chart", help="Draw the category breakdown (png/pdf/svg)")
    chart.add_argument("path")
    chart.add_argument("--type", choices=TRANSACTION_TYPES, default="expense")

    sub.add_parser("backup", help="Create today's CSV backup")
    sub.add_parser("backups", help="List CSV backups")

    imp = sub.add_parser("import-backup", help="Add missing transactions from a backup")
    imp.add_argument("file")

    res = sub.add_parser("restore", help="Replace all transactions with a backup")
    res.add_argument("file")

    mig = sub.add_parser("migrate", help="Import a browser local-storage JSON dump")
    mig.add_argument("file")

    cfg = sub.add_parser("config", help="Show or change stored folders")
    cfg.add_argument("--set-db-folder", default=None)
    cfg.add_argument("--set-backup-folder", default=None)
    return p.parse_args(argv)


# ── Commands ──────────────────────────────────────────────────────────────────

def cmd_add(app: App, args) -> int:
    anchor = args.date or today()
    category = args.category or ("house" if args.type == "income" else "other")
    tx = app.transactions.create(
        args.type, args.name, args.amount, category, args.frequency, anchor, args.emoji
    )
    print(f"Added {tx.type} {tx.id}: {tx.emoji} {tx.name} {format_currency(tx.amount, app.symbol)}")
    return 0


def cmd_list(app: App, args) -> int:
    for tx in app.transactions.search(args.search, args.type):
        label = FREQUENCY_LABELS.get(normalize_frequency(tx.frequency), tx.frequency)
        print(
            f"{tx.id}  {format_date(tx.anchor_date)}  {tx.type:<7}  {tx.emoji} {tx.name:<24} "
            f"{format_currency(tx.amount, app.symbol):>12}  {label:<10} {tx.category}"
        )
    return 0


def cmd_update(app: App, args) -> int:
    tx = app.transactions.get_by_id(args.id)
    if tx is None:
        raise ValueError(f"Transaction with ID {args.id} not found.")
    tx = app.transactions.update(
        tx.id,
        name=args.name if args.name is not None else tx.name,
        amount=args.amount if args.amount is not None else tx.amount,
        category=args.category if args.category is not None else tx.category,
        frequency=args.frequency or tx.frequency,
        anchor_date=args.date or tx.anchor_date,
        emoji=args.emoji,
    )
    print(
        f"Updated {tx.type} {tx.id}: {tx.emoji} {tx.name} "
        f"{format_currency(tx.amount, app.symbol)} {FREQUENCY_LABELS.get(tx.frequency, tx.frequency)}"
    )
    return 0


def cmd_delete(app: App, args) -> int:
    app.transactions.delete(args.id)
    print(f"Deleted {args.id}")
    return 0


def cmd_calendar(app: App, args) -> int:
    first = args.month or today().replace(day=1)
    grid = app.calendar.get_month_grid(first.year, first.month, search=args.search)
    totals = app.calendar.get_month_totals(first.year, first.month, search=args.search)

    print(friendly_month(first.strftime("%Y-%m")))
    print(
        f"Total Income: {format_currency(totals['income'], app.symbol)}   "
        f"Total Expense: {format_currency(totals['expense'], app.symbol)}"
    )
    print(" ".join(f"{h:<10}" for h in WEEKDAY_HEADERS))
    for week in grid:
        lines = ["", "", ""]
        for cell in week:
            marker = "*" if cell.is_today else " "
            day_label = f"{cell.date.day:>2}{marker}" if cell.in_month else f"({cell.date.day})"
            inc = f"+{format_compact(cell.income_total, app.symbol)}" if cell.income_total else ""
            exp = f"-{format_compact(cell.expense_total, app.symbol)}" if cell.expense_total else ""
            for i, text in enumerate((day_label, inc, exp)):
                lines[i] += f"{text:<10} "
        print("\n".join(line.rstrip() for line in lines))
    return 0


def cmd_day(app: App, args) -> int:
    detail = app.calendar.get_day_detail(args.date)
    print(args.date.strftime("%B %d, %Y"))
    if detail.is_empty:
        print("No transactions on this date")
        return 0
    if detail.income:
        print("Income")
        for tx in detail.income:
            print(f"  {tx.emoji} {tx.name} ({tx.category})  +{format_currency(tx.amount, app.symbol)}")
    if detail.expenses:
        print("Expenses")
        for tx in detail.expenses:
            print(f"  {tx.emoji} {tx.name} ({tx.category})  -{format_currency(tx.amount, app.symbol)}")
    print(f"Net Total: {format_signed(detail.net, app.symbol)}")
    return 0


def cmd_dashboard(app: App, args) -> int:
    days = args.days if args.days is not None else int(app.db.get_setting("upcoming_days", "7"))
    cards = app.dashboard.get_cards(upcoming_days=days)
    print(f"Total Expenses:      {format_currency(cards.total_expenses, app.symbol)}")
    print(f"Monthly Recurring:   {format_currency(cards.monthly_recurring, app.symbol)}")
    print(f"Upcoming ({cards.upcoming_days} days): {format_currency(cards.upcoming_total, app.symbol)}")
    for item in cards.upcoming:
        tx = item.transaction
        print(f"  {format_date(item.date)}  {tx.emoji} {tx.name}  {format_currency(tx.amount, app.symbol)}")
    return 0


def cmd_forecast(app: App, args) -> int:
    if args.years > 0:
        rows = app.forecast.get_annual_forecast(years=args.years)
        key = "year"
    else:
        rows = app.forecast.get_monthly_forecast(months=args.months)
        key = "month"
        if args.chart:
            app.reports.render_forecast_chart(args.chart, rows)
    for row in rows:
        print(
            f"{row[key]!s:<8} income {format_currency(row['income'], app.symbol):>12}  "
            f"expense {format_currency(row['expense'], app.symbol):>12}  "
            f"net {format_signed(row['net'], app.symbol):>12}"
        )
    return 0


def cmd_report(app: App, args) -> int:
    rows = app.reports.get_rows(args.type, args.search, args.sort, args.desc)
    path = app.reports.export_csv(args.path, rows)
    print(f"Exported {len(rows)} rows to {path}")
    return 0


def cmd_chart(app: App, args) -> int:
    path = app.reports.render_category_chart(args.path, args.type)
    print(f"Chart written to {path}")
    return 0


def _print_result(result) -> int:
    print(result.message, file=sys.stdout if result.success else sys.stderr)
    return 0 if result.success else 1


def cmd_backup(app: App, args) -> int:
    return _print_result(app.backups.create_daily_backup())


def cmd_backups(app: App, args) -> int:
    files = app.backups.list_backups()["csv"]
    print(f"CSV Files ({len(files)}) in {app.backups.backup_folder}")
    for name in files:
        print(f"  {name}")
    return 0


def cmd_import_backup(app: App, args) -> int:
    return _print_result(app.backups.import_backup(args.file))


def cmd_restore(app: App, args) -> int:
    return _print_result(app.backups.restore_from_backup(args.file))


def cmd_migrate(app: App, args) -> int:
    with open(args.file, "r", encoding="utf-8") as f:
        data = json.load(f)
    return _print_result(app.backups.import_local_storage(data))


def cmd_config(args) -> int:
    if args.set_db_folder is not None:
        app_config.set_db_folder(args.set_db_folder or None)
    if args.set_backup_folder is not None:
        app_config.set_backup_folder(args.set_backup_folder or None)
    print(f"db_folder:     {app_config.get_db_folder() or '(current directory)'}")
    print(f"backup_folder: {app_config.get_backup_folder()}")
    return 0


COMMANDS = {
    "add": cmd_add,
    "list": cmd_list,
    "update": cmd_update,
    "delete": cmd_delete,
    "calendar": cmd_calendar,
    "day": cmd_day,
    "dashboard": cmd_dashboard,
    "forecast": cmd_forecast,
    "report": cmd_report,
    "chart": cmd_chart,
    "backup": cmd_backup,
    "backups": cmd_backups,
    "import-backup": cmd_import_backup,
    "restore": cmd_restore,
    "migrate": cmd_migrate,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "config":
        return cmd_config(args)

    app = build_app(args.db_folder, args.backup_folder)
    try:
        return COMMANDS[args.command](app, args)
    except ValueError as e:
        # also covers json.JSONDecodeError from `migrate`
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        app.db.close()


if __name__ == "__main__":
    raise SystemExit(main())
