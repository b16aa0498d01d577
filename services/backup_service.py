"""Backups of all transactions as daily CSV files and JSON exports, plus
migration of the browser build's local-storage export.
"""
import csv
import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from models.category import emoji_for
from models.transaction import Transaction
from services.transaction_service import TransactionService
from utils.constants import (
    BACKUP_PREFIX, CSV_FIELDS, FREQUENCIES, LEGACY_STORAGE_KEYS, TRANSACTION_TYPES,
)
from utils.date_helpers import format_date, parse_date, today
from utils.recurrence import normalize_frequency

logger = logging.getLogger(__name__)

IMPORT_MODES = ("merge", "replace")


@dataclass
class BackupResult:
    success: bool
    message: str
    path: Path | None = None
    imported: int = 0
    skipped: int = 0


class BackupService:
    def __init__(
        self,
        db: DatabaseManager,
        tx_dao: TransactionDAO,
        tx_service: TransactionService,
        backup_folder: str | Path,
    ):
        self._db = db
        self._tx_dao = tx_dao
        self._tx_svc = tx_service
        self._folder = Path(backup_folder)

    @property
    def backup_folder(self) -> Path:
        return self._folder

    # ── CSV backups ───────────────────────────────────────────────────────────

    def backup_path_for(self, day: date) -> Path:
        return self._folder / f"{BACKUP_PREFIX}{format_date(day)}.csv"

    def create_daily_backup(self, ref_date: date | None = None) -> BackupResult:
        """Write today's CSV backup unless one already exists."""
        path = self.backup_path_for(ref_date or today())
        if path.exists():
            return BackupResult(True, f"Backup already exists for today: {path.name}", path)
        try:
            self._folder.mkdir(parents=True, exist_ok=True)
            rows = self._build_rows()
            with open(path, "w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
                writer.writeheader()
                writer.writerows(rows)
        except OSError as e:
            logger.exception("Failed to write backup %s", path)
            return BackupResult(False, f"Failed to create backup: {e}")
        logger.info("Wrote %d transactions to %s", len(rows), path)
        return BackupResult(True, f"Backup created: {path.name}", path, imported=len(rows))

    def list_backups(self) -> dict[str, list[str]]:
        """Return {"csv": [file names, newest first]}."""
        if not self._folder.is_dir():
            return {"csv": []}
        names = sorted(
            (p.name for p in self._folder.glob(f"{BACKUP_PREFIX}*.csv")), reverse=True
        )
        return {"csv": names}

    def import_backup(self, file_name: str) -> BackupResult:
        """Add transactions from a backup whose ids are not already stored."""
        return self._import_csv(file_name, mode="merge")

    def restore_from_backup(self, file_name: str) -> BackupResult:
        """Replace every stored transaction with the contents of a backup."""
        return self._import_csv(file_name, mode="replace")

    def _import_csv(self, file_name: str, mode: str) -> BackupResult:
        path = self._resolve(file_name)
        try:
            with open(path, newline="", encoding="utf-8") as f:
                records = list(csv.DictReader(f))
        except (OSError, csv.Error) as e:
            logger.exception("Failed to read backup %s", path)
            return BackupResult(False, f"Failed to read backup: {e}", path)
        return self._import_records(records, mode, source=path)

    def _resolve(self, file_name: str) -> Path:
        path = Path(file_name)
        return path if path.is_absolute() or path.exists() else self._folder / path

    # ── JSON export / import ──────────────────────────────────────────────────

    def export_json(self) -> dict:
        """Return a full export dict (caller writes to disk)."""
        return {
            "export_version": 1,
            "exported_at": datetime.now().isoformat(),
            "transactions": self._build_rows(),
        }

    def import_json(self, data: dict, mode: str) -> BackupResult:
        """Import from a previously exported JSON dict.

        mode: 'merge' | 'replace'
        """
        records = data.get("transactions", []) if isinstance(data, dict) else None
        if not isinstance(records, list):
            logger.warning("Rejected JSON import: not an export object")
            return BackupResult(False, "Invalid export: expected an object with a transactions list")
        return self._import_records(records, mode)

    def import_local_storage(self, data: dict) -> BackupResult:
        """Merge a dump of the browser build's local storage.

        Expenses live under 'budget-tracker-expenses' with a 'dueDate';
        income under 'budget-tracker-income' with a 'receiveDate'. Values may
        be lists or the JSON strings local storage holds.
        """
        if not isinstance(data, dict):
            logger.warning("Rejected local-storage import: not an object")
            return BackupResult(False, "Invalid local-storage dump: expected an object")
        records = []
        for type_, (key, date_field) in LEGACY_STORAGE_KEYS.items():
            items = data.get(key) or []
            if isinstance(items, str):
                try:
                    items = json.loads(items)
                except ValueError:
                    logger.warning("Ignoring unreadable local-storage value for %s", key)
                    continue
            if not isinstance(items, list):
                logger.warning("Ignoring local-storage value for %s: not a list", key)
                continue
            for item in items:
                if not isinstance(item, dict):
                    records.append(item)
                    continue
                records.append({
                    "id": item.get("id"),
                    "type": type_,
                    "name": item.get("name"),
                    "amount": item.get("amount"),
                    "category": item.get("category"),
                    "frequency": item.get("frequency"),
                    "date": item.get(date_field),
                    "emoji": item.get("emoji"),
                    "created_at": item.get("createdAt"),
                })
        return self._import_records(records, mode="merge")

    # ── Private ───────────────────────────────────────────────────────────────

    def _build_rows(self) -> list[dict]:
        return [
            {
                "id": tx.id,
                "type": tx.type,
                "name": tx.name,
                "amount": tx.amount,
                "category": tx.category,
                "frequency": tx.frequency,
                "date": format_date(tx.anchor_date),
                "emoji": tx.emoji,
                "created_at": tx.created_at,
                "updated_at": tx.updated_at,
            }
            for tx in self._tx_dao.get_all()
        ]

    def _import_records(self, records: list[dict], mode: str, source: Path | None = None) -> BackupResult:
        if mode not in IMPORT_MODES:
            raise ValueError(f"Invalid import mode: {mode}")

        coerced = [_coerce_record(record) for record in records]
        unusable = sum(1 for tx in coerced if tx is None)
        if mode == "replace" and unusable:
            # Stored rows stay untouched when the file has unusable rows
            logger.warning("Restore aborted: %d unusable records", unusable)
            return BackupResult(
                False, f"Restore aborted: {unusable} unusable records", source, skipped=unusable
            )

        conn = self._db.get_connection()
        imported = skipped = 0
        try:
            if mode == "replace":
                self._tx_dao.delete_all(commit=False)
            existing = self._tx_dao.get_ids()
            for tx in coerced:
                if tx is None or tx.id in existing:
                    skipped += 1
                    continue
                self._tx_dao.create(
                    tx_id=tx.id,
                    type_=tx.type,
                    name=tx.name,
                    amount=tx.amount,
                    category=tx.category,
                    frequency=tx.frequency,
                    anchor_date=tx.anchor_date,
                    emoji=tx.emoji,
                    created_at=tx.created_at or None,
                    commit=False,
                )
                existing.add(tx.id)
                imported += 1
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.exception("Import failed; changes rolled back")
            return BackupResult(False, f"Import failed: {e}", source)
        except Exception:
            # Never leave a pending delete_all on the shared connection
            conn.rollback()
            raise

        logger.info("Imported %d transactions (%d skipped, mode=%s)", imported, skipped, mode)
        if imported or mode == "replace":
            self._tx_svc.notify_changed()
        verb = "Restored" if mode == "replace" else "Imported"
        return BackupResult(
            True, f"{verb} {imported} transactions ({skipped} skipped)",
            source, imported=imported, skipped=skipped,
        )


def _coerce_record(record: dict) -> Transaction | None:
    """Build a Transaction from an imported row, or None if it is unusable."""
    if not isinstance(record, dict):
        logger.warning("Skipping non-object record %r", record)
        return None
    tx_id = str(record.get("id") or "").strip()
    type_ = str(record.get("type") or "").strip().lower()
    name = str(record.get("name") or "").strip()
    anchor = parse_date(str(record.get("date") or ""))
    try:
        amount = float(record.get("amount") or 0)
    except (TypeError, ValueError):
        amount = 0.0

    if not tx_id or type_ not in TRANSACTION_TYPES or not name or anchor is None or not amount > 0:
        logger.warning("Skipping unusable record %r", record)
        return None

    raw_freq = str(record.get("frequency") or "")
    freq = normalize_frequency(raw_freq)
    if freq not in FREQUENCIES:
        # Kept verbatim; it simply never occurs.
        logger.warning("Record %s has unknown frequency %r", tx_id, raw_freq)
        freq = raw_freq

    category = str(record.get("category") or "")
    # ISO timestamps from the browser build become sqlite's 'YYYY-MM-DD HH:MM:SS'
    created_at = str(record.get("created_at") or "").replace("T", " ")[:19]
    return Transaction(
        id=tx_id,
        type=type_,
        name=name,
        amount=amount,
        category=category,
        frequency=freq,
        anchor_date=anchor,
        emoji=str(record.get("emoji") or "") or emoji_for(category),
        created_at=created_at,
    )
