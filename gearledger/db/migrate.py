"""Additive, idempotent schema upgrades for SQLite ledgers.

Databases created by earlier releases lack some columns. We only ever ADD
columns and backfill them; nothing is dropped.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_ADDED_COLUMNS: dict[str, dict[str, str]] = {
    "cohorts": {
        "color": "TEXT",
        "sort_order": "INTEGER DEFAULT 0",
        "is_hidden": "INTEGER DEFAULT 0",
    },
    "checkouts": {
        "previous_serial": "TEXT",
        "remarks": "TEXT",
    },
    "damage_reports": {
        "image_path": "TEXT",
    },
    "personnel": {
        "duplicate_tag": "TEXT",
        "active_checkout_id": "INTEGER REFERENCES checkouts(id)",
    },
}


def _column_names(engine: Engine, table: str) -> set[str]:
    with engine.connect() as conn:
        rows = conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()
    return {row["name"] for row in rows}


def _add_column_sqlite(engine: Engine, table: str, col_def: str) -> None:
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))


def _create_index_if_not_exists(engine: Engine, table: str, name: str, cols: Iterable[str], unique: bool = False) -> None:
    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


def _backfill_active_checkouts(engine: Engine) -> int:
    """Point each person at their max(id) checkout, the rule older releases used."""

    with engine.begin() as conn:
        result = conn.execute(
            text(
                """
                UPDATE personnel
                SET active_checkout_id = (
                    SELECT MAX(ck.id) FROM checkouts ck WHERE ck.personnel_id = personnel.id
                )
                WHERE active_checkout_id IS NULL
                  AND EXISTS (SELECT 1 FROM checkouts ck WHERE ck.personnel_id = personnel.id)
                """
            )
        )
        return result.rowcount or 0


def run_migrations(engine: Engine) -> None:
    """Bring an existing SQLite ledger up to the current schema."""

    if not engine.url.get_backend_name().startswith("sqlite"):
        return

    for table, wanted in _ADDED_COLUMNS.items():
        existing = _column_names(engine, table)
        if not existing:
            # Table absent; create_all builds it fresh.
            continue
        for name, dtype in wanted.items():
            if name not in existing:
                logger.info("migrate.add_column", extra={"extra_data": {"table": table, "column": name}})
                _add_column_sqlite(engine, table, f"{name} {dtype}")

    _create_index_if_not_exists(engine, "checkouts", "ix_checkouts_open", ["equipment_id", "return_date"])

    backfilled = _backfill_active_checkouts(engine)
    if backfilled:
        logger.info("migrate.backfill_active_checkout", extra={"extra_data": {"rows": backfilled}})
