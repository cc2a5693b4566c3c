"""Spreadsheet-style bulk import for rosters and warehouse intake.

Rows are plain lists of cell values with the header row first, as produced by
``read_csv_rows`` or by any spreadsheet reader. Columns are located by
header synonyms, so exports with slightly different labels still load.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.csvrows import read_csv_rows
from ..core.errors import LedgerError, ValidationError
from ..core.serials import split_display_name
from ..crud import checkouts as ledger
from ..crud import cohorts as cohort_crud
from ..crud import equipment as registry
from ..crud import personnel as personnel_crud
from ..models.checkout import Checkout

logger = logging.getLogger(__name__)

ROSTER_HEADERS: dict[str, tuple[str, ...]] = {
    "cohort": ("기수", "cohort"),
    "name": ("이름", "성명", "name"),
    "type": ("장비종류", "종류", "장비명", "type", "equipment"),
    "serial": ("시리얼", "s/n", "serial"),
    "date": ("불출일", "날짜", "date"),
    "remark": ("특이사항", "비고", "메모", "remark", "note"),
}

EQUIPMENT_HEADERS: dict[str, tuple[str, ...]] = {
    "type": ("장비", "종류", "모델", "type", "equipment", "model"),
    "serial": ("시리얼", "s/n", "serial"),
}

_WS_RE = re.compile(r"\s+")


@dataclass
class ImportResult:
    processed: int = 0
    checkouts_opened: int = 0
    skipped: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class EquipmentImportResult:
    added: int = 0
    duplicates: int = 0
    skipped: list[dict[str, Any]] = field(default_factory=list)


def _header_key(value: Any) -> str:
    return _WS_RE.sub("", str(value if value is not None else "")).lower()


def locate_columns(header: Sequence[Any], synonyms: dict[str, tuple[str, ...]]) -> dict[str, int]:
    """Map each logical column to the first header cell containing a synonym."""

    keys = [_header_key(cell) for cell in header]
    found: dict[str, int] = {}
    for column, words in synonyms.items():
        for index, key in enumerate(keys):
            if key and any(word in key for word in words):
                found[column] = index
                break
    return found


def _cell(row: Sequence[Any], columns: dict[str, int], column: str) -> str | None:
    index = columns.get(column)
    if index is None or index >= len(row):
        return None
    value = row[index]
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _has_open_pair(db: Session, personnel_id: int, equipment_id: int) -> bool:
    stmt = select(Checkout.id).where(
        Checkout.personnel_id == personnel_id,
        Checkout.equipment_id == equipment_id,
        Checkout.return_date.is_(None),
    )
    return db.execute(stmt).first() is not None


def import_roster(db: Session, rows: Iterable[Sequence[Any]]) -> ImportResult:
    """Load cohorts, personnel and open checkouts from roster rows.

    Each row is committed on its own. Rows without a cohort or name are
    passed over; rows that fail validation or hit a conflict are recorded in
    ``skipped`` and logged, and the import carries on.
    """

    rows = list(rows)
    if not rows:
        raise ValidationError("no rows to import", code="empty_import")
    columns = locate_columns(rows[0], ROSTER_HEADERS)
    missing = [name for name in ("cohort", "name") if name not in columns]
    if missing:
        raise ValidationError(
            "roster needs at least cohort and name columns",
            code="missing_columns",
            details={"missing": missing},
        )

    result = ImportResult()
    for line_no, row in enumerate(rows[1:], start=2):
        cohort_name = _cell(row, columns, "cohort")
        full_name = _cell(row, columns, "name")
        if not cohort_name or not full_name:
            continue
        equipment_type = _cell(row, columns, "type")
        serial = _cell(row, columns, "serial")
        try:
            cohort = cohort_crud.find_or_create_cohort(db, cohort_name)
            name, tag = split_display_name(full_name)
            person = personnel_crud.find_or_create_personnel(db, cohort.id, name, tag)
            if equipment_type and serial:
                existing = registry.get_equipment_by_serial(db, serial)
                if existing is None or not _has_open_pair(db, person.id, existing.id):
                    ledger.checkout(
                        db,
                        person.id,
                        equipment_type,
                        serial,
                        checkout_date=_cell(row, columns, "date"),
                        remarks=_cell(row, columns, "remark"),
                        exclusive=False,
                    )
                    result.checkouts_opened += 1
        except LedgerError as exc:
            logger.warning(
                "import.roster_row_skipped",
                extra={"extra_data": {"line": line_no, "code": exc.code, "message": exc.message}},
            )
            result.skipped.append({"line": line_no, "reason": exc.code, "message": exc.message})
            continue
        result.processed += 1

    logger.info(
        "import.roster_completed",
        extra={
            "extra_data": {
                "processed": result.processed,
                "checkouts_opened": result.checkouts_opened,
                "skipped": len(result.skipped),
            }
        },
    )
    return result


def import_equipment(db: Session, rows: Iterable[Sequence[Any]]) -> EquipmentImportResult:
    """Register new warehouse stock as IN_STOCK; known serials are counted as duplicates."""

    rows = list(rows)
    if not rows:
        raise ValidationError("no rows to import", code="empty_import")
    columns = locate_columns(rows[0], EQUIPMENT_HEADERS)
    missing = [name for name in ("type", "serial") if name not in columns]
    if missing:
        raise ValidationError(
            "equipment intake needs type and serial columns",
            code="missing_columns",
            details={"missing": missing},
        )

    result = EquipmentImportResult()
    for line_no, row in enumerate(rows[1:], start=2):
        equipment_type = _cell(row, columns, "type")
        serial = _cell(row, columns, "serial")
        if not equipment_type or not serial:
            continue
        try:
            _, created = registry.register_equipment(db, equipment_type, serial)
        except LedgerError as exc:
            logger.warning(
                "import.equipment_row_skipped",
                extra={"extra_data": {"line": line_no, "code": exc.code}},
            )
            result.skipped.append({"line": line_no, "reason": exc.code, "message": exc.message})
            continue
        if created:
            result.added += 1
        else:
            result.duplicates += 1

    logger.info(
        "import.equipment_completed",
        extra={"extra_data": {"added": result.added, "duplicates": result.duplicates}},
    )
    return result


__all__ = [
    "ImportResult",
    "EquipmentImportResult",
    "read_csv_rows",
    "locate_columns",
    "import_roster",
    "import_equipment",
]
