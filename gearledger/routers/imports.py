from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.imports import EquipmentImportOut, ImportRequest, RosterImportOut
from ..services import bulk_import

router = APIRouter(prefix="/api/v1/import", tags=["import"], dependencies=[Depends(require_api_key)])


def _rows(payload: ImportRequest) -> list[list]:
    if payload.rows:
        return payload.rows
    return bulk_import.read_csv_rows(payload.csv_text or "")


@router.post("/roster", response_model=RosterImportOut)
def api_import_roster(payload: ImportRequest, db: Session = Depends(get_db)):
    return bulk_import.import_roster(db, _rows(payload))


@router.post("/equipment", response_model=EquipmentImportOut)
def api_import_equipment(payload: ImportRequest, db: Session = Depends(get_db)):
    return bulk_import.import_equipment(db, _rows(payload))
