from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..crud import damage as crud
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.damage import DamageCreate, DamageImage, DamageOut

router = APIRouter(prefix="/api/v1/damage-reports", tags=["damage"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[DamageOut])
def api_list(equipment_id: Optional[int] = None, db: Session = Depends(get_db)):
    return crud.list_reports(db, equipment_id=equipment_id)


@router.post("", response_model=DamageOut, status_code=201)
def api_report(payload: DamageCreate, db: Session = Depends(get_db)):
    return crud.report_damage(db, payload.equipment_id, payload.description, payload.report_date)


@router.get("/{report_id}", response_model=DamageOut)
def api_get(report_id: int, db: Session = Depends(get_db)):
    return crud.get_report(db, report_id)


@router.post("/{report_id}/images", response_model=DamageOut)
def api_attach_image(report_id: int, payload: DamageImage, db: Session = Depends(get_db)):
    return crud.attach_image(db, report_id, payload.image)


@router.delete("/{report_id}/images", response_model=DamageOut)
def api_remove_image(report_id: int, image: str, db: Session = Depends(get_db)):
    return crud.remove_image(db, report_id, image)
