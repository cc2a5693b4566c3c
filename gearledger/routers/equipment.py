from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..crud import colors
from ..crud import equipment as registry
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.equipment import EquipmentCreate, EquipmentOut, EquipmentRegistered, TypeColorUpdate

router = APIRouter(prefix="/api/v1/equipment", tags=["equipment"], dependencies=[Depends(require_api_key)])


@router.get("/types", response_model=list[str])
def api_types(db: Session = Depends(get_db)):
    return registry.list_equipment_types(db)


@router.get("/colors", response_model=dict[str, str])
def api_colors(db: Session = Depends(get_db)):
    return colors.type_colors(db)


@router.put("/colors", response_model=dict[str, str])
def api_set_color(payload: TypeColorUpdate, db: Session = Depends(get_db)):
    return colors.set_type_color(db, payload.type, payload.color)


@router.post("", response_model=EquipmentRegistered)
def api_register(payload: EquipmentCreate, db: Session = Depends(get_db)):
    item, created = registry.register_equipment(db, payload.type, payload.serial_number)
    data = EquipmentOut.model_validate(item).model_dump()
    return EquipmentRegistered(**data, created=created)


@router.get("/{equipment_id}", response_model=EquipmentOut)
def api_get(equipment_id: int, db: Session = Depends(get_db)):
    return registry.get_equipment(db, equipment_id)


@router.post("/{equipment_id}/inspect", response_model=EquipmentOut)
def api_inspect(equipment_id: int, db: Session = Depends(get_db)):
    return registry.mark_inspected(db, equipment_id)
