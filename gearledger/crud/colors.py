from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.serials import require_text
from ..db.session import atomic
from ..models.equipment_color import EquipmentColor
from .cohorts import normalize_color


def type_colors(db: Session) -> dict[str, str]:
    rows = db.execute(select(EquipmentColor.type, EquipmentColor.color)).all()
    return {row.type: row.color for row in rows}


def set_type_color(db: Session, equipment_type: str, color: str | None) -> dict[str, str]:
    """Upsert the display colour for ``equipment_type``; a blank colour removes it."""

    type_label = require_text(equipment_type, "type")
    value = normalize_color(color)
    with atomic(db):
        if value is None:
            existing = db.get(EquipmentColor, type_label)
            if existing is not None:
                db.delete(existing)
        else:
            db.merge(EquipmentColor(type=type_label, color=value))
    return type_colors(db)
