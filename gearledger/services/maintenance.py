from __future__ import annotations

import logging

from sqlalchemy import delete, text, update
from sqlalchemy.orm import Session

from ..db.session import atomic
from ..models.checkout import Checkout
from ..models.cohort import Cohort
from ..models.damage import DamageReport
from ..models.equipment import Equipment
from ..models.equipment_color import EquipmentColor
from ..models.personnel import Personnel

logger = logging.getLogger(__name__)

# Children before parents; foreign keys are enforced.
_RESET_ORDER = (DamageReport, Checkout, Personnel, Equipment, Cohort, EquipmentColor)


def _has_sqlite_sequence(db: Session) -> bool:
    stmt = text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'sqlite_sequence'")
    return db.execute(stmt).first() is not None


def factory_reset(db: Session) -> dict[str, int]:
    """Delete every record and restart id sequences, in one transaction.

    Returns the number of rows removed per table.
    """

    removed: dict[str, int] = {}
    with atomic(db):
        db.execute(update(Personnel).values(active_checkout_id=None))
        for model in _RESET_ORDER:
            result = db.execute(delete(model))
            removed[model.__tablename__] = int(result.rowcount or 0)
        if db.get_bind().dialect.name == "sqlite" and _has_sqlite_sequence(db):
            db.execute(text("DELETE FROM sqlite_sequence"))
    db.expunge_all()
    logger.warning("maintenance.factory_reset", extra={"extra_data": removed})
    return removed
