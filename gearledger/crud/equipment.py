"""Equipment registry: find-or-create by serial number and own ``status``.

``resolve_or_create``, ``mark_returned`` and ``mark_damaged`` are steps of
larger ledger actions and never commit; the caller wraps them in
``db.session.atomic``. ``mark_inspected`` and ``register_equipment`` are
complete user actions and commit themselves.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError, NotFoundError
from ..core.serials import require_serial, require_text
from ..core.status import EquipmentStatus, settle
from ..db.session import atomic
from ..models.checkout import Checkout
from ..models.equipment import Equipment

logger = logging.getLogger(__name__)


def get_equipment(db: Session, equipment_id: int) -> Equipment:
    item = db.get(Equipment, equipment_id)
    if not item:
        raise NotFoundError(f"equipment {equipment_id} not found", details={"equipment_id": equipment_id})
    return item


def get_equipment_by_serial(db: Session, serial_number: str) -> Equipment | None:
    serial = require_serial(serial_number)
    stmt = select(Equipment).where(Equipment.serial_number == serial)
    return db.execute(stmt).scalars().first()


def list_equipment_types(db: Session) -> list[str]:
    stmt = select(Equipment.type).where(Equipment.type.is_not(None)).distinct().order_by(Equipment.type)
    return [row for row in db.execute(stmt).scalars().all() if row]


def open_holder(db: Session, equipment_id: int, *, exclude_checkout_id: int | None = None) -> Checkout | None:
    """Return an open checkout row that currently holds the item, if any."""

    stmt = select(Checkout).where(
        Checkout.equipment_id == equipment_id,
        Checkout.return_date.is_(None),
    )
    if exclude_checkout_id is not None:
        stmt = stmt.where(Checkout.id != exclude_checkout_id)
    return db.execute(stmt.order_by(Checkout.id.desc())).scalars().first()


def _set_status(item: Equipment, status: EquipmentStatus, reason: str) -> None:
    previous = item.status
    item.status = status.value
    if previous != item.status:
        logger.info(
            "equipment.status_changed",
            extra={
                "extra_data": {
                    "equipment_id": item.id,
                    "serial_number": item.serial_number,
                    "from": previous,
                    "to": item.status,
                    "reason": reason,
                }
            },
        )


def resolve_or_create(db: Session, equipment_type: str, serial_number: str) -> Equipment:
    """Find the item by serial (or create it) and mark it CHECKED_OUT.

    An existing item has its type overwritten: serial number is the durable
    identity and type is metadata that may change over the item's life.
    Raises ``ConflictError`` when the item is already active elsewhere.
    """

    type_label = require_text(equipment_type, "type")
    serial = require_serial(serial_number)

    item = db.execute(select(Equipment).where(Equipment.serial_number == serial)).scalars().first()
    if item is None:
        item = Equipment(type=type_label, serial_number=serial, status=EquipmentStatus.CHECKED_OUT.value)
        db.add(item)
        db.flush()
        logger.info(
            "equipment.created",
            extra={"extra_data": {"equipment_id": item.id, "serial_number": serial, "type": type_label}},
        )
        return item

    if item.has_status(EquipmentStatus.CHECKED_OUT) or open_holder(db, item.id) is not None:
        raise ConflictError(
            f"equipment {serial} is already checked out",
            code="equipment_checked_out",
            details={"serial_number": serial, "equipment_id": item.id, "status": item.status},
        )

    item.type = type_label
    _set_status(item, EquipmentStatus.CHECKED_OUT, "checkout")
    db.flush()
    return item


def mark_returned(db: Session, item: Equipment) -> None:
    """Send a returned item to the inspection gate; DAMAGED items stay DAMAGED."""

    _set_status(item, settle(item.status, EquipmentStatus.NEEDS_INSPECTION), "return")
    db.flush()


def mark_checked_out(db: Session, item: Equipment) -> None:
    """Restore an item to its holder after an undone return; DAMAGED items stay DAMAGED."""

    _set_status(item, settle(item.status, EquipmentStatus.CHECKED_OUT), "undo_return")
    db.flush()


def mark_damaged(db: Session, item: Equipment) -> None:
    _set_status(item, EquipmentStatus.DAMAGED, "damage")
    db.flush()


def mark_inspected(db: Session, equipment_id: int) -> Equipment:
    """Clear a returned item for re-issue: NEEDS_INSPECTION -> IN_STOCK."""

    with atomic(db):
        item = get_equipment(db, equipment_id)
        if not item.has_status(EquipmentStatus.NEEDS_INSPECTION):
            raise ConflictError(
                f"equipment {item.serial_number} is not waiting for inspection",
                code="not_pending_inspection",
                details={"equipment_id": item.id, "status": item.status},
            )
        _set_status(item, EquipmentStatus.IN_STOCK, "inspection")
    db.refresh(item)
    return item


def register_equipment(db: Session, equipment_type: str, serial_number: str) -> tuple[Equipment, bool]:
    """Take a new item into the warehouse as IN_STOCK.

    Existing serials are left exactly as they are; the second element of the
    result says whether a row was created.
    """

    type_label = require_text(equipment_type, "type")
    serial = require_serial(serial_number)
    with atomic(db):
        existing = db.execute(select(Equipment).where(Equipment.serial_number == serial)).scalars().first()
        if existing is not None:
            return existing, False
        item = Equipment(type=type_label, serial_number=serial, status=EquipmentStatus.IN_STOCK.value)
        db.add(item)
    db.refresh(item)
    logger.info("equipment.registered", extra={"extra_data": {"equipment_id": item.id, "serial_number": serial}})
    return item, True
