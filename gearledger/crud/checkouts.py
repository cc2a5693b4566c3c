"""Checkout ledger: open, close, reopen and re-point personnel assignments.

Each public action runs as one transaction. The person's
``active_checkout_id`` always names their latest row, so "what does this
person hold right now" is a pointer read rather than a max(id) scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from sqlalchemy.orm import Session

from ..core.dates import normalize_date
from ..core.errors import ConflictError, LedgerError, NotFoundError
from ..core.status import EquipmentStatus
from ..db.session import atomic
from ..models.checkout import Checkout
from ..models.equipment import Equipment
from ..models.personnel import Personnel
from . import equipment as registry

logger = logging.getLogger(__name__)


@dataclass
class BatchReturnResult:
    closed: list[int] = field(default_factory=list)
    skipped: list[dict[str, object]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.closed)


def _log(event: str, checkout: Checkout, **extra: object) -> None:
    data = {
        "checkout_id": checkout.id,
        "personnel_id": checkout.personnel_id,
        "equipment_id": checkout.equipment_id,
    }
    data.update(extra)
    logger.info(event, extra={"extra_data": data})


def get_checkout(db: Session, checkout_id: int) -> Checkout:
    checkout = db.get(Checkout, checkout_id)
    if not checkout:
        raise NotFoundError(f"checkout {checkout_id} not found", details={"checkout_id": checkout_id})
    return checkout


def _get_personnel(db: Session, personnel_id: int) -> Personnel:
    person = db.get(Personnel, personnel_id)
    if not person:
        raise NotFoundError(f"personnel {personnel_id} not found", details={"personnel_id": personnel_id})
    return person


def latest_for(db: Session, personnel_id: int) -> Checkout | None:
    """Return the person's latest checkout row (open or returned), or ``None``."""

    person = _get_personnel(db, personnel_id)
    return person.active_checkout


def open_checkout(
    db: Session,
    personnel_id: int,
    item: Equipment,
    checkout_date: str | date | None = None,
    remarks: str | None = None,
    exclusive: bool = True,
) -> Checkout:
    """Insert an open row for ``item`` and make it the person's active row.

    ``item`` must come from ``registry.resolve_or_create`` in the same
    transaction. Does not commit.

    With ``exclusive`` (the default) a person whose active row is still open
    is refused. Roster imports pass ``exclusive=False``: they only guard the
    (person, item) pair, so an earlier open row stays open and the pointer
    moves to the new one.
    """

    person = _get_personnel(db, personnel_id)
    current = person.active_checkout
    if exclusive and current is not None and current.is_open:
        raise ConflictError(
            f"{person.display_name} still holds equipment {current.serial_number}",
            code="checkout_open",
            details={"personnel_id": person.id, "checkout_id": current.id},
        )
    checkout = Checkout(
        personnel_id=person.id,
        equipment_id=item.id,
        checkout_date=normalize_date(checkout_date),
        return_date=None,
        remarks=(remarks or "").strip() or None,
        previous_serial=None,
    )
    db.add(checkout)
    db.flush()
    person.active_checkout = checkout
    db.flush()
    _log("checkout.opened", checkout, serial_number=item.serial_number)
    return checkout


def checkout(
    db: Session,
    personnel_id: int,
    equipment_type: str,
    serial_number: str,
    checkout_date: str | date | None = None,
    remarks: str | None = None,
    exclusive: bool = True,
) -> Checkout:
    """Issue an item to a person: resolve the serial, then open a ledger row."""

    with atomic(db):
        _get_personnel(db, personnel_id)
        item = registry.resolve_or_create(db, equipment_type, serial_number)
        row = open_checkout(db, personnel_id, item, checkout_date, remarks, exclusive=exclusive)
    db.refresh(row)
    return row


def _close(db: Session, row: Checkout, return_date: str | date | None) -> None:
    if not row.is_open:
        raise ConflictError(
            f"checkout {row.id} is already returned",
            code="already_returned",
            details={"checkout_id": row.id, "return_date": row.return_date},
        )
    row.return_date = normalize_date(return_date)
    registry.mark_returned(db, row.equipment)
    _log("checkout.closed", row, return_date=row.return_date, status=row.equipment.status)


def close_checkout(db: Session, checkout_id: int, return_date: str | date | None = None) -> Checkout:
    """Record a return. Ledger row and equipment status change together."""

    with atomic(db):
        row = get_checkout(db, checkout_id)
        _close(db, row, return_date)
    db.refresh(row)
    return row


def reopen_checkout(db: Session, checkout_id: int) -> Checkout:
    """Undo a mistaken return.

    Refused when the item has since been issued to someone else, so one item
    never ends up with two active holders.
    """

    with atomic(db):
        row = get_checkout(db, checkout_id)
        if row.is_open:
            raise ConflictError(
                f"checkout {row.id} has not been returned",
                code="not_returned",
                details={"checkout_id": row.id},
            )
        person = _get_personnel(db, row.personnel_id)
        if person.active_checkout_id != row.id:
            raise ConflictError(
                f"checkout {row.id} is not {person.display_name}'s latest checkout",
                code="not_latest_checkout",
                details={"checkout_id": row.id, "active_checkout_id": person.active_checkout_id},
            )
        item = row.equipment
        holder = registry.open_holder(db, item.id, exclude_checkout_id=row.id)
        if item.has_status(EquipmentStatus.CHECKED_OUT) or holder is not None:
            raise ConflictError(
                f"equipment {item.serial_number} has been issued again since it was returned",
                code="equipment_checked_out",
                details={
                    "checkout_id": row.id,
                    "equipment_id": item.id,
                    "holder_checkout_id": holder.id if holder else None,
                },
            )
        row.return_date = None
        registry.mark_checked_out(db, item)
        _log("checkout.reopened", row, status=item.status)
    db.refresh(row)
    return row


def replace_equipment(db: Session, checkout_id: int, equipment_type: str, serial_number: str) -> Checkout:
    """Swap the item on an open checkout, keeping the row and its serial provenance."""

    with atomic(db):
        row = get_checkout(db, checkout_id)
        if not row.is_open:
            raise ConflictError(
                f"checkout {row.id} is already returned",
                code="already_returned",
                details={"checkout_id": row.id},
            )
        old_item = row.equipment
        # The outgoing item is held by this open row, so resolving its own
        # serial again is refused as a conflict before anything changes.
        new_item = registry.resolve_or_create(db, equipment_type, serial_number)
        registry.mark_returned(db, old_item)
        row.push_serial(old_item.serial_number)
        row.equipment_id = new_item.id
        row.equipment = new_item
        db.flush()
        _log(
            "checkout.replaced",
            row,
            old_serial=old_item.serial_number,
            new_serial=new_item.serial_number,
            previous_serial=row.previous_serial,
        )
    db.refresh(row)
    return row


def set_remarks(db: Session, checkout_id: int, remarks: str | None) -> Checkout:
    with atomic(db):
        row = get_checkout(db, checkout_id)
        row.remarks = (remarks or "").strip() or None
    db.refresh(row)
    return row


def batch_return(db: Session, personnel_ids: Iterable[int], return_date: str | date | None = None) -> BatchReturnResult:
    """Close the open latest checkout of each selected person.

    Best effort per person: every close is its own transaction, so one bad
    row never rolls back the others. People with nothing open and items that
    are DAMAGED (returned individually) are skipped.
    """

    result = BatchReturnResult()
    when = normalize_date(return_date)
    for personnel_id in dict.fromkeys(personnel_ids):
        person = db.get(Personnel, personnel_id)
        if person is None:
            result.skipped.append({"personnel_id": personnel_id, "reason": "not_found"})
            continue
        row = person.active_checkout
        if row is None or not row.is_open:
            result.skipped.append({"personnel_id": personnel_id, "reason": "nothing_open"})
            continue
        if row.equipment.has_status(EquipmentStatus.DAMAGED):
            result.skipped.append({"personnel_id": personnel_id, "reason": "damaged"})
            continue
        try:
            with atomic(db):
                _close(db, row, when)
        except LedgerError as exc:
            logger.warning(
                "checkout.batch_return_skipped",
                extra={"extra_data": {"personnel_id": personnel_id, "code": exc.code}},
            )
            result.skipped.append({"personnel_id": personnel_id, "reason": exc.code})
            continue
        result.closed.append(row.id)
    logger.info(
        "checkout.batch_return",
        extra={"extra_data": {"closed": result.count, "skipped": len(result.skipped)}},
    )
    return result
