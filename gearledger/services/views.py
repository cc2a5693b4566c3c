"""Read-only projections the dashboard, roster and inventory screens render.

Nothing here writes. Every function recomputes from the tables on each call
and returns plain dicts ready for the API schemas.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from ..core.serials import format_display_name, split_serials
from ..core.status import STATUS_RANK, EquipmentStatus
from ..models.checkout import Checkout
from ..models.cohort import Cohort
from ..models.damage import DamageReport, decode_images
from ..models.equipment import Equipment
from ..models.personnel import Personnel

_STATUS_ORDER = case(
    {status.value: rank for status, rank in STATUS_RANK.items()},
    value=Equipment.status,
    else_=len(STATUS_RANK) + 1,
)


def _last_checkout_per_equipment():
    return (
        select(Checkout.equipment_id, func.max(Checkout.id).label("checkout_id"))
        .group_by(Checkout.equipment_id)
        .subquery()
    )


def status_totals(db: Session) -> dict[str, int]:
    rows = db.execute(select(Equipment.status, func.count(Equipment.id)).group_by(Equipment.status)).all()
    totals = {status.value: 0 for status in EquipmentStatus}
    for status, count in rows:
        key = status or EquipmentStatus.IN_STOCK.value
        totals[key] = totals.get(key, 0) + int(count)
    totals["total"] = sum(int(count) for _, count in rows)
    return totals


def type_counts(db: Session) -> list[dict[str, Any]]:
    stmt = (
        select(Equipment.type, func.count(Equipment.id).label("total"))
        .group_by(Equipment.type)
        .order_by(Equipment.type)
    )
    return [{"type": row.type, "total": int(row.total)} for row in db.execute(stmt).all()]


def cohort_summaries(db: Session, include_hidden: bool = True) -> list[dict[str, Any]]:
    """Per cohort: head count and how many members hold an open checkout."""

    totals = (
        select(Personnel.cohort_id, func.count(Personnel.id).label("total"))
        .group_by(Personnel.cohort_id)
        .subquery()
    )
    holding = (
        select(Personnel.cohort_id, func.count(Personnel.id).label("open"))
        .join(Checkout, Checkout.id == Personnel.active_checkout_id)
        .where(Checkout.return_date.is_(None))
        .group_by(Personnel.cohort_id)
        .subquery()
    )
    stmt = (
        select(
            Cohort.id,
            Cohort.name,
            Cohort.color,
            Cohort.sort_order,
            Cohort.is_hidden,
            func.coalesce(totals.c.total, 0).label("total_personnel"),
            func.coalesce(holding.c.open, 0).label("checked_out_count"),
        )
        .outerjoin(totals, totals.c.cohort_id == Cohort.id)
        .outerjoin(holding, holding.c.cohort_id == Cohort.id)
        .order_by(Cohort.is_hidden, Cohort.sort_order, Cohort.id)
    )
    if not include_hidden:
        stmt = stmt.where(Cohort.is_hidden == 0)
    return [
        {
            "id": row.id,
            "name": row.name,
            "color": row.color,
            "sort_order": row.sort_order,
            "is_hidden": bool(row.is_hidden),
            "total_personnel": int(row.total_personnel),
            "checked_out_count": int(row.checked_out_count),
        }
        for row in db.execute(stmt).all()
    ]


def cohort_type_matrix(db: Session) -> list[dict[str, Any]]:
    """Open checkouts counted per cohort and equipment type."""

    stmt = (
        select(
            Cohort.id.label("cohort_id"),
            Cohort.name.label("cohort_name"),
            Cohort.color.label("cohort_color"),
            Equipment.type.label("equipment_type"),
            func.count(Checkout.id).label("count"),
        )
        .select_from(Checkout)
        .join(Personnel, Personnel.id == Checkout.personnel_id)
        .join(Cohort, Cohort.id == Personnel.cohort_id)
        .join(Equipment, Equipment.id == Checkout.equipment_id)
        .where(Checkout.return_date.is_(None))
        .group_by(Cohort.id, Cohort.name, Cohort.color, Cohort.sort_order, Equipment.type)
        .order_by(Cohort.sort_order, Cohort.id, Equipment.type)
    )
    return [dict(row._mapping) for row in db.execute(stmt).all()]


def roster(db: Session, cohort_id: int) -> list[dict[str, Any]]:
    """One row per member, joined to their latest checkout and its item."""

    stmt = (
        select(
            Personnel.id.label("personnel_id"),
            Personnel.name.label("personnel_name"),
            Personnel.duplicate_tag,
            Checkout.id.label("checkout_id"),
            Checkout.checkout_date,
            Checkout.return_date,
            Checkout.remarks,
            Checkout.previous_serial,
            Equipment.id.label("equipment_id"),
            Equipment.type.label("equipment_type"),
            Equipment.serial_number,
            Equipment.status,
        )
        .select_from(Personnel)
        .outerjoin(Checkout, Checkout.id == Personnel.active_checkout_id)
        .outerjoin(Equipment, Equipment.id == Checkout.equipment_id)
        .where(Personnel.cohort_id == cohort_id)
        .order_by(Personnel.name, Checkout.checkout_date.desc(), Personnel.id)
    )
    rows = []
    for row in db.execute(stmt).all():
        data = dict(row._mapping)
        data["display_name"] = format_display_name(row.personnel_name, row.duplicate_tag)
        data["previous_serials"] = split_serials(row.previous_serial)
        data["is_open"] = row.checkout_id is not None and row.return_date is None
        rows.append(data)
    return rows


def available_inventory(db: Session, include_pending: bool = False) -> list[dict[str, Any]]:
    """Items on the shelf, with the remarks from their most recent checkout.

    ``include_pending`` adds returned items still waiting for inspection.
    """

    statuses = [EquipmentStatus.IN_STOCK.value]
    if include_pending:
        statuses.append(EquipmentStatus.NEEDS_INSPECTION.value)
    last = _last_checkout_per_equipment()
    stmt = (
        select(
            Equipment.id,
            Equipment.type,
            Equipment.serial_number,
            Equipment.status,
            Checkout.remarks,
        )
        .outerjoin(last, last.c.equipment_id == Equipment.id)
        .outerjoin(Checkout, Checkout.id == last.c.checkout_id)
        .where(Equipment.status.in_(statuses))
        .order_by(_STATUS_ORDER, Equipment.type, Equipment.id.desc())
    )
    return [dict(row._mapping) for row in db.execute(stmt).all()]


def damaged_items(db: Session) -> list[dict[str, Any]]:
    """DAMAGED items joined with their most recent damage report."""

    latest = (
        select(DamageReport.equipment_id, func.max(DamageReport.id).label("report_id"))
        .group_by(DamageReport.equipment_id)
        .subquery()
    )
    stmt = (
        select(
            Equipment.id.label("equipment_id"),
            Equipment.type.label("equipment_type"),
            Equipment.serial_number,
            DamageReport.id.label("report_id"),
            DamageReport.report_date,
            DamageReport.description,
            DamageReport.image_path,
        )
        .outerjoin(latest, latest.c.equipment_id == Equipment.id)
        .outerjoin(DamageReport, DamageReport.id == latest.c.report_id)
        .where(Equipment.status == EquipmentStatus.DAMAGED.value)
        .order_by(DamageReport.report_date.desc(), Equipment.id.desc())
    )
    rows = []
    for row in db.execute(stmt).all():
        data = dict(row._mapping)
        image_path = data.pop("image_path")
        data["images"] = decode_images(image_path)
        rows.append(data)
    return rows


def equipment_overview(db: Session) -> list[dict[str, Any]]:
    """Every item with its current holder (if any) and latest remarks."""

    last = _last_checkout_per_equipment()
    holder = (
        select(
            Checkout.equipment_id,
            Personnel.name.label("person_name"),
            Personnel.duplicate_tag,
            Cohort.name.label("cohort_name"),
            Cohort.color.label("cohort_color"),
        )
        .join(Personnel, Personnel.id == Checkout.personnel_id)
        .join(Cohort, Cohort.id == Personnel.cohort_id)
        .where(Checkout.return_date.is_(None))
        .subquery()
    )
    stmt = (
        select(
            Equipment.id,
            Equipment.type,
            Equipment.serial_number,
            Equipment.status,
            holder.c.cohort_name,
            holder.c.cohort_color,
            holder.c.person_name,
            holder.c.duplicate_tag,
            Checkout.remarks,
        )
        .outerjoin(holder, holder.c.equipment_id == Equipment.id)
        .outerjoin(last, last.c.equipment_id == Equipment.id)
        .outerjoin(Checkout, Checkout.id == last.c.checkout_id)
        .order_by(_STATUS_ORDER, Equipment.type, Equipment.id.desc())
    )
    rows = []
    seen: set[int] = set()
    for row in db.execute(stmt).all():
        # A legacy database can hold two open rows for one item; show the item once.
        if row.id in seen:
            continue
        seen.add(row.id)
        data = dict(row._mapping)
        tag = data.pop("duplicate_tag")
        if data["person_name"]:
            data["person_name"] = format_display_name(data["person_name"], tag)
        rows.append(data)
    return rows
