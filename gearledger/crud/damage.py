"""Damage reports and the DAMAGED flag they force onto equipment."""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.dates import normalize_date
from ..core.errors import NotFoundError, ValidationError
from ..db.session import atomic
from ..models.damage import DamageReport
from . import equipment as registry

logger = logging.getLogger(__name__)


def get_report(db: Session, report_id: int) -> DamageReport:
    report = db.get(DamageReport, report_id)
    if not report:
        raise NotFoundError(f"damage report {report_id} not found", details={"report_id": report_id})
    return report


def list_reports(db: Session, equipment_id: int | None = None) -> list[DamageReport]:
    stmt = select(DamageReport)
    if equipment_id is not None:
        stmt = stmt.where(DamageReport.equipment_id == equipment_id)
    stmt = stmt.order_by(desc(DamageReport.report_date), desc(DamageReport.id))
    return db.execute(stmt).scalars().all()


def report_damage(
    db: Session,
    equipment_id: int,
    description: str,
    report_date: str | date | None = None,
) -> DamageReport:
    """Record a damage incident and flag the item DAMAGED.

    Reports stack: an item that is already DAMAGED may collect further
    incidents, each kept as its own row.
    """

    text_value = (description or "").strip()
    if not text_value:
        raise ValidationError("description is required", code="description_required")
    when = normalize_date(report_date)

    with atomic(db):
        item = registry.get_equipment(db, equipment_id)
        report = DamageReport(equipment_id=item.id, report_date=when, description=text_value)
        db.add(report)
        db.flush()
        registry.mark_damaged(db, item)
    db.refresh(report)
    logger.info(
        "damage.reported",
        extra={"extra_data": {"report_id": report.id, "equipment_id": equipment_id}},
    )
    return report


def attach_image(db: Session, report_id: int, image_ref: str) -> DamageReport:
    ref = (image_ref or "").strip()
    if not ref:
        raise ValidationError("image reference is required", code="image_required")
    with atomic(db):
        report = get_report(db, report_id)
        images = report.images
        if ref not in images:
            images.append(ref)
        report.images = images
    db.refresh(report)
    return report


def remove_image(db: Session, report_id: int, image_ref: str) -> DamageReport:
    with atomic(db):
        report = get_report(db, report_id)
        images = report.images
        if image_ref not in images:
            raise NotFoundError(
                "image is not attached to this report",
                details={"report_id": report_id, "image": image_ref},
            )
        report.images = [item for item in images if item != image_ref]
    db.refresh(report)
    return report
