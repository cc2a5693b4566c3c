"""Cohort CRUD: intake groups shown as colour-coded columns on the dashboard.

New cohorts go to the end of the board (``sort_order = max + 1``). Hidden
cohorts keep their people and history; they are only dropped from the
default listings and sort after the visible ones.
"""

from __future__ import annotations

import re

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..core.serials import require_text
from ..db.session import atomic
from ..models.cohort import Cohort

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def normalize_color(value: str | None) -> str | None:
    """Accept ``#rgb``/``#rrggbb`` (case folded to lower); blank clears the colour."""

    cleaned = (value or "").strip()
    if not cleaned:
        return None
    if not _COLOR_RE.match(cleaned):
        raise ValidationError("color must look like #rrggbb", code="color_malformed", details={"color": value})
    return cleaned.lower()


def list_cohorts(db: Session, include_hidden: bool = True) -> list[Cohort]:
    stmt = select(Cohort)
    if not include_hidden:
        stmt = stmt.where(Cohort.is_hidden == 0)
    stmt = stmt.order_by(Cohort.is_hidden, Cohort.sort_order, Cohort.id)
    return db.execute(stmt).scalars().all()


def get_cohort(db: Session, cohort_id: int) -> Cohort:
    cohort = db.get(Cohort, cohort_id)
    if not cohort:
        raise NotFoundError(f"cohort {cohort_id} not found", details={"cohort_id": cohort_id})
    return cohort


def _by_name(db: Session, name: str) -> Cohort | None:
    return db.execute(select(Cohort).where(Cohort.name == name)).scalars().first()


def _next_sort_order(db: Session) -> int:
    current = db.scalar(select(func.coalesce(func.max(Cohort.sort_order), 0)))
    return int(current or 0) + 1


def _insert(db: Session, name: str) -> Cohort:
    cohort = Cohort(name=name, sort_order=_next_sort_order(db), is_hidden=0)
    db.add(cohort)
    db.flush()
    return cohort


def create_cohort(db: Session, name: str) -> Cohort:
    cleaned = require_text(name, "name")
    with atomic(db):
        if _by_name(db, cleaned) is not None:
            raise ConflictError(f"cohort {cleaned} already exists", code="duplicate_cohort", details={"name": cleaned})
        cohort = _insert(db, cleaned)
    db.refresh(cohort)
    return cohort


def find_or_create_cohort(db: Session, name: str) -> Cohort:
    """Return the cohort called ``name``, creating it at the end of the board."""

    cleaned = require_text(name, "name")
    with atomic(db):
        cohort = _by_name(db, cleaned) or _insert(db, cleaned)
    db.refresh(cohort)
    return cohort


def set_cohort_hidden(db: Session, cohort_id: int, hidden: bool) -> Cohort:
    with atomic(db):
        cohort = get_cohort(db, cohort_id)
        cohort.is_hidden = 1 if hidden else 0
    db.refresh(cohort)
    return cohort


def set_cohort_color(db: Session, cohort_id: int, color: str | None) -> Cohort:
    value = normalize_color(color)
    with atomic(db):
        cohort = get_cohort(db, cohort_id)
        cohort.color = value
    db.refresh(cohort)
    return cohort
