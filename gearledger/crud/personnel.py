"""Personnel CRUD: members of a cohort, told apart by name and duplicate tag.

``add_personnel`` is the interactive path and refuses ambiguous names.
``find_or_create_personnel`` is the importer's path: a roster line either
matches an existing (cohort, name, tag) member or creates one, so loading
the same sheet twice adds nobody new.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError, NotFoundError
from ..core.serials import format_display_name, require_text
from ..db.session import atomic
from ..models.personnel import Personnel
from .cohorts import get_cohort


def get_personnel(db: Session, personnel_id: int) -> Personnel:
    person = db.get(Personnel, personnel_id)
    if not person:
        raise NotFoundError(f"personnel {personnel_id} not found", details={"personnel_id": personnel_id})
    return person


def list_personnel(db: Session, cohort_id: int) -> list[Personnel]:
    stmt = (
        select(Personnel)
        .where(Personnel.cohort_id == cohort_id)
        .order_by(Personnel.name, Personnel.duplicate_tag, Personnel.id)
    )
    return db.execute(stmt).scalars().all()


def find_personnel(db: Session, cohort_id: int, name: str, duplicate_tag: str | None = None) -> Personnel | None:
    # An untagged lookup matches only the untagged member, never "Kim (A)".
    stmt = select(Personnel).where(Personnel.cohort_id == cohort_id, Personnel.name == name)
    if duplicate_tag:
        stmt = stmt.where(Personnel.duplicate_tag == duplicate_tag)
    else:
        stmt = stmt.where(Personnel.duplicate_tag.is_(None))
    return db.execute(stmt.order_by(Personnel.id)).scalars().first()


def add_personnel(db: Session, cohort_id: int, name: str, duplicate_tag: str | None = None) -> Personnel:
    """Add a person to a cohort.

    The store does not enforce uniqueness, so duplicates are caught here: a
    name already present in the cohort needs a ``duplicate_tag`` to tell the
    two apart, and the same (name, tag) pair twice is refused outright.
    """

    cleaned = require_text(name, "name")
    tag = (duplicate_tag or "").strip() or None
    with atomic(db):
        get_cohort(db, cohort_id)
        same_name = db.execute(
            select(Personnel.id).where(Personnel.cohort_id == cohort_id, Personnel.name == cleaned)
        ).first()
        if same_name and tag is None:
            raise ConflictError(
                f"{cleaned} already exists in this cohort; supply a duplicate tag",
                code="duplicate_name",
                details={"cohort_id": cohort_id, "name": cleaned},
            )
        if tag is not None and find_personnel(db, cohort_id, cleaned, tag) is not None:
            raise ConflictError(
                f"{format_display_name(cleaned, tag)} already exists in this cohort",
                code="duplicate_personnel",
                details={"cohort_id": cohort_id, "name": cleaned, "duplicate_tag": tag},
            )
        person = Personnel(cohort_id=cohort_id, name=cleaned, duplicate_tag=tag)
        db.add(person)
    db.refresh(person)
    return person


def find_or_create_personnel(db: Session, cohort_id: int, name: str, duplicate_tag: str | None = None) -> Personnel:
    cleaned = require_text(name, "name")
    tag = (duplicate_tag or "").strip() or None
    with atomic(db):
        person = find_personnel(db, cohort_id, cleaned, tag)
        if person is None:
            person = Personnel(cohort_id=cohort_id, name=cleaned, duplicate_tag=tag)
            db.add(person)
    db.refresh(person)
    return person
