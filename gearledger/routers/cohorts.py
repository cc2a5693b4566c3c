from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..crud import cohorts as crud
from ..crud import personnel as personnel_crud
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.cohort import CohortCreate, CohortOut, CohortUpdate
from ..schemas.personnel import PersonnelCreate, PersonnelOut

router = APIRouter(prefix="/api/v1/cohorts", tags=["cohorts"], dependencies=[Depends(require_api_key)])


@router.get("", response_model=list[CohortOut])
def api_list(include_hidden: bool = True, db: Session = Depends(get_db)):
    return crud.list_cohorts(db, include_hidden=include_hidden)


@router.post("", response_model=CohortOut, status_code=201)
def api_create(payload: CohortCreate, db: Session = Depends(get_db)):
    return crud.create_cohort(db, payload.name)


@router.get("/{cohort_id}", response_model=CohortOut)
def api_get(cohort_id: int, db: Session = Depends(get_db)):
    return crud.get_cohort(db, cohort_id)


@router.patch("/{cohort_id}", response_model=CohortOut)
def api_update(cohort_id: int, payload: CohortUpdate, db: Session = Depends(get_db)):
    cohort = crud.get_cohort(db, cohort_id)
    if payload.is_hidden is not None:
        cohort = crud.set_cohort_hidden(db, cohort_id, payload.is_hidden)
    if "color" in payload.model_fields_set:
        cohort = crud.set_cohort_color(db, cohort_id, payload.color)
    return cohort


@router.get("/{cohort_id}/personnel", response_model=list[PersonnelOut])
def api_list_personnel(cohort_id: int, db: Session = Depends(get_db)):
    crud.get_cohort(db, cohort_id)
    return personnel_crud.list_personnel(db, cohort_id)


@router.post("/{cohort_id}/personnel", response_model=PersonnelOut, status_code=201)
def api_add_personnel(cohort_id: int, payload: PersonnelCreate, db: Session = Depends(get_db)):
    return personnel_crud.add_personnel(db, cohort_id, payload.name, payload.duplicate_tag)
