"""Read-only projections for the dashboard, roster and inventory screens."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..crud.cohorts import get_cohort
from ..crud.colors import type_colors
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.views import (
    CohortSummary,
    CohortTypeCount,
    Dashboard,
    DamagedRow,
    InventoryRow,
    OverviewRow,
    RosterRow,
    StatusTotals,
    TypeCount,
)
from ..services import views

router = APIRouter(prefix="/api/v1/views", tags=["views"], dependencies=[Depends(require_api_key)])


@router.get("/dashboard", response_model=Dashboard)
def api_dashboard(db: Session = Depends(get_db)):
    return {
        "totals": views.status_totals(db),
        "cohort_matrix": views.cohort_type_matrix(db),
        "type_colors": type_colors(db),
    }


@router.get("/status-totals", response_model=StatusTotals)
def api_status_totals(db: Session = Depends(get_db)):
    return views.status_totals(db)


@router.get("/type-counts", response_model=list[TypeCount])
def api_type_counts(db: Session = Depends(get_db)):
    return views.type_counts(db)


@router.get("/cohorts", response_model=list[CohortSummary])
def api_cohort_summaries(include_hidden: bool = True, db: Session = Depends(get_db)):
    return views.cohort_summaries(db, include_hidden=include_hidden)


@router.get("/cohort-matrix", response_model=list[CohortTypeCount])
def api_cohort_matrix(db: Session = Depends(get_db)):
    return views.cohort_type_matrix(db)


@router.get("/roster/{cohort_id}", response_model=list[RosterRow])
def api_roster(cohort_id: int, db: Session = Depends(get_db)):
    get_cohort(db, cohort_id)
    return views.roster(db, cohort_id)


@router.get("/inventory", response_model=list[InventoryRow])
def api_inventory(include_pending: bool = False, db: Session = Depends(get_db)):
    return views.available_inventory(db, include_pending=include_pending)


@router.get("/damaged", response_model=list[DamagedRow])
def api_damaged(db: Session = Depends(get_db)):
    return views.damaged_items(db)


@router.get("/equipment", response_model=list[OverviewRow])
def api_equipment_overview(db: Session = Depends(get_db)):
    return views.equipment_overview(db)
