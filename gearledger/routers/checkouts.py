"""Ledger endpoints: issue, return, undo, replace and batch return."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..crud import checkouts as ledger
from ..crud.personnel import get_personnel
from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.checkout import (
    BatchReturnOut,
    BatchReturnRequest,
    CheckoutCreate,
    CheckoutOut,
    CheckoutReplace,
    CheckoutReturn,
    RemarksUpdate,
)

router = APIRouter(prefix="/api/v1", tags=["checkouts"], dependencies=[Depends(require_api_key)])


@router.post("/checkouts", response_model=CheckoutOut, status_code=201)
def api_checkout(payload: CheckoutCreate, db: Session = Depends(get_db)):
    return ledger.checkout(
        db,
        payload.personnel_id,
        payload.equipment_type,
        payload.serial_number,
        checkout_date=payload.checkout_date,
        remarks=payload.remarks,
    )


@router.get("/checkouts/{checkout_id}", response_model=CheckoutOut)
def api_get(checkout_id: int, db: Session = Depends(get_db)):
    return ledger.get_checkout(db, checkout_id)


@router.post("/checkouts/{checkout_id}/return", response_model=CheckoutOut)
def api_return(checkout_id: int, payload: CheckoutReturn | None = None, db: Session = Depends(get_db)):
    return_date = payload.return_date if payload else None
    return ledger.close_checkout(db, checkout_id, return_date)


@router.post("/checkouts/{checkout_id}/undo-return", response_model=CheckoutOut)
def api_undo_return(checkout_id: int, db: Session = Depends(get_db)):
    return ledger.reopen_checkout(db, checkout_id)


@router.post("/checkouts/{checkout_id}/replace", response_model=CheckoutOut)
def api_replace(checkout_id: int, payload: CheckoutReplace, db: Session = Depends(get_db)):
    return ledger.replace_equipment(db, checkout_id, payload.equipment_type, payload.serial_number)


@router.patch("/checkouts/{checkout_id}/remarks", response_model=CheckoutOut)
def api_remarks(checkout_id: int, payload: RemarksUpdate, db: Session = Depends(get_db)):
    return ledger.set_remarks(db, checkout_id, payload.remarks)


@router.post("/checkouts/batch-return", response_model=BatchReturnOut)
def api_batch_return(payload: BatchReturnRequest, db: Session = Depends(get_db)):
    result = ledger.batch_return(db, payload.personnel_ids, payload.return_date)
    return {"count": result.count, "closed": result.closed, "skipped": result.skipped}


@router.get("/personnel/{personnel_id}/checkout", response_model=CheckoutOut | None)
def api_latest(personnel_id: int, db: Session = Depends(get_db)):
    get_personnel(db, personnel_id)
    return ledger.latest_for(db, personnel_id)
