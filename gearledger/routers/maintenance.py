from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..deps.auth import require_api_key
from ..schemas.maintenance import ResetOut, ResetRequest
from ..services.maintenance import factory_reset

router = APIRouter(prefix="/api/v1/maintenance", tags=["maintenance"], dependencies=[Depends(require_api_key)])


@router.post("/reset", response_model=ResetOut)
def api_reset(payload: ResetRequest, db: Session = Depends(get_db)):
    # Both confirmations are checked by the schema; anything but "RESET" is a 422.
    return {"removed": factory_reset(db)}
