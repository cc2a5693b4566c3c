from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CheckoutCreate(BaseModel):
    personnel_id: int
    equipment_type: str = Field(..., min_length=1)
    serial_number: str = Field(..., min_length=1)
    checkout_date: Optional[str] = None
    remarks: Optional[str] = None


class CheckoutReturn(BaseModel):
    return_date: Optional[str] = None


class CheckoutReplace(BaseModel):
    equipment_type: str = Field(..., min_length=1)
    serial_number: str = Field(..., min_length=1)


class RemarksUpdate(BaseModel):
    remarks: Optional[str] = None


class BatchReturnRequest(BaseModel):
    personnel_ids: list[int] = Field(..., min_length=1)
    return_date: Optional[str] = None


class CheckoutOut(BaseModel):
    id: int
    personnel_id: int
    equipment_id: int
    checkout_date: str
    return_date: Optional[str]
    remarks: Optional[str]
    previous_serial: Optional[str]
    serial_history: list[str] = Field(default_factory=list)
    serial_number: Optional[str] = None
    equipment_type: Optional[str] = None
    is_open: bool

    class Config:
        from_attributes = True


class BatchReturnSkip(BaseModel):
    personnel_id: int
    reason: str


class BatchReturnOut(BaseModel):
    count: int
    closed: list[int]
    skipped: list[BatchReturnSkip]
