from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class DamageCreate(BaseModel):
    equipment_id: int
    description: str = Field(..., min_length=1)
    report_date: Optional[str] = None


class DamageImage(BaseModel):
    image: str = Field(..., min_length=1)


class DamageOut(BaseModel):
    id: int
    equipment_id: int
    report_date: str
    description: Optional[str]
    images: list[str] = Field(default_factory=list)
    serial_number: Optional[str] = None
    equipment_type: Optional[str] = None

    class Config:
        from_attributes = True
