from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class PersonnelCreate(BaseModel):
    name: str = Field(..., min_length=1)
    duplicate_tag: Optional[str] = None


class PersonnelOut(BaseModel):
    id: int
    cohort_id: int
    name: str
    duplicate_tag: Optional[str]
    display_name: str
    active_checkout_id: Optional[int]

    class Config:
        from_attributes = True
