"""Pydantic schemas for cohort payloads."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CohortCreate(BaseModel):
    name: str = Field(..., min_length=1)


class CohortUpdate(BaseModel):
    is_hidden: Optional[bool] = None
    color: Optional[str] = None


class CohortOut(BaseModel):
    id: int
    name: str
    color: Optional[str]
    sort_order: int
    is_hidden: bool

    class Config:
        from_attributes = True
