"""Pydantic schemas describing equipment payloads for the API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class EquipmentCreate(BaseModel):
    type: str = Field(..., min_length=1)
    serial_number: str = Field(..., min_length=1)


class EquipmentOut(BaseModel):
    id: int
    type: str
    serial_number: str
    status: str

    class Config:
        from_attributes = True


class EquipmentRegistered(EquipmentOut):
    created: bool


class TypeColorUpdate(BaseModel):
    type: str = Field(..., min_length=1)
    color: Optional[str] = None
