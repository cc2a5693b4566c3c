"""Response models for the read-only dashboard and roster projections."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class StatusTotals(BaseModel):
    IN_STOCK: int = 0
    CHECKED_OUT: int = 0
    NEEDS_INSPECTION: int = 0
    DAMAGED: int = 0
    total: int = 0


class TypeCount(BaseModel):
    type: str
    total: int


class CohortSummary(BaseModel):
    id: int
    name: str
    color: Optional[str]
    sort_order: int
    is_hidden: bool
    total_personnel: int
    checked_out_count: int


class CohortTypeCount(BaseModel):
    cohort_id: int
    cohort_name: str
    cohort_color: Optional[str]
    equipment_type: str
    count: int


class RosterRow(BaseModel):
    personnel_id: int
    personnel_name: str
    duplicate_tag: Optional[str]
    display_name: str
    checkout_id: Optional[int]
    checkout_date: Optional[str]
    return_date: Optional[str]
    remarks: Optional[str]
    previous_serial: Optional[str]
    previous_serials: list[str] = Field(default_factory=list)
    equipment_id: Optional[int]
    equipment_type: Optional[str]
    serial_number: Optional[str]
    status: Optional[str]
    is_open: bool


class InventoryRow(BaseModel):
    id: int
    type: str
    serial_number: str
    status: str
    remarks: Optional[str]


class DamagedRow(BaseModel):
    equipment_id: int
    equipment_type: str
    serial_number: str
    report_id: Optional[int]
    report_date: Optional[str]
    description: Optional[str]
    images: list[str] = Field(default_factory=list)


class OverviewRow(BaseModel):
    id: int
    type: str
    serial_number: str
    status: str
    cohort_name: Optional[str]
    cohort_color: Optional[str]
    person_name: Optional[str]
    remarks: Optional[str]


class Dashboard(BaseModel):
    totals: StatusTotals
    cohort_matrix: list[CohortTypeCount]
    type_colors: dict[str, str] = Field(default_factory=dict)
