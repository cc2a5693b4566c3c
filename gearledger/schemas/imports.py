from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class ImportRequest(BaseModel):
    """Rows with the header first, or raw CSV text to be parsed server-side."""

    rows: Optional[list[list[Any]]] = None
    csv_text: Optional[str] = None

    @model_validator(mode="after")
    def validate_source(self) -> "ImportRequest":
        if not self.rows and not (self.csv_text and self.csv_text.strip()):
            raise ValueError("rows or csv_text is required")
        return self


class ImportSkip(BaseModel):
    line: int
    reason: str
    message: Optional[str] = None


class RosterImportOut(BaseModel):
    processed: int
    checkouts_opened: int
    skipped: list[ImportSkip] = Field(default_factory=list)

    class Config:
        from_attributes = True


class EquipmentImportOut(BaseModel):
    added: int
    duplicates: int
    skipped: list[ImportSkip] = Field(default_factory=list)

    class Config:
        from_attributes = True
