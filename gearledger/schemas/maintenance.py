from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ResetRequest(BaseModel):
    confirm: Literal["RESET"]
    confirm_again: Literal["RESET"]

    model_config = {
        "json_schema_extra": {
            "example": {"confirm": "RESET", "confirm_again": "RESET"}
        }
    }


class ResetOut(BaseModel):
    removed: dict[str, int]
