"""Equipment status values and the precedence rule every transition uses.

    IN_STOCK ──checkout──> CHECKED_OUT
    NEEDS_INSPECTION ──checkout──> CHECKED_OUT
    CHECKED_OUT ──return──> NEEDS_INSPECTION   (DAMAGED stays DAMAGED)
    NEEDS_INSPECTION ──inspect──> IN_STOCK
    ANY ──damage──> DAMAGED
"""

from __future__ import annotations

from enum import Enum


class EquipmentStatus(str, Enum):
    IN_STOCK = "IN_STOCK"
    NEEDS_INSPECTION = "NEEDS_INSPECTION"
    CHECKED_OUT = "CHECKED_OUT"
    DAMAGED = "DAMAGED"

    def __str__(self) -> str:
        return self.value


# Display order used by the equipment overview.
STATUS_RANK = {
    EquipmentStatus.IN_STOCK: 1,
    EquipmentStatus.NEEDS_INSPECTION: 2,
    EquipmentStatus.CHECKED_OUT: 3,
    EquipmentStatus.DAMAGED: 4,
}


def coerce_status(value: str | EquipmentStatus | None) -> EquipmentStatus:
    """Read a stored status token; rows written before the column had a default are IN_STOCK."""

    if value is None or value == "":
        return EquipmentStatus.IN_STOCK
    if isinstance(value, EquipmentStatus):
        return value
    return EquipmentStatus(value)


def settle(current: str | EquipmentStatus | None, target: EquipmentStatus) -> EquipmentStatus:
    """Return the status an item ends up in when a passive transition aims at ``target``.

    Damage dominates return, undo-return and replace: a DAMAGED item keeps its
    flag whatever the ledger does with the checkout row. Explicit damage and
    checkout resolution do not go through here.
    """

    if coerce_status(current) is EquipmentStatus.DAMAGED:
        return EquipmentStatus.DAMAGED
    return target
