from __future__ import annotations

from sqlalchemy import Column, Integer, Text

from ..core.status import EquipmentStatus, coerce_status
from ..db.session import Base


class Equipment(Base):
    """A physical item. ``serial_number`` is its identity; ``type`` is mutable metadata."""

    __tablename__ = "equipment"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Text, nullable=False, index=True)
    serial_number = Column(Text, nullable=False, unique=True, index=True)
    status = Column(Text, nullable=False, default=EquipmentStatus.IN_STOCK.value)

    @property
    def status_enum(self) -> EquipmentStatus:
        return coerce_status(self.status)

    def has_status(self, status: EquipmentStatus) -> bool:
        return self.status_enum is status


__all__ = ["Equipment"]
