from __future__ import annotations

from sqlalchemy import Column, Text

from ..db.session import Base


class EquipmentColor(Base):
    """Display colour for an equipment type label."""

    __tablename__ = "equipment_colors"

    type = Column(Text, primary_key=True)
    color = Column(Text, nullable=False)


__all__ = ["EquipmentColor"]
