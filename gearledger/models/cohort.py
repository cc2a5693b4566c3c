"""SQLAlchemy model for named personnel groups (intake classes)."""

from __future__ import annotations

from sqlalchemy import Column, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class Cohort(Base):
    __tablename__ = "cohorts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False, unique=True)
    color = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    # Hiding a cohort leaves its members and their checkout history in place.
    is_hidden = Column(Integer, nullable=False, default=0)

    personnel = relationship("Personnel", back_populates="cohort", order_by="Personnel.name")


__all__ = ["Cohort"]
