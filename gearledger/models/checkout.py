from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..core.serials import join_serials, split_serials
from ..db.session import Base


class Checkout(Base):
    """One assignment of an equipment item to a person.

    The row stays open (``return_date`` is NULL) until the item comes back.
    Replacing the item keeps the row and appends the outgoing serial to
    ``previous_serial``.
    """

    __tablename__ = "checkouts"

    id = Column(Integer, primary_key=True, index=True)
    personnel_id = Column(Integer, ForeignKey("personnel.id"), nullable=False, index=True)
    equipment_id = Column(Integer, ForeignKey("equipment.id"), nullable=False, index=True)
    checkout_date = Column(Text, nullable=False)
    return_date = Column(Text, nullable=True)
    remarks = Column(Text, nullable=True)
    previous_serial = Column(Text, nullable=True)

    personnel = relationship("Personnel", foreign_keys=[personnel_id], lazy="joined")
    equipment = relationship("Equipment", lazy="joined")

    @property
    def is_open(self) -> bool:
        return self.return_date is None

    @property
    def serial_history(self) -> list[str]:
        return split_serials(self.previous_serial)

    @serial_history.setter
    def serial_history(self, value: list[str]) -> None:
        self.previous_serial = join_serials(list(value))

    def push_serial(self, serial: str) -> None:
        history = self.serial_history
        history.append(serial)
        self.serial_history = history

    @property
    def serial_number(self) -> str | None:
        return self.equipment.serial_number if self.equipment else None

    @property
    def equipment_type(self) -> str | None:
        return self.equipment.type if self.equipment else None


__all__ = ["Checkout"]
