from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..core.serials import format_display_name
from ..db.session import Base


class Personnel(Base):
    """A person in exactly one cohort.

    ``active_checkout_id`` points at the person's latest checkout row, open or
    returned. Only the checkout ledger moves it.
    """

    __tablename__ = "personnel"

    id = Column(Integer, primary_key=True, index=True)
    cohort_id = Column(Integer, ForeignKey("cohorts.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    duplicate_tag = Column(Text, nullable=True)
    active_checkout_id = Column(
        Integer,
        ForeignKey("checkouts.id", use_alter=True, name="fk_personnel_active_checkout"),
        nullable=True,
        index=True,
    )

    cohort = relationship("Cohort", back_populates="personnel")
    # personnel <-> checkouts reference each other; post_update breaks the
    # insert cycle by writing the pointer in a second UPDATE.
    active_checkout = relationship(
        "Checkout",
        foreign_keys=[active_checkout_id],
        post_update=True,
    )

    @property
    def display_name(self) -> str:
        return format_display_name(self.name, self.duplicate_tag)


__all__ = ["Personnel"]
