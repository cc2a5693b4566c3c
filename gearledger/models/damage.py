from __future__ import annotations

import json

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


def decode_images(raw: str | None) -> list[str]:
    """Decode the ``image_path`` column into a list of image references."""

    if not raw:
        return []
    try:
        decoded = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        # Older rows hold a single bare path.
        return [raw]
    if isinstance(decoded, str):
        return [decoded] if decoded else []
    if not isinstance(decoded, list):
        return []
    return [str(item) for item in decoded if item]


class DamageReport(Base):
    __tablename__ = "damage_reports"

    id = Column(Integer, primary_key=True, index=True)
    equipment_id = Column(Integer, ForeignKey("equipment.id"), nullable=False, index=True)
    report_date = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    image_path = Column(Text, nullable=True)

    equipment = relationship("Equipment", lazy="joined")

    @property
    def images(self) -> list[str]:
        return decode_images(self.image_path)

    @images.setter
    def images(self, value: list[str] | None) -> None:
        if not value:
            self.image_path = None
            return
        self.image_path = json.dumps([str(item) for item in value], ensure_ascii=False)

    @property
    def serial_number(self) -> str | None:
        return self.equipment.serial_number if self.equipment else None

    @property
    def equipment_type(self) -> str | None:
        return self.equipment.type if self.equipment else None


__all__ = ["DamageReport", "decode_images"]
